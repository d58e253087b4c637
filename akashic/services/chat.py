import logging
from collections.abc import Sequence
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from akashic.core.config import Settings
from akashic.db.utils import atomic, utc_now
from akashic.exceptions import DailyLimitReached
from akashic.models.ledger import TransactionType
from akashic.models.messages import ChatChannel, ChatMessage
from akashic.repositories import MessageRepository
from akashic.services.ledger import LedgerService
from akashic.services.lore import LoreResponder, Responder

logger = logging.getLogger(__name__)


class ChatService:
    """
    Conversations with the Oracle (metered) and the Keeper (free). Both sides of
    every exchange are stored under the client's chat session key.
    """

    def __init__(
        self,
        session: AsyncSession,
        message_repo: MessageRepository,
        ledger: LedgerService,
        settings: Settings,
        responder: Responder | None = None,
    ):
        self._session = session
        self._message_repo = message_repo
        self._ledger = ledger
        self._settings = settings
        self._responder = responder or LoreResponder()

    async def consult_oracle(
        self, session_key: str, message: str, user_id: int | None = None, today: date | None = None
    ) -> tuple[ChatMessage, ChatMessage]:
        """
        Anonymous visitors get a few free consultations per day; signed-in users pay Mana.

        Raises:
            DailyLimitReached: the anonymous session used up today's free consultations.
            InsufficientBalance: the signed-in user cannot pay. Nothing is stored.
        """
        day = (today or utc_now().date()).isoformat()

        async with atomic(self._session):
            if user_id is None:
                used = await self._message_repo.take_free_consultation(
                    session_key, day, self._settings.oracle_free_daily
                )
                if used is None:
                    raise DailyLimitReached(
                        "You have reached your daily Oracle consultation limit. Create an account and "
                        "purchase Mana to continue your journey with the Oracle.",
                        requires_mana=True,
                    )
            elif self._settings.oracle_cost > 0:
                await self._ledger.append(
                    user_id, -self._settings.oracle_cost, TransactionType.SPEND, "Oracle consultation"
                )

            user_message = await self._message_repo.add_chat_message(ChatChannel.ORACLE, session_key, message, True)
            reply = await self._message_repo.add_chat_message(
                ChatChannel.ORACLE, session_key, self._responder(message), False
            )

        logger.info("Oracle consulted by session %s (user %s)", session_key, user_id)
        return user_message, reply

    async def ask_keeper(self, session_key: str, message: str) -> tuple[ChatMessage, ChatMessage]:
        async with atomic(self._session):
            user_message = await self._message_repo.add_chat_message(ChatChannel.KEEPER, session_key, message, True)
            reply = await self._message_repo.add_chat_message(
                ChatChannel.KEEPER, session_key, self._responder(message), False
            )
        return user_message, reply

    async def history(self, channel: ChatChannel | str, session_key: str) -> Sequence[ChatMessage]:
        return await self._message_repo.list_chat_messages(ChatChannel(channel), session_key)
