from collections.abc import Sequence

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from akashic.models.messages import ChatChannel, ChatMessage, ContactMessage, OracleUsage


class MessageRepository:
    """Chat transcripts, Oracle usage counters and contact-form submissions."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add_chat_message(
        self, channel: ChatChannel, session_key: str, content: str, is_user: bool
    ) -> ChatMessage:
        message = ChatMessage(channel=channel.value, session_key=session_key, content=content, is_user=is_user)
        self.session.add(message)
        await self.session.flush()
        return message

    async def list_chat_messages(self, channel: ChatChannel, session_key: str) -> Sequence[ChatMessage]:
        stmt = (
            select(ChatMessage)
            .where(ChatMessage.channel == channel.value, ChatMessage.session_key == session_key)
            .order_by(ChatMessage.created_at, ChatMessage.id)
        )
        return (await self.session.scalars(stmt)).all()

    async def take_free_consultation(self, session_key: str, day: str, limit: int) -> int | None:
        """
        Counts one free consultation against the session's daily quota.

        The counter row is created if missing and bumped by a guarded UPDATE, so
        concurrent requests cannot push it past `limit`.

        Returns:
            The new count, or None when the quota is already used up.
        """
        if self.session.get_bind().dialect.name == "postgresql":
            insert_stmt = postgresql_insert(OracleUsage)
        else:
            insert_stmt = sqlite_insert(OracleUsage)
        await self.session.execute(
            insert_stmt.values(session_key=session_key, day=day, count=0).on_conflict_do_nothing(
                index_elements=["session_key", "day"]
            )
        )

        stmt = (
            update(OracleUsage)
            .where(OracleUsage.session_key == session_key, OracleUsage.day == day, OracleUsage.count < limit)
            .values(count=OracleUsage.count + 1)
            .returning(OracleUsage.count)
            .execution_options(synchronize_session=False)
        )
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def add_contact_message(self, **fields) -> ContactMessage:
        message = ContactMessage(**fields)
        self.session.add(message)
        await self.session.flush()
        return message
