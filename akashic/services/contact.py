import logging

from sqlalchemy.ext.asyncio import AsyncSession

from akashic.db.utils import atomic
from akashic.models.messages import ContactMessage
from akashic.repositories import MessageRepository

logger = logging.getLogger(__name__)


class ContactService:
    def __init__(self, session: AsyncSession, message_repo: MessageRepository):
        self._session = session
        self._message_repo = message_repo

    async def submit_contact(self, name: str, email: str, subject: str, message: str) -> ContactMessage:
        async with atomic(self._session):
            contact = await self._message_repo.add_contact_message(
                name=name, email=email, subject=subject, message=message
            )
        logger.info("Contact message %d received: %r", contact.id, subject)
        return contact
