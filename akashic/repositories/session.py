from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from akashic.models.definitions import AuthSession


class SessionRepository:
    """Data access for server-side login sessions."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, user_id: int, token: str, expires_at: datetime) -> AuthSession:
        auth_session = AuthSession(user_id=user_id, token=token, expires_at=expires_at)
        self.session.add(auth_session)
        await self.session.flush()
        return auth_session

    async def get_by_token(self, token: str) -> AuthSession | None:
        stmt = select(AuthSession).where(AuthSession.token == token)
        return (await self.session.scalars(stmt)).one_or_none()

    async def delete_by_token(self, token: str) -> int:
        result = await self.session.execute(delete(AuthSession).where(AuthSession.token == token))
        return result.rowcount or 0

