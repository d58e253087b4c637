from collections.abc import Sequence
from typing import Any

from sqlalchemy import case, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from akashic.db.utils import apply_dict_updates
from akashic.models.definitions import User


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: int) -> User | None:
        """Retrieves a User by their primary ID."""
        return await self.session.get(User, user_id)

    async def get_by_username(self, username: str) -> User | None:
        stmt = select(User).where(User.username == username)
        return (await self.session.scalars(stmt)).one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        """Retrieves a User by their unique email."""
        stmt = select(User).where(User.email == email.lower())
        return (await self.session.scalars(stmt)).one_or_none()

    async def get_by_login(self, ident: str) -> User | None:
        """
        Resolves a login identifier that may be either a username or an email.
        An exact username match wins over another account's email.
        """
        stmt = (
            select(User)
            .where(or_(User.username == ident, User.email == ident.lower()))
            .order_by(case((User.username == ident, 0), else_=1), User.id)
            .limit(1)
        )
        return (await self.session.scalars(stmt)).first()

    async def get_balance(self, user_id: int) -> int | None:
        """Reads the cached balance straight from the row, bypassing any loaded User."""
        return await self.session.scalar(select(User.mana_balance).where(User.id == user_id))

    async def list_ids(self) -> Sequence[int]:
        return (await self.session.scalars(select(User.id).order_by(User.id))).all()

    async def create(self, create_data: dict[str, Any]) -> User:
        """Creates a new User record and persists it. The balance always starts at zero."""
        sensitive_fields = {"id", "created_at", "created_by", "mana_balance"}
        user = User(mana_balance=0)
        apply_dict_updates(user, create_data, sensitive_fields)
        self.session.add(user)
        await self.session.flush()
        return user

    async def update(self, user_id: int, update_data: dict[str, Any]) -> User | None:
        """
        Updates user profile fields using the pure ORM Tracking pattern.
        Identity, credentials and the balance cache are never touched here.
        """

        user_to_update = await self.get_by_id(user_id)
        if not user_to_update:
            return None

        sensitive_fields = {"id", "username", "password_hash", "mana_balance", "created_at", "created_by"}
        apply_dict_updates(entity=user_to_update, update_data=update_data, excluded_attrs=sensitive_fields)

        await self.session.flush()
        await self.session.refresh(user_to_update)

        return user_to_update

    async def update_password(self, user_id: int, new_hashed_password: str) -> None:
        user_to_update = await self.get_by_id(user_id)
        if not user_to_update:
            return None
        user_to_update.password_hash = new_hashed_password
        await self.session.flush()

    async def apply_balance_delta(self, user_id: int, amount_delta: int) -> int | None:
        """
        CRITICAL: Atomically moves the cached mana_balance by amount_delta.

        In-memory User objects are not synchronized; re-read or refresh them afterwards.
        The guard lives in the UPDATE itself, so a debit that would take the balance
        below zero matches no row. Concurrent debits therefore serialize on the row
        and cannot both pass a stale balance check.

        Returns:
            The new balance, or None when the user does not exist or funds are insufficient.
        """
        stmt = (
            update(User)
            .where(User.id == user_id, User.mana_balance + amount_delta >= 0)
            .values(mana_balance=User.mana_balance + amount_delta)
            .returning(User.mana_balance)
            .execution_options(synchronize_session=False)
        )

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
