import logging
from datetime import timedelta
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from akashic.core.config import Settings
from akashic.core.security import check_password, hash_password, new_session_token
from akashic.db.utils import as_utc, atomic, utc_now
from akashic.exceptions import AuthenticationRequired, NotFound, ValidationError
from akashic.models.definitions import AuthSession, User
from akashic.models.ledger import TransactionType
from akashic.models.seed import STARTER_ITEMS
from akashic.repositories import SessionRepository, UserRepository
from akashic.services.inventory import InventoryService
from akashic.services.ledger import LedgerService

logger = logging.getLogger(__name__)

WELCOME_BONUS_DESCRIPTION = "Welcome bonus for new registration"


class UserService:
    def __init__(
        self,
        session: AsyncSession,
        user_repo: UserRepository,
        session_repo: SessionRepository,
        ledger: LedgerService,
        inventory: InventoryService,
        settings: Settings,
    ):
        self._session = session
        self._user_repo = user_repo
        self._session_repo = session_repo
        self._ledger = ledger
        self._inventory = inventory
        self._settings = settings

    # --- 1. USER REGISTRATION (Atomic Operation) ---

    async def register(self, username: str, email: str, password: str, phone: str | None = None) -> User:
        """
        Registers a new user ATOMICALLY: creating the identity, the welcome bonus
        transaction and the starter inventory.
        """

        if not password:
            raise ValidationError("Password is required for user registration.")

        if await self._user_repo.get_by_username(username):
            raise ValidationError("Username already taken")

        if await self._user_repo.get_by_email(email):
            raise ValidationError("User with this email already exists.")

        hashed_password = hash_password(password)

        # --- START ATOMIC TRANSACTION ---
        try:
            async with atomic(self._session):
                created_user = await self._user_repo.create(
                    {"username": username, "email": email.lower(), "password_hash": hashed_password, "phone": phone}
                )

                if self._settings.welcome_bonus > 0:
                    await self._ledger.append(
                        created_user.id,
                        self._settings.welcome_bonus,
                        TransactionType.REWARD,
                        WELCOME_BONUS_DESCRIPTION,
                    )

                for template in STARTER_ITEMS:
                    await self._inventory.grant_item(created_user.id, template)
        except IntegrityError:
            # Lost a race against a concurrent registration of the same username or email.
            raise ValidationError("Username or email already taken") from None
        # --- END ATOMIC TRANSACTION ---

        # The balance moved through a bulk UPDATE; reload it into the identity.
        await self._session.refresh(created_user)
        logger.info("Registered user %d (%s)", created_user.id, created_user.username)
        return created_user

    # --- 2. USER AUTHENTICATION AND SESSIONS ---

    async def authenticate(self, ident: str, password: str) -> User | None:
        """
        Authenticates a user by username or email and password using secure hashing.
        """
        # 1. Retrieve the user record, including the stored hash
        user_orm = await self._user_repo.get_by_login(ident)

        if not user_orm or not user_orm.is_active:
            return None

        # 2. Perform cryptographic verification
        if check_password(password, user_orm.password_hash):
            return user_orm

        return None

    async def open_session(self, user: User) -> AuthSession:
        async with atomic(self._session):
            auth_session = await self._session_repo.create(
                user.id,
                new_session_token(),
                utc_now() + timedelta(hours=self._settings.session_ttl_hours),
            )
        return auth_session

    async def login(self, ident: str, password: str) -> tuple[User, AuthSession]:
        user = await self.authenticate(ident, password)
        if user is None:
            logger.info("Failed login attempt for %r", ident)
            raise AuthenticationRequired("Invalid credentials")

        auth_session = await self.open_session(user)
        logger.info("User %d signed in", user.id)
        return user, auth_session

    async def logout(self, token: str | None) -> None:
        if not token:
            return
        async with atomic(self._session):
            await self._session_repo.delete_by_token(token)

    async def resolve_session(self, token: str | None) -> User | None:
        """Maps a session token to its active user. Expired sessions are removed."""
        if not token:
            return None

        auth_session = await self._session_repo.get_by_token(token)
        if auth_session is None:
            return None

        if as_utc(auth_session.expires_at) <= utc_now():
            async with atomic(self._session):
                await self._session_repo.delete_by_token(token)
            return None

        user = await self._user_repo.get_by_id(auth_session.user_id)
        if user is None or not user.is_active:
            return None
        return user

    # --- 3. PASSWORD AND PROFILE MANAGEMENT ---

    async def update_profile(self, user_id: int, data: dict[str, Any]) -> User:
        """
        Updates non-password related user profile fields.
        """
        update_data = {key: value for key, value in data.items() if value is not None}
        if "email" in update_data:
            update_data["email"] = update_data["email"].lower()
            existing = await self._user_repo.get_by_email(update_data["email"])
            if existing is not None and existing.id != user_id:
                raise ValidationError("User with this email already exists.")

        async with atomic(self._session):
            updated_user_orm = await self._user_repo.update(user_id, update_data)
            if updated_user_orm is None:
                raise NotFound("User not found")

        return updated_user_orm

    async def change_password(self, user_id: int, old_password: str, new_password: str) -> bool:
        """
        Changes the user's password after verifying the old password.
        """
        user_orm = await self._user_repo.get_by_id(user_id)

        if not user_orm:
            return False

        if not check_password(old_password, user_orm.password_hash):
            return False

        new_password_hash = hash_password(new_password)

        async with atomic(self._session):
            await self._user_repo.update_password(user_id, new_password_hash)

        logger.info("Password changed for user %d", user_id)
        return True
