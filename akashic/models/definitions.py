from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import AuditMixin, Base, utc_now

# --- CORE IDENTITY ENTITY ---


class User(Base, AuditMixin):
    """
    The User Definition Table (T_User).
    This is the core identity entity for the entire Archive (Ledger, Unlocks, Inventory, Crafting).

    Username is the public login handle; email is a second, equally unique login identifier.
    Users are never hard-deleted.
    """

    __tablename__ = "users"
    __table_args__ = (CheckConstraint("mana_balance >= 0", name="ck_users_mana_balance_non_negative"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, comment="Unique User ID.")

    username: Mapped[str] = mapped_column(
        String(50), nullable=False, unique=True, index=True, comment="Unique login handle and display name."
    )

    email: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        index=True,
        comment="User's unique email address, also accepted as a login identifier.",
    )

    password_hash: Mapped[str] = mapped_column(
        String(255), nullable=False, comment="Argon2 hash of the user's password."
    )

    phone: Mapped[str | None] = mapped_column(String(32), nullable=True, comment="Optional phone number.")

    profile_picture: Mapped[str | None] = mapped_column(
        String(255), nullable=True, comment="Path or URL of the profile picture."
    )

    # State field: Cached Balance (must be updated atomically with every ManaTransaction)
    mana_balance: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Running Mana counter. Always equals the sum of the user's mana_transactions amounts.",
    )

    stripe_customer_id: Mapped[str | None] = mapped_column(
        String(64), nullable=True, index=True, comment="Payment-provider customer reference (stored only)."
    )

    is_active: Mapped[bool] = mapped_column(
        default=True, comment="Indicates if the user account is active and may sign in."
    )


class AuthSession(Base):
    """
    Server-side login session (T_Session). The token is handed to the client as a
    cookie or bearer token; this table is the authoritative record of who is signed in.
    """

    __tablename__ = "auth_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    token: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey(User.id), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
