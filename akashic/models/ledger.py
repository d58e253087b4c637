from enum import Enum as PyEnum

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin
from .definitions import User


class TransactionType(str, PyEnum):
    PURCHASE = "purchase"  # Mana bought (direct purchase of a package)
    SPEND = "spend"  # Mana consumed (scroll access, Oracle, crystals)
    EARN = "earn"  # Mana gained through activity
    REWARD = "reward"  # Grants issued by the Archive (welcome bonus)


# --- 1. CONFIGURATION MODELS (Dimensions) ---


class ManaPackage(Base, TimestampMixin):
    """
    The Mana Package Table (T_ManaPackage).
    The purchasable bundles of Mana offered in the shop.
    """

    __tablename__ = "mana_packages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, comment="Mana Package ID.")
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, comment="e.g. 'Novice Pack'.")
    description: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    amount: Mapped[int] = mapped_column(Integer, nullable=False, comment="Mana credited on purchase.")
    price: Mapped[int] = mapped_column(Integer, nullable=False, comment="Price in cents (USD).")
    is_active: Mapped[bool] = mapped_column(default=True, comment="Only active packages are offered.")


# --- 2. CORE FACT MODEL ---


class ManaTransaction(Base, TimestampMixin):
    """
    The Mana Transaction Table (T_ManaTransaction) - The Immutable Ledger.
    Append-only record of every balance-affecting event. A user's balance is the
    sum of their amounts; users.mana_balance caches that sum.
    """

    __tablename__ = "mana_transactions"
    __table_args__ = (CheckConstraint("amount <> 0", name="ck_mana_transactions_amount_non_zero"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, comment="Unique Transaction ID.")
    user_id: Mapped[int] = mapped_column(
        ForeignKey(User.id), nullable=False, index=True, comment="The user whose balance this entry affects."
    )
    amount: Mapped[int] = mapped_column(
        Integer, nullable=False, comment="Signed Mana delta: positive = credit, negative = debit."
    )
    transaction_type: Mapped[TransactionType] = mapped_column(String(20), nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    # --- Business Tracking Fields ---
    reference_id: Mapped[str | None] = mapped_column(
        String(64), nullable=True, comment="Related entity (package id, scroll id, ...)."
    )
    stripe_payment_intent_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    balance_after: Mapped[int] = mapped_column(
        Integer, nullable=False, comment="Cached balance immediately after this entry was applied."
    )
