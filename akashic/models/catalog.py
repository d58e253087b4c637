from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin, utc_now
from .definitions import User


class ScrollType(str, PyEnum):
    SCROLL = "scroll"
    TABLET = "tablet"
    BOOK = "book"
    ARTIFACT = "artifact"


class Scroll(Base, TimestampMixin):
    """
    The Scroll Table (T_Scroll).
    Any unlockable content item of the Archive. Administered server-side; clients
    can only read it and submit unlock attempts.
    """

    __tablename__ = "scrolls"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, comment="Scroll ID.")
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    image: Mapped[str] = mapped_column(String(255), nullable=False, default="", comment="Image path or URL.")
    type: Mapped[ScrollType] = mapped_column(String(20), nullable=False, default=ScrollType.SCROLL, index=True)
    is_locked: Mapped[bool] = mapped_column(
        default=True, comment="Global default. False means readable by everyone without a key."
    )

    # Secret: compared server-side only, never serialized to clients.
    unlock_key: Mapped[str] = mapped_column(String(100), nullable=False)


class UserScrollUnlock(Base):
    """
    Association of a User and a Scroll they unlocked (T_UserScrollUnlock).
    At most one row per (user, scroll); rows are never deleted.
    """

    __tablename__ = "user_scroll_unlocks"
    __table_args__ = (UniqueConstraint("user_id", "scroll_id", name="uq_user_scroll_unlocks_user_scroll"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey(User.id), nullable=False, index=True)
    scroll_id: Mapped[int] = mapped_column(ForeignKey(Scroll.id), nullable=False, index=True)
    unlocked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
