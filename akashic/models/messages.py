from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utc_now


class ChatChannel(str, PyEnum):
    ORACLE = "oracle"
    KEEPER = "keeper"


class ChatMessage(Base):
    """One message of an Oracle or Keeper conversation, from either side."""

    __tablename__ = "chat_messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    channel: Mapped[ChatChannel] = mapped_column(String(10), nullable=False, index=True)
    session_key: Mapped[str] = mapped_column(
        String(100), nullable=False, index=True, comment="Client chat session id, or the user id when signed in."
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_user: Mapped[bool] = mapped_column(nullable=False, comment="True for the visitor, False for the reply.")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)


class OracleUsage(Base):
    """Per-day counter of free Oracle consultations for anonymous chat sessions."""

    __tablename__ = "oracle_usage"
    __table_args__ = (UniqueConstraint("session_key", "day", name="uq_oracle_usage_session_day"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    session_key: Mapped[str] = mapped_column(String(100), nullable=False)
    day: Mapped[str] = mapped_column(String(10), nullable=False, comment="YYYY-MM-DD (UTC).")
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class ContactMessage(Base):
    __tablename__ = "contact_messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(100), nullable=False)
    subject: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
