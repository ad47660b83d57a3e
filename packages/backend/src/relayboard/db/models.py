"""SQLAlchemy ORM models — the message table.

Learn: One row per accepted webhook event. The full event is kept as JSON
text (message_data) so the provider can add fields without a migration;
user_id is pulled out of the event's for_user_id so reads can be
partitioned per account.

created_at has second resolution on SQLite, so ordering by created_at
alone is not stable for bursts. Reads always tie-break on the
autoincrement id.
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class Message(Base):
    """A persisted webhook event."""

    __tablename__ = "messages"
    __table_args__ = (
        Index("idx_user_id", "user_id"),
        Index("idx_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    message_data: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
