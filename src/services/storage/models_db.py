"""
SQLAlchemy ORM models.

Learner state is kept as JSON documents under string keys, mirroring the
browser key/value store the lesson flow was first written against.
"""

from datetime import UTC, datetime

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.services.storage.database import Base


class KeyValue(Base):
    """A single stored document."""

    __tablename__ = "key_values"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, default="")
    updated_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    def __repr__(self) -> str:
        return f"<KeyValue key={self.key!r}>"
