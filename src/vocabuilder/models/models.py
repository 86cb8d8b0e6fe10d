"""Database models for the key-value store."""
from sqlalchemy import Column, String, Text

from vocabuilder.models.base import Base, TimestampMixin


class StoreItem(Base, TimestampMixin):
    """One key of the persistent key-value store."""

    __tablename__ = "store_items"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)  # JSON text, or a bare string for the session
