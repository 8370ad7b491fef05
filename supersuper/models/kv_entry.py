"""Key-value entry model backing persisted client state (e.g. the pantry)."""

from sqlalchemy import Column, String, Text

from supersuper.database import Base
from supersuper.models.mixins import TimestampMixin


class KeyValueEntry(Base, TimestampMixin):
    """One JSON document stored under a string key."""

    __tablename__ = "kv_entries"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)  # JSON-encoded document
