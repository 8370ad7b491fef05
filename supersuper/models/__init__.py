"""SQLAlchemy models."""

from supersuper.models.kv_entry import KeyValueEntry

__all__ = ["KeyValueEntry"]
