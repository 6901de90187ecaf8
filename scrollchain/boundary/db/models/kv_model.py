"""
Key-value entry ORM model.

One row per stored key. Chain heads, in-flight publish operations,
manifests and genesis configuration are all stored as entries.

Dependencies: sqlalchemy, scrollchain.boundary.db.base
System role: Persistent storage row for the key-value store
"""

from sqlalchemy import LargeBinary, String
from sqlalchemy.orm import Mapped, mapped_column

from scrollchain.boundary.db.base import Base, TimestampMixin


class KeyValueModel(Base, TimestampMixin):
    """
    Stored key with an opaque binary value.

    Attributes:
        key: Namespaced key (e.g. "chain_head:<author>")
        value: Serialized value bytes
    """

    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(String(512), primary_key=True)
    value: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)

    def __repr__(self) -> str:
        return f"<KeyValueModel(key={self.key!r}, size={len(self.value or b'')})>"
