from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text

from seabite.db import Base


class StorageEntry(Base):
    """
    One key of a browser profile's local storage.

    (profile_id, storage_key) is the primary key, so a write for an existing
    key replaces the value in place. Values are opaque strings; the cart is a
    JSON array stored under the "cart" key.
    """

    __tablename__ = "local_storage"

    profile_id = Column(String(64), primary_key=True)
    storage_key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<StorageEntry profile_id={self.profile_id} key={self.storage_key}>"
