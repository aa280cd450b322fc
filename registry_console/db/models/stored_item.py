from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from registry_console.db.base import Base


class StoredItem(Base):
    """One entry of the console's persistent key-value store."""

    # Base provides: id, written_at
    key: Mapped[str] = mapped_column(String, unique=True, index=True, nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<StoredItem(key={self.key!r})>"
