"""Database models"""

from registry_console.db.models.stored_item import StoredItem

__all__ = ["StoredItem"]
