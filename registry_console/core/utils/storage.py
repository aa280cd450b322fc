"""Persistent key-value storage for client state.

The console keeps exactly one long-lived value: the authentication token,
under a well-known key. ``SqlKeyValueStore`` plays the role a browser's
local storage plays for a web client; ``MemoryKeyValueStore`` is used when
nothing must survive a restart.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from threading import Lock
from typing import Dict, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from registry_console.core.exceptions import DecodeError
from registry_console.core.utils.encryption import TokenCipher, TokenDecryptionError
from registry_console.db.base import Base
from registry_console.db.models.stored_item import StoredItem
from registry_console.db.session import make_session_factory, session_scope

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """String-valued key-value store"""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the value for ``key`` or None"""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value"""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove ``key``; a missing key is not an error"""


class MemoryKeyValueStore(KeyValueStore):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class SqlKeyValueStore(KeyValueStore):
    """Key-value store on a SQL database (SQLite by default)."""

    def __init__(self, engine: Engine):
        self._engine = engine
        self._session_factory = make_session_factory(engine)
        self._table_ready = False
        self._table_lock = Lock()

    def _ensure_table(self) -> None:
        """Create the storeditem table once, in a thread-safe manner."""
        if self._table_ready:
            return

        with self._table_lock:
            # Double-check after acquiring lock
            if not self._table_ready:
                try:
                    Base.metadata.create_all(
                        bind=self._engine,
                        tables=[StoredItem.__table__],
                        checkfirst=True,
                    )
                except Exception as e:
                    logger.error(f"Failed to initialize key-value store table: {e}")
                    raise
                self._table_ready = True
                logger.debug("Key-value store table initialized")

    def get(self, key: str) -> Optional[str]:
        self._ensure_table()
        with session_scope(self._session_factory) as db:
            row = db.scalar(select(StoredItem).where(StoredItem.key == key))
            return row.value if row else None

    def set(self, key: str, value: str) -> None:
        self._ensure_table()
        with session_scope(self._session_factory) as db:
            try:
                # Update first; insert when no row exists yet
                result = db.execute(
                    update(StoredItem).where(StoredItem.key == key).values(value=value)
                )
                if result.rowcount == 0:
                    db.add(StoredItem(key=key, value=value))
                db.commit()
            except IntegrityError:
                # Another writer inserted between our UPDATE and INSERT
                db.rollback()
                logger.debug(f"Insert raced for key {key}, retrying update")
                db.execute(
                    update(StoredItem).where(StoredItem.key == key).values(value=value)
                )
                db.commit()
            except Exception as e:
                db.rollback()
                logger.error(f"Database operation failed for key {key}: {e}")
                raise

    def remove(self, key: str) -> None:
        self._ensure_table()
        with session_scope(self._session_factory) as db:
            db.execute(delete(StoredItem).where(StoredItem.key == key))
            db.commit()


class TokenStorage:
    """The token's slot in a key-value store.

    When a cipher is given the token is encrypted at rest. A stored value
    that cannot be decrypted is reported as a DecodeError, the same way an
    unparseable token is.
    """

    def __init__(self, store: KeyValueStore, key: str = "token", cipher: Optional[TokenCipher] = None):
        self._store = store
        self._key = key
        self._cipher = cipher

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> Optional[str]:
        stored = self._store.get(self._key)
        if stored is None or self._cipher is None:
            return stored
        try:
            return self._cipher.decrypt(stored)
        except TokenDecryptionError as e:
            # Never hand back the raw encrypted value
            raise DecodeError("Stored token could not be decrypted") from e

    def save(self, token: str) -> None:
        value = self._cipher.encrypt(token) if self._cipher else token
        self._store.set(self._key, value)

    def evict(self) -> None:
        self._store.remove(self._key)
