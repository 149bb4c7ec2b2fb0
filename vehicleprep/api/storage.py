"""
Credential persistence for the API client.

Tokens live in a key/value storage that behaves like the browser's
localStorage. Old dashboard builds read and wrote the access and refresh
tokens under different key names, so every credential has an ordered list of
aliases: reads walk the list, writes land on the canonical (first) alias and,
while legacy compatibility is on, on the others as well.
"""
import json
import os
import threading
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from vehicleprep.logging_config import get_logger
from vehicleprep.models import Base, StoredValue

logger = get_logger(__name__)

ACCESS_TOKEN_KEYS: Tuple[str, ...] = ("auth-token", "token")
REFRESH_TOKEN_KEYS: Tuple[str, ...] = ("refresh-token", "refresh_token")

# Other auth leftovers written by the dashboards over time
EXTRA_AUTH_KEYS: Tuple[str, ...] = (
    "auth_token",
    "access_token",
    "authToken",
    "auth-user",
    "user_data",
    "user",
)
APP_CACHE_KEYS: Tuple[str, ...] = (
    "selectedAgency",
    "lastActivity",
    "dashboardData",
    "currentPreparation",
)
APP_KEY_PREFIXES: Tuple[str, ...] = ("vehicle_prep_", "auth_", "user_", "prep_", "sixt_")

SENTINEL_VALUES = ("null", "undefined")


def is_usable_token(value: Optional[str]) -> bool:
    """A token is usable when it is a non-empty string other than "null"/"undefined"."""
    if not value or not isinstance(value, str):
        return False
    return value.strip() not in ("",) + SENTINEL_VALUES


class KeyValueStorage:
    """Minimal localStorage-like interface."""

    def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove_item(self, key: str) -> None:
        raise NotImplementedError

    def keys(self) -> List[str]:
        raise NotImplementedError

    def clear(self) -> None:
        for key in self.keys():
            self.remove_item(key)


class MemoryStorage(KeyValueStorage):
    """Process-local storage; also used as the session storage."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._lock = threading.Lock()
        self._data: Dict[str, str] = dict(initial or {})

    def get_item(self, key):
        with self._lock:
            return self._data.get(key)

    def set_item(self, key, value):
        with self._lock:
            self._data[key] = str(value)

    def remove_item(self, key):
        with self._lock:
            self._data.pop(key, None)

    def keys(self):
        with self._lock:
            return list(self._data.keys())

    def clear(self):
        with self._lock:
            self._data.clear()


class JsonFileStorage(KeyValueStorage):
    """Storage persisted to a JSON file, so a CLI session survives between runs."""

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.RLock()

    def _load(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as e:
            logger.warning("Unreadable storage file, starting empty", path=self.path, error=str(e))
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: Dict[str, str]) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as fh:
            json.dump(data, fh, indent=2, sort_keys=True)
        os.replace(tmp_path, self.path)

    def get_item(self, key):
        with self._lock:
            return self._load().get(key)

    def set_item(self, key, value):
        with self._lock:
            data = self._load()
            data[key] = str(value)
            self._save(data)

    def remove_item(self, key):
        with self._lock:
            data = self._load()
            if key in data:
                del data[key]
                self._save(data)

    def keys(self):
        with self._lock:
            return list(self._load().keys())

    def clear(self):
        with self._lock:
            self._save({})


class SqlStorage(KeyValueStorage):
    """Storage backed by the ``client_storage`` table, shared by every worker using the same database."""

    def __init__(self, database_url: Optional[str] = None, engine=None):
        if engine is None and not database_url:
            raise ValueError("SqlStorage needs a database_url or an engine")
        self.engine = engine or create_engine(database_url, pool_pre_ping=True)
        Base.metadata.create_all(self.engine)
        self._session_factory = sessionmaker(bind=self.engine)

    def get_item(self, key):
        with self._session_factory() as session:
            row = StoredValue.get_current(session, key)
            return row.value if row else None

    def set_item(self, key, value):
        with self._session_factory() as session:
            row = StoredValue.get_current(session, key)
            if row is None:
                session.add(StoredValue(key=key, value=str(value)))
            else:
                row.value = str(value)
                row.updated_at = datetime.utcnow()
            session.commit()

    def remove_item(self, key):
        with self._session_factory() as session:
            row = StoredValue.get_current(session, key)
            if row is not None:
                session.delete(row)
                session.commit()

    def keys(self):
        with self._session_factory() as session:
            return [key for (key,) in session.query(StoredValue.key).all()]

    def clear(self):
        with self._session_factory() as session:
            session.query(StoredValue).delete()
            session.commit()


class TokenStore:
    """Reads, writes and clears the credentials used by the client."""

    def __init__(
        self,
        storage: Optional[KeyValueStorage] = None,
        session_storage: Optional[KeyValueStorage] = None,
        legacy_keys: bool = True,
    ):
        self.storage = storage if storage is not None else MemoryStorage()
        self.session_storage = session_storage
        self.legacy_keys = legacy_keys

    # -------------------------
    # Alias handling
    # -------------------------
    def _read(self, aliases: Iterable[str]) -> Optional[str]:
        aliases = tuple(aliases)
        for key in aliases:
            value = self.storage.get_item(key)
            if is_usable_token(value):
                if key != aliases[0] and not is_usable_token(self.storage.get_item(aliases[0])):
                    # Found under a legacy name only: copy it to the canonical key
                    self.storage.set_item(aliases[0], value)
                    logger.debug("Migrated legacy storage key", from_key=key, to_key=aliases[0])
                return value
        return None

    def _write(self, aliases: Iterable[str], value: str) -> None:
        canonical, *legacy = tuple(aliases)
        self.storage.set_item(canonical, value)
        for key in legacy:
            if self.legacy_keys:
                self.storage.set_item(key, value)
            else:
                self.storage.remove_item(key)

    # -------------------------
    # Credentials
    # -------------------------
    def get_access_token(self) -> Optional[str]:
        return self._read(ACCESS_TOKEN_KEYS)

    def set_access_token(self, token: str) -> None:
        self._write(ACCESS_TOKEN_KEYS, token)

    def get_refresh_token(self) -> Optional[str]:
        return self._read(REFRESH_TOKEN_KEYS)

    def set_refresh_token(self, token: str) -> None:
        self._write(REFRESH_TOKEN_KEYS, token)

    def save_credentials(self, access_token: str, refresh_token: Optional[str] = None) -> None:
        self.set_access_token(access_token)
        if refresh_token:
            self.set_refresh_token(refresh_token)

    def clear_credentials(self) -> None:
        """Remove the access and refresh tokens under every alias."""
        for key in ACCESS_TOKEN_KEYS + REFRESH_TOKEN_KEYS:
            self.storage.remove_item(key)

    def clear_all(self) -> None:
        """Remove every auth-related and app-cached key, and wipe the session storage."""
        self.clear_credentials()
        for key in EXTRA_AUTH_KEYS + APP_CACHE_KEYS:
            self.storage.remove_item(key)
        for key in self.storage.keys():
            if key.startswith(APP_KEY_PREFIXES):
                self.storage.remove_item(key)
        if self.session_storage is not None:
            self.session_storage.clear()
        logger.info("Cleared stored credentials and cached session data")

    @staticmethod
    def known_token_keys() -> Tuple[str, ...]:
        return ACCESS_TOKEN_KEYS + REFRESH_TOKEN_KEYS + EXTRA_AUTH_KEYS
