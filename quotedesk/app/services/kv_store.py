"""Key-value stores used for drafts, templates, usage counters and price history.

Values are JSON text. Backends raise ``StoreError`` on failure; callers decide
whether a failure is a silent miss (reads) or a user-visible notice (writes).
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from quotedesk.app.core.errors import StoreError
from quotedesk.app.crud.crud_store_entry import store_entry_crud

logger = logging.getLogger(__name__)

DRAFT_KEY = "quoteDraft"
TEMPLATES_KEY = "quoteTemplates"
RECENT_KEY = "recentlyUsed"
FAVORITES_KEY = "favorites"


def usage_key(company_id: int | str) -> str:
    return f"usage:{company_id}"


def price_history_key(catalog_item_id: int | str) -> str:
    return f"priceHistory:{catalog_item_id}"


class KeyValueStore(ABC):
    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...


class InMemoryKeyValueStore(KeyValueStore):
    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class SqlKeyValueStore(KeyValueStore):
    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str) -> Optional[str]:
        try:
            entry = store_entry_crud.get(self.db, key=key)
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not read {key}") from exc
        return entry.value if entry else None

    def set(self, key: str, value: str) -> None:
        try:
            store_entry_crud.upsert(self.db, key=key, value=value)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreError(f"Could not write {key}") from exc

    def delete(self, key: str) -> None:
        try:
            store_entry_crud.delete(self.db, key=key)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreError(f"Could not delete {key}") from exc


def read_json(store: KeyValueStore, key: str, expect: Callable[[Any], bool], default: Any) -> Any:
    """Read and decode ``key``; missing, unreadable or malformed values yield ``default``."""
    try:
        raw = store.get(key)
    except StoreError:
        logger.exception("Store read failed for %s", key)
        return default
    if raw is None:
        return default
    try:
        data = json.loads(raw)
    except ValueError:
        logger.error("Malformed value under %s; ignoring it", key)
        return default
    if not expect(data):
        logger.error("Unexpected value shape under %s; ignoring it", key)
        return default
    return data


def write_json(store: KeyValueStore, key: str, data: Any) -> None:
    store.set(key, json.dumps(data, ensure_ascii=False))
