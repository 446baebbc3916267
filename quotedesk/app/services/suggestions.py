"""Per-company usage counters, last-used prices, recents and favorites.

Usage counts are keyed by company and only ever incremented. The top-N cut
for suggestions is taken at read time over the active catalog.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from quotedesk.app.core.errors import StoreError
from quotedesk.app.core.settings import get_settings
from quotedesk.app.schemas.quote_draft import CatalogItem
from quotedesk.app.services.kv_store import (
    FAVORITES_KEY,
    RECENT_KEY,
    KeyValueStore,
    price_history_key,
    read_json,
    usage_key,
    write_json,
)

logger = logging.getLogger(__name__)


def active_catalog(catalog: Iterable[CatalogItem]) -> list[CatalogItem]:
    return [entry for entry in catalog if entry.is_active]


def _is_int_list(data) -> bool:
    return isinstance(data, list) and all(isinstance(v, int) for v in data)


class UsageTracker:
    def __init__(self, store: KeyValueStore):
        self.store = store

    def usage_for(self, company_id: int) -> dict[int, int]:
        data = read_json(self.store, usage_key(company_id), lambda d: isinstance(d, dict), {})
        usage: dict[int, int] = {}
        for raw_id, raw_count in data.items():
            try:
                usage[int(raw_id)] = int(raw_count)
            except (TypeError, ValueError):
                continue
        return usage

    def record_usage(self, company_id: int, catalog_item_id: int) -> None:
        usage = self.usage_for(company_id)
        usage[catalog_item_id] = usage.get(catalog_item_id, 0) + 1
        try:
            write_json(self.store, usage_key(company_id), {str(k): v for k, v in usage.items()})
        except StoreError:
            logger.exception("Could not record usage of %s for company %s", catalog_item_id, company_id)

    def suggest(
        self, company_id: Optional[int], catalog: Iterable[CatalogItem], limit: Optional[int] = None
    ) -> list[CatalogItem]:
        if not company_id:
            return []
        limit = limit if limit is not None else get_settings().suggestion_limit
        usage = self.usage_for(company_id)
        used = [entry for entry in active_catalog(catalog) if usage.get(entry.id, 0) > 0]
        # sorted() is stable, so ties keep catalog order
        ranked = sorted(used, key=lambda entry: -usage[entry.id])
        return ranked[:limit]

    def last_price(self, catalog_item_id: int) -> Optional[Decimal]:
        try:
            raw = self.store.get(price_history_key(catalog_item_id))
        except StoreError:
            logger.exception("Could not read price history for %s", catalog_item_id)
            return None
        if raw is None:
            return None
        try:
            return Decimal(raw.strip().strip('"'))
        except InvalidOperation:
            logger.error("Malformed price history for %s: %r", catalog_item_id, raw)
            return None

    def record_price(self, catalog_item_id: int, price: Decimal) -> None:
        if not price:
            return
        try:
            self.store.set(price_history_key(catalog_item_id), str(price))
        except StoreError:
            logger.exception("Could not record price history for %s", catalog_item_id)

    def suggested_price(self, entry: CatalogItem) -> Decimal:
        if entry.price:
            return entry.price
        return self.last_price(entry.id) or Decimal("0")

    def recently_used(self) -> list[int]:
        return read_json(self.store, RECENT_KEY, _is_int_list, [])

    def mark_recent(self, catalog_item_id: int) -> list[int]:
        limit = get_settings().recent_limit
        updated = [catalog_item_id, *(v for v in self.recently_used() if v != catalog_item_id)][:limit]
        try:
            write_json(self.store, RECENT_KEY, updated)
        except StoreError:
            logger.exception("Could not update recently used items")
        return updated

    def favorites(self) -> list[int]:
        return read_json(self.store, FAVORITES_KEY, _is_int_list, [])

    def toggle_favorite(self, catalog_item_id: int) -> list[int]:
        current = self.favorites()
        if catalog_item_id in current:
            updated = [v for v in current if v != catalog_item_id]
        else:
            updated = [*current, catalog_item_id]
        write_json(self.store, FAVORITES_KEY, updated)
        return updated
