"""Quote builder session.

Holds one ``QuoteDraft`` and applies every mutation as a replacement of the
draft value, followed by an autosave. Adding catalog items also feeds the
usage counters, price history and recently-used list.
"""

import logging
from datetime import timedelta
from decimal import Decimal
from typing import Iterable, Optional

from pydantic import ValidationError

from quotedesk.app.core.errors import (
    ItemNotFoundError,
    ItemValidationError,
    PersistenceError,
    QuoteValidationError,
    StoreError,
)
from quotedesk.app.core.settings import get_settings
from quotedesk.app.core.time import today
from quotedesk.app.schemas.quote_draft import (
    BuilderState,
    BulkAddSettings,
    CatalogItem,
    OrderTotals,
    PreviousQuoteLine,
    QuoteDraft,
    QuoteOrderUpdate,
    QuoteSubmission,
)
from quotedesk.app.schemas.quote_item import (
    BulkEditRequest,
    BulkPriceAdjustment,
    DiscountType,
    QuoteItem,
    QuoteItemBase,
    QuoteItemCreate,
    QuoteItemUpdate,
)
from quotedesk.app.schemas.quote_template import QuoteTemplate
from quotedesk.app.services import sequencing
from quotedesk.app.services.currency import present
from quotedesk.app.services.drafts import DraftStore, TemplateStore
from quotedesk.app.services.kv_store import KeyValueStore
from quotedesk.app.services.pricing import calculate_draft_totals, calculate_line_item
from quotedesk.app.services.suggestions import UsageTracker, active_catalog

logger = logging.getLogger(__name__)

NOTE_TEMPLATES = [
    "Prices are quoted excluding VAT.",
    "Payment terms: cash in advance",
    "Payment terms: net 30 days",
    "Delivery time: 7-10 business days",
    "Delivery time: 15-20 business days",
    "All prices are calculated at the current exchange rate.",
    "This quote is valid for 30 days.",
]

PAYMENT_TERMS_TEMPLATES = [
    "Cash in advance",
    "Net 30 days",
    "Net 60 days",
    "50% in advance, 50% on completion",
    "40% in advance, 60% on completion",
]

MAX_SUBMITTED_TAX_RATE = Decimal("50")


def validate_item(data: QuoteItemBase | dict) -> QuoteItemCreate:
    """Run the item input checks, raising ``ItemValidationError`` with the first reason."""
    payload = data if isinstance(data, dict) else data.model_dump()
    try:
        return QuoteItemCreate.model_validate(payload)
    except ValidationError as exc:
        reason = exc.errors()[0].get("msg", "Invalid item")
        raise ItemValidationError(reason.removeprefix("Value error, ")) from exc


class QuoteBuilder:
    def __init__(self, store: KeyValueStore, draft: Optional[QuoteDraft] = None):
        self.store = store
        self.drafts = DraftStore(store)
        self.templates = TemplateStore(store)
        self.usage = UsageTracker(store)
        self.draft = draft or QuoteDraft()
        self.has_draft = False
        self.notices: list[str] = []

    @classmethod
    def restore(cls, store: KeyValueStore) -> "QuoteBuilder":
        builder = cls(store)
        saved = builder.drafts.load()
        if saved is not None:
            builder.draft = saved
            builder.has_draft = True
        return builder

    # state

    def _commit(self, draft: QuoteDraft) -> QuoteDraft:
        self.draft = draft
        try:
            if self.drafts.autosave(draft):
                self.has_draft = True
            elif self.has_draft:
                # emptied by this change: the stored draft must not come back
                self.drafts.clear()
                self.has_draft = False
        except PersistenceError as exc:
            self.notices.append(str(exc))
        return draft

    def _set_items(self, items: list[QuoteItem]) -> list[QuoteItem]:
        self._commit(self.draft.model_copy(update={"items": items}))
        return items

    @property
    def items(self) -> list[QuoteItem]:
        return list(self.draft.items)

    def totals(self) -> OrderTotals:
        return calculate_draft_totals(self.draft)

    def display(self, amount: Decimal) -> str:
        return present(amount, self.draft.currency, self.draft.manual_rate)

    def state(self) -> BuilderState:
        totals = self.totals()
        return BuilderState(
            draft=self.draft,
            totals=totals,
            item_totals={item.id: calculate_line_item(item) for item in self.draft.items},
            display_total=self.display(totals.total_with_extras),
            has_draft=self.has_draft,
            notices=list(self.notices),
        )

    def _require_item(self, item_id: str) -> QuoteItem:
        item = sequencing.find_item(self.draft.items, item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        return item

    def _track_catalog_use(self, catalog_item_id: int, unit_price: Decimal) -> None:
        self.usage.record_price(catalog_item_id, unit_price)
        if self.draft.company_id:
            self.usage.record_usage(self.draft.company_id, catalog_item_id)
        self.usage.mark_recent(catalog_item_id)

    # items

    def add_item(self, data: QuoteItemBase) -> QuoteItem:
        validated = validate_item(data)
        items = self._set_items(sequencing.add_item(self.draft.items, validated))
        if validated.catalog_ref:
            self._track_catalog_use(validated.catalog_ref, validated.unit_price)
        return items[-1]

    def edit_item(self, item_id: str, update: QuoteItemUpdate) -> QuoteItem:
        existing = self._require_item(item_id)
        validated = validate_item({**existing.item_fields(), **update.model_dump(exclude_unset=True)})
        items = self._set_items(sequencing.update_item(self.draft.items, item_id, **validated.model_dump()))
        return sequencing.find_item(items, item_id)

    def update_field(self, item_id: str, field: str, value) -> QuoteItem:
        if field not in QuoteItemUpdate.model_fields:
            raise ItemValidationError(f"Unknown field: {field}")
        return self.edit_item(item_id, QuoteItemUpdate.model_validate({field: value}))

    def remove_item(self, item_id: str) -> list[QuoteItem]:
        return self._set_items(sequencing.remove_item(self.draft.items, item_id))

    def reorder(self, active_id: str, over_id: str) -> list[QuoteItem]:
        return self._set_items(sequencing.reorder_items(self.draft.items, active_id, over_id))

    def toggle_select(self, item_id: str) -> QuoteItem:
        self._require_item(item_id)
        items = self._set_items(sequencing.toggle_select(self.draft.items, item_id))
        return sequencing.find_item(items, item_id)

    def select_all(self, selected: bool) -> list[QuoteItem]:
        return self._set_items(sequencing.select_all(self.draft.items, selected))

    def _require_selection(self) -> set[str]:
        ids = sequencing.selected_ids(self.draft.items)
        if not ids:
            raise ItemValidationError("Select the items to update first")
        return ids

    def bulk_edit(self, request: BulkEditRequest) -> list[QuoteItem]:
        self._require_selection()
        return self._set_items(sequencing.apply_bulk_edit(self.draft.items, request))

    def bulk_delete(self) -> int:
        count = len(self._require_selection())
        self._set_items(sequencing.remove_selected(self.draft.items))
        return count

    def bulk_adjust_price(self, adjustment: BulkPriceAdjustment) -> list[QuoteItem]:
        return self._set_items(
            sequencing.bulk_adjust_price(self.draft.items, adjustment.direction, adjustment.percentage)
        )

    # catalog

    def suggested_price(self, entry: CatalogItem) -> Decimal:
        return self.usage.suggested_price(entry)

    def quick_add(self, entry: CatalogItem) -> QuoteItem:
        price = self.suggested_price(entry)
        data = QuoteItemBase(
            catalog_ref=entry.id,
            quantity=1,
            unit_price=price,
            description=entry.name,
            discount=Decimal("0"),
            discount_type=DiscountType.PERCENTAGE,
            tax_rate=get_settings().quick_add_tax_rate,
        )
        items = self._set_items(sequencing.add_item(self.draft.items, data))
        self._track_catalog_use(entry.id, price)
        return items[-1]

    def _add_catalog_entries(self, entries: list[CatalogItem], settings: BulkAddSettings) -> list[QuoteItem]:
        new_data = []
        for entry in entries:
            new_data.append(
                QuoteItemBase(
                    catalog_ref=entry.id,
                    quantity=settings.quantity,
                    unit_price=self.suggested_price(entry),
                    description=entry.name,
                    discount=settings.discount,
                    discount_type=settings.discount_type,
                    tax_rate=settings.tax_rate,
                )
            )
        before = len(self.draft.items)
        items = self._set_items(sequencing.add_items(self.draft.items, new_data))
        for data in new_data:
            self._track_catalog_use(data.catalog_ref, data.unit_price)
        return items[before:]

    def bulk_add(
        self,
        catalog: Iterable[CatalogItem],
        catalog_item_ids: Iterable[int],
        settings: Optional[BulkAddSettings] = None,
    ) -> list[QuoteItem]:
        wanted = list(catalog_item_ids)
        if not wanted:
            raise ItemValidationError("Select at least one catalog item")
        by_id = {entry.id: entry for entry in active_catalog(catalog)}
        entries = [by_id[item_id] for item_id in wanted if item_id in by_id]
        return self._add_catalog_entries(entries, settings or BulkAddSettings())

    def add_recent(self, catalog: Iterable[CatalogItem]) -> list[QuoteItem]:
        recent = set(self.usage.recently_used())
        entries = [entry for entry in active_catalog(catalog) if entry.id in recent]
        if not entries:
            raise ItemValidationError("No recently used catalog items found")
        return self._add_catalog_entries(
            entries, BulkAddSettings(tax_rate=get_settings().quick_add_tax_rate)
        )

    def suggestions(self, catalog: Iterable[CatalogItem]) -> list[CatalogItem]:
        return self.usage.suggest(self.draft.company_id, catalog)

    def toggle_favorite(self, catalog_item_id: int) -> list[int]:
        try:
            return self.usage.toggle_favorite(catalog_item_id)
        except StoreError as exc:
            logger.exception("Could not update favorites")
            raise PersistenceError("Favorites could not be saved") from exc

    def copy_items(self, lines: Iterable[PreviousQuoteLine], notes: Optional[str] = None) -> list[QuoteItem]:
        """Replace the item list with lines from an earlier quote."""
        tax_rate = get_settings().quick_add_tax_rate
        items = sequencing.replace_items(
            QuoteItemBase(
                catalog_ref=line.catalog_ref,
                quantity=line.quantity,
                unit_price=line.unit_price,
                description=line.description,
                discount=Decimal("0"),
                discount_type=DiscountType.PERCENTAGE,
                tax_rate=tax_rate,
            )
            for line in lines
        )
        update = {"items": items}
        if notes is not None:
            update["notes"] = notes
        self._commit(self.draft.model_copy(update=update))
        return items

    # order-level fields

    def update_order(self, update: QuoteOrderUpdate) -> QuoteDraft:
        fields = update.model_dump(exclude_unset=True, exclude_none=True, exclude={"clear_manual_rate", "clear_company"})
        if update.clear_manual_rate:
            fields["manual_rate"] = None
        if update.clear_company:
            fields["company_id"] = None
        validated = QuoteDraft.model_validate({**self.draft.model_dump(), **fields})
        return self._commit(validated)

    def set_validity(self, days: int) -> QuoteDraft:
        return self._commit(self.draft.model_copy(update={"valid_until_date": today() + timedelta(days=days)}))

    def append_note(self, text: str) -> QuoteDraft:
        notes = f"{self.draft.notes}\n{text}" if self.draft.notes else text
        return self._commit(self.draft.model_copy(update={"notes": notes}))

    def apply_payment_terms(self, text: str) -> QuoteDraft:
        return self._commit(self.draft.model_copy(update={"payment_terms": text}))

    # templates

    def save_template(self, name: str) -> QuoteTemplate:
        return self.templates.save(name, self.draft.items)

    def load_template(self, template_id: str) -> Optional[list[QuoteItem]]:
        items = self.templates.load(template_id)
        if items is None:
            return None
        return self._set_items(items)

    def delete_template(self, template_id: str) -> bool:
        return self.templates.delete(template_id)

    # lifecycle

    def clear(self) -> QuoteDraft:
        try:
            self.drafts.clear()
        except PersistenceError as exc:
            self.notices.append(str(exc))
        self.draft = QuoteDraft()
        self.has_draft = False
        return self.draft

    def validate(self) -> dict[str, str]:
        draft = self.draft
        errors: dict[str, str] = {}
        if not draft.company_id:
            errors["company_id"] = "Select a company"
        if draft.valid_until_date < draft.issue_date:
            errors["valid_until_date"] = "Validity date cannot be before the issue date"
        if not draft.items:
            errors["items"] = "Add at least one item"
        else:
            problematic = [
                item
                for item in draft.items
                if item.quantity <= 0
                or item.unit_price <= 0
                or item.tax_rate < 0
                or item.tax_rate > MAX_SUBMITTED_TAX_RATE
            ]
            if problematic:
                errors["items"] = (
                    f"{len(problematic)} item(s) have invalid values (quantity / unit price / tax rate). "
                    "Please check these items."
                )
        return errors

    def composed_notes(self, totals: OrderTotals) -> Optional[str]:
        draft = self.draft
        parts = [draft.notes.strip()]
        if draft.payment_terms:
            parts.append(f"Payment terms: {draft.payment_terms}")
        if draft.extra_costs > 0:
            parts.append(f"Extra costs: {draft.extra_costs:.2f} TRY")
        if draft.down_payment > 0:
            parts.append(f"Down payment: {draft.down_payment:.2f} TRY")
            parts.append(f"Net payable: {totals.net_payable:.2f} TRY")
        composed = "\n".join(part for part in parts if part)
        return composed or None

    def build_submission(self) -> QuoteSubmission:
        errors = self.validate()
        if errors:
            raise QuoteValidationError(errors)
        totals = self.totals()
        return QuoteSubmission(
            company_id=self.draft.company_id,
            issue_date=self.draft.issue_date,
            valid_until_date=self.draft.valid_until_date,
            notes=self.composed_notes(totals),
            payment_terms=self.draft.payment_terms,
            items=list(self.draft.items),
            totals=totals,
        )

    def submit(self) -> QuoteSubmission:
        """Build the submission and clear the draft; the caller sends it on."""
        submission = self.build_submission()
        self.clear()
        logger.info(
            "Quote for company %s submitted with %d items", submission.company_id, len(submission.items)
        )
        return submission
