"""Single-slot draft persistence and the template collection."""

import logging
import uuid
from typing import Iterable, Optional

from pydantic import TypeAdapter, ValidationError

from quotedesk.app.core.errors import PersistenceError, StoreError, TemplateValidationError
from quotedesk.app.core.time import utc_now
from quotedesk.app.schemas.quote_draft import QuoteDraft
from quotedesk.app.schemas.quote_item import QuoteItem, QuoteItemBase, TemplateItem
from quotedesk.app.schemas.quote_template import QuoteTemplate
from quotedesk.app.services.kv_store import DRAFT_KEY, TEMPLATES_KEY, KeyValueStore
from quotedesk.app.services.sequencing import replace_items

logger = logging.getLogger(__name__)

_templates_adapter = TypeAdapter(list[QuoteTemplate])


class DraftStore:
    def __init__(self, store: KeyValueStore):
        self.store = store

    def load(self) -> Optional[QuoteDraft]:
        try:
            raw = self.store.get(DRAFT_KEY)
        except StoreError:
            logger.exception("Could not read the quote draft")
            return None
        if raw is None:
            return None
        try:
            return QuoteDraft.model_validate_json(raw)
        except ValidationError:
            logger.exception("Stored quote draft is malformed; ignoring it")
            return None

    def save(self, draft: QuoteDraft) -> None:
        try:
            self.store.set(DRAFT_KEY, draft.model_dump_json())
        except StoreError as exc:
            logger.exception("Could not save the quote draft")
            raise PersistenceError("The draft could not be saved") from exc

    def autosave(self, draft: QuoteDraft) -> bool:
        """Save unless the draft is untouched; return whether a write happened."""
        if draft.is_trivial():
            return False
        self.save(draft)
        return True

    def clear(self) -> None:
        try:
            self.store.delete(DRAFT_KEY)
        except StoreError as exc:
            logger.exception("Could not clear the quote draft")
            raise PersistenceError("The draft could not be cleared") from exc


class TemplateStore:
    def __init__(self, store: KeyValueStore):
        self.store = store

    def get_multi(self) -> list[QuoteTemplate]:
        try:
            raw = self.store.get(TEMPLATES_KEY)
        except StoreError:
            logger.exception("Could not read quote templates")
            return []
        if raw is None:
            return []
        try:
            return _templates_adapter.validate_json(raw)
        except ValidationError:
            logger.exception("Stored quote templates are malformed; ignoring them")
            return []

    def get(self, template_id: str) -> Optional[QuoteTemplate]:
        return next((t for t in self.get_multi() if t.id == template_id), None)

    def _write(self, templates: list[QuoteTemplate]) -> None:
        try:
            self.store.set(TEMPLATES_KEY, _templates_adapter.dump_json(templates).decode())
        except StoreError as exc:
            logger.exception("Could not write quote templates")
            raise PersistenceError("Templates could not be saved") from exc

    def save(self, name: str, items: Iterable[QuoteItemBase]) -> QuoteTemplate:
        name = (name or "").strip()
        if not name:
            raise TemplateValidationError("Enter a template name")
        template_items = [TemplateItem.model_validate(item.model_dump()) for item in items]
        if not template_items:
            raise TemplateValidationError("Add at least one item before saving a template")
        template = QuoteTemplate(
            id=f"template-{uuid.uuid4().hex}",
            name=name,
            items=template_items,
            created_at=utc_now(),
        )
        self._write([*self.get_multi(), template])
        logger.info("Saved template %s with %d items", template.id, len(template_items))
        return template

    def delete(self, template_id: str) -> bool:
        templates = self.get_multi()
        remaining = [t for t in templates if t.id != template_id]
        if len(remaining) == len(templates):
            return False
        self._write(remaining)
        return True

    def load(self, template_id: str) -> Optional[list[QuoteItem]]:
        """Return the template's items as fresh, unselected line items."""
        template = self.get(template_id)
        if template is None:
            return None
        return replace_items(template.items)
