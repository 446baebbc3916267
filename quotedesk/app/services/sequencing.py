"""Ordered line-item list operations.

Every function takes the current list and returns a new one; items are
frozen and replaced via ``model_copy``. Positions are renumbered 0..n-1 on
every call so ordering never depends on list identity. Input validation is
done by the schemas before these functions are reached.
"""

import uuid
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from quotedesk.app.schemas.quote_item import (
    BulkEditRequest,
    DiscountType,
    QuoteItem,
    QuoteItemBase,
)
from quotedesk.app.services.pricing import round_money

HUNDRED = Decimal("100")


def new_item_id() -> str:
    return f"item-{uuid.uuid4().hex}"


def _renumber(items: Iterable[QuoteItem]) -> list[QuoteItem]:
    result = []
    for position, item in enumerate(items):
        if item.position != position:
            item = item.model_copy(update={"position": position})
        result.append(item)
    return result


def make_item(data: QuoteItemBase, *, selected: bool = False) -> QuoteItem:
    fields = QuoteItemBase.model_validate(data.model_dump()).model_dump()
    return QuoteItem(id=new_item_id(), selected=selected, **fields)


def add_item(items: Sequence[QuoteItem], data: QuoteItemBase) -> list[QuoteItem]:
    return _renumber([*items, make_item(data)])


def add_items(items: Sequence[QuoteItem], data: Iterable[QuoteItemBase]) -> list[QuoteItem]:
    return _renumber([*items, *(make_item(entry) for entry in data)])


def replace_items(data: Iterable[QuoteItemBase]) -> list[QuoteItem]:
    return _renumber(make_item(entry) for entry in data)


def remove_item(items: Sequence[QuoteItem], item_id: str) -> list[QuoteItem]:
    return _renumber(item for item in items if item.id != item_id)


def reorder_items(items: Sequence[QuoteItem], active_id: str, over_id: str) -> list[QuoteItem]:
    """Move ``active_id`` into the slot held by ``over_id``, shifting the rest."""
    if active_id == over_id:
        return list(items)
    ids = [item.id for item in items]
    if active_id not in ids or over_id not in ids:
        return list(items)
    old_index = ids.index(active_id)
    new_index = ids.index(over_id)
    reordered = list(items)
    moved = reordered.pop(old_index)
    reordered.insert(new_index, moved)
    return _renumber(reordered)


def update_item(items: Sequence[QuoteItem], item_id: str, **fields) -> list[QuoteItem]:
    fields.pop("id", None)
    fields.pop("position", None)
    return _renumber(item.model_copy(update=fields) if item.id == item_id else item for item in items)


def find_item(items: Sequence[QuoteItem], item_id: str) -> Optional[QuoteItem]:
    return next((item for item in items if item.id == item_id), None)


def toggle_select(items: Sequence[QuoteItem], item_id: str) -> list[QuoteItem]:
    return _renumber(
        item.model_copy(update={"selected": not item.selected}) if item.id == item_id else item for item in items
    )


def select_all(items: Sequence[QuoteItem], selected: bool) -> list[QuoteItem]:
    return _renumber(item.model_copy(update={"selected": selected}) for item in items)


def selected_ids(items: Sequence[QuoteItem]) -> set[str]:
    return {item.id for item in items if item.selected}


def _bulk_update(items: Sequence[QuoteItem], ids: Optional[Iterable[str]], update: dict) -> list[QuoteItem]:
    targets = set(ids) if ids is not None else selected_ids(items)
    return _renumber(item.model_copy(update=update) if item.id in targets else item for item in items)


def bulk_set_discount(
    items: Sequence[QuoteItem], value: Decimal, selected: Optional[Iterable[str]] = None
) -> list[QuoteItem]:
    return _bulk_update(items, selected, {"discount": Decimal(value), "discount_type": DiscountType.PERCENTAGE})


def bulk_set_tax_rate(
    items: Sequence[QuoteItem], value: Decimal, selected: Optional[Iterable[str]] = None
) -> list[QuoteItem]:
    return _bulk_update(items, selected, {"tax_rate": Decimal(value)})


def apply_bulk_edit(items: Sequence[QuoteItem], request: BulkEditRequest) -> list[QuoteItem]:
    if request.field == "discount":
        return bulk_set_discount(items, request.value)
    return bulk_set_tax_rate(items, request.value)


def remove_selected(items: Sequence[QuoteItem]) -> list[QuoteItem]:
    return _renumber(item for item in items if not item.selected)


def bulk_adjust_price(items: Sequence[QuoteItem], direction: str, percentage: Decimal) -> list[QuoteItem]:
    """Scale every item's unit price, selected or not."""
    if direction == "increase":
        multiplier = 1 + Decimal(percentage) / HUNDRED
    elif direction == "decrease":
        multiplier = 1 - Decimal(percentage) / HUNDRED
    else:
        raise ValueError(f"Unknown direction: {direction}")
    return _renumber(
        item.model_copy(update={"unit_price": round_money(item.unit_price * multiplier)}) for item in items
    )
