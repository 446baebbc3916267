from decimal import Decimal

import pytest

from quotedesk.app.schemas.quote_item import BulkEditRequest, DiscountType, QuoteItem, QuoteItemBase
from quotedesk.app.services import sequencing


def build(*ids, **fields):
    items = [
        QuoteItem(id=item_id, description=f"Item {item_id}", unit_price=Decimal("100"), tax_rate=Decimal("10"), **fields)
        for item_id in ids
    ]
    return sequencing.select_all(items, False)


def ids_of(items):
    return [item.id for item in items]


def test_add_item_assigns_fresh_id_and_position():
    items = build("a", "b")
    result = sequencing.add_item(items, QuoteItemBase(description="New", unit_price=Decimal("5")))
    assert len(result) == 3
    new = result[-1]
    assert new.id.startswith("item-")
    assert new.id not in {"a", "b"}
    assert new.selected is False
    assert [item.position for item in result] == [0, 1, 2]
    assert len(items) == 2


def test_item_ids_are_unique():
    data = [QuoteItemBase(description=f"Line {i}") for i in range(20)]
    result = sequencing.add_items([], data)
    assert len(set(ids_of(result))) == 20


def test_reorder_moves_item_into_target_slot():
    items = build("a", "b", "c", "d")
    assert ids_of(sequencing.reorder_items(items, "d", "b")) == ["a", "d", "b", "c"]
    assert ids_of(sequencing.reorder_items(items, "a", "c")) == ["b", "c", "a", "d"]


def test_reorder_renumbers_positions():
    result = sequencing.reorder_items(build("a", "b", "c", "d"), "d", "b")
    assert [item.position for item in result] == [0, 1, 2, 3]
    assert sequencing.find_item(result, "d").position == 1


def test_reorder_same_or_unknown_id_is_noop():
    items = build("a", "b", "c")
    assert ids_of(sequencing.reorder_items(items, "b", "b")) == ["a", "b", "c"]
    assert ids_of(sequencing.reorder_items(items, "x", "b")) == ["a", "b", "c"]
    assert ids_of(sequencing.reorder_items(items, "a", "x")) == ["a", "b", "c"]


def test_remove_item_and_unknown_id():
    items = build("a", "b", "c")
    result = sequencing.remove_item(items, "b")
    assert ids_of(result) == ["a", "c"]
    assert [item.position for item in result] == [0, 1]
    assert ids_of(sequencing.remove_item(items, "zzz")) == ["a", "b", "c"]


def test_update_item_keeps_id_and_position():
    items = build("a", "b")
    result = sequencing.update_item(items, "b", quantity=4, id="other", position=9)
    updated = sequencing.find_item(result, "b")
    assert updated.quantity == 4
    assert updated.position == 1
    assert sequencing.find_item(result, "other") is None


def test_toggle_and_select_all():
    items = build("a", "b", "c")
    items = sequencing.toggle_select(items, "b")
    assert sequencing.selected_ids(items) == {"b"}
    items = sequencing.toggle_select(items, "b")
    assert sequencing.selected_ids(items) == set()
    items = sequencing.select_all(items, True)
    assert sequencing.selected_ids(items) == {"a", "b", "c"}
    items = sequencing.select_all(items, False)
    assert sequencing.selected_ids(items) == set()


def test_bulk_discount_touches_only_selected_and_forces_percentage():
    items = build("a", "b", "c", discount_type=DiscountType.FIXED)
    items = sequencing.toggle_select(items, "a")
    items = sequencing.toggle_select(items, "c")
    result = sequencing.bulk_set_discount(items, Decimal("15"))
    a, b, c = result
    assert a.discount == Decimal("15") and a.discount_type == DiscountType.PERCENTAGE
    assert c.discount == Decimal("15") and c.discount_type == DiscountType.PERCENTAGE
    assert b.discount == Decimal("0") and b.discount_type == DiscountType.FIXED


def test_bulk_tax_rate_with_explicit_ids():
    items = build("a", "b", "c")
    result = sequencing.bulk_set_tax_rate(items, Decimal("20"), selected=["b"])
    assert [item.tax_rate for item in result] == [Decimal("10"), Decimal("20"), Decimal("10")]


def test_apply_bulk_edit_dispatches_on_field():
    items = sequencing.select_all(build("a", "b"), True)
    result = sequencing.apply_bulk_edit(items, BulkEditRequest(field="tax_rate", value=Decimal("8")))
    assert all(item.tax_rate == Decimal("8") for item in result)


def test_remove_selected():
    items = sequencing.toggle_select(build("a", "b", "c"), "b")
    result = sequencing.remove_selected(items)
    assert ids_of(result) == ["a", "c"]


def test_bulk_price_adjustment_applies_to_every_item():
    items = sequencing.toggle_select(build("a", "b"), "a")
    raised = sequencing.bulk_adjust_price(items, "increase", Decimal("10"))
    assert [item.unit_price for item in raised] == [Decimal("110.00"), Decimal("110.00")]
    lowered = sequencing.bulk_adjust_price(items, "decrease", Decimal("12.5"))
    assert [item.unit_price for item in lowered] == [Decimal("87.50"), Decimal("87.50")]


def test_bulk_price_adjustment_rounds_to_cents():
    item = QuoteItem(id="a", description="x", unit_price=Decimal("33.33"))
    result = sequencing.bulk_adjust_price([item], "increase", Decimal("7"))
    # 33.33 * 1.07 = 35.6631
    assert result[0].unit_price == Decimal("35.66")


def test_bulk_price_adjustment_rejects_unknown_direction():
    with pytest.raises(ValueError):
        sequencing.bulk_adjust_price(build("a"), "sideways", Decimal("5"))
