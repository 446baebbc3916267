from decimal import Decimal

from quotedesk.app.schemas.quote_draft import QuoteDraft
from quotedesk.app.schemas.quote_item import DiscountType, QuoteItem
from quotedesk.app.services.pricing import (
    calculate_draft_totals,
    calculate_line_item,
    calculate_order_totals,
)


def make_item(item_id="a", quantity=1, unit_price="0", discount="0", discount_type="percentage", tax_rate="0"):
    return QuoteItem(
        id=item_id,
        quantity=quantity,
        unit_price=Decimal(unit_price),
        description=f"Item {item_id}",
        discount=Decimal(discount),
        discount_type=DiscountType(discount_type),
        tax_rate=Decimal(tax_rate),
    )


def test_line_item_percentage_discount_then_tax():
    item = make_item(quantity=2, unit_price="100", discount="10", tax_rate="20")
    totals = calculate_line_item(item)
    assert totals.item_subtotal == Decimal("200")
    assert totals.discount_amount == Decimal("20")
    assert totals.after_discount == Decimal("180")
    assert totals.tax_amount == Decimal("36")
    assert totals.item_total == Decimal("216")


def test_line_item_fixed_discount():
    item = make_item(quantity=3, unit_price="50", discount="25", discount_type="fixed", tax_rate="10")
    totals = calculate_line_item(item)
    assert totals.item_subtotal == Decimal("150")
    assert totals.discount_amount == Decimal("25")
    assert totals.after_discount == Decimal("125")
    assert totals.tax_amount == Decimal("12.5")
    assert totals.item_total == Decimal("137.5")


def test_fixed_discount_larger_than_subtotal_goes_negative():
    item = make_item(quantity=1, unit_price="50", discount="100", discount_type="fixed", tax_rate="0")
    totals = calculate_line_item(item)
    assert totals.after_discount == Decimal("-50")
    assert totals.item_total == Decimal("-50")


def test_negative_after_discount_yields_negative_tax():
    item = make_item(quantity=1, unit_price="50", discount="100", discount_type="fixed", tax_rate="20")
    totals = calculate_line_item(item)
    assert totals.tax_amount == Decimal("-10")
    assert totals.item_total == Decimal("-60")


def test_general_discount_applies_after_tax():
    items = [make_item(quantity=1, unit_price="1000", tax_rate="10")]
    totals = calculate_order_totals(items, general_discount=Decimal("10"))
    assert totals.subtotal == Decimal("1000")
    assert totals.total_tax == Decimal("100")
    assert totals.total_before_general_discount == Decimal("1100")
    assert totals.general_discount_amount == Decimal("110")
    assert totals.total == Decimal("990")
    assert totals.total != Decimal("900")


def test_fixed_general_discount_extras_and_down_payment():
    items = [
        make_item("a", quantity=2, unit_price="100", tax_rate="20"),
        make_item("b", quantity=1, unit_price="50", tax_rate="0"),
    ]
    totals = calculate_order_totals(
        items,
        general_discount=Decimal("40"),
        general_discount_type=DiscountType.FIXED,
        extra_costs=Decimal("15"),
        down_payment=Decimal("100"),
    )
    assert totals.subtotal == Decimal("250")
    assert totals.total_tax == Decimal("40")
    assert totals.total_before_general_discount == Decimal("290")
    assert totals.general_discount_amount == Decimal("40")
    assert totals.total == Decimal("250")
    assert totals.total_with_extras == Decimal("265")
    assert totals.net_payable == Decimal("165")


def test_general_discount_larger_than_total_is_not_clamped():
    items = [make_item(quantity=1, unit_price="100")]
    totals = calculate_order_totals(items, general_discount=Decimal("150"), general_discount_type=DiscountType.FIXED)
    assert totals.total == Decimal("-50")


def test_empty_order_totals():
    totals = calculate_order_totals([])
    assert totals.subtotal == Decimal("0")
    assert totals.total == Decimal("0")
    assert totals.net_payable == Decimal("0")
    assert totals.effective_tax_rate == 0


def test_effective_tax_rate_is_rounded_percentage():
    items = [
        make_item("a", quantity=1, unit_price="100", tax_rate="20"),
        make_item("b", quantity=1, unit_price="200", tax_rate="10"),
    ]
    totals = calculate_order_totals(items)
    # 40 / 300 = 13.33%
    assert totals.effective_tax_rate == 13


def test_calculation_is_idempotent():
    items = [
        make_item("a", quantity=3, unit_price="33.33", discount="7.5", tax_rate="8"),
        make_item("b", quantity=1, unit_price="12.10", discount="1", discount_type="fixed", tax_rate="20"),
    ]
    first = calculate_order_totals(items, general_discount=Decimal("3"))
    second = calculate_order_totals(items, general_discount=Decimal("3"))
    assert first == second
    assert calculate_line_item(items[0]) == calculate_line_item(items[0])


def test_draft_totals_use_order_level_fields():
    draft = QuoteDraft(
        items=[make_item(quantity=1, unit_price="1000", tax_rate="10")],
        general_discount=Decimal("10"),
        extra_costs=Decimal("10"),
        down_payment=Decimal("500"),
    )
    totals = calculate_draft_totals(draft)
    assert totals.total == Decimal("990")
    assert totals.total_with_extras == Decimal("1000")
    assert totals.net_payable == Decimal("500")
