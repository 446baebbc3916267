"""Line-item and order total calculations.

All amounts are in the base currency. Nothing here rounds: sums are taken
left-to-right over the current item order and only display formatting
rounds. A fixed discount larger than an item's subtotal, or a general
discount larger than the order, yields negative totals; this is kept as-is
pending a product decision.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from quotedesk.app.schemas.quote_draft import OrderTotals, QuoteDraft
from quotedesk.app.schemas.quote_item import DiscountType, LineItemTotals, QuoteItemBase

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def _discount_amount(base: Decimal, discount: Decimal, discount_type: DiscountType) -> Decimal:
    if discount_type == DiscountType.PERCENTAGE:
        return base * (discount / HUNDRED)
    return discount


def calculate_line_item(item: QuoteItemBase) -> LineItemTotals:
    item_subtotal = Decimal(item.quantity) * item.unit_price
    discount_amount = _discount_amount(item_subtotal, item.discount, item.discount_type)
    after_discount = item_subtotal - discount_amount
    tax_amount = after_discount * (item.tax_rate / HUNDRED)
    return LineItemTotals(
        item_subtotal=item_subtotal,
        discount_amount=discount_amount,
        after_discount=after_discount,
        tax_amount=tax_amount,
        item_total=after_discount + tax_amount,
    )


def effective_tax_rate(subtotal: Decimal, total_tax: Decimal) -> int:
    if subtotal <= ZERO:
        return 0
    return int((total_tax / subtotal * HUNDRED).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def calculate_order_totals(
    items: Iterable[QuoteItemBase],
    general_discount: Decimal = ZERO,
    general_discount_type: DiscountType = DiscountType.PERCENTAGE,
    extra_costs: Decimal = ZERO,
    down_payment: Decimal = ZERO,
) -> OrderTotals:
    subtotal = ZERO
    total_tax = ZERO
    for item in items:
        line = calculate_line_item(item)
        subtotal += line.item_subtotal
        total_tax += line.tax_amount

    # General discount is applied after tax, extras and down payment after that.
    total_before_general_discount = subtotal + total_tax
    general_discount_amount = _discount_amount(
        total_before_general_discount, general_discount or ZERO, general_discount_type
    )
    total = total_before_general_discount - general_discount_amount
    total_with_extras = total + (extra_costs or ZERO)
    net_payable = total_with_extras - (down_payment or ZERO)

    return OrderTotals(
        subtotal=subtotal,
        total_tax=total_tax,
        total_before_general_discount=total_before_general_discount,
        general_discount_amount=general_discount_amount,
        total=total,
        total_with_extras=total_with_extras,
        net_payable=net_payable,
        effective_tax_rate=effective_tax_rate(subtotal, total_tax),
    )


def calculate_draft_totals(draft: QuoteDraft) -> OrderTotals:
    return calculate_order_totals(
        draft.items,
        general_discount=draft.general_discount,
        general_discount_type=draft.general_discount_type,
        extra_costs=draft.extra_costs,
        down_payment=draft.down_payment,
    )


def round_money(value: Decimal) -> Decimal:
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
