"""Quote draft, totals and submission schemas."""

from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from quotedesk.app.core.settings import get_settings
from quotedesk.app.core.time import today
from quotedesk.app.schemas.quote_item import DiscountType, LineItemTotals, QuoteItem


class Currency(str, Enum):
    TRY = "TRY"
    USD = "USD"
    EUR = "EUR"


def _default_valid_until() -> date:
    return today() + timedelta(days=get_settings().default_validity_days)


class QuoteDraft(BaseModel):
    company_id: Optional[int] = None
    issue_date: date = Field(default_factory=today)
    valid_until_date: date = Field(default_factory=_default_valid_until)
    notes: str = ""
    payment_terms: str = ""
    items: list[QuoteItem] = Field(default_factory=list)
    currency: Currency = Currency.TRY
    general_discount: Decimal = Decimal("0")
    general_discount_type: DiscountType = DiscountType.PERCENTAGE
    extra_costs: Decimal = Decimal("0")
    down_payment: Decimal = Decimal("0")
    manual_rate: Optional[Decimal] = None

    model_config = ConfigDict(frozen=True)

    def is_trivial(self) -> bool:
        """True for an untouched builder, which is never written to the draft slot."""
        return not (
            self.items
            or self.company_id
            or self.notes
            or self.payment_terms
            or self.extra_costs
            or self.down_payment
            or self.manual_rate
        )


class QuoteOrderUpdate(BaseModel):
    company_id: Optional[int] = None
    issue_date: Optional[date] = None
    valid_until_date: Optional[date] = None
    notes: Optional[str] = None
    payment_terms: Optional[str] = None
    currency: Optional[Currency] = None
    general_discount: Optional[Decimal] = None
    general_discount_type: Optional[DiscountType] = None
    extra_costs: Optional[Decimal] = None
    down_payment: Optional[Decimal] = None
    manual_rate: Optional[Decimal] = None
    clear_manual_rate: bool = False
    clear_company: bool = False


class OrderTotals(BaseModel):
    subtotal: Decimal
    total_tax: Decimal
    total_before_general_discount: Decimal
    general_discount_amount: Decimal
    total: Decimal
    total_with_extras: Decimal
    net_payable: Decimal
    effective_tax_rate: int


class CatalogItem(BaseModel):
    id: int
    name: str
    code: Optional[str] = None
    price: Optional[Decimal] = None
    is_active: bool = True


class BulkAddSettings(BaseModel):
    quantity: int = Field(default=1, ge=1)
    discount: Decimal = Field(default=Decimal("0"), ge=0)
    discount_type: DiscountType = DiscountType.PERCENTAGE
    tax_rate: Decimal = Field(default_factory=lambda: get_settings().default_tax_rate)


class BulkAddRequest(BaseModel):
    catalog: list[CatalogItem]
    catalog_item_ids: list[int]
    settings: BulkAddSettings = Field(default_factory=BulkAddSettings)


class PreviousQuoteLine(BaseModel):
    catalog_ref: Optional[int] = None
    quantity: int
    unit_price: Decimal
    description: str


class CopyItemsRequest(BaseModel):
    items: list[PreviousQuoteLine]
    notes: Optional[str] = None


class SuggestionRequest(BaseModel):
    company_id: int
    catalog: list[CatalogItem]


class PresentRequest(BaseModel):
    amount: Decimal
    currency: Currency
    manual_rate: Optional[Decimal] = None


class PresentResponse(BaseModel):
    amount: Decimal
    currency: Currency
    rate: Decimal
    converted: Decimal
    display: str


class QuoteSubmission(BaseModel):
    company_id: int
    issue_date: date
    valid_until_date: date
    notes: Optional[str] = None
    payment_terms: str = ""
    items: list[QuoteItem]
    totals: OrderTotals


class BuilderState(BaseModel):
    draft: QuoteDraft
    totals: OrderTotals
    item_totals: dict[str, LineItemTotals]
    display_total: str
    has_draft: bool
    notices: list[str] = Field(default_factory=list)
