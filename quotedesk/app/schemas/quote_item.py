"""Quote line item schemas."""

from decimal import Decimal
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from quotedesk.app.core.settings import get_settings

ALLOWED_TAX_RATES = (Decimal("0"), Decimal("1"), Decimal("8"), Decimal("10"), Decimal("20"))


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class QuoteItemBase(BaseModel):
    catalog_ref: Optional[int] = None
    quantity: int = 1
    unit_price: Decimal = Decimal("0")
    description: str = ""
    discount: Decimal = Decimal("0")
    discount_type: DiscountType = DiscountType.PERCENTAGE
    tax_rate: Decimal = Field(default_factory=lambda: get_settings().default_tax_rate)


class TemplateItem(QuoteItemBase):
    """Item shape stored inside a template: no id, selection or position."""


class QuoteItem(QuoteItemBase):
    id: str
    selected: bool = False
    position: int = 0

    model_config = ConfigDict(frozen=True)

    def item_fields(self) -> dict:
        return self.model_dump(exclude={"id", "selected", "position"})


class QuoteItemCreate(QuoteItemBase):
    """Validated input for a typed item add or edit."""

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Description is required")
        return value.strip()

    @field_validator("quantity")
    @classmethod
    def quantity_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("Quantity must be greater than 0")
        return value

    @field_validator("unit_price")
    @classmethod
    def unit_price_positive(cls, value: Decimal) -> Decimal:
        if value <= 0:
            raise ValueError("Unit price must be greater than 0")
        return value

    @field_validator("discount")
    @classmethod
    def discount_not_negative(cls, value: Decimal) -> Decimal:
        if value < 0:
            raise ValueError("Discount cannot be negative")
        return value

    @field_validator("tax_rate")
    @classmethod
    def tax_rate_not_negative(cls, value: Decimal) -> Decimal:
        if value < 0:
            raise ValueError("Tax rate cannot be negative")
        return value


class QuoteItemUpdate(BaseModel):
    catalog_ref: Optional[int] = None
    quantity: Optional[int] = None
    unit_price: Optional[Decimal] = None
    description: Optional[str] = None
    discount: Optional[Decimal] = None
    discount_type: Optional[DiscountType] = None
    tax_rate: Optional[Decimal] = None


class BulkEditRequest(BaseModel):
    field: Literal["discount", "tax_rate"]
    value: Decimal

    @field_validator("value")
    @classmethod
    def value_in_range(cls, value: Decimal, info) -> Decimal:
        field = info.data.get("field")
        if field == "discount" and not (Decimal("0") <= value <= Decimal("100")):
            raise ValueError("Enter a valid discount percentage (0-100)")
        if field == "tax_rate" and value not in ALLOWED_TAX_RATES:
            raise ValueError("Enter a valid tax rate (0, 1, 8, 10, 20)")
        return value


class BulkPriceAdjustment(BaseModel):
    direction: Literal["increase", "decrease"]
    percentage: Decimal

    @field_validator("percentage")
    @classmethod
    def percentage_in_range(cls, value: Decimal) -> Decimal:
        if value <= 0 or value > 100:
            raise ValueError("Enter a valid percentage (0-100)")
        return value


class LineItemTotals(BaseModel):
    item_subtotal: Decimal
    discount_amount: Decimal
    after_discount: Decimal
    tax_amount: Decimal
    item_total: Decimal
