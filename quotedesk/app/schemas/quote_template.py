"""Quote template schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from quotedesk.app.schemas.quote_item import TemplateItem


class QuoteTemplateCreate(BaseModel):
    name: str


class QuoteTemplate(BaseModel):
    id: str
    name: str
    items: list[TemplateItem] = Field(default_factory=list)
    created_at: datetime

    model_config = ConfigDict(frozen=True)
