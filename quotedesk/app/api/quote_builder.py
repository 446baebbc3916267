"""Quote builder endpoints: draft state, items, bulk actions, suggestions and submission."""

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from quotedesk.app.core.errors import (
    ItemNotFoundError,
    ItemValidationError,
    PersistenceError,
    QuoteValidationError,
)
from quotedesk.app.dependencies.builder import get_builder
from quotedesk.app.schemas.quote_draft import (
    BuilderState,
    BulkAddRequest,
    CatalogItem,
    CopyItemsRequest,
    PresentRequest,
    PresentResponse,
    QuoteOrderUpdate,
    QuoteSubmission,
    SuggestionRequest,
)
from quotedesk.app.schemas.quote_item import (
    BulkEditRequest,
    BulkPriceAdjustment,
    QuoteItemCreate,
    QuoteItemUpdate,
)
from quotedesk.app.services.currency import convert, format_amount, resolve_rate
from quotedesk.app.services.pricing import round_money
from quotedesk.app.services.quote_builder import NOTE_TEMPLATES, PAYMENT_TERMS_TEMPLATES, QuoteBuilder

router = APIRouter(prefix="/quote-builder", tags=["quote_builder"])


class ReorderRequest(BaseModel):
    active_id: str
    over_id: str


class SelectAllRequest(BaseModel):
    selected: bool


class NoteRequest(BaseModel):
    text: str
    kind: str = "note"


class ValidityRequest(BaseModel):
    days: int


class FavoriteRequest(BaseModel):
    catalog_item_id: int


class CatalogRequest(BaseModel):
    catalog: list[CatalogItem]


def _unprocessable(detail) -> HTTPException:
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


def _item_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quote item not found")


@router.get("/draft", response_model=BuilderState)
async def get_draft(builder: QuoteBuilder = Depends(get_builder)):
    return builder.state()


@router.put("/draft", response_model=BuilderState)
async def update_draft(update: QuoteOrderUpdate, builder: QuoteBuilder = Depends(get_builder)):
    builder.update_order(update)
    return builder.state()


@router.delete("/draft", response_model=BuilderState)
async def clear_draft(builder: QuoteBuilder = Depends(get_builder)):
    builder.clear()
    return builder.state()


@router.post("/draft/items", response_model=BuilderState, status_code=status.HTTP_201_CREATED)
async def add_item(item_in: QuoteItemCreate, builder: QuoteBuilder = Depends(get_builder)):
    try:
        builder.add_item(item_in)
    except ItemValidationError as exc:
        raise _unprocessable(exc.reason)
    return builder.state()


@router.patch("/draft/items/{item_id}", response_model=BuilderState)
async def edit_item(item_id: str, update: QuoteItemUpdate, builder: QuoteBuilder = Depends(get_builder)):
    try:
        builder.edit_item(item_id, update)
    except ItemNotFoundError:
        raise _item_not_found()
    except ItemValidationError as exc:
        raise _unprocessable(exc.reason)
    return builder.state()


@router.delete("/draft/items/{item_id}", response_model=BuilderState)
async def remove_item(item_id: str, builder: QuoteBuilder = Depends(get_builder)):
    builder.remove_item(item_id)
    return builder.state()


@router.post("/draft/items/{item_id}/toggle", response_model=BuilderState)
async def toggle_item(item_id: str, builder: QuoteBuilder = Depends(get_builder)):
    try:
        builder.toggle_select(item_id)
    except ItemNotFoundError:
        raise _item_not_found()
    return builder.state()


@router.post("/draft/select-all", response_model=BuilderState)
async def select_all(payload: SelectAllRequest, builder: QuoteBuilder = Depends(get_builder)):
    builder.select_all(payload.selected)
    return builder.state()


@router.post("/draft/reorder", response_model=BuilderState)
async def reorder_items(payload: ReorderRequest, builder: QuoteBuilder = Depends(get_builder)):
    builder.reorder(payload.active_id, payload.over_id)
    return builder.state()


@router.post("/draft/bulk-edit", response_model=BuilderState)
async def bulk_edit(payload: BulkEditRequest, builder: QuoteBuilder = Depends(get_builder)):
    try:
        builder.bulk_edit(payload)
    except ItemValidationError as exc:
        raise _unprocessable(exc.reason)
    return builder.state()


@router.post("/draft/bulk-delete", response_model=BuilderState)
async def bulk_delete(builder: QuoteBuilder = Depends(get_builder)):
    try:
        builder.bulk_delete()
    except ItemValidationError as exc:
        raise _unprocessable(exc.reason)
    return builder.state()


@router.post("/draft/bulk-price", response_model=BuilderState)
async def bulk_price(payload: BulkPriceAdjustment, builder: QuoteBuilder = Depends(get_builder)):
    builder.bulk_adjust_price(payload)
    return builder.state()


@router.post("/draft/quick-add", response_model=BuilderState, status_code=status.HTTP_201_CREATED)
async def quick_add(entry: CatalogItem, builder: QuoteBuilder = Depends(get_builder)):
    builder.quick_add(entry)
    return builder.state()


@router.post("/draft/bulk-add", response_model=BuilderState, status_code=status.HTTP_201_CREATED)
async def bulk_add(payload: BulkAddRequest, builder: QuoteBuilder = Depends(get_builder)):
    try:
        builder.bulk_add(payload.catalog, payload.catalog_item_ids, payload.settings)
    except ItemValidationError as exc:
        raise _unprocessable(exc.reason)
    return builder.state()


@router.post("/draft/add-recent", response_model=BuilderState, status_code=status.HTTP_201_CREATED)
async def add_recent(payload: CatalogRequest, builder: QuoteBuilder = Depends(get_builder)):
    try:
        builder.add_recent(payload.catalog)
    except ItemValidationError as exc:
        raise _unprocessable(exc.reason)
    return builder.state()


@router.post("/draft/copy-items", response_model=BuilderState)
async def copy_items(payload: CopyItemsRequest, builder: QuoteBuilder = Depends(get_builder)):
    builder.copy_items(payload.items, notes=payload.notes)
    return builder.state()


@router.get("/note-templates")
async def list_note_templates():
    return {"notes": NOTE_TEMPLATES, "payment_terms": PAYMENT_TERMS_TEMPLATES}


@router.post("/draft/notes", response_model=BuilderState)
async def apply_note(payload: NoteRequest, builder: QuoteBuilder = Depends(get_builder)):
    if payload.kind == "payment_terms":
        builder.apply_payment_terms(payload.text)
    elif payload.kind == "note":
        builder.append_note(payload.text)
    else:
        raise HTTPException(status_code=400, detail="Invalid kind value")
    return builder.state()


@router.post("/draft/validity", response_model=BuilderState)
async def set_validity(payload: ValidityRequest, builder: QuoteBuilder = Depends(get_builder)):
    if payload.days < 0:
        raise HTTPException(status_code=400, detail="Validity days cannot be negative")
    builder.set_validity(payload.days)
    return builder.state()


@router.post("/suggestions", response_model=list[CatalogItem])
async def get_suggestions(payload: SuggestionRequest, builder: QuoteBuilder = Depends(get_builder)):
    return builder.usage.suggest(payload.company_id, payload.catalog)


@router.get("/price-history/{catalog_item_id}")
async def get_price_history(catalog_item_id: int, builder: QuoteBuilder = Depends(get_builder)):
    price = builder.usage.last_price(catalog_item_id)
    return {"catalog_item_id": catalog_item_id, "last_price": str(price) if price is not None else None}


@router.get("/favorites")
async def list_favorites(builder: QuoteBuilder = Depends(get_builder)):
    return {"favorites": builder.usage.favorites(), "recently_used": builder.usage.recently_used()}


@router.post("/favorites")
async def toggle_favorite(payload: FavoriteRequest, builder: QuoteBuilder = Depends(get_builder)):
    try:
        favorites = builder.toggle_favorite(payload.catalog_item_id)
    except PersistenceError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))
    return {"favorites": favorites}


@router.post("/present", response_model=PresentResponse)
async def present_amount(payload: PresentRequest):
    rate = resolve_rate(payload.currency, payload.manual_rate)
    converted = convert(payload.amount, payload.currency, payload.manual_rate)
    return PresentResponse(
        amount=payload.amount,
        currency=payload.currency,
        rate=rate,
        converted=round_money(converted),
        display=format_amount(converted, payload.currency),
    )


@router.post("/submit", response_model=QuoteSubmission)
async def submit_quote(builder: QuoteBuilder = Depends(get_builder)):
    try:
        return builder.submit()
    except QuoteValidationError as exc:
        raise _unprocessable(exc.errors)
