"""Quote template endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from quotedesk.app.core.errors import PersistenceError, TemplateValidationError
from quotedesk.app.dependencies.builder import get_builder
from quotedesk.app.schemas.quote_draft import BuilderState
from quotedesk.app.schemas.quote_template import QuoteTemplate, QuoteTemplateCreate
from quotedesk.app.services.quote_builder import QuoteBuilder

router = APIRouter(prefix="/quote-templates", tags=["quote_templates"])


@router.get("/", response_model=list[QuoteTemplate])
async def list_quote_templates(builder: QuoteBuilder = Depends(get_builder)):
    return builder.templates.get_multi()


@router.post("/", response_model=QuoteTemplate, status_code=status.HTTP_201_CREATED)
async def create_quote_template(template_in: QuoteTemplateCreate, builder: QuoteBuilder = Depends(get_builder)):
    try:
        return builder.save_template(template_in.name)
    except TemplateValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.reason)
    except PersistenceError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))


@router.delete("/{template_id}")
async def delete_quote_template(template_id: str, builder: QuoteBuilder = Depends(get_builder)):
    try:
        deleted = builder.delete_template(template_id)
    except PersistenceError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quote template not found")
    return {"deleted": template_id}


@router.post("/{template_id}/load", response_model=BuilderState)
async def load_quote_template(template_id: str, builder: QuoteBuilder = Depends(get_builder)):
    items = builder.load_template(template_id)
    if items is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quote template not found")
    return builder.state()
