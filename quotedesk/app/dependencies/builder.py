"""Dependencies that bind the quote builder to the request's database session."""

from fastapi import Depends
from sqlalchemy.orm import Session

from quotedesk.app.db.session import get_db
from quotedesk.app.services.kv_store import SqlKeyValueStore
from quotedesk.app.services.quote_builder import QuoteBuilder


def get_store(db: Session = Depends(get_db)) -> SqlKeyValueStore:
    return SqlKeyValueStore(db)


def get_builder(store: SqlKeyValueStore = Depends(get_store)) -> QuoteBuilder:
    # Each request restores the saved draft, applies one change and autosaves.
    return QuoteBuilder.restore(store)
