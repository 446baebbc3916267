# QuoteDesk backend entrypoint: quote builder engine over FastAPI.

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from quotedesk.app.api import quote_builder
from quotedesk.app.api import quote_templates
from quotedesk.app.core.logging import configure_logging
from quotedesk.app.core.settings import get_settings
from quotedesk.app.db.base import Base
from quotedesk.app.db.session import engine

logger = logging.getLogger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    Base.metadata.create_all(bind=engine)
    logger.info("%s %s started (%s)", settings.app_name, settings.api_version, settings.environment)
    yield


app = FastAPI(title=settings.app_name, version=settings.api_version, lifespan=lifespan)

origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(quote_builder.router)
app.include_router(quote_templates.router)


@app.get("/")
def read_root():
    return {"app": "QuoteDesk backend", "status": "ok"}


@app.get("/health")
def health_check():
    return {"status": "ok"}
