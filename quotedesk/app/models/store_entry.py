"""Key-value entry backing drafts, templates, usage counters and price history."""

from sqlalchemy import Column, DateTime, String, Text

from quotedesk.app.core.time import utc_now
from quotedesk.app.db.base_class import Base


class StoreEntry(Base):
    __tablename__ = "kv_entries"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)
