from quotedesk.app.db.base_class import Base

# Import models to register metadata for Base.metadata.create_all in tests
from quotedesk.app.models.store_entry import StoreEntry  # noqa: F401
