import os

os.environ.setdefault("QUOTEDESK_DATABASE_URL", "sqlite:///./_pytest_quotedesk.db")
os.environ.setdefault("QUOTEDESK_LOG_LEVEL", "DEBUG")
