import os
from decimal import Decimal

from dotenv import load_dotenv

load_dotenv()


class Settings:
    def __init__(self):
        self.app_name = "QuoteDesk"
        self.api_version = "1.0.0"
        self.environment = os.getenv("QUOTEDESK_ENVIRONMENT", "development")
        self.database_url = os.getenv("QUOTEDESK_DATABASE_URL", "sqlite:///./quotedesk.db")
        self.log_level = os.getenv("QUOTEDESK_LOG_LEVEL", "INFO").upper()
        self.base_currency = "TRY"
        self.suggestion_limit = int(os.getenv("QUOTEDESK_SUGGESTION_LIMIT", "5"))
        self.recent_limit = int(os.getenv("QUOTEDESK_RECENT_LIMIT", "5"))
        self.default_validity_days = int(os.getenv("QUOTEDESK_DEFAULT_VALIDITY_DAYS", "30"))
        self.default_tax_rate = Decimal(os.getenv("QUOTEDESK_DEFAULT_TAX_RATE", "10"))
        self.quick_add_tax_rate = Decimal(os.getenv("QUOTEDESK_QUICK_ADD_TAX_RATE", "20"))


_settings_instance = None


def get_settings():
    """Return a singleton Settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


def reset_settings():
    """Drop the cached instance so the next call re-reads the environment."""
    global _settings_instance
    _settings_instance = None
