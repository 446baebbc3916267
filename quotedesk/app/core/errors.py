"""Exception types raised by the quote engine."""


class QuoteDeskError(Exception):
    """Base class for engine errors."""


class ItemValidationError(QuoteDeskError):
    """An item add/edit was rejected before reaching the item list."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class TemplateValidationError(QuoteDeskError):
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class QuoteValidationError(QuoteDeskError):
    """Submission checks failed; ``errors`` maps field name to message."""

    def __init__(self, errors: dict[str, str]):
        first = next(iter(errors.values()), "Invalid quote")
        super().__init__(first)
        self.errors = errors


class StoreError(QuoteDeskError):
    """Raised by key-value store backends on read or write failure."""


class PersistenceError(QuoteDeskError):
    """A write that would lose user data did not reach the store."""


class ItemNotFoundError(QuoteDeskError):
    def __init__(self, item_id: str):
        super().__init__(f"Item {item_id} not found")
        self.item_id = item_id
