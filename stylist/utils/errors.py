"""Exception types raised by the decision layer and its collaborators."""


class StylistError(Exception):
    """Base class for all application errors."""


class StoreError(StylistError):
    """A read or write against the external store failed."""

    def __init__(self, operation: str, message: str):
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation


class CatalogUnavailableError(StylistError):
    """The product catalog could not be loaded or came back empty."""


class HandoffError(StylistError):
    """A hand-off payload could not be decoded."""
