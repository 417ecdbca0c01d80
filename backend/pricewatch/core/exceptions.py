"""Custom exception classes for the application."""


class PriceWatchException(Exception):
    """Base exception for all PriceWatch errors."""

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(self.message)


class NotFoundError(PriceWatchException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} with identifier '{identifier}' not found")


class ValidationError(PriceWatchException):
    """Raised when a request is rejected before any extraction is attempted."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Invalid {field}: {message}")


class ExtractionError(PriceWatchException):
    """Raised when a product page cannot be loaded or has no usable data.

    ``status`` carries the extraction-log status to record for the attempt:
    'failed' by default, 'rate_limited' or 'blocked' when the source pushed back.
    """

    def __init__(self, url: str, message: str, status: str = "failed"):
        self.url = url
        self.status = status
        super().__init__(f"Extraction failed for {url}: {message}")


class PersistenceError(PriceWatchException):
    """Raised when the catalog store fails to read or write."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"Catalog store error during {operation}: {message}")
