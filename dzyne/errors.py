"""Custom error types for dzyne."""


class DzyneError(Exception):
    """Base error for dzyne operations."""
    pass


class ValidationError(DzyneError):
    """Invalid user input."""
    pass


class IngestionError(DzyneError):
    """Error while scraping or extracting a reference site."""

    def __init__(self, message: str, url: str = None, status_code: int = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class KnowledgeError(DzyneError):
    """Error while parsing, chunking or storing knowledge documents."""
    pass


class ApiKeyError(DzyneError):
    """API key rejected or caller not permitted."""

    def __init__(self, message: str, reason: str = None):
        super().__init__(message)
        self.reason = reason


class BillingError(DzyneError):
    """Error talking to Stripe or handling a billing event."""
    pass


class LLMResponseError(DzyneError):
    """The chat model returned nothing usable."""
    pass
