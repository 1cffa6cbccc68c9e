class RecipeLinkError(Exception):
    """Base exception for association service errors."""
    pass


class ConfigurationError(RecipeLinkError):
    """Required credentials or configuration for an external service are absent."""
    pass


class GenerationError(RecipeLinkError):
    """The association generator failed, timed out, or returned an unusable payload."""
    pass


class StoreError(RecipeLinkError):
    """Persistence I/O or constraint failure in the association store."""
    pass


class RecipeSourceError(RecipeLinkError):
    """The recipe source could not be reached or rejected the request."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
