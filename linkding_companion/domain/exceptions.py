"""Domain-specific exceptions.

Client-side HTTP failures live in ``adapters.linkding.exceptions``; these
cover the enrichment collaborators and the pipeline itself.
"""


class CompanionError(Exception):
    """Base exception for all domain errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        """Initialize domain exception.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ParsingError(CompanionError):
    """Raised when language-model output does not have the requested shape."""

    pass


class ExtractionFailure(CompanionError):
    """Raised when readable content cannot be extracted from a page."""

    pass


class SearchFailure(CompanionError):
    """Raised when the web-search provider cannot answer a query."""

    pass


class ChatCompletionError(CompanionError):
    """Raised when the chat-completion endpoint fails or returns no text."""

    pass


class UnknownTaskError(CompanionError):
    """Raised when a job names a task that is not registered."""

    pass
