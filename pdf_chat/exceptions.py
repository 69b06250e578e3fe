"""
Error taxonomy for the PDF Chat Backend.

Every error raised by the question-answering pipeline derives from
ChatbotError and carries the HTTP status code the API responds with.
"""

from typing import List, Optional


class ChatbotError(Exception):
    """Base class for pipeline errors."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ChatbotError):
    """Bad or missing request input."""

    status_code = 400


class ExtractionError(ChatbotError):
    """A specific uploaded document could not be parsed."""

    def __init__(self, filename: Optional[str], message: str):
        super().__init__(message)
        self.filename = filename


class UpstreamServiceError(ChatbotError):
    """The embedding, index or completion service failed."""

    def __init__(self, service: str, message: str):
        super().__init__(message)
        self.service = service


class ConfigurationError(ChatbotError):
    """Required configuration is missing; the service cannot start."""

    def __init__(self, missing: List[str]):
        message = (
            f"Missing required environment variables: {', '.join(missing)}. "
            "Please check your .env file."
        )
        super().__init__(message)
        self.missing = missing
