# backend/errors.py
from typing import Optional


class SummarizerError(Exception):
    """Base error; ``message`` is safe to show to the client."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class InvalidRequest(SummarizerError):
    status_code = 400
    message = "Invalid request body"


class ServiceUnavailable(SummarizerError):
    status_code = 502
    message = "Failed to generate summary (upstream error)"


class InvalidUpstreamResponse(SummarizerError):
    status_code = 502
    message = "LLM returned invalid JSON"

    def __init__(self, text: str = ""):
        super().__init__()
        self.text = text


class MailDeliveryError(SummarizerError):
    status_code = 500
    message = "Failed to send summary"


class PayloadTooLarge(SummarizerError):
    status_code = 413
    message = "Request body too large"
