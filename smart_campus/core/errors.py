from typing import Optional


class ChatbotError(Exception):
    """Base class for chatbot pipeline errors."""


class InvalidRequest(ChatbotError):
    """The caller sent no usable message. Maps to HTTP 400."""

    def __init__(self, message: str = "Message is required"):
        super().__init__(message)
        self.message = message


class AIProviderError(ChatbotError):
    """A call to the generative AI provider failed.

    `kind` is one of: unavailable, timeout, network, auth, quota,
    malformed_response, provider_error.
    """

    def __init__(self, kind: str, detail: Optional[str] = None):
        super().__init__(f"{kind}: {detail}" if detail else kind)
        self.kind = kind
        self.detail = detail


class InternalFailure(ChatbotError):
    """Unexpected failure after the AI path. Maps to HTTP 500."""

    def __init__(self, detail: str, cause: Optional[BaseException] = None):
        super().__init__(detail)
        self.detail = detail
        self.cause = cause
