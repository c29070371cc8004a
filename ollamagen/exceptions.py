from __future__ import annotations


class OllamaGenError(Exception):
    """Base exception for ollamagen-related errors."""

    def __init__(self, msg: str, /):
        super().__init__(msg)
        self.message = msg

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class TransportError(OllamaGenError):
    """Exception raised when the chat-completion endpoint answers with a
    non-success HTTP status.

    Attributes:
        status: HTTP status code of the response.
        body: Raw response body text, never parsed.
    """

    def __init__(self, status: int, body: str, /):
        super().__init__(f"Ollama API error ({status}): {body}")
        self.status = status
        self.body = body

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(status={self.status!r}, body={self.body!r})"


class MissingBodyError(OllamaGenError):
    """Exception raised when a streaming response carries no body."""


class NoCandidateError(OllamaGenError):
    """Exception raised when a wire response has an empty choice list."""


class MalformedToolArgumentsError(OllamaGenError):
    """Exception raised when a tool call's argument string is not a JSON
    object."""

    def __init__(self, name: str, arguments: str, /, reason: str = "invalid JSON"):
        super().__init__(f"Malformed arguments for tool call {name!r} ({reason}): {arguments!r}")
        self.name = name
        self.arguments = arguments


class UnsupportedOperationError(OllamaGenError):
    """Exception raised for operations the adapter does not serve."""


class StreamConsumedError(OllamaGenError):
    """Exception raised when a single-pass stream is iterated again."""


class ChunkParseWarning(UserWarning):
    """Category of a stream line that could not be decoded.

    Non-fatal: the stream skips the line and continues. The decoder logs it
    rather than issuing it through `warnings`, so an ``error`` filter cannot
    abort a stream; log records carry the category name as
    ``warning_category``.
    """
