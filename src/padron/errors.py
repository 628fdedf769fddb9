"""Error taxonomy for padron."""


class PadronError(Exception):
    """Base class for all padron errors."""


class TransportFailure(PadronError):
    """Non-2xx response or network-level failure on a remote call."""

    def __init__(self, message: str, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ShapeFailure(PadronError):
    """Response body could not be read as JSON."""


class ValidationFailure(PadronError):
    """Required form fields are missing."""

    def __init__(self, messages: list[str]) -> None:
        super().__init__("; ".join(messages))
        self.messages = list(messages)
