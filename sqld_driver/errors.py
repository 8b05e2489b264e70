from typing import Optional

class DriverError(RuntimeError):
    pass

class InvalidArgument(DriverError, ValueError):
    """The statement batch was rejected before anything was sent."""

class TransportError(DriverError):
    """The request could not complete its round-trip to the server."""

    def __init__(self, reason: str, cause: Optional[BaseException] = None):
        super().__init__(reason, cause)
        self.reason = reason
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is None:
            return f"transport error ({self.reason})"
        return f"transport error ({self.reason}): {self.cause!r}"

class ServerError(DriverError):
    def __init__(self, status: int, message: Optional[str], body: bytes = b""):
        super().__init__(status, message, body)
        self.status = status
        self.message = message
        self.body = body

    def __str__(self) -> str:
        return f"HTTP status {self.status}, message={self.message!r}"

class DecodeError(DriverError):
    """The response body is not a valid result payload."""

    def __init__(self, message: str, snippet: bytes = b""):
        super().__init__(message, snippet)
        self.message = message
        self.snippet = snippet

    def __str__(self) -> str:
        if not self.snippet:
            return self.message
        return f"{self.message}, body={self.snippet!r}"

class ProtocolMismatch(DriverError):
    def __init__(self, expected: int, received: int):
        super().__init__(expected, received)
        self.expected = expected
        self.received = received

    def __str__(self) -> str:
        return f"Sent {self.expected} statements, received {self.received} results"
