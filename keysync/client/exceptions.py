"""Exception types for the keysync client library."""


class KeySyncError(Exception):
    """Base exception for all keysync errors."""
    pass


class TransportError(KeySyncError):
    """Network communication error."""
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class FetchError(KeySyncError):
    """A key inventory could not be read. Aborts the current cycle."""
    def __init__(self, message: str, source: str | None = None) -> None:
        super().__init__(message)
        self.source = source


class MutationError(KeySyncError):
    """A batched add or remove call could not be completed."""
    def __init__(self, message: str, operation: str | None = None) -> None:
        super().__init__(message)
        self.operation = operation
