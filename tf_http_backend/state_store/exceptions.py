"""Errors raised by the state store."""


class StateStoreError(Exception):
    """Base class for all state store errors."""

    def __init__(self, message: str, name: str | None = None) -> None:
        super().__init__(message)
        self.name = name


class InvalidStateNameError(StateStoreError):
    """Raised when a state name cannot be mapped to a storage artifact."""


class RequestBodyError(StateStoreError):
    """Raised when the request body for a write cannot be read."""


class StateNotFoundError(StateStoreError):
    """Raised when a state has no stored content."""


class StateLockedError(StateStoreError):
    """Raised when a state is locked and the operation requires it unlocked."""


class StateNotLockedError(StateStoreError):
    """Raised when unlocking a state that holds no lock marker."""


class StorageError(StateStoreError):
    """Raised on unexpected filesystem failures."""


class InconsistentStorageError(StorageError):
    """Raised when the storage directory holds conflicting artifacts."""


class StorageInitError(StateStoreError):
    """Raised when the storage root cannot be prepared for use."""
