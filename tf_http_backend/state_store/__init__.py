"""Filesystem storage for Terraform states and their lock markers."""

from tf_http_backend.state_store.exceptions import (
    InconsistentStorageError,
    InvalidStateNameError,
    RequestBodyError,
    StateLockedError,
    StateNotFoundError,
    StateNotLockedError,
    StateStoreError,
    StorageError,
    StorageInitError,
)
from tf_http_backend.state_store.models import RosterResponse, StateEntry
from tf_http_backend.state_store.store import StateStore

__all__ = [
    "InconsistentStorageError",
    "InvalidStateNameError",
    "RequestBodyError",
    "RosterResponse",
    "StateEntry",
    "StateLockedError",
    "StateNotFoundError",
    "StateNotLockedError",
    "StateStore",
    "StateStoreError",
    "StorageError",
    "StorageInitError",
]
