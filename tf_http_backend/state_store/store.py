"""Filesystem-backed storage for Terraform state files and their locks."""

import os
import tempfile
from pathlib import Path

from tf_http_backend.core.logging import get_logger
from tf_http_backend.state_store.exceptions import (
    InconsistentStorageError,
    InvalidStateNameError,
    StateLockedError,
    StateNotFoundError,
    StateNotLockedError,
    StorageError,
    StorageInitError,
)
from tf_http_backend.state_store.locks import NameLockTable
from tf_http_backend.state_store.models import StateEntry

logger = get_logger()

STATE_FILE_EXT = ".tfstate"
LOCK_FILE_EXT = ".lock"
PROBE_FILE_NAME = "test_rw"
HEALTH_PROBE_PREFIX = ".health."
TEMP_FILE_SUFFIX = ".tmp"
DEFAULT_FILE_MODE = 0o644
DEFAULT_DIR_MODE = 0o755

_FORBIDDEN_NAME_CHARS = ("/", "\\", "\x00")


class StateStore:
    """Stores state content and lock markers as files in one directory.

    Each state ``name`` owns two artifacts under the storage root:
    ``{name}.tfstate`` holding the raw content and ``{name}.lock``, an empty
    marker whose presence means the state is locked. Nothing is cached; every
    call re-reads the directory.
    """

    def __init__(self, storage_path: Path) -> None:
        """Initialize the store and verify the storage root is usable.

        Args:
            storage_path: Directory holding the state files. Created if missing.

        Raises:
            StorageInitError: If the path is not a directory or not writable.
        """
        self.storage_path = Path(storage_path)
        self._locks = NameLockTable()

        logger.debug("storage_path", path=str(self.storage_path))
        self._init_directory()
        self.check_access()
        self._sweep_temp_files()

    def _init_directory(self) -> None:
        """Create the storage root if it does not exist yet."""
        if not self.storage_path.exists():
            logger.warning("storage_directory_missing", path=str(self.storage_path))
            try:
                self.storage_path.mkdir(mode=DEFAULT_DIR_MODE)
            except OSError as e:
                raise StorageInitError(
                    f"failed to create {self.storage_path}: {e}"
                ) from e

        if not self.storage_path.is_dir():
            raise StorageInitError(f"is not directory: {self.storage_path}")

    def check_access(self) -> None:
        """Verify the process can create and remove files in the storage root.

        Raises:
            StorageInitError: If the probe file cannot be written or removed.
        """
        probe = self.storage_path / PROBE_FILE_NAME
        try:
            probe.touch(mode=DEFAULT_FILE_MODE)
        except OSError as e:
            raise StorageInitError(
                f"insufficient permissions for reading and writing in "
                f"{self.storage_path}: {e}"
            ) from e

        try:
            probe.unlink()
        except OSError as e:
            raise StorageInitError(f"failed to remove test file {probe}: {e}") from e

    def probe_access(self) -> None:
        """Like ``check_access`` but on a uniquely named file.

        Safe to call from concurrent requests.

        Raises:
            StorageInitError: If the probe file cannot be written or removed.
        """
        try:
            fd, probe = tempfile.mkstemp(
                dir=self.storage_path,
                prefix=HEALTH_PROBE_PREFIX,
                suffix=TEMP_FILE_SUFFIX,
            )
        except OSError as e:
            raise StorageInitError(
                f"insufficient permissions for reading and writing in "
                f"{self.storage_path}: {e}"
            ) from e
        os.close(fd)

        try:
            os.unlink(probe)
        except OSError as e:
            raise StorageInitError(f"failed to remove test file {probe}: {e}") from e

    def _sweep_temp_files(self) -> None:
        """Remove temporary files left behind by interrupted writes."""
        try:
            files = self._scan()
        except StorageError as e:
            raise StorageInitError(str(e)) from e

        for file_name in files:
            if not (file_name.startswith(".") and file_name.endswith(TEMP_FILE_SUFFIX)):
                continue
            path = self.storage_path / file_name
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning("stale_temp_file_kept", path=str(path), error=str(e))
            else:
                logger.info("stale_temp_file_removed", path=str(path))

    def _validate_name(self, name: str) -> None:
        """Reject names that do not map to a single file in the storage root."""
        if not name:
            raise InvalidStateNameError("missing name", name=name)
        if name in (".", "..") or any(c in name for c in _FORBIDDEN_NAME_CHARS):
            raise InvalidStateNameError(f"invalid state name: {name!r}", name=name)

    def state_path(self, name: str) -> Path:
        self._validate_name(name)
        return self.storage_path / f"{name}{STATE_FILE_EXT}"

    def lock_path(self, name: str) -> Path:
        self._validate_name(name)
        return self.storage_path / f"{name}{LOCK_FILE_EXT}"

    def exists(self, name: str) -> bool:
        """Return True if content is stored for ``name``."""
        return self.state_path(name).is_file()

    def is_locked(self, name: str) -> bool:
        """Return True if a lock marker exists for ``name``."""
        return self.lock_path(name).is_file()

    def read(self, name: str) -> bytes:
        """Return the full stored content of a state.

        Raises:
            StateNotFoundError: If no content is stored under ``name``.
            StorageError: On any other I/O failure.
        """
        path = self.state_path(name)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise StateNotFoundError(f"state {name} not found", name=name) from e
        except IsADirectoryError as e:
            raise StateNotFoundError(f"state {name} not found", name=name) from e
        except OSError as e:
            raise StorageError(f"failed to read {path}: {e}", name=name) from e

    def write(self, name: str, data: bytes) -> bool:
        """Replace the content of a state.

        The content is written to a temporary file in the storage root and
        moved into place, so a reader sees either the old or the new content.

        Args:
            name: State name
            data: New content

        Returns:
            True if the state did not exist before this call

        Raises:
            StateLockedError: If the state is locked.
            StorageError: If the content cannot be written.
        """
        path = self.state_path(name)
        with self._locks.hold(name):
            if self.is_locked(name):
                raise StateLockedError(f"state {name} is locked", name=name)

            created = not self.exists(name)
            self._replace_file(path, data, name)

        return created

    def _replace_file(self, path: Path, data: bytes, name: str) -> None:
        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=self.storage_path,
                prefix=f".{path.name}.",
                suffix=TEMP_FILE_SUFFIX,
            )
        except OSError as e:
            raise StorageError(f"failed to write {path}: {e}", name=name) from e

        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.chmod(tmp_name, DEFAULT_FILE_MODE)
            os.replace(tmp_name, path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise StorageError(f"failed to write {path}: {e}", name=name) from e

    def delete(self, name: str) -> bool:
        """Remove the content of a state.

        Deleting a state that has no content is not an error.

        Returns:
            True if content was removed, False if it was already absent

        Raises:
            StateLockedError: If the state is locked.
            StorageError: If the content exists but cannot be removed.
        """
        path = self.state_path(name)
        with self._locks.hold(name):
            if self.is_locked(name):
                raise StateLockedError(f"state {name} is locked", name=name)

            try:
                path.unlink()
            except FileNotFoundError:
                return False
            except OSError as e:
                raise StorageError(f"failed to delete {path}: {e}", name=name) from e

        return True

    def lock(self, name: str) -> None:
        """Create the lock marker for a state.

        A state does not need content to be locked; Terraform locks a new
        state before writing it for the first time.

        Raises:
            StateLockedError: If the state is already locked.
            StorageError: If the marker cannot be created.
        """
        path = self.lock_path(name)
        with self._locks.hold(name):
            try:
                fd = os.open(
                    path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, DEFAULT_FILE_MODE
                )
            except FileExistsError as e:
                if not self.is_locked(name):
                    raise StorageError(
                        f"lock path {path} exists but is not a file", name=name
                    ) from e
                raise StateLockedError(
                    f"state {name} already locked", name=name
                ) from e
            except OSError as e:
                raise StorageError(
                    f"failed to create lock file {path}: {e}", name=name
                ) from e
            os.close(fd)

    def unlock(self, name: str) -> None:
        """Remove the lock marker for a state.

        Raises:
            StateNotLockedError: If the state is not locked.
            StorageError: If the marker cannot be removed.
        """
        path = self.lock_path(name)
        with self._locks.hold(name):
            if not self.is_locked(name):
                raise StateNotLockedError(f"state {name} not locked", name=name)

            try:
                path.unlink()
            except FileNotFoundError as e:
                raise StateNotLockedError(
                    f"state {name} not locked", name=name
                ) from e
            except OSError as e:
                raise StorageError(
                    f"failed to remove lock file {path}: {e}", name=name
                ) from e

    def list_states(self) -> list[StateEntry]:
        """Enumerate all stored states with their lock status.

        The storage root is scanned once. Content files become entries in
        listing order; lock markers then flag their entry as locked. A lock
        marker without content is reported as a locked entry of its own.

        Returns:
            List of state entries

        Raises:
            InconsistentStorageError: If the same state name is found twice.
            StorageError: If the directory cannot be read.
        """
        files = self._scan()

        roster: dict[str, StateEntry] = {}
        for file_name in files:
            name = _strip_ext(file_name, STATE_FILE_EXT)
            if name is None:
                continue
            if name in roster:
                raise InconsistentStorageError(
                    f"failed to process entry {name}: state already exists",
                    name=name,
                )
            roster[name] = StateEntry(name=name)

        for file_name in files:
            name = _strip_ext(file_name, LOCK_FILE_EXT)
            if name is None:
                continue
            entry = roster.get(name)
            if entry is None:
                logger.debug("lock_without_state", name=name)
                roster[name] = StateEntry(name=name, locked=True)
            elif entry.locked:
                raise InconsistentStorageError(
                    f"failed to process entry {name}: state already locked",
                    name=name,
                )
            else:
                entry.locked = True

        return list(roster.values())

    def _scan(self) -> list[str]:
        """Return the names of the regular files in the storage root."""
        try:
            with os.scandir(self.storage_path) as it:
                return [e.name for e in it if e.is_file()]
        except OSError as e:
            raise StorageError(
                f"failed to read directory {self.storage_path}: {e}"
            ) from e


def _strip_ext(file_name: str, ext: str) -> str | None:
    """Return the state name for ``file_name`` if it carries ``ext``."""
    if not file_name.endswith(ext):
        return None
    name = file_name[: -len(ext)]
    return name or None
