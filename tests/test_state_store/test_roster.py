"""Tests for listing stored states."""

from pathlib import Path
from unittest.mock import patch

import pytest

from tf_http_backend.state_store import (
    InconsistentStorageError,
    StateEntry,
    StateStore,
    StorageError,
)


def _as_set(entries: list[StateEntry]) -> set[tuple[str, bool]]:
    return {(e.name, e.locked) for e in entries}


def test_should_list_nothing_for_empty_store(state_store: StateStore) -> None:
    assert state_store.list_states() == []


def test_should_list_states_with_lock_flags(state_store: StateStore) -> None:
    state_store.write("n1", b"{}")
    state_store.write("n2", b"{}")
    state_store.lock("n2")

    assert _as_set(state_store.list_states()) == {("n1", False), ("n2", True)}


def test_should_list_lock_without_content_as_locked(state_store: StateStore) -> None:
    state_store.write("existing", b"{}")
    state_store.lock("fresh")

    entries = state_store.list_states()

    assert _as_set(entries) == {("existing", False), ("fresh", True)}
    assert entries[-1] == StateEntry(name="fresh", locked=True)


def test_should_ignore_unrelated_files(state_store: StateStore) -> None:
    root = state_store.storage_path
    state_store.write("prod", b"{}")
    (root / "notes.txt").write_text("x")
    (root / ".prod.tfstate.abc.tmp").write_text("partial")
    (root / "dir.tfstate").mkdir()

    assert _as_set(state_store.list_states()) == {("prod", False)}


def test_should_not_cache_between_scans(state_store: StateStore) -> None:
    state_store.write("a", b"{}")
    assert _as_set(state_store.list_states()) == {("a", False)}

    state_store.delete("a")
    state_store.write("b", b"{}")

    assert _as_set(state_store.list_states()) == {("b", False)}


def test_should_reject_duplicate_state_names(state_store: StateStore) -> None:
    with patch.object(
        StateStore, "_scan", return_value=["a.tfstate", "a.tfstate"]
    ):
        with pytest.raises(InconsistentStorageError):
            state_store.list_states()


def test_should_fail_when_directory_unreadable(tmp_path: Path) -> None:
    store = StateStore(storage_path=tmp_path / "states")

    with patch("os.scandir", side_effect=PermissionError("denied")):
        with pytest.raises(StorageError):
            store.list_states()
