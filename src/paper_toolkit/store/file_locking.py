"""
Module: store.file_locking

Purpose:
    Locked, atomic updates of the JSON paper store. Writers serialise on
    a sidecar ``<name>.lock`` file held with portalocker and publish the
    new document with an atomic rename, so a reader never sees a
    half-written store and a failed update leaves the previous file
    untouched.

Key Functions:
    - lock_path_for(): Sidecar lock file of a store
    - store_lock(): Context manager holding the store lock
    - locked_read_json(): Read the document once no update is running
    - locked_read_modify_write_json(): Read-modify-replace under the lock

Key Classes:
    - StoreLockTimeout: Lock not acquired within the timeout

Dependencies:
    - portalocker: Cross-platform file locking

Used By:
    - store.paper_store: Paper persistence
"""

from __future__ import annotations

import json
import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Iterator

import portalocker

logger = logging.getLogger(__name__)

DEFAULT_LOCK_TIMEOUT = 10.0


class StoreLockTimeout(Exception):
    """Raised when another process holds the store lock for too long."""
    pass


def lock_path_for(path: Path) -> Path:
    """
    Sidecar lock file for a store path.

    Example:
        >>> lock_path_for(Path("workspace/papers.json"))
        PosixPath('workspace/papers.json.lock')
    """
    return path.with_name(path.name + ".lock")


@contextmanager
def store_lock(path: Path, timeout: float = DEFAULT_LOCK_TIMEOUT) -> Iterator[None]:
    """
    Hold the exclusive store lock for ``path``.

    The document itself is never locked: it is replaced by rename, so
    the lock lives in a sidecar file that outlives every replacement.

    Raises:
        StoreLockTimeout: If the lock is still held after ``timeout`` seconds
    """
    lock_path = lock_path_for(path)
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    lock = portalocker.Lock(str(lock_path), mode="a", timeout=timeout)
    try:
        lock.acquire()
    except portalocker.LockException as e:
        raise StoreLockTimeout(f"{path.name} is locked by another process (waited {timeout}s)") from e
    try:
        yield
    finally:
        lock.release()


def _load(path: Path, default: Callable[[], Dict[str, Any]]) -> Dict[str, Any]:
    if not path.exists():
        return default()
    content = path.read_text(encoding="utf-8")
    return json.loads(content) if content.strip() else default()


def _replace_atomically(path: Path, data: Dict[str, Any]) -> None:
    """Write ``data`` beside ``path`` and rename it into place."""
    tmp_path = path.with_name(f".{path.name}.{os.getpid()}.tmp")
    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    finally:
        tmp_path.unlink(missing_ok=True)


def locked_read_json(
    path: Path,
    default: Callable[[], Dict[str, Any]] = dict,
    timeout: float = DEFAULT_LOCK_TIMEOUT,
) -> Dict[str, Any]:
    """
    Read a JSON document, waiting for a running update to finish.

    Args:
        path: Path to JSON file.
        default: Factory for the result when the file is missing or empty.
        timeout: Seconds to wait for the store lock.

    Raises:
        json.JSONDecodeError: If the file is not valid JSON.
        StoreLockTimeout: If the lock could not be acquired.
    """
    if not path.exists():
        return default()
    with store_lock(path, timeout):
        return _load(path, default)


def locked_read_modify_write_json(
    path: Path,
    modifier: Callable[[Dict[str, Any]], Dict[str, Any]],
    default: Callable[[], Dict[str, Any]] = dict,
    timeout: float = DEFAULT_LOCK_TIMEOUT,
) -> Dict[str, Any]:
    """
    Read JSON, apply ``modifier`` and atomically replace the file.

    If reading, the modifier or writing fails, the previous document is
    left as it was.

    Args:
        path: Path to JSON file.
        modifier: Function that takes existing data, returns modified data.
        default: Factory for the data when the file doesn't exist yet.
        timeout: Seconds to wait for the store lock.

    Returns:
        The modified data that was written.

    Example:
        >>> def add_paper(existing):
        ...     existing["papers"].append(summary)
        ...     return existing
        >>> locked_read_modify_write_json(store_path, add_paper, lambda: {"papers": []})
    """
    with store_lock(path, timeout):
        modified = modifier(_load(path, default))
        _replace_atomically(path, modified)
    logger.debug(f"Replaced {path.name}")
    return modified
