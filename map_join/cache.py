"""Directory-backed store for per-cell outputs."""

from __future__ import annotations

import os
import pickle
import tempfile
import warnings
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

CACHE_SUFFIX = ".pkl"
KEY_DELIMITER = "="


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _apply_payload_timestamps(
    payload: dict[str, Any],
    existing: Mapping[str, Any] | None = None,
) -> None:
    now = _now_iso()
    created_at = None if existing is None else existing.get("created_at")
    if created_at is None:
        created_at = now
    payload["created_at"] = created_at
    payload["updated_at"] = now


def _atomic_write_pickle(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="wb",
            delete=False,
            dir=path.parent,
            prefix=f".{path.name}.",
        ) as handle:
            tmp_path = Path(handle.name)
            pickle.dump(payload, handle, protocol=5)
        os.replace(tmp_path, path)
    finally:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()


_READ_ERRORS = (
    pickle.UnpicklingError,
    EOFError,
    AttributeError,
    ImportError,
    IndexError,
    ValueError,
    TypeError,
)


def _read_payload(path: Path, *, warn: bool = True) -> dict[str, Any] | None:
    """Return the payload at ``path``, or None if missing, unreadable or malformed."""
    if not path.exists():
        return None
    try:
        with open(path, "rb") as handle:
            payload = pickle.load(handle)
    except _READ_ERRORS as exc:
        if warn:
            warnings.warn(
                f"Ignoring unreadable cache entry {path}: {exc!r}", stacklevel=3
            )
        return None
    if not isinstance(payload, dict) or "output" not in payload:
        if warn:
            warnings.warn(f"Ignoring malformed cache entry {path}", stacklevel=3)
        return None
    return payload


class CacheStore:
    """Opaque pickled outputs stored as ``<root>/<prefix>=<key>.pkl``.

    ``=`` never appears in a prefix, so stores whose prefixes share a
    leading part (``outer`` and ``outer.v2``) never see each other's entries.
    The store never creates its directory on read; use ``open`` or
    ``from_prefix`` to create it up front.
    """

    def __init__(self, root: str | Path, prefix: str = "map_join") -> None:
        if not prefix:
            raise ValueError("'prefix' must be a non-empty string")
        if KEY_DELIMITER in prefix:
            raise ValueError(
                f"'prefix' must not contain {KEY_DELIMITER!r}: {prefix!r}"
            )
        self.root = Path(root)
        self.prefix = prefix

    @classmethod
    def open(cls, root: str | Path, prefix: str = "map_join") -> "CacheStore":
        store = cls(root, prefix)
        store.root.mkdir(parents=True, exist_ok=True)
        return store

    @classmethod
    def from_prefix(cls, cache_prefix: str | Path) -> "CacheStore":
        """Open a store from a path prefix such as ``cache_dir/outer_product``."""
        path = Path(cache_prefix)
        return cls.open(path.parent, path.name)

    def path_for(self, key: str) -> Path:
        return self.root / f"{self.prefix}{KEY_DELIMITER}{key}{CACHE_SUFFIX}"

    def contains(self, key: str) -> bool:
        return self.path_for(key).exists()

    def load(self, key: str) -> tuple[bool, Any]:
        """Return ``(found, output)``; unreadable entries count as missing."""
        payload = _read_payload(self.path_for(key))
        if payload is None:
            return False, None
        return True, payload["output"]

    def save(self, key: str, output: Any) -> Path:
        path = self.path_for(key)
        payload: dict[str, Any] = {"key": key, "output": output}
        _apply_payload_timestamps(payload, _read_payload(path, warn=False))
        _atomic_write_pickle(path, payload)
        return path

    def keys(self) -> list[str]:
        if not self.root.exists():
            return []
        keys: list[str] = []
        head = f"{self.prefix}{KEY_DELIMITER}"
        for path in sorted(self.root.iterdir()):
            name = path.name
            if name.startswith(head) and name.endswith(CACHE_SUFFIX):
                keys.append(name[len(head) : -len(CACHE_SUFFIX)])
        return keys

    def clear(self) -> int:
        removed = 0
        for key in self.keys():
            self.path_for(key).unlink(missing_ok=True)
            removed += 1
        return removed

    def __repr__(self) -> str:
        return f"CacheStore(root={str(self.root)!r}, prefix={self.prefix!r})"
