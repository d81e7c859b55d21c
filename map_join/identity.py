import re

from .index_space import CellKey

KEY_SEPARATOR = "."
ESCAPE = "~"
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]+")


def _escape(match: re.Match[str]) -> str:
    return "".join(f"{ESCAPE}{byte:02X}" for byte in match.group().encode("utf-8"))


def sanitize_key_part(part: str) -> str:
    """Escape every byte outside ``[A-Za-z0-9_-]`` as ``~XX``; reversible."""
    return _UNSAFE_CHARS.sub(_escape, part)


def cell_cache_key(key: CellKey) -> str:
    """Join a cell's labels into a path-safe cache key.

    Unlabeled positions are written as ``~p`` plus their 1-based index, which
    no escaped label can produce.
    """
    parts = []
    for _, label, index in key:
        if label:
            parts.append(sanitize_key_part(label))
        else:
            parts.append(f"{ESCAPE}p{index + 1}")
    return KEY_SEPARATOR.join(parts)
