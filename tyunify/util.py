"""Small helpers shared across the type checker."""

from __future__ import annotations

import os
from collections.abc import Hashable, Sequence
from pathlib import Path
from typing import TypeVar

T = TypeVar("T")

_CACHE_DIR_MODE = 0o774
_cache_dirs: dict[str, Path] = {}


class CompilerBug(RuntimeError):
    """An internal invariant was violated; the checker cannot continue."""


def give_up(message: str) -> None:
    """Raise a CompilerBug carrying ``message``."""
    raise CompilerBug(f"{message}\nThis is a compiler bug! Giving up.")


def multiset_eq(as_: Sequence[T], bs: Sequence[T]) -> bool:
    """Return True if the sequences hold the same elements with the same counts."""
    if len(as_) != len(bs):
        return False
    used = [False] * len(bs)
    for a in as_:
        match = next(
            (j for j, b in enumerate(bs) if not used[j] and a == b),
            None,
        )
        if match is None:
            return False
        used[match] = True
    return True


def find_range(haystack: Sequence[T], needle: Sequence[T]) -> int:
    """Return the first index where ``needle`` occurs in ``haystack``.

    Returns ``len(haystack)`` when there is no occurrence.
    """
    size = len(haystack)
    width = len(needle)
    if size == 0 or width > size:
        return size
    needle_list = list(needle)
    for start in range(size - width + 1):
        if list(haystack[start : start + width]) == needle_list:
            return start
    return size


def prefix(pre: str, s: str) -> bool:
    """Return True if ``s`` starts with ``pre``."""
    return s.startswith(pre)


def count_char_occurrences(data: str, needle: str) -> int:
    """Count how many times the single character ``needle`` appears in ``data``."""
    if len(needle) != 1:
        raise ValueError("needle must be a single character")
    return data.count(needle)


def join_paths(*args: str) -> str:
    """Join path components with the platform's path separator."""
    return os.sep.join(args)


def get_cache_dir(program_name: str) -> Path:
    """Return (creating it if needed) the cache directory for ``program_name``.

    Uses ``$XDG_CACHE_DIR/<program_name>`` if that variable is set, otherwise
    ``<home>/.cache/<program_name>``. The result is remembered per program name.
    """
    cached = _cache_dirs.get(program_name)
    if cached is not None:
        return cached
    base = os.environ.get("XDG_CACHE_DIR")
    if base is None:
        home = os.environ.get("HOME") or str(Path.home())
        directory = Path(join_paths(home, ".cache", program_name))
    else:
        directory = Path(join_paths(base, program_name))
    try:
        directory.mkdir(mode=_CACHE_DIR_MODE, parents=True, exist_ok=True)
    except OSError as exc:
        raise OSError(f"Couldn't create cache directory {directory}") from exc
    if not directory.is_dir():
        raise OSError(f"Couldn't create cache directory {directory}")
    _cache_dirs[program_name] = directory
    return directory


def read_entire_file(path: str | os.PathLike[str]) -> str:
    """Read a whole source file as text."""
    with open(path, "rb") as handle:
        data = handle.read()
    return data.decode("utf-8")


__all__ = [
    "CompilerBug",
    "count_char_occurrences",
    "find_range",
    "get_cache_dir",
    "give_up",
    "join_paths",
    "multiset_eq",
    "prefix",
    "read_entire_file",
]