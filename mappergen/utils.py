# File: mappergen/utils.py
"""
Mapper Codegen - Utility Functions & Helpers
==============================================
String transformation, indentation, timing and file I/O helpers shared by
the generation pipeline.

- Case-conversion functions are ``@lru_cache``-decorated: the same table and
  column names are converted many times per generated file.
- Generated Scala uses a two-space indent unit.
- File writes go through a temporary file and an atomic rename.
"""

from __future__ import annotations

import functools
import logging
import os
import re
import tempfile
import time
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mappergen.utils")

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns
# ---------------------------------------------------------------------------

_WORD_SPLIT_RE: re.Pattern[str] = re.compile(r"[^A-Za-z0-9]+")

INDENT_UNIT: str = "  "


# ---------------------------------------------------------------------------
# Cached string transformation functions
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def _split_words(name: str) -> Tuple[str, ...]:
    return tuple(w for w in _WORD_SPLIT_RE.split(name) if w)


def _capitalise_word(word: str) -> str:
    # "MEMBER" -> "Member", but "groupMembers" keeps its inner humps.
    if word.isupper():
        return word.capitalize()
    return word[0].upper() + word[1:]


@functools.lru_cache(maxsize=None)
def to_pascal_case(name: str) -> str:
    """
    Convert a table or column name to PascalCase.

    Examples:
        >>> to_pascal_case("member_group")
        'MemberGroup'
        >>> to_pascal_case("MEMBER_GROUP")
        'MemberGroup'
        >>> to_pascal_case("memberGroup")
        'MemberGroup'
    """
    return "".join(_capitalise_word(w) for w in _split_words(name))


@functools.lru_cache(maxsize=None)
def to_camel_case(name: str) -> str:
    """
    Convert a table or column name to camelCase.

    Examples:
        >>> to_camel_case("created_at")
        'createdAt'
        >>> to_camel_case("ID")
        'id'
    """
    pascal: str = to_pascal_case(name)
    if not pascal:
        return ""
    return pascal[0].lower() + pascal[1:]


@functools.lru_cache(maxsize=None)
def upper_initials(name: str) -> str:
    """Upper-case letters of *name*, in order (``OrderItem`` -> ``OI``)."""
    return "".join(ch for ch in name if ch.isupper())


def scala_string_literal(value: str) -> str:
    """Double-quoted Scala string literal."""
    escaped: str = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


# ---------------------------------------------------------------------------
# Indentation helpers
# ---------------------------------------------------------------------------


def indent(level: int) -> str:
    """Indentation prefix for *level* nesting levels."""
    return INDENT_UNIT * level


def indent_lines(lines: Sequence[str], level: int = 1) -> List[str]:
    """Indent non-blank lines, returning a new list."""
    prefix: str = indent(level)
    return [prefix + line if line.strip() else line for line in lines]


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> None:
    """Create directory (and parents) if it doesn't exist."""
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)


def write_file(path: Path, content: str, encoding: str = "utf-8") -> int:
    """
    Atomically write *content* to *path*, creating parent directories.

    The temporary file lives beside the target so the final ``os.replace``
    never crosses a filesystem boundary.  The temporary file descriptor is
    closed, and the temporary file removed, on every failure path.

    Returns the number of bytes written.
    """
    encoded: bytes = content.encode(encoding)
    ensure_directory(path.parent)

    fd, tmp_path = tempfile.mkstemp(
        dir=str(path.parent),
        prefix=f".{path.name}.",
        suffix=".tmp",
    )
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(encoded)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, str(path))
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise

    logger.debug("Wrote %s (%d bytes).", path, len(encoded))
    return len(encoded)


def count_lines(content: str) -> int:
    """Count the number of lines in a string."""
    if not content:
        return 0
    return content.count("\n") + (1 if not content.endswith("\n") else 0)


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Context-manager timer for pipeline steps.

    Usage:
        with Timer("generate member") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.debug("Timer [%s]: %.4f seconds", self.label, self.elapsed)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "INDENT_UNIT",
    "to_pascal_case",
    "to_camel_case",
    "upper_initials",
    "scala_string_literal",
    "indent",
    "indent_lines",
    "ensure_directory",
    "write_file",
    "count_lines",
    "Timer",
]

logger.debug("mappergen.utils loaded — %d public symbols.", len(__all__))
