# File: entitygen/utils.py
"""
entitygen - Utility Functions & Helpers
=========================================
Naming, PHP ``use`` block, file writing and timing helpers shared by the
generation pipeline.

- Naming follows Laravel's ``Str::snake`` / ``Str::plural`` closely
  enough to predict an Eloquent model's default table name.
- ``write_file`` goes through a sibling temporary file and ``os.replace``
  so an interrupted run never leaves a half-written class behind.
"""

from __future__ import annotations

import functools
import logging
import os
import re
import tempfile
import time
from pathlib import Path
from typing import Dict, Iterable, List, Optional

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("entitygen.utils")

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

# Str::snake: underscore before every capital that follows a character
_SNAKE_BOUNDARY_RE: re.Pattern[str] = re.compile(r"(.)(?=[A-Z])")
_WHITESPACE_RE: re.Pattern[str] = re.compile(r"\s+")

# PHP label: letter/underscore/high byte, then word chars
_PHP_IDENTIFIER_RE: re.Pattern[str] = re.compile(r"^[A-Za-z_\x80-\uffff][A-Za-z0-9_\x80-\uffff]*$")

_IRREGULAR_PLURALS: Dict[str, str] = {
    "child": "children",
    "person": "people",
    "man": "men",
    "woman": "women",
    "foot": "feet",
    "tooth": "teeth",
    "mouse": "mice",
    "criterion": "criteria",
    "medium": "media",
    "datum": "data",
    "index": "indices",
    "axis": "axes",
}

_UNCOUNTABLE: frozenset = frozenset({
    "audio", "data", "equipment", "feedback", "information", "media",
    "metadata", "money", "news", "series", "software", "staff",
})


# ---------------------------------------------------------------------------
# Naming
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def to_snake_case(name: str) -> str:
    """
    Laravel's ``Str::snake``.

    Examples:
        >>> to_snake_case("BlogPost")
        'blog_post'
        >>> to_snake_case("APIKey")
        'a_p_i_key'
    """
    if name.islower():
        return name
    compact: str = _WHITESPACE_RE.sub("", name)
    return _SNAKE_BOUNDARY_RE.sub(r"\1_", compact).lower()


def _plural_word(word: str) -> str:
    lower: str = word.lower()
    if lower in _UNCOUNTABLE:
        return word
    if lower in _IRREGULAR_PLURALS:
        return _IRREGULAR_PLURALS[lower]
    if lower.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    if lower.endswith("y") and lower[-2:-1] not in ("a", "e", "i", "o", "u", ""):
        return word[:-1] + "ies"
    if lower.endswith("fe"):
        return word[:-2] + "ves"
    if lower.endswith("f") and not lower.endswith("ff"):
        return word[:-1] + "ves"
    return word + "s"


@functools.lru_cache(maxsize=None)
def to_plural(name: str) -> str:
    """
    Pluralise the last ``_``-separated word of a snake_case name.

    Good enough for Eloquent's table-name convention; models that break
    it declare ``$table`` explicitly.
    """
    if not name:
        return ""
    head, _, last = name.rpartition("_")
    plural: str = _plural_word(last)
    return f"{head}_{plural}" if head else plural


@functools.lru_cache(maxsize=None)
def table_name_for_model(model_name: str) -> str:
    """
    Eloquent's default table name for a model class.

    Examples:
        >>> table_name_for_model("User")
        'users'
        >>> table_name_for_model("BlogCategory")
        'blog_categories'
    """
    return to_plural(to_snake_case(model_name))


def is_php_identifier(name: str) -> bool:
    return bool(_PHP_IDENTIFIER_RE.match(name))


def short_class_name(type_name: str) -> str:
    """Last segment of a namespaced name (``\\A\\B`` -> ``B``)."""
    return type_name.rsplit("\\", 1)[-1]


def is_class_type(type_name: str) -> bool:
    return "\\" in type_name


# ---------------------------------------------------------------------------
# PHP use block
# ---------------------------------------------------------------------------


def build_use_block(class_names: Iterable[str]) -> List[str]:
    """
    Sorted, de-duplicated ``use`` lines for *class_names*.

    ``\\Illuminate\\Support\\Carbon`` becomes
    ``use Illuminate\\Support\\Carbon;``; empty names are skipped.
    """
    unique = {name.lstrip("\\") for name in class_names} - {""}
    return [f"use {name};" for name in sorted(unique)]


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> None:
    if not path.is_dir():
        logger.debug("Creating directory %s", path)
    path.mkdir(parents=True, exist_ok=True)


def write_file(path: Path, content: str) -> int:
    """
    Atomically replace *path* with *content* (UTF-8).

    Returns the number of bytes written.
    """
    ensure_directory(path.parent)
    data: bytes = content.encode("utf-8")

    with tempfile.NamedTemporaryFile(
        mode="wb", dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp", delete=False
    ) as handle:
        tmp_name: str = handle.name
        try:
            handle.write(data)
        except BaseException:
            handle.close()
            os.unlink(tmp_name)
            raise

    try:
        os.replace(tmp_name, path)
    except OSError:
        os.unlink(tmp_name)
        raise

    logger.debug("%s: %d bytes", path, len(data))
    return len(data)


def count_lines(content: str) -> int:
    return len(content.splitlines())


# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------


class Timer:
    """
    Wall-clock timer for pipeline steps::

        with Timer("parse model") as t:
            ...
        t.elapsed  # seconds
    """

    __slots__ = ("label", "elapsed", "_started")

    def __init__(self, label: str) -> None:
        self.label: str = label
        self.elapsed: float = 0.0
        self._started: float = 0.0

    def __enter__(self) -> "Timer":
        self._started = time.perf_counter()
        return self

    def __exit__(self, *exc_info: Optional[object]) -> None:
        self.elapsed = time.perf_counter() - self._started
        logger.debug("%s took %.4fs", self.label, self.elapsed)


__all__: List[str] = [
    "to_snake_case",
    "to_plural",
    "table_name_for_model",
    "is_php_identifier",
    "short_class_name",
    "is_class_type",
    "build_use_block",
    "ensure_directory",
    "write_file",
    "count_lines",
    "Timer",
]
