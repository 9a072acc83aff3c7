# File: dmmf_ir/utils.py
"""
dmmf-ir - Utility Functions & Helpers
=======================================
Identifier transformations, freezing helpers and a small profiling timer
shared by the parsing pipeline.

Performance strategy:
- ALL string-conversion functions are decorated with ``@lru_cache(maxsize=None)``
  so repeated calls (one per field per naming check) are amortised to O(1)
  after first invocation.  The caches only hold pure results, so they are
  safe to share between concurrent parses.
- Freezing helpers always copy before freezing; they never freeze a
  caller-owned container in place.
"""

from __future__ import annotations

import functools
import logging
import re
import time
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, TypeVar, Union

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("dmmf_ir.utils")

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns (compiled once at module load)
# ---------------------------------------------------------------------------

_CAMEL_TO_SNAKE_RE1: re.Pattern[str] = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_TO_SNAKE_RE2: re.Pattern[str] = re.compile(r"([a-z0-9])([A-Z])")
_NON_ALPHANUM_RE: re.Pattern[str] = re.compile(r"[^a-zA-Z0-9]")
_MULTI_UNDERSCORE_RE: re.Pattern[str] = re.compile(r"_{2,}")
_LEADING_TRAILING_UNDERSCORE_RE: re.Pattern[str] = re.compile(r"^_+|_+$")
_SPLIT_WORDS_RE: re.Pattern[str] = re.compile(
    r"[A-Z]?[a-z]+|[A-Z]+(?=[A-Z][a-z]|\d|\b)|[A-Z]|\d+"
)


# ---------------------------------------------------------------------------
# Cached string transformation functions
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def to_snake_case(name: str) -> str:
    """
    Convert any string to snake_case.

    Examples:
        >>> to_snake_case("UserProfile")
        'user_profile'
        >>> to_snake_case("getHTTPResponse")
        'get_http_response'
        >>> to_snake_case("already_snake")
        'already_snake'
    """
    if not name:
        return ""
    s: str = _CAMEL_TO_SNAKE_RE1.sub(r"\1_\2", name)
    s = _CAMEL_TO_SNAKE_RE2.sub(r"\1_\2", s)
    s = _NON_ALPHANUM_RE.sub("_", s)
    s = _MULTI_UNDERSCORE_RE.sub("_", s)
    s = _LEADING_TRAILING_UNDERSCORE_RE.sub("", s)
    return s.lower()


@functools.lru_cache(maxsize=None)
def to_camel_case(name: str) -> str:
    """
    Convert any string to camelCase.

    Examples:
        >>> to_camel_case("user_profile")
        'userProfile'
        >>> to_camel_case("HTTPResponse")
        'httpResponse'
    """
    if not name:
        return ""
    words: Tuple[str, ...] = _extract_words(name)
    if not words:
        return ""
    first: str = words[0].lower()
    rest: str = "".join(w.capitalize() for w in words[1:])
    return first + rest


@functools.lru_cache(maxsize=None)
def to_kebab_case(name: str) -> str:
    """Convert any string to kebab-case (used in route segments)."""
    if not name:
        return ""
    words: Tuple[str, ...] = _extract_words(name)
    return "-".join(w.lower() for w in words)


@functools.lru_cache(maxsize=None)
def to_plural(name: str) -> str:
    """
    Naive English pluralisation sufficient for route and collection names.

    Handles common suffixes and the irregular nouns that show up in schemas.
    """
    if not name:
        return ""

    lower: str = name.lower()

    irregulars: Dict[str, str] = {
        "person": "people",
        "child": "children",
        "man": "men",
        "woman": "women",
        "mouse": "mice",
        "datum": "data",
        "index": "indices",
        "matrix": "matrices",
        "vertex": "vertices",
        "axis": "axes",
        "analysis": "analyses",
        "status": "statuses",
        "address": "addresses",
    }

    if lower in irregulars:
        plural: str = irregulars[lower]
        if name[0].isupper():
            return plural[0].upper() + plural[1:]
        return plural

    # Already plural-looking (very naive)
    if lower.endswith("s") and not lower.endswith("ss"):
        return name

    if lower.endswith(("sh", "ch", "x", "z", "ss")):
        return name + "es"
    if lower.endswith("y") and len(name) > 1 and lower[-2] not in "aeiou":
        return name[:-1] + "ies"
    if lower.endswith("fe"):
        return name[:-2] + "ves"
    if lower.endswith("f"):
        return name[:-1] + "ves"

    return name + "s"


@functools.lru_cache(maxsize=None)
def _extract_words(name: str) -> Tuple[str, ...]:
    """
    Extract individual words from any casing style.

    Returns a tuple (hashable for LRU cache) of lowercase word strings.
    """
    cleaned: str = _NON_ALPHANUM_RE.sub(" ", name)
    words: List[str] = _SPLIT_WORDS_RE.findall(cleaned)
    return tuple(w.lower() for w in words if w)


@functools.lru_cache(maxsize=None)
def model_to_route_segment(model_name: str) -> str:
    """Convert a model name to the URL segment generators derive from it."""
    return to_kebab_case(to_plural(model_name))


# ---------------------------------------------------------------------------
# Freezing helpers
# ---------------------------------------------------------------------------


def freeze_sequence(items: Iterable[T], should_freeze: bool) -> Union[Tuple[T, ...], List[T]]:
    """
    Copy *items* into a new container.

    Returns a ``tuple`` when *should_freeze* is True and a fresh ``list``
    otherwise.  The input is never returned as-is.
    """
    if should_freeze:
        return tuple(items)
    return list(items)


def freeze_mapping(
    mapping: Mapping[str, T], should_freeze: bool
) -> Union[Mapping[str, T], Dict[str, T]]:
    """Copy *mapping*; wrap the copy in a read-only proxy when freezing."""
    copied: Dict[str, T] = dict(mapping)
    if should_freeze:
        return MappingProxyType(copied)
    return copied


def deep_copy_value(value: Any, should_freeze: bool) -> Any:
    """
    Recursively copy plain containers from a raw node.

    Lists and tuples become tuples (frozen) or lists; dicts become read-only
    proxies (frozen) or dicts.  Scalars are returned unchanged.
    """
    if isinstance(value, Mapping):
        return freeze_mapping(
            {str(k): deep_copy_value(v, should_freeze) for k, v in value.items()},
            should_freeze,
        )
    if isinstance(value, (list, tuple)):
        return freeze_sequence(
            (deep_copy_value(v, should_freeze) for v in value), should_freeze
        )
    return value


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Simple context-manager timer for profiling pipeline stages.

    Usage:
        with Timer("parse") as t:
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
        logger.debug(
            "Timer [%s]: %.4f seconds",
            self.label,
            self.elapsed,
        )

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "to_snake_case",
    "to_camel_case",
    "to_kebab_case",
    "to_plural",
    "model_to_route_segment",
    "freeze_sequence",
    "freeze_mapping",
    "deep_copy_value",
    "Timer",
]

logger.debug("dmmf_ir.utils loaded - %d public symbols.", len(__all__))
