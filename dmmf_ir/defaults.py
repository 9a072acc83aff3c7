# File: dmmf_ir/defaults.py
"""
dmmf-ir - Default Value Classification
========================================
Decides who owns a field's default (the client or the database) and renders
scalar literal defaults as text for generators.

Classification rules:
- ``now`` is client-managed: the calling application fills it in.
- ``autoincrement``, ``uuid``, ``cuid`` and ``dbgenerated`` are DB-managed.
- Any other function name is also DB-managed.  Unknown functions are kept out
  of write payloads rather than guessed at.

Client-managed status is checked first and excludes DB-managed status, so a
default is never both.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, FrozenSet, List, Mapping, Optional

from dmmf_ir.models import FieldKind, FunctionDefault, ParsedField
from dmmf_ir.sanitize import escape_for_codegen

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("dmmf_ir.defaults")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

CLIENT_MANAGED_DEFAULTS: FrozenSet[str] = frozenset({"now"})

DB_MANAGED_DEFAULTS: FrozenSet[str] = frozenset(
    {"autoincrement", "uuid", "cuid", "dbgenerated"}
)

# Field names treated as system timestamps by read-only and payload rules
SYSTEM_TIMESTAMP_FIELDS: FrozenSet[str] = frozenset({"createdAt", "updatedAt"})

# Types whose numeric defaults need a dedicated literal syntax
_SPECIAL_NUMERIC_TYPES: FrozenSet[str] = frozenset({"BigInt", "Decimal"})

MAX_SAFE_INTEGER: int = 2**53 - 1
MIN_SAFE_INTEGER: int = -(2**53 - 1)

_ENUM_IDENTIFIER_RE: re.Pattern[str] = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def default_function_name(default: Any) -> Optional[str]:
    """Return the function name of a function default, else None."""
    if isinstance(default, FunctionDefault):
        return default.name
    if isinstance(default, Mapping):
        name: Any = default.get("name")
        if isinstance(name, str) and name:
            return name
    return None


def is_client_managed_default(default: Any) -> bool:
    """True for function defaults the client evaluates before a write."""
    name: Optional[str] = default_function_name(default)
    return name is not None and name in CLIENT_MANAGED_DEFAULTS


def is_db_managed_default(default: Any) -> bool:
    """
    True for function defaults the database evaluates.

    Literal defaults are never DB-managed.  Unrecognized function names are.
    """
    name: Optional[str] = default_function_name(default)
    if name is None:
        return False
    if name in CLIENT_MANAGED_DEFAULTS:
        return False
    return True


def is_known_default_function(name: str) -> bool:
    return name in CLIENT_MANAGED_DEFAULTS or name in DB_MANAGED_DEFAULTS


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def default_value_literal(field: ParsedField) -> Optional[str]:
    """
    Render a scalar literal default as source text.

    Returns None ("unrepresentable", never an error) when:
    - the field has no default or a function default
    - the field is an enum (see ``enum_default_reference``)
    - the type is BigInt or Decimal
    - the number is non-finite or outside the safe integer range
    """
    if not field.has_default_value:
        return None
    if field.kind == FieldKind.ENUM:
        return None

    value: Any = field.default

    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        if field.type in _SPECIAL_NUMERIC_TYPES:
            return None
        if isinstance(value, float) and not math.isfinite(value):
            return None
        if value > MAX_SAFE_INTEGER or value < MIN_SAFE_INTEGER:
            return None
        return repr(value)
    if isinstance(value, str):
        return f'"{escape_for_codegen(value)}"'

    return None


def enum_default_reference(field: ParsedField) -> Optional[str]:
    """
    Qualified reference to an enum default, e.g. ``Role.USER``.

    Values that are not safe identifiers fall back to bracket notation,
    e.g. ``Status["in-progress"]``.
    """
    if field.kind != FieldKind.ENUM or not field.has_default_value:
        return None
    value: Any = field.default
    if not isinstance(value, str):
        return None
    if _ENUM_IDENTIFIER_RE.match(value):
        return f"{field.type}.{value}"
    return f'{field.type}["{escape_for_codegen(value)}"]'


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "CLIENT_MANAGED_DEFAULTS",
    "DB_MANAGED_DEFAULTS",
    "SYSTEM_TIMESTAMP_FIELDS",
    "MAX_SAFE_INTEGER",
    "MIN_SAFE_INTEGER",
    "default_function_name",
    "is_client_managed_default",
    "is_db_managed_default",
    "is_known_default_function",
    "default_value_literal",
    "enum_default_reference",
]
