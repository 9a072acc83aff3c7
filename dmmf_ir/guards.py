# File: dmmf_ir/guards.py
"""
dmmf-ir - Raw Node Type Guards
================================
Named predicates for every raw node shape the parser reads.

Each guard returns a plain ``bool`` and never raises, so callers can filter
with them and log the rejects.  No parser module touches a raw node field
before the matching guard has accepted the node.
"""

from __future__ import annotations

import json
from typing import Any, List, Mapping, Optional

MAX_NODE_PREVIEW: int = 200

_FIELD_BOOL_KEYS = (
    "isRequired",
    "isList",
    "isId",
    "isUnique",
    "isReadOnly",
    "isUpdatedAt",
    "hasDefaultValue",
    "isNullable",
)


def safe_stringify(node: Any, limit: int = MAX_NODE_PREVIEW) -> str:
    """
    Serialize *node* for a log message, capped at *limit* characters.

    Falls back to ``repr`` for values JSON cannot encode.
    """
    try:
        text: str = json.dumps(node, default=repr, sort_keys=True)
    except (TypeError, ValueError):
        text = repr(node)
    if len(text) > limit:
        return text[:limit] + f"... ({len(text) - limit} more chars)"
    return text


def is_string_list(value: Any) -> bool:
    """True for a list/tuple whose items are all strings."""
    return isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value)


def _is_optional_bool(node: Mapping[str, Any], key: str) -> bool:
    value: Any = node.get(key)
    return value is None or isinstance(value, bool)


def _is_optional_str(node: Mapping[str, Any], key: str) -> bool:
    value: Any = node.get(key)
    return value is None or isinstance(value, str)


def datamodel_of(document: Any) -> Optional[Mapping[str, Any]]:
    """
    Return the mapping holding ``models``/``enums``.

    Accepts both the bare ``{models, enums}`` form and a full DMMF document
    with a ``datamodel`` section.
    """
    if not isinstance(document, Mapping):
        return None
    inner: Any = document.get("datamodel")
    if isinstance(inner, Mapping):
        return inner
    return document


def is_valid_document(document: Any) -> bool:
    return isinstance(document, Mapping)


def is_valid_enum_value_node(node: Any) -> bool:
    return isinstance(node, Mapping) and isinstance(node.get("name"), str) and bool(node["name"])


def is_valid_enum_node(node: Any) -> bool:
    """An enum needs a string ``name`` and a list of ``{name: str}`` values."""
    if not isinstance(node, Mapping):
        return False
    name: Any = node.get("name")
    values: Any = node.get("values")
    if not isinstance(name, str) or not name:
        return False
    if not isinstance(values, (list, tuple)):
        return False
    return all(is_valid_enum_value_node(v) for v in values) and _is_optional_str(
        node, "documentation"
    )


def is_valid_primary_key_node(node: Any) -> bool:
    """``primaryKey`` may be absent/None or ``{name?: str, fields: [str]}``."""
    if node is None:
        return True
    if not isinstance(node, Mapping):
        return False
    return _is_optional_str(node, "name") and is_string_list(node.get("fields"))


def is_valid_unique_fields_node(node: Any) -> bool:
    """``uniqueFields`` may be absent/None or a list of string lists."""
    if node is None:
        return True
    return isinstance(node, (list, tuple)) and all(is_string_list(group) for group in node)


def is_valid_model_node(node: Any) -> bool:
    """A model needs a string ``name``, a ``fields`` list and well-formed keys."""
    if not isinstance(node, Mapping):
        return False
    name: Any = node.get("name")
    if not isinstance(name, str) or not name:
        return False
    if not isinstance(node.get("fields"), (list, tuple)):
        return False
    return (
        is_valid_primary_key_node(node.get("primaryKey"))
        and is_valid_unique_fields_node(node.get("uniqueFields"))
        and _is_optional_str(node, "dbName")
        and _is_optional_str(node, "documentation")
    )


def is_valid_field_node(node: Any) -> bool:
    """
    A field needs string ``name``, ``type`` and ``kind``.

    Optional flags must be booleans when present; relation key lists must be
    string lists when present.
    """
    if not isinstance(node, Mapping):
        return False
    for key in ("name", "type", "kind"):
        value: Any = node.get(key)
        if not isinstance(value, str) or not value:
            return False
    if not all(_is_optional_bool(node, key) for key in _FIELD_BOOL_KEYS):
        return False
    for key in ("relationFromFields", "relationToFields"):
        value = node.get(key)
        if value is not None and not is_string_list(value):
            return False
    return _is_optional_str(node, "relationName") and _is_optional_str(
        node, "documentation"
    )


def is_function_default_node(node: Any) -> bool:
    """``{name: str, args?: list}`` default, e.g. ``autoincrement()``."""
    if not isinstance(node, Mapping):
        return False
    name: Any = node.get("name")
    args: Any = node.get("args")
    return (
        isinstance(name, str)
        and bool(name)
        and (args is None or isinstance(args, (list, tuple)))
    )


__all__: List[str] = [
    "MAX_NODE_PREVIEW",
    "safe_stringify",
    "is_string_list",
    "datamodel_of",
    "is_valid_document",
    "is_valid_enum_value_node",
    "is_valid_enum_node",
    "is_valid_primary_key_node",
    "is_valid_unique_fields_node",
    "is_valid_model_node",
    "is_valid_field_node",
    "is_function_default_node",
]
