# File: dmmf_ir/field_parser.py
"""
dmmf-ir - Field & Model Parser
================================
Turns guarded raw model nodes into un-enhanced ``ParsedModel`` values.

Per field this module decides, once:

- ``kind``: ``scalar`` / ``enum`` / ``object``; anything else is kept as
  ``unsupported`` so the validator can report it.
- ``is_nullable``: the node's own ``isNullable`` when present, otherwise the
  inverse of ``isRequired``.
- ``is_optional``: ``is_nullable or has_default_value or is_list or
  is_implicit_relation``.  List fields accept an empty list; an implicit
  relation's key lives on the other side.
- ``is_read_only``: ``isReadOnly``, ``@updatedAt``, or an id / system
  timestamp whose default the database computes.

Every list taken from the raw node is copied; nothing in the result aliases
the input.
"""

from __future__ import annotations

import logging
from typing import Any, Collection, FrozenSet, Iterable, List, Mapping, Optional, Set

from dmmf_ir.defaults import SYSTEM_TIMESTAMP_FIELDS, is_db_managed_default
from dmmf_ir.guards import (
    is_function_default_node,
    is_valid_field_node,
    is_valid_model_node,
    safe_stringify,
)
from dmmf_ir.models import (
    DefaultValue,
    FieldKind,
    FunctionDefault,
    ParsedField,
    ParsedModel,
    ParserLogger,
    PrimaryKey,
)
from dmmf_ir.sanitize import sanitize_documentation
from dmmf_ir.utils import deep_copy_value, freeze_sequence

logger: logging.Logger = logging.getLogger("dmmf_ir.field_parser")

_KNOWN_KINDS: FrozenSet[str] = frozenset(k.value for k in FieldKind) - {
    FieldKind.UNSUPPORTED.value
}


# ---------------------------------------------------------------------------
# Field-level helpers
# ---------------------------------------------------------------------------


def _field_kind(raw_kind: str) -> FieldKind:
    if raw_kind in _KNOWN_KINDS:
        return FieldKind(raw_kind)
    return FieldKind.UNSUPPORTED


def _copy_default(
    raw: Any, owner: str, log: ParserLogger, should_freeze: bool
) -> DefaultValue:
    """Copy a raw default into the IR; function defaults become ``FunctionDefault``."""
    if raw is None or isinstance(raw, (bool, int, float, str)):
        return raw
    if isinstance(raw, Mapping):
        if not is_function_default_node(raw):
            log.warning(f"Ignoring malformed default on '{owner}': {safe_stringify(raw)}")
            return None
        func = FunctionDefault(
            name=raw["name"],
            args=freeze_sequence(
                (deep_copy_value(a, should_freeze) for a in raw.get("args") or ()),
                should_freeze,
            ),
        )
        if should_freeze:
            func.freeze()
        return func
    if isinstance(raw, (list, tuple)):
        return deep_copy_value(raw, should_freeze)

    log.warning(f"Ignoring unsupported default on '{owner}': {safe_stringify(raw)}")
    return None


def _copy_names(raw: Any, should_freeze: bool) -> Optional[Any]:
    if raw is None:
        return None
    return freeze_sequence(raw, should_freeze)


def parse_field(
    node: Mapping[str, Any],
    model_name: str,
    log: ParserLogger,
    should_freeze: bool = True,
    composite_key_fields: Collection[str] = (),
) -> ParsedField:
    """Build one ``ParsedField`` from a node that already passed the guard."""
    name: str = node["name"]
    owner: str = f"{model_name}.{name}"
    kind: FieldKind = _field_kind(node["kind"])
    if kind == FieldKind.UNSUPPORTED:
        log.warning(f"Field '{owner}' has unsupported kind '{node['kind']}'.")

    is_required: bool = bool(node.get("isRequired", False))
    is_list: bool = bool(node.get("isList", False))
    is_id: bool = bool(node.get("isId", False))
    is_updated_at: bool = bool(node.get("isUpdatedAt", False))

    raw_nullable: Any = node.get("isNullable")
    is_nullable: bool = raw_nullable if isinstance(raw_nullable, bool) else not is_required

    default: DefaultValue = _copy_default(node.get("default"), owner, log, should_freeze)
    raw_has_default: Any = node.get("hasDefaultValue")
    has_default_value: bool = (
        raw_has_default if isinstance(raw_has_default, bool) else default is not None
    )
    has_db_default: bool = has_default_value and is_db_managed_default(default)

    relation_from_fields = _copy_names(node.get("relationFromFields"), should_freeze)
    relation_to_fields = _copy_names(node.get("relationToFields"), should_freeze)
    is_relation: bool = kind == FieldKind.OBJECT
    is_implicit_relation: bool = is_relation and not relation_from_fields

    is_read_only: bool = (
        bool(node.get("isReadOnly", False))
        or is_updated_at
        or ((is_id or name in SYSTEM_TIMESTAMP_FIELDS) and has_db_default)
    )

    field = ParsedField(
        name=name,
        type=node["type"],
        kind=kind,
        is_id=is_id,
        is_list=is_list,
        is_required=is_required,
        is_unique=bool(node.get("isUnique", False)),
        is_nullable=is_nullable,
        is_optional=(
            is_nullable or has_default_value or is_list or is_implicit_relation
        ),
        is_read_only=is_read_only,
        is_updated_at=is_updated_at,
        has_default_value=has_default_value,
        has_db_default=has_db_default,
        default=default,
        is_part_of_composite_primary_key=name in composite_key_fields,
        is_self_relation=is_relation and node["type"] == model_name,
        relation_name=node.get("relationName") or None,
        relation_from_fields=relation_from_fields,
        relation_to_fields=relation_to_fields,
        documentation=sanitize_documentation(node.get("documentation")),
    )
    if should_freeze:
        field.freeze()
    return field


def parse_fields(
    nodes: Iterable[Any],
    model_name: str,
    log: ParserLogger,
    should_freeze: bool = True,
    composite_key_fields: Collection[str] = (),
) -> List[ParsedField]:
    """Parse a model's field nodes, skipping malformed and duplicate ones."""
    fields: List[ParsedField] = []
    seen: Set[str] = set()
    for node in nodes:
        if not is_valid_field_node(node):
            log.warning(
                f"Skipping invalid field node on model '{model_name}': {safe_stringify(node)}"
            )
            continue
        if node["name"] in seen:
            log.warning(f"Skipping duplicate field '{model_name}.{node['name']}'.")
            continue
        seen.add(node["name"])
        fields.append(
            parse_field(node, model_name, log, should_freeze, composite_key_fields)
        )
    return fields


# ---------------------------------------------------------------------------
# Model-level parsing
# ---------------------------------------------------------------------------


def _parse_primary_key(raw: Any, should_freeze: bool) -> Optional[PrimaryKey]:
    if raw is None or not raw.get("fields"):
        return None
    pk = PrimaryKey(
        name=raw.get("name"),
        fields=freeze_sequence(raw["fields"], should_freeze),
    )
    if should_freeze:
        pk.freeze()
    return pk


def parse_model(
    node: Mapping[str, Any], log: ParserLogger, should_freeze: bool = True
) -> ParsedModel:
    """Build an un-enhanced ``ParsedModel`` from a node that passed the guard."""
    name: str = node["name"]
    primary_key: Optional[PrimaryKey] = _parse_primary_key(
        node.get("primaryKey"), should_freeze
    )
    key_fields: FrozenSet[str] = frozenset(primary_key.fields) if primary_key else frozenset()

    fields: List[ParsedField] = parse_fields(
        node["fields"], name, log, should_freeze, key_fields
    )

    model = ParsedModel(
        name=name,
        name_lower=name.lower(),
        db_name=node.get("dbName") or None,
        documentation=sanitize_documentation(node.get("documentation")),
        fields=freeze_sequence(fields, should_freeze),
        primary_key=primary_key,
        unique_fields=freeze_sequence(
            (freeze_sequence(group, should_freeze) for group in node.get("uniqueFields") or ()),
            should_freeze,
        ),
    )
    if should_freeze:
        model.freeze()
    return model


def parse_models(
    nodes: Iterable[Any], log: ParserLogger, should_freeze: bool = True
) -> List[ParsedModel]:
    """Parse every valid model node; malformed and duplicate models are skipped."""
    models: List[ParsedModel] = []
    names: Set[str] = set()
    for node in nodes:
        if not is_valid_model_node(node):
            log.warning(f"Skipping invalid model node: {safe_stringify(node)}")
            continue
        if node["name"] in names:
            log.warning(f"Skipping duplicate model '{node['name']}'.")
            continue
        names.add(node["name"])
        models.append(parse_model(node, log, should_freeze))

    logger.debug(
        "Parsed %d model(s) with %d field(s).",
        len(models),
        sum(len(m.fields) for m in models),
    )
    return models


__all__: List[str] = [
    "parse_field",
    "parse_fields",
    "parse_model",
    "parse_models",
]
