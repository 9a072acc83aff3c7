# File: dmmf_ir/relations.py
"""
dmmf-ir - Reverse Relation Index
==================================
For every relation field ``A.x -> B`` records an entry on ``B``'s reverse
list, i.e. "who points at B".

Entries are independent copies of the forward field (fresh key lists and a
fresh default), so mutating one view never shows through the other.  Edges
whose target model is missing from the schema are not indexed.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple, Union

from dmmf_ir.models import FieldKind, FunctionDefault, ParsedField, ParsedModel
from dmmf_ir.utils import deep_copy_value, freeze_mapping, freeze_sequence

logger: logging.Logger = logging.getLogger("dmmf_ir.relations")

ReverseRelationMap = Mapping[str, Union[Tuple[ParsedField, ...], List[ParsedField]]]


def relation_edge_key(model_name: str, field: ParsedField) -> str:
    """
    Deduplication key for one relation edge.

    ``source.field.(relationName|implicit).target.from:to``; the key-list
    lengths separate composite-key relations sharing a relation name.
    """
    from_count: int = len(field.relation_from_fields or ())
    to_count: int = len(field.relation_to_fields or ())
    return (
        f"{model_name}.{field.name}.{field.relation_name or 'implicit'}."
        f"{field.type}.{from_count}:{to_count}"
    )


def _copy_default(default: Any, should_freeze: bool) -> Any:
    if isinstance(default, FunctionDefault):
        func = FunctionDefault(
            name=default.name,
            args=freeze_sequence(
                (deep_copy_value(a, should_freeze) for a in default.args), should_freeze
            ),
        )
        return func.freeze() if should_freeze else func
    return deep_copy_value(default, should_freeze)


def _copy_names(names: Optional[Sequence[str]], should_freeze: bool) -> Optional[Any]:
    if names is None:
        return None
    return freeze_sequence(names, should_freeze)


def copy_field(field: ParsedField, should_freeze: bool) -> ParsedField:
    """Return an independent copy of *field* sharing no containers with it."""
    values: Dict[str, Any] = dict(field)
    values.update(
        relation_from_fields=_copy_names(field.relation_from_fields, should_freeze),
        relation_to_fields=_copy_names(field.relation_to_fields, should_freeze),
        default=_copy_default(field.default, should_freeze),
    )
    copied = ParsedField(**values)
    return copied.freeze() if should_freeze else copied


def build_reverse_relation_map(
    models: Iterable[ParsedModel], should_freeze: bool = True
) -> ReverseRelationMap:
    """
    Map every model name to the relation fields of other models targeting it.

    Deduplication is global across the whole schema, keyed by
    ``relation_edge_key``.  Every known model gets an entry, possibly empty.
    """
    model_list: List[ParsedModel] = list(models)
    known: Set[str] = {m.name for m in model_list}
    collected: Dict[str, List[ParsedField]] = {m.name: [] for m in model_list}
    seen: Set[str] = set()

    for model in model_list:
        for field in model.fields:
            if field.kind != FieldKind.OBJECT or field.type not in known:
                continue
            key: str = relation_edge_key(model.name, field)
            if key in seen:
                continue
            seen.add(key)
            collected[field.type].append(copy_field(field, should_freeze))

    logger.debug("Indexed %d reverse relation edge(s).", len(seen))
    return freeze_mapping(
        {name: freeze_sequence(entries, should_freeze) for name, entries in collected.items()},
        should_freeze,
    )


__all__: List[str] = [
    "ReverseRelationMap",
    "relation_edge_key",
    "copy_field",
    "build_reverse_relation_map",
]
