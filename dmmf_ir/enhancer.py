# File: dmmf_ir/enhancer.py
"""
dmmf-ir - Model Enhancer
==========================
Partitions each parsed model's fields into the views generators consume:

- ``scalar_fields``: scalar and enum fields (``unsupported`` is left out)
- ``relation_fields``: object fields
- ``create_fields`` / ``update_fields``: scalar fields passing
  ``is_included_in_write_payload``
- ``read_fields``: all scalar fields
- ``reverse_relations``: this model's entry in the reverse relation index

``is_junction_table`` is decided first, from field counts alone, so analysis
passes can skip junction tables before doing any per-relation work.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from dmmf_ir.defaults import SYSTEM_TIMESTAMP_FIELDS
from dmmf_ir.models import FieldKind, ParsedField, ParsedModel
from dmmf_ir.relations import ReverseRelationMap
from dmmf_ir.utils import freeze_sequence

logger: logging.Logger = logging.getLogger("dmmf_ir.enhancer")

JUNCTION_MIN_RELATIONS: int = 2
JUNCTION_MAX_SCALARS: int = 2
JUNCTION_MAX_FIELDS: int = 4


def is_junction_table(fields: Sequence[ParsedField]) -> bool:
    """At least two relations, at most two scalars, at most four fields."""
    if len(fields) > JUNCTION_MAX_FIELDS:
        return False
    relations: int = sum(1 for f in fields if f.kind == FieldKind.OBJECT)
    scalars: int = len(fields) - relations
    return relations >= JUNCTION_MIN_RELATIONS and scalars <= JUNCTION_MAX_SCALARS


def is_included_in_write_payload(field: ParsedField) -> bool:
    """
    Inclusion rule shared by create and update payloads.

    Excludes ids, read-only fields, ``@updatedAt`` fields and system
    timestamps whose default the database computes.  ``createdAt`` with a
    ``now()`` default stays in: the client may supply its own value.
    """
    if field.kind not in (FieldKind.SCALAR, FieldKind.ENUM):
        return False
    is_db_managed_timestamp: bool = (
        field.has_db_default and field.name in SYSTEM_TIMESTAMP_FIELDS
    )
    return not (
        field.is_id
        or field.is_read_only
        or field.is_updated_at
        or is_db_managed_timestamp
    )


def enhance_model(
    model: ParsedModel,
    reverse_map: ReverseRelationMap,
    should_freeze: bool = True,
) -> ParsedModel:
    """Return a new ``ParsedModel`` carrying every derived view."""
    junction: bool = is_junction_table(model.fields)

    scalar_fields: List[ParsedField] = []
    relation_fields: List[ParsedField] = []
    write_fields: List[ParsedField] = []
    id_field: Optional[ParsedField] = None
    has_self_relation: bool = False

    for field in model.fields:
        if field.is_id and id_field is None:
            id_field = field
        if field.is_self_relation:
            has_self_relation = True

        if field.kind == FieldKind.OBJECT:
            relation_fields.append(field)
            continue
        if field.kind == FieldKind.UNSUPPORTED:
            continue

        scalar_fields.append(field)
        if is_included_in_write_payload(field):
            write_fields.append(field)

    values: Dict[str, Any] = dict(model)
    values.update(
        fields=freeze_sequence(model.fields, should_freeze),
        unique_fields=freeze_sequence(
            (freeze_sequence(g, should_freeze) for g in model.unique_fields),
            should_freeze,
        ),
        scalar_fields=freeze_sequence(scalar_fields, should_freeze),
        relation_fields=freeze_sequence(relation_fields, should_freeze),
        create_fields=freeze_sequence(write_fields, should_freeze),
        update_fields=freeze_sequence(write_fields, should_freeze),
        read_fields=freeze_sequence(scalar_fields, should_freeze),
        reverse_relations=freeze_sequence(reverse_map.get(model.name, ()), should_freeze),
        id_field=id_field,
        has_self_relation=has_self_relation,
        is_junction_table=junction,
    )
    enhanced = ParsedModel(**values)
    if should_freeze:
        enhanced.freeze()

    logger.debug(
        "Enhanced %s: %d scalar, %d relation, %d writable%s.",
        model.name,
        len(scalar_fields),
        len(relation_fields),
        len(write_fields),
        " (junction)" if junction else "",
    )
    return enhanced


__all__: List[str] = [
    "JUNCTION_MIN_RELATIONS",
    "JUNCTION_MAX_SCALARS",
    "JUNCTION_MAX_FIELDS",
    "is_junction_table",
    "is_included_in_write_payload",
    "enhance_model",
]
