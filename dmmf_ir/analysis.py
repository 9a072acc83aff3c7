# File: dmmf_ir/analysis.py
"""
dmmf-ir - Relationship Analysis
=================================
Classifies each relation of an enhanced schema as one-to-one, one-to-many,
many-to-one or many-to-many.

Junction tables are filtered out by their precomputed ``is_junction_table``
flag before any relation is classified.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple, Union

from pydantic import Field, computed_field

from dmmf_ir.models import (
    FieldKind,
    FreezableModel,
    ParsedField,
    ParsedModel,
    ParsedSchema,
    RelationshipType,
    StrSeq,
)
from dmmf_ir.utils import freeze_sequence

logger: logging.Logger = logging.getLogger("dmmf_ir.analysis")


class RelationshipInfo(FreezableModel):
    """One classified relation, seen from the model declaring the field."""

    model: str = Field(..., description="Model declaring the relation field.")
    field: str = Field(..., description="Relation field name.")
    target: str = Field(..., description="Target model name.")
    relationship_type: RelationshipType = Field(..., description="Cardinality.")
    back_reference: Optional[str] = Field(
        default=None, description="Opposite field on the target, if any."
    )
    should_auto_include: bool = Field(
        default=False, description="Many-to-one relations loaded with the owner."
    )

    @computed_field  # type: ignore[misc]
    @property
    def is_bidirectional(self) -> bool:
        return self.back_reference is not None


class ModelAnalysis(FreezableModel):
    """Relationship summary for one model."""

    model: str = Field(..., description="Model name.")
    is_junction_table: bool = Field(default=False)
    relationships: Union[Tuple[RelationshipInfo, ...], List[RelationshipInfo]] = Field(
        default_factory=list
    )
    skipped_relations: StrSeq = Field(
        default_factory=list, description="Relations whose target model is missing."
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def find_back_reference(
    field: ParsedField, source: ParsedModel, target: ParsedModel
) -> Optional[ParsedField]:
    """
    Opposite side of *field*: a relation on *target* pointing at *source*
    with the same relation name.  For self-relations the field itself is
    never its own back reference.
    """
    for candidate in target.relation_fields:
        if candidate.type != source.name:
            continue
        if source.name == target.name and candidate.name == field.name:
            continue
        if candidate.relation_name == field.relation_name:
            return candidate
    return None


def are_fields_unique(model: ParsedModel, names: Sequence[str]) -> bool:
    """True when *names* form a single-field or composite unique key."""
    wanted: List[str] = sorted(names)
    if len(wanted) == 1:
        field: Optional[ParsedField] = model.get_field(wanted[0])
        if field is not None and (field.is_unique or field.is_id):
            return True
    if model.primary_key is not None and sorted(model.primary_key.fields) == wanted:
        return True
    return any(sorted(group) == wanted for group in model.unique_fields)


def classify_relation(
    field: ParsedField,
    source: ParsedModel,
    target: ParsedModel,
    back_reference: Optional[ParsedField],
) -> RelationshipType:
    """
    Cardinality of *field*.

    With a back reference both sides' list flags decide.  Without one: an
    owned unique key is one-to-one, an owned key is many-to-one, a list is
    one-to-many (many-to-many when the target is a junction table), and a
    bare single relation is one-to-one.
    """
    if back_reference is not None:
        if field.is_list and back_reference.is_list:
            return RelationshipType.MANY_TO_MANY
        if field.is_list:
            return RelationshipType.ONE_TO_MANY
        if back_reference.is_list:
            return RelationshipType.MANY_TO_ONE
        return RelationshipType.ONE_TO_ONE

    if field.relation_from_fields:
        if are_fields_unique(source, field.relation_from_fields):
            return RelationshipType.ONE_TO_ONE
        return RelationshipType.MANY_TO_ONE
    if field.is_list:
        if target.is_junction_table:
            return RelationshipType.MANY_TO_MANY
        return RelationshipType.ONE_TO_MANY
    return RelationshipType.ONE_TO_ONE


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def analyze_model(
    model: ParsedModel, schema: ParsedSchema, should_freeze: bool = True
) -> ModelAnalysis:
    """Classify every relation of *model*; junction tables are not classified."""
    if model.is_junction_table:
        analysis = ModelAnalysis(model=model.name, is_junction_table=True)
        return analysis.freeze() if should_freeze else analysis

    relationships: List[RelationshipInfo] = []
    skipped: List[str] = []
    for field in model.fields:
        if field.kind != FieldKind.OBJECT:
            continue
        target: Optional[ParsedModel] = schema.get_model(field.type)
        if target is None:
            skipped.append(field.name)
            continue
        back: Optional[ParsedField] = find_back_reference(field, model, target)
        kind: RelationshipType = classify_relation(field, model, target, back)
        info = RelationshipInfo(
            model=model.name,
            field=field.name,
            target=target.name,
            relationship_type=kind,
            back_reference=back.name if back is not None else None,
            should_auto_include=kind == RelationshipType.MANY_TO_ONE,
        )
        relationships.append(info.freeze() if should_freeze else info)

    analysis = ModelAnalysis(
        model=model.name,
        relationships=freeze_sequence(relationships, should_freeze),
        skipped_relations=freeze_sequence(skipped, should_freeze),
    )
    return analysis.freeze() if should_freeze else analysis


def analyze_schema(
    schema: ParsedSchema, should_freeze: bool = True
) -> Dict[str, ModelAnalysis]:
    """Analysis for every model, keyed by model name, in schema order."""
    results: Dict[str, ModelAnalysis] = {}
    junctions: int = 0
    for model in schema.models:
        if model.is_junction_table:
            junctions += 1
        results[model.name] = analyze_model(model, schema, should_freeze)

    logger.debug(
        "Analyzed %d model(s), skipped %d junction table(s).",
        len(results),
        junctions,
    )
    return results


__all__: List[str] = [
    "RelationshipInfo",
    "ModelAnalysis",
    "find_back_reference",
    "are_fields_unique",
    "classify_relation",
    "analyze_model",
    "analyze_schema",
]
