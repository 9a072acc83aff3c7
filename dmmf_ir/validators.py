# File: dmmf_ir/validators.py
"""
dmmf-ir - Schema Validators
=============================
A **pure-function validation pipeline** over an enhanced ``ParsedSchema``.

Structural checks already happened in the guards; this module adds
cross-entity semantic checks: self-relation feasibility, circular insertion
dependencies, generated-name collisions, key consistency, relation and enum
references.

Every check runs unconditionally and returns its own ``ValidationResult``;
``validate_schema`` merges them, so callers always get the complete set of
diagnostics in one pass.

Usage:
    from dmmf_ir.validators import validate_schema
    result = validate_schema(schema)
    if not result.is_valid:
        print(result.format_report())
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from typing import Any, Callable, Dict, Iterator, List, Optional, Set, Tuple

from dmmf_ir.defaults import default_function_name, is_known_default_function
from dmmf_ir.models import FieldKind, ParsedField, ParsedModel, ParsedSchema
from dmmf_ir.utils import model_to_route_segment, to_camel_case, to_snake_case

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("dmmf_ir.validators")

# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------

_LEVEL_PREFIXES: Dict[str, str] = {
    "error": "ERROR",
    "warning": "WARNING",
    "info": "INFO",
}


class ValidationIssue:
    """Lightweight diagnostic descriptor (no Pydantic overhead)."""

    __slots__ = ("level", "code", "message", "context")

    def __init__(
        self,
        level: str,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.level: str = level  # "error" | "warning" | "info"
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    @property
    def is_info(self) -> bool:
        return self.level == "info"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


class ValidationResult:
    """
    Accumulates ``ValidationIssue`` instances produced by the pipeline.

    ``errors``, ``warnings`` and ``infos`` expose plain message strings;
    ``issues`` keeps the structured items with their codes and context.
    """

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[ValidationIssue] = []

    # -- Mutation -----------------------------------------------------------

    def add_error(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationIssue("error", code, message, context))

    def add_warning(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationIssue("warning", code, message, context))

    def add_info(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationIssue("info", code, message, context))

    def merge(self, other: "ValidationResult") -> None:
        """Append every item of *other*, preserving order."""
        self._items.extend(other._items)

    # -- Query --------------------------------------------------------------

    @property
    def issues(self) -> List[ValidationIssue]:
        return list(self._items)

    @property
    def errors(self) -> List[str]:
        return [i.message for i in self._items if i.is_error]

    @property
    def warnings(self) -> List[str]:
        return [i.message for i in self._items if i.is_warning]

    @property
    def infos(self) -> List[str]:
        return [i.message for i in self._items if i.is_info]

    @property
    def all(self) -> List[str]:
        """Every message, prefixed with its level."""
        return [f"{_LEVEL_PREFIXES[i.level]}: {i.message}" for i in self._items]

    @property
    def first_error(self) -> Optional[ValidationIssue]:
        return next((i for i in self._items if i.is_error), None)

    def by_code(self, code: str) -> List[ValidationIssue]:
        return [i for i in self._items if i.code == code]

    @property
    def has_errors(self) -> bool:
        return any(i.is_error for i in self._items)

    @property
    def has_warnings(self) -> bool:
        return any(i.is_warning for i in self._items)

    @property
    def error_count(self) -> int:
        return sum(1 for i in self._items if i.is_error)

    @property
    def warning_count(self) -> int:
        return sum(1 for i in self._items if i.is_warning)

    @property
    def info_count(self) -> int:
        return sum(1 for i in self._items if i.is_info)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    def summary(self) -> str:
        return (
            f"Validation: {self.error_count} error(s), "
            f"{self.warning_count} warning(s), "
            f"{self.info_count} info(s)."
        )

    def to_dict(self) -> Dict[str, List[str]]:
        return {"errors": self.errors, "warnings": self.warnings, "infos": self.infos}

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        """Truthy when there are NO errors (i.e. valid)."""
        return self.is_valid

    def __len__(self) -> int:
        return len(self._items)

    def format_report(self, include_info: bool = False) -> str:
        """Human-readable multi-line report."""
        lines: List[str] = [self.summary(), ""]
        for item in self._items:
            if not include_info and item.is_info:
                continue
            lines.append(f"  {_LEVEL_PREFIXES[item.level]} [{item.code}] {item.message}")
            if item.context:
                for k, v in item.context.items():
                    lines.append(f"       {k}: {v}")
        return "\n".join(lines)


class SchemaValidationError(ValueError):
    """Raised by ``parse_dmmf(..., throw_on_error=True)`` when errors were found."""

    def __init__(self, result: ValidationResult) -> None:
        self.result: ValidationResult = result
        self.first_error: Optional[ValidationIssue] = result.first_error
        detail: str = self.first_error.message if self.first_error else "unknown error"
        super().__init__(
            f"Schema validation failed with {result.error_count} error(s); first: {detail}"
        )


# ---------------------------------------------------------------------------
# Individual validation functions (each is linear in fields or models)
# ---------------------------------------------------------------------------


def validate_self_relations(schema: ParsedSchema) -> ValidationResult:
    """
    Report self-relations; required ones that own the key are errors.

    A required, non-nullable self-relation holding the foreign key means the
    first row would have to reference a row that cannot exist yet.
    """
    result: ValidationResult = ValidationResult()

    for model in schema.models:
        for field in model.fields:
            if not field.is_self_relation:
                continue
            ref: str = f"{model.name}.{field.name}"
            ctx: Dict[str, Any] = {"model": model.name, "field": field.name}
            result.add_info(
                "SELF_RELATION",
                f"Model '{model.name}' has self-relation '{ref}'.",
                ctx,
            )
            if field.blocks_insertion:
                result.add_error(
                    "REQUIRED_SELF_RELATION",
                    f"Self-relation '{ref}' is required and owns its foreign key, "
                    f"so the first '{model.name}' row can never be inserted. "
                    f"Make it optional or add a default to allow a two-step insert.",
                    ctx,
                )

    return result


def _blocking_edges(schema: ParsedSchema) -> Dict[str, List[str]]:
    """Adjacency list of insertion-blocking edges, in field order."""
    adjacency: Dict[str, List[str]] = defaultdict(list)
    for model in schema.models:
        for field in model.fields:
            if (
                field.blocks_insertion
                and field.type != model.name
                and schema.get_model(field.type) is not None
                and field.type not in adjacency[model.name]
            ):
                adjacency[model.name].append(field.type)
    return adjacency


def _cycle_forms(ring: List[str]) -> Iterator[str]:
    """Every rotation of *ring* in both directions, rendered ``A -> B -> A``."""
    for direction in (ring, ring[::-1]):
        for i in range(len(direction)):
            rotated: List[str] = direction[i:] + direction[:i]
            yield " -> ".join(rotated + rotated[:1])


def validate_circular_dependencies(schema: ParsedSchema) -> ValidationResult:
    """
    Detect cycles of insertion-blocking relations with iterative DFS.

    The on-stack set holds model names only.  A detected cycle is the path
    sliced from the first occurrence of the repeated model, kept in
    traversal order; a cycle already reported in either direction is
    skipped.  Self-edges are left to ``validate_self_relations``.

    Models are visited once across all starts, so at most one cycle is
    reported per back edge: a shorter cycle through models already walked
    as part of a longer one is not reported separately.
    """
    result: ValidationResult = ValidationResult()
    adjacency: Dict[str, List[str]] = _blocking_edges(schema)

    visited: Set[str] = set()
    reported: Set[str] = set()
    cycles: List[List[str]] = []

    for start in schema.model_names:
        if start in visited:
            continue

        path: List[str] = [start]
        on_stack: Set[str] = {start}
        visited.add(start)
        pending: List[Iterator[str]] = [iter(adjacency.get(start, ()))]

        while pending:
            neighbour: Optional[str] = next(pending[-1], None)
            if neighbour is None:
                pending.pop()
                on_stack.discard(path.pop())
                continue

            if neighbour in on_stack:
                cycle: List[str] = path[path.index(neighbour):] + [neighbour]
                rendered: str = " -> ".join(cycle)
                if rendered not in reported:
                    reported.update(_cycle_forms(cycle[:-1]))
                    cycles.append(cycle)
                continue

            if neighbour in visited:
                continue

            visited.add(neighbour)
            on_stack.add(neighbour)
            path.append(neighbour)
            pending.append(iter(adjacency.get(neighbour, ())))

    for cycle in cycles:
        cycle_str: str = " -> ".join(cycle)
        result.add_error(
            "CIRCULAR_RELATION",
            f"Circular relationship detected: {cycle_str}. "
            f"Make at least one relation in the cycle optional so rows can be inserted.",
            {"cycle": cycle},
        )

    if not cycles:
        logger.debug("No circular insertion dependencies detected.")

    return result


_MODEL_NAME_FORMS: Tuple[Tuple[str, Callable[[str], str]], ...] = (
    ("lower-case", str.lower),
    ("snake_case", to_snake_case),
    ("route", model_to_route_segment),
)

_FIELD_NAME_FORMS: Tuple[Tuple[str, Callable[[str], str]], ...] = (
    ("camelCase", to_camel_case),
    ("snake_case", to_snake_case),
)


def _collisions(
    names: List[str], forms: Tuple[Tuple[str, Callable[[str], str]], ...]
) -> List[Tuple[str, str, str, str]]:
    """``(first, second, form label, derived name)`` once per colliding pair."""
    found: List[Tuple[str, str, str, str]] = []
    pairs: Set[Tuple[str, str]] = set()
    for label, transform in forms:
        owners: Dict[str, str] = {}
        for name in names:
            derived: str = transform(name)
            first: Optional[str] = owners.get(derived)
            if first is None:
                owners[derived] = name
                continue
            if first != name and (first, name) not in pairs:
                pairs.add((first, name))
                found.append((first, name, label, derived))
    return found


def validate_naming_collisions(schema: ParsedSchema) -> ValidationResult:
    """
    Warn when distinct names map to the same generated identifier.

    Models are compared by lower-case name, snake_case name and route
    segment; enums share the type namespace with models; fields of one model
    are compared by camelCase and snake_case name.
    """
    result: ValidationResult = ValidationResult()

    for first, second, label, derived in _collisions(schema.model_names, _MODEL_NAME_FORMS):
        result.add_warning(
            "MODEL_NAME_COLLISION",
            f"Models '{first}' and '{second}' both map to {label} identifier '{derived}'.",
            {"models": [first, second], "form": label},
        )

    model_lower: Dict[str, str] = {m.name_lower: m.name for m in schema.models}
    for enum in schema.enums:
        model_name: Optional[str] = model_lower.get(enum.name.lower())
        if model_name is not None:
            result.add_warning(
                "ENUM_MODEL_NAME_COLLISION",
                f"Enum '{enum.name}' and model '{model_name}' map to the same type name.",
                {"enum": enum.name, "model": model_name},
            )

    for model in schema.models:
        for first, second, label, derived in _collisions(model.field_names, _FIELD_NAME_FORMS):
            result.add_warning(
                "FIELD_NAME_COLLISION",
                f"Fields '{model.name}.{first}' and '{model.name}.{second}' "
                f"both map to {label} identifier '{derived}'.",
                {"model": model.name, "fields": [first, second], "form": label},
            )

    return result


def _check_key_names(
    result: ValidationResult,
    model: ParsedModel,
    names: List[str],
    what: str,
    code: str,
) -> None:
    for name in names:
        if model.get_field(name) is None:
            result.add_error(
                code,
                f"Model '{model.name}' {what} references non-existent field '{name}'.",
                {"model": model.name, "field": name},
            )
    for name, count in Counter(names).items():
        if count > 1:
            result.add_warning(
                "DUPLICATE_KEY_FIELD",
                f"Model '{model.name}' {what} lists field '{name}' {count} times.",
                {"model": model.name, "field": name},
            )


def validate_keys(schema: ParsedSchema) -> ValidationResult:
    """
    Check primary keys and unique constraints against each model's fields.

    An empty primary-key name was already normalized to None by the model,
    so only the field lists are checked here.
    """
    result: ValidationResult = ValidationResult()

    for model in schema.models:
        id_fields: List[str] = [f.name for f in model.fields if f.is_id]
        ctx: Dict[str, Any] = {"model": model.name}

        if not id_fields and not model.has_composite_primary_key:
            result.add_error(
                "MISSING_PRIMARY_KEY",
                f"Model '{model.name}' has no @id field or @@id composite key.",
                ctx,
            )
        if len(id_fields) > 1:
            result.add_warning(
                "MULTIPLE_ID_FIELDS",
                f"Model '{model.name}' marks {len(id_fields)} fields as @id: "
                f"{', '.join(id_fields)}.",
                ctx,
            )
        if model.primary_key is not None:
            _check_key_names(
                result, model, list(model.primary_key.fields),
                "primary key", "PK_FIELD_NOT_FOUND",
            )

        for group in model.unique_fields:
            if not group:
                result.add_warning(
                    "EMPTY_UNIQUE_CONSTRAINT",
                    f"Model '{model.name}' declares an empty unique constraint.",
                    ctx,
                )
                continue
            _check_key_names(
                result, model, list(group),
                "unique constraint", "UNIQUE_FIELD_NOT_FOUND",
            )

    return result


def validate_relations(schema: ParsedSchema) -> ValidationResult:
    """Relation targets exist and relation key lists line up."""
    result: ValidationResult = ValidationResult()

    for model in schema.models:
        for field in model.fields:
            if field.kind != FieldKind.OBJECT:
                continue
            ref: str = f"{model.name}.{field.name}"
            ctx: Dict[str, Any] = {"model": model.name, "field": field.name}

            target: Optional[ParsedModel] = schema.get_model(field.type)
            if target is None:
                result.add_error(
                    "UNKNOWN_RELATION_TARGET",
                    f"Relation '{ref}' references unknown model '{field.type}'.",
                    ctx,
                )

            from_fields: List[str] = list(field.relation_from_fields or ())
            to_fields: List[str] = list(field.relation_to_fields or ())
            if from_fields and not to_fields:
                result.add_error(
                    "MISSING_RELATION_TO_FIELDS",
                    f"Relation '{ref}' has relationFromFields but missing relationToFields.",
                    ctx,
                )
            elif to_fields and len(from_fields) != len(to_fields):
                result.add_error(
                    "RELATION_FIELD_COUNT_MISMATCH",
                    f"Relation '{ref}' has mismatched field counts: "
                    f"{len(from_fields)} local vs {len(to_fields)} referenced.",
                    ctx,
                )

            for name in from_fields:
                if model.get_field(name) is None:
                    result.add_error(
                        "RELATION_FIELD_NOT_FOUND",
                        f"Relation '{ref}' uses non-existent local field '{name}'.",
                        {**ctx, "missing": name},
                    )
            if target is not None:
                for name in to_fields:
                    if target.get_field(name) is None:
                        result.add_error(
                            "RELATION_FIELD_NOT_FOUND",
                            f"Relation '{ref}' references non-existent field "
                            f"'{target.name}.{name}'.",
                            {**ctx, "missing": name},
                        )

    return result


def validate_enums(schema: ParsedSchema) -> ValidationResult:
    """Enums are non-empty, enum fields resolve, enum defaults are members."""
    result: ValidationResult = ValidationResult()

    for enum in schema.enums:
        if not enum.values:
            result.add_error(
                "EMPTY_ENUM",
                f"Enum '{enum.name}' has no values.",
                {"enum": enum.name},
            )

    for model in schema.models:
        for field in model.fields:
            if field.kind != FieldKind.ENUM:
                continue
            ref: str = f"{model.name}.{field.name}"
            enum = schema.get_enum(field.type)
            if enum is None:
                result.add_error(
                    "UNKNOWN_ENUM",
                    f"Field '{ref}' references unknown enum '{field.type}'.",
                    {"model": model.name, "field": field.name, "enum": field.type},
                )
                continue
            if isinstance(field.default, str) and field.default not in enum.values:
                result.add_warning(
                    "INVALID_ENUM_DEFAULT",
                    f"Field '{ref}' defaults to '{field.default}', "
                    f"which is not a value of enum '{enum.name}'.",
                    {"model": model.name, "field": field.name, "enum": enum.name},
                )

    return result


def validate_field_kinds(schema: ParsedSchema) -> ValidationResult:
    result: ValidationResult = ValidationResult()
    for model in schema.models:
        for field in model.fields:
            if field.kind == FieldKind.UNSUPPORTED:
                result.add_warning(
                    "UNSUPPORTED_FIELD_KIND",
                    f"Field '{model.name}.{field.name}' has an unsupported kind and "
                    f"is left out of scalar, read and write views.",
                    {"model": model.name, "field": field.name, "type": field.type},
                )
    return result


def validate_default_functions(schema: ParsedSchema) -> ValidationResult:
    """Note default functions this package does not recognize."""
    result: ValidationResult = ValidationResult()
    for model in schema.models:
        for field in model.fields:
            name: Optional[str] = default_function_name(field.default)
            if name is None or is_known_default_function(name):
                continue
            result.add_info(
                "UNKNOWN_DEFAULT_FUNCTION",
                f"Field '{model.name}.{field.name}' uses unrecognized default "
                f"function '{name}()'; treating it as database-managed.",
                {"model": model.name, "field": field.name, "function": name},
            )
    return result


# ---------------------------------------------------------------------------
# Composite validation orchestrator
# ---------------------------------------------------------------------------

# Type alias for a validation function
ValidatorFn = Callable[[ParsedSchema], ValidationResult]

SCHEMA_VALIDATORS: Tuple[ValidatorFn, ...] = (
    validate_self_relations,
    validate_circular_dependencies,
    validate_naming_collisions,
    validate_keys,
    validate_relations,
    validate_enums,
    validate_field_kinds,
    validate_default_functions,
)


def validate_schema(schema: ParsedSchema) -> ValidationResult:
    """
    Run every schema-level validator and return the merged result.

    Never stops early: a failing check does not prevent later ones.
    """
    result: ValidationResult = ValidationResult()

    for validator_fn in SCHEMA_VALIDATORS:
        logger.debug("Running validator: %s", validator_fn.__name__)
        result.merge(validator_fn(schema))

    logger.info("Schema validation complete: %s", result.summary())
    return result


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ValidationIssue",
    "ValidationResult",
    "SchemaValidationError",
    "validate_self_relations",
    "validate_circular_dependencies",
    "validate_naming_collisions",
    "validate_keys",
    "validate_relations",
    "validate_enums",
    "validate_field_kinds",
    "validate_default_functions",
    "SCHEMA_VALIDATORS",
    "validate_schema",
]

logger.debug("dmmf_ir.validators loaded - %d public symbols.", len(__all__))
