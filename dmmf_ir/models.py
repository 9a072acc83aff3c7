# File: dmmf_ir/models.py
"""
dmmf-ir - Core Data Models
============================
Pydantic V2 models for the intermediate representation (IR) produced from a
DMMF-like schema document, plus the per-call ``ParseOptions``.

These models form the single source of truth handed to downstream code
generators: Raw document → Guards → Field/Enum parsing → Reverse relations →
Model enhancement → Validation.

Immutability: every IR class derives from ``FreezableModel``.  Once
``freeze()`` has been called on an instance, assigning or deleting any
attribute raises ``FrozenInstanceError``.  Collections reachable from a
frozen IR are tuples and read-only mapping proxies; with ``freeze=False``
they are plain lists and dicts owned by the result.
"""

from __future__ import annotations

import logging
from enum import Enum
from types import MappingProxyType
from typing import (
    Any,
    Dict,
    List,
    Mapping,
    Optional,
    Protocol,
    Tuple,
    Union,
    runtime_checkable,
)

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    computed_field,
    field_validator,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("dmmf_ir.models")

# ---------------------------------------------------------------------------
# Enums: fixed sets used across the entire project
# ---------------------------------------------------------------------------


class FieldKind(str, Enum):
    """Kinds of field a DMMF model can declare."""

    SCALAR = "scalar"
    ENUM = "enum"
    OBJECT = "object"
    UNSUPPORTED = "unsupported"


class RelationshipType(str, Enum):
    """Relation cardinalities as seen from the owning model."""

    ONE_TO_ONE = "one_to_one"
    ONE_TO_MANY = "one_to_many"
    MANY_TO_ONE = "many_to_one"
    MANY_TO_MANY = "many_to_many"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class FrozenInstanceError(AttributeError):
    """Raised when code tries to mutate a frozen IR object."""


# ---------------------------------------------------------------------------
# Type aliases: tuple when frozen, list when freezing is disabled
# ---------------------------------------------------------------------------

StrSeq = Union[Tuple[str, ...], List[str]]
StrSeqSeq = Union[Tuple[Tuple[str, ...], ...], List[List[str]]]
AnySeq = Union[Tuple[Any, ...], List[Any]]

# ---------------------------------------------------------------------------
# Mixin: shared model configuration
# ---------------------------------------------------------------------------

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    use_enum_values=True,
    frozen=False,
    extra="forbid",
)


class FreezableModel(BaseModel):
    """
    Base class with a per-instance freeze switch.

    Pydantic's own ``frozen`` setting is class-wide; the parser needs to
    decide per call (``ParseOptions.freeze``), so the flag lives in a private
    attribute instead.
    """

    model_config = _SHARED_CONFIG

    _frozen: bool = PrivateAttr(default=False)

    @property
    def is_frozen(self) -> bool:
        private: Optional[Dict[str, Any]] = getattr(self, "__pydantic_private__", None)
        return bool(private and private.get("_frozen", False))

    def freeze(self) -> "FreezableModel":
        """Freeze this instance in place and return it."""
        if not self.is_frozen:
            self._frozen = True
        return self

    def __setattr__(self, name: str, value: Any) -> None:
        if self.is_frozen:
            raise FrozenInstanceError(
                f"Cannot assign '{name}' on frozen {type(self).__name__}."
            )
        super().__setattr__(name, value)

    def __delattr__(self, name: str) -> None:
        if self.is_frozen:
            raise FrozenInstanceError(
                f"Cannot delete '{name}' on frozen {type(self).__name__}."
            )
        super().__delattr__(name)


# ---------------------------------------------------------------------------
# Field-level primitives
# ---------------------------------------------------------------------------


class FunctionDefault(FreezableModel):
    """A function-call default such as ``autoincrement()`` or ``now()``."""

    name: str = Field(..., min_length=1, description="Function name.")
    args: AnySeq = Field(
        default_factory=list, description="Copied function arguments."
    )

    def __repr__(self) -> str:
        return f"<FunctionDefault {self.name}()>"


DefaultValue = Union[FunctionDefault, bool, int, float, str, Tuple[Any, ...], List[Any], None]


class ParsedField(FreezableModel):
    """
    One attribute or relation of a model.

    ``is_nullable`` mirrors the schema's own nullability.  ``is_optional``
    answers "may a create payload omit this field" and is computed once by
    the field parser as
    ``is_nullable or has_default_value or is_list or is_implicit_relation``.
    """

    name: str = Field(..., min_length=1, description="Field name.")
    type: str = Field(..., min_length=1, description="Scalar, enum or model type name.")
    kind: FieldKind = Field(..., description="Field kind.")

    is_id: bool = Field(default=False, description="Single-field primary key?")
    is_list: bool = Field(default=False, description="List field?")
    is_required: bool = Field(default=False, description="Marked required in the source.")
    is_unique: bool = Field(default=False, description="Has a single-field UNIQUE constraint?")
    is_nullable: bool = Field(default=True, description="Column / relation may hold null.")
    is_optional: bool = Field(default=True, description="May be omitted on create.")
    is_read_only: bool = Field(default=False, description="Never written by clients.")
    is_updated_at: bool = Field(default=False, description="Managed by @updatedAt.")

    has_default_value: bool = Field(default=False, description="Declares any default.")
    has_db_default: bool = Field(
        default=False, description="Default is computed by the database."
    )
    default: DefaultValue = Field(default=None, description="Copied default value.")

    is_part_of_composite_primary_key: bool = Field(
        default=False, description="Listed in the model's @@id."
    )
    is_self_relation: bool = Field(
        default=False, description="Relation whose target is the owning model."
    )

    relation_name: Optional[str] = Field(default=None, description="Relation name.")
    relation_from_fields: Optional[StrSeq] = Field(
        default=None, description="Local foreign-key field names (copy)."
    )
    relation_to_fields: Optional[StrSeq] = Field(
        default=None, description="Referenced field names on the target (copy)."
    )

    documentation: Optional[str] = Field(
        default=None, description="Sanitized documentation text."
    )

    # -- Derived helpers ----------------------------------------------------

    @computed_field  # type: ignore[misc]
    @property
    def is_relation(self) -> bool:
        return self.kind == FieldKind.OBJECT

    @computed_field  # type: ignore[misc]
    @property
    def owns_foreign_key(self) -> bool:
        return self.is_relation and bool(self.relation_from_fields)

    @computed_field  # type: ignore[misc]
    @property
    def is_implicit_relation(self) -> bool:
        """Relation without its own FK columns; the opposite side owns the key."""
        return self.is_relation and not self.relation_from_fields

    @property
    def blocks_insertion(self) -> bool:
        """
        True when a row cannot be inserted before the related row exists.

        Required, non-nullable, single-valued and owning the foreign key.
        """
        return (
            self.is_required
            and not self.is_nullable
            and not self.is_list
            and self.owns_foreign_key
        )

    @property
    def is_client_managed_default(self) -> bool:
        from dmmf_ir.defaults import is_client_managed_default

        return is_client_managed_default(self.default)

    def __repr__(self) -> str:
        flags: str = " ?" if self.is_optional else ""
        list_flag: str = "[]" if self.is_list else ""
        return f"<Field {self.name}: {self.type}{list_flag}{flags} ({self.kind})>"


class PrimaryKey(FreezableModel):
    """Composite primary key (``@@id``)."""

    name: Optional[str] = Field(
        default=None, description="Constraint name; empty strings become None."
    )
    fields: StrSeq = Field(..., description="Ordered key field names.")

    @field_validator("name")
    @classmethod
    def _empty_name_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


# ---------------------------------------------------------------------------
# Model & enum
# ---------------------------------------------------------------------------


class ParsedEnum(FreezableModel):
    """An enum type with deduplicated value names."""

    name: str = Field(..., min_length=1, description="Enum type name.")
    values: StrSeq = Field(default_factory=list, description="Value names.")
    documentation: Optional[str] = Field(default=None, description="Sanitized doc.")

    def __repr__(self) -> str:
        return f"<Enum {self.name} ({len(self.values)} values)>"


class ParsedModel(FreezableModel):
    """
    Complete representation of one entity.

    The parser builds it with ``fields`` only; ``enhance_model`` returns a
    new instance carrying the derived views and ``is_junction_table``.
    """

    name: str = Field(..., min_length=1, description="Model name.")
    name_lower: str = Field(..., description="Lower-cased name, computed once.")
    db_name: Optional[str] = Field(default=None, description="Mapped table name.")
    documentation: Optional[str] = Field(default=None, description="Sanitized doc.")

    fields: Union[Tuple[ParsedField, ...], List[ParsedField]] = Field(
        default_factory=list, description="All parsed fields."
    )
    primary_key: Optional[PrimaryKey] = Field(default=None, description="@@id.")
    unique_fields: StrSeqSeq = Field(
        default_factory=list, description="@@unique field groups."
    )

    # -- Derived views (populated by the enhancer) --------------------------
    scalar_fields: Union[Tuple[ParsedField, ...], List[ParsedField]] = Field(
        default_factory=list
    )
    relation_fields: Union[Tuple[ParsedField, ...], List[ParsedField]] = Field(
        default_factory=list
    )
    create_fields: Union[Tuple[ParsedField, ...], List[ParsedField]] = Field(
        default_factory=list
    )
    update_fields: Union[Tuple[ParsedField, ...], List[ParsedField]] = Field(
        default_factory=list
    )
    read_fields: Union[Tuple[ParsedField, ...], List[ParsedField]] = Field(
        default_factory=list
    )
    reverse_relations: Union[Tuple[ParsedField, ...], List[ParsedField]] = Field(
        default_factory=list
    )
    id_field: Optional[ParsedField] = Field(default=None)
    has_self_relation: bool = Field(default=False)
    is_junction_table: bool = Field(default=False)

    # -- Fast O(1) lookup cache (populated once in model_post_init) ---------
    _field_map: Dict[str, ParsedField] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        self._field_map = {f.name: f for f in self.fields}

    def get_field(self, name: str) -> Optional[ParsedField]:
        """O(1) field lookup by name."""
        return self._field_map.get(name)

    @computed_field  # type: ignore[misc]
    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    @computed_field  # type: ignore[misc]
    @property
    def has_composite_primary_key(self) -> bool:
        return self.primary_key is not None and len(self.primary_key.fields) > 0

    def __repr__(self) -> str:
        return (
            f"<Model {self.name} "
            f"({len(self.fields)} fields, {len(self.relation_fields)} relations)>"
        )


# ---------------------------------------------------------------------------
# Schema: top-level container
# ---------------------------------------------------------------------------


class ParsedSchema(FreezableModel):
    """
    The root IR value.

    Invariant: ``model_map``, ``enum_map`` and ``reverse_relation_map`` are
    read-only O(1) lookup views built once from ``models`` and ``enums``.
    """

    models: Union[Tuple[ParsedModel, ...], List[ParsedModel]] = Field(
        default_factory=list, description="All parsed models."
    )
    enums: Union[Tuple[ParsedEnum, ...], List[ParsedEnum]] = Field(
        default_factory=list, description="All parsed enums."
    )

    _model_map: Mapping[str, ParsedModel] = PrivateAttr(default_factory=dict)
    _enum_map: Mapping[str, ParsedEnum] = PrivateAttr(default_factory=dict)
    _reverse_relation_map: Mapping[str, Any] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        self._model_map = MappingProxyType({m.name: m for m in self.models})
        self._enum_map = MappingProxyType({e.name: e for e in self.enums})
        self._reverse_relation_map = MappingProxyType(
            {m.name: m.reverse_relations for m in self.models}
        )

    @property
    def model_map(self) -> Mapping[str, ParsedModel]:
        return self._model_map

    @property
    def enum_map(self) -> Mapping[str, ParsedEnum]:
        return self._enum_map

    @property
    def reverse_relation_map(self) -> Mapping[str, Any]:
        return self._reverse_relation_map

    def get_model(self, name: str) -> Optional[ParsedModel]:
        """O(1) model lookup."""
        return self._model_map.get(name)

    def get_enum(self, name: str) -> Optional[ParsedEnum]:
        """O(1) enum lookup."""
        return self._enum_map.get(name)

    def get_relation_target(self, field: ParsedField) -> Optional[ParsedModel]:
        """Target model of a relation field, or None for non-relations and dangling targets."""
        if field.kind != FieldKind.OBJECT:
            return None
        return self._model_map.get(field.type)

    @computed_field  # type: ignore[misc]
    @property
    def model_names(self) -> List[str]:
        return [m.name for m in self.models]

    @computed_field  # type: ignore[misc]
    @property
    def total_fields(self) -> int:
        return sum(len(m.fields) for m in self.models)

    def __repr__(self) -> str:
        return (
            f"<ParsedSchema {len(self.models)} models, "
            f"{len(self.enums)} enums, {self.total_fields} fields>"
        )


# ---------------------------------------------------------------------------
# Per-call configuration
# ---------------------------------------------------------------------------


@runtime_checkable
class ParserLogger(Protocol):
    """
    Minimal logger surface the parser writes to.

    A stdlib ``logging.Logger`` or ``LoggerAdapter`` satisfies it.  Objects
    exposing ``warn(msg)`` instead of ``warning(msg)`` are wrapped in a
    ``WarnStyleLogger`` by ``ParseOptions``.
    """

    def warning(self, msg: str) -> Any: ...

    def error(self, msg: str) -> Any: ...


class WarnStyleLogger:
    """Routes ``warning()`` to a wrapped logger's ``warn()``."""

    __slots__ = ("target",)

    def __init__(self, target: Any) -> None:
        self.target: Any = target

    def warning(self, msg: str) -> Any:
        return self.target.warn(msg)

    def error(self, msg: str) -> Any:
        return self.target.error(msg)


def _has_method(obj: Any, name: str) -> bool:
    return callable(getattr(obj, name, None))


class ParseOptions(BaseModel):
    """
    Configuration for a single ``parse_dmmf`` call.

    Nothing here is stored globally; two concurrent calls with different
    options never observe each other.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        extra="forbid",
        validate_assignment=True,
    )

    logger: Optional[Any] = Field(
        default=None,
        description="Object with warning() or warn(), and error(); a fresh adapter is used when None.",
    )
    throw_on_error: bool = Field(
        default=False,
        description="Raise SchemaValidationError when validation reports errors.",
    )
    freeze: bool = Field(
        default=True,
        description="Freeze every IR object and collection (tuples, read-only maps).",
    )

    @field_validator("logger")
    @classmethod
    def _logger_has_methods(cls, v: Any) -> Any:
        if v is None or isinstance(v, ParserLogger):
            return v
        if _has_method(v, "warn") and _has_method(v, "error"):
            return WarnStyleLogger(v)
        raise ValueError("logger must provide warning(msg) or warn(msg), and error(msg).")


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "FieldKind",
    "RelationshipType",
    "FrozenInstanceError",
    "FreezableModel",
    "FunctionDefault",
    "DefaultValue",
    "ParsedField",
    "PrimaryKey",
    "ParsedEnum",
    "ParsedModel",
    "ParsedSchema",
    "ParserLogger",
    "WarnStyleLogger",
    "ParseOptions",
]

logger.debug("dmmf_ir.models loaded - %d public symbols.", len(__all__))
