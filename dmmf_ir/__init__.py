# File: dmmf_ir/__init__.py
"""
dmmf-ir - DMMF Schema to Intermediate Representation
======================================================

Turns a loosely typed, DMMF-like schema document (``models`` + ``enums``)
into a validated, immutable intermediate representation that code
generators can consume without re-deriving field semantics.

Architecture overview::

    raw mapping ──▶ guards ──▶ enum_parser / field_parser
                                     │
                                     ▼
                     relations (reverse index) ──▶ enhancer
                                     │
                                     ▼
                         validators ──▶ ParseResult

Usage::

    from dmmf_ir import parse_dmmf
    result = parse_dmmf(document, freeze=True, throw_on_error=False)
    user = result.schema.get_model("User")
    print(result.validation.format_report())

Public API:
    - parse_dmmf          Parse and validate a document
    - ParseOptions        Per-call configuration
    - ParsedSchema etc.   IR models
    - analyze_schema      Relationship cardinality per model
"""

from __future__ import annotations

__version__: str = "1.0.0"
__license__: str = "MIT"

from dmmf_ir.models import (
    FieldKind,
    FrozenInstanceError,
    FunctionDefault,
    ParsedEnum,
    ParsedField,
    ParsedModel,
    ParsedSchema,
    ParseOptions,
    ParserLogger,
    PrimaryKey,
    RelationshipType,
    WarnStyleLogger,
)
from dmmf_ir.parser import DMMFStructureError, ParseResult, parse_dmmf
from dmmf_ir.validators import (
    SchemaValidationError,
    ValidationIssue,
    ValidationResult,
    validate_schema,
)
from dmmf_ir.defaults import (
    default_value_literal,
    enum_default_reference,
    is_client_managed_default,
    is_db_managed_default,
)
from dmmf_ir.sanitize import escape_for_codegen, sanitize_documentation
from dmmf_ir.analysis import ModelAnalysis, RelationshipInfo, analyze_schema

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    # Version info
    "__version__",
    "__license__",
    # Entry point
    "parse_dmmf",
    "ParseResult",
    "ParseOptions",
    "ParserLogger",
    "WarnStyleLogger",
    # IR models
    "FieldKind",
    "FunctionDefault",
    "ParsedEnum",
    "ParsedField",
    "ParsedModel",
    "ParsedSchema",
    "PrimaryKey",
    "RelationshipType",
    # Errors
    "DMMFStructureError",
    "FrozenInstanceError",
    "SchemaValidationError",
    # Validation
    "ValidationIssue",
    "ValidationResult",
    "validate_schema",
    # Defaults & text
    "default_value_literal",
    "enum_default_reference",
    "is_client_managed_default",
    "is_db_managed_default",
    "escape_for_codegen",
    "sanitize_documentation",
    # Analysis
    "ModelAnalysis",
    "RelationshipInfo",
    "analyze_schema",
]
