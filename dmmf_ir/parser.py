# File: dmmf_ir/parser.py
"""
dmmf-ir - Parse Pipeline
==========================
``parse_dmmf`` is the single entry point:

    raw mapping -> guards -> enums + models -> reverse relation index
                -> model enhancement -> schema validation -> ParseResult

Each call builds its own logger and options; nothing is stored at module
level, so concurrent calls never observe each other.

Usage:
    from dmmf_ir import parse_dmmf
    result = parse_dmmf(json.loads(text))
    for model in result.schema.models:
        ...
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from dmmf_ir.enhancer import enhance_model
from dmmf_ir.enum_parser import parse_enums
from dmmf_ir.field_parser import parse_models
from dmmf_ir.guards import datamodel_of, is_valid_document, safe_stringify
from dmmf_ir.models import ParsedEnum, ParsedModel, ParsedSchema, ParseOptions, ParserLogger
from dmmf_ir.relations import ReverseRelationMap, build_reverse_relation_map
from dmmf_ir.utils import Timer, freeze_sequence
from dmmf_ir.validators import SchemaValidationError, ValidationResult, validate_schema

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("dmmf_ir.parser")

PACKAGE_LOGGER_NAME: str = "dmmf_ir"


class DMMFStructureError(TypeError):
    """The top-level document is not a mapping; nothing can be parsed."""


@dataclass(frozen=True)
class ParseResult:
    """Output of ``parse_dmmf``: the IR plus every diagnostic found."""

    schema: ParsedSchema
    validation: ValidationResult

    @property
    def is_valid(self) -> bool:
        return self.validation.is_valid


def default_logger() -> ParserLogger:
    """A fresh adapter over the package logger, owned by one call."""
    return logging.LoggerAdapter(logging.getLogger(PACKAGE_LOGGER_NAME), {})


def _resolve_options(options: Optional[ParseOptions], overrides: Mapping[str, Any]) -> ParseOptions:
    if options is None:
        return ParseOptions(**overrides)
    if not overrides:
        return options
    return ParseOptions(**{**dict(options), **overrides})


def _node_list(datamodel: Mapping[str, Any], key: str, log: ParserLogger) -> List[Any]:
    """``datamodel[key]`` as a list; a missing key is empty, a wrong type warns."""
    raw: Any = datamodel.get(key)
    if raw is None:
        return []
    if not isinstance(raw, (list, tuple)):
        log.warning(f"Expected '{key}' to be a list; ignoring {safe_stringify(raw)}")
        return []
    return list(raw)


def parse_dmmf(
    document: Any,
    options: Optional[ParseOptions] = None,
    **overrides: Any,
) -> ParseResult:
    """
    Parse a DMMF-like document into a ``ParsedSchema`` and validate it.

    Keyword overrides (``logger=``, ``throw_on_error=``, ``freeze=``) are
    applied on top of *options*.

    Raises:
        DMMFStructureError: *document* is not a mapping.
        SchemaValidationError: ``throw_on_error`` is set and validation
            reported at least one error.
    """
    if not is_valid_document(document):
        raise DMMFStructureError(
            f"DMMF document must be a mapping, got {type(document).__name__}."
        )

    opts: ParseOptions = _resolve_options(options, overrides)
    log: ParserLogger = opts.logger if opts.logger is not None else default_logger()
    should_freeze: bool = opts.freeze

    with Timer("parse_dmmf") as timer:
        datamodel: Mapping[str, Any] = datamodel_of(document) or {}

        enums: List[ParsedEnum] = parse_enums(
            _node_list(datamodel, "enums", log), log, should_freeze
        )
        parsed: List[ParsedModel] = parse_models(
            _node_list(datamodel, "models", log), log, should_freeze
        )

        reverse_map: ReverseRelationMap = build_reverse_relation_map(parsed, should_freeze)
        models: List[ParsedModel] = [
            enhance_model(model, reverse_map, should_freeze) for model in parsed
        ]

        schema = ParsedSchema(
            models=freeze_sequence(models, should_freeze),
            enums=freeze_sequence(enums, should_freeze),
        )
        if should_freeze:
            schema.freeze()

        validation: ValidationResult = validate_schema(schema)

    logger.debug(
        "Parsed %d model(s) and %d enum(s) in %.4fs.",
        len(models),
        len(enums),
        timer.elapsed,
    )

    if opts.throw_on_error and validation.has_errors:
        log.error(validation.errors[0])
        raise SchemaValidationError(validation)

    return ParseResult(schema=schema, validation=validation)


__all__: List[str] = [
    "DMMFStructureError",
    "ParseResult",
    "default_logger",
    "parse_dmmf",
]
