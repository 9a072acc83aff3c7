"""
tests/test_parser.py
End-to-end tests for dmmf_ir.parse_dmmf.

Tests cover:
- Structural rejection and document shapes
- Field-level laws across a full schema
- Freeze toggle and idempotence
- throw_on_error and per-call loggers
- Concurrent calls with independent loggers
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Tuple

import pytest
from pydantic import ValidationError

from conftest import RecordingLogger, id_node, model_node, scalar_node
from dmmf_ir import (
    DMMFStructureError,
    FrozenInstanceError,
    ParseOptions,
    SchemaValidationError,
    WarnStyleLogger,
    parse_dmmf,
)
from dmmf_ir.parser import default_logger


# ===========================================================================
# Document shapes
# ===========================================================================


class TestDocumentShape:
    @pytest.mark.parametrize("document", [None, [], "models", 42])
    def test_non_mapping_rejected(self, document: Any) -> None:
        with pytest.raises(DMMFStructureError):
            parse_dmmf(document)

    def test_structure_error_is_type_error(self) -> None:
        with pytest.raises(TypeError):
            parse_dmmf(["not", "a", "document"])

    def test_empty_document(self, empty_dmmf: Dict[str, Any]) -> None:
        result = parse_dmmf(empty_dmmf)
        assert result.schema.models == ()
        assert result.schema.enums == ()
        assert result.is_valid

    def test_datamodel_wrapper(self, blog_dmmf: Dict[str, Any]) -> None:
        wrapped = parse_dmmf({"datamodel": blog_dmmf})
        assert wrapped.schema.model_names == parse_dmmf(blog_dmmf).schema.model_names

    def test_non_list_sections_warn(self, recording_logger: RecordingLogger) -> None:
        result = parse_dmmf({"models": {"User": {}}, "enums": "Role"}, logger=recording_logger)
        assert result.schema.models == ()
        assert len(recording_logger.warnings) == 2
        assert any("'models'" in w for w in recording_logger.warnings)
        assert any("'enums'" in w for w in recording_logger.warnings)

    def test_malformed_enum_does_not_stop_parse(self, recording_logger: RecordingLogger) -> None:
        document = {
            "enums": [{"name": "Broken", "values": 3}, {"name": "Role", "values": [{"name": "A"}]}],
            "models": [model_node("T", [id_node()])],
        }
        result = parse_dmmf(document, logger=recording_logger)
        assert [e.name for e in result.schema.enums] == ["Role"]
        assert result.schema.model_names == ["T"]
        assert any("Broken" in w for w in recording_logger.warnings)


# ===========================================================================
# Field laws over a full schema
# ===========================================================================


class TestFieldLaws:
    @pytest.fixture()
    def fields(self, blog_dmmf: Dict[str, Any]) -> List[Any]:
        schema = parse_dmmf(blog_dmmf).schema
        return [field for model in schema.models for field in model.fields]

    def test_optionality_law(self, fields: List[Any]) -> None:
        for field in fields:
            assert field.is_optional == (
                field.is_nullable
                or field.has_default_value
                or field.is_list
                or field.is_implicit_relation
            ), field.name

    def test_default_ownership_disjoint(self, fields: List[Any]) -> None:
        for field in fields:
            assert not (field.has_db_default and field.is_client_managed_default), field.name

    def test_write_views_exclude_read_only(self, blog_dmmf: Dict[str, Any]) -> None:
        for model in parse_dmmf(blog_dmmf).schema.models:
            for field in model.create_fields:
                assert not field.is_read_only
                assert not field.is_id

    def test_documentation_sanitized(self, blog_dmmf: Dict[str, Any]) -> None:
        user = parse_dmmf(blog_dmmf).schema.get_model("User")
        assert user is not None and user.documentation is not None
        assert "*/" not in user.documentation


# ===========================================================================
# Freezing and idempotence
# ===========================================================================


class TestFreezing:
    def test_frozen_schema(self, blog_dmmf: Dict[str, Any]) -> None:
        schema = parse_dmmf(blog_dmmf).schema
        assert schema.is_frozen
        with pytest.raises(FrozenInstanceError):
            schema.models = ()
        with pytest.raises(TypeError):
            schema.model_map["Other"] = None  # type: ignore[index]
        with pytest.raises(FrozenInstanceError):
            schema.models[0].fields[0].name = "changed"

    def test_unfrozen_schema(self, blog_dmmf: Dict[str, Any]) -> None:
        schema = parse_dmmf(blog_dmmf, freeze=False).schema
        assert not schema.is_frozen
        assert isinstance(schema.models, list)
        schema.models[0].fields[0].documentation = "edited"
        assert schema.models[0].fields[0].documentation == "edited"

    def test_idempotent(self, raw_blog_dmmf: Dict[str, Any]) -> None:
        first = parse_dmmf(raw_blog_dmmf)
        second = parse_dmmf(raw_blog_dmmf)
        assert first.schema == second.schema
        assert first.schema is not second.schema
        assert first.schema.models[0] is not second.schema.models[0]
        assert first.validation.all == second.validation.all

    def test_input_not_mutated(self, blog_dmmf: Dict[str, Any], raw_blog_dmmf: Dict[str, Any]) -> None:
        parse_dmmf(blog_dmmf)
        assert blog_dmmf == raw_blog_dmmf


# ===========================================================================
# Options, errors and loggers
# ===========================================================================


class TestOptions:
    def test_valid_schema_returns_result(self, blog_dmmf: Dict[str, Any]) -> None:
        result = parse_dmmf(blog_dmmf, throw_on_error=True)
        assert result.is_valid

    def test_throw_on_error(
        self, employee_dmmf: Dict[str, Any], recording_logger: RecordingLogger
    ) -> None:
        with pytest.raises(SchemaValidationError) as excinfo:
            parse_dmmf(employee_dmmf, throw_on_error=True, logger=recording_logger)
        error = excinfo.value
        assert isinstance(error, ValueError)
        assert error.first_error is not None
        assert error.first_error.code == "REQUIRED_SELF_RELATION"
        assert error.result.error_count == 1
        assert recording_logger.errors == [error.first_error.message]

    def test_errors_collected_without_throw(self, employee_dmmf: Dict[str, Any]) -> None:
        result = parse_dmmf(employee_dmmf)
        assert not result.is_valid
        assert len(result.validation.errors) == 1

    def test_options_object_with_overrides(
        self, blog_dmmf: Dict[str, Any], recording_logger: RecordingLogger
    ) -> None:
        options = ParseOptions(freeze=False)
        result = parse_dmmf(blog_dmmf, options, logger=recording_logger)
        assert not result.schema.is_frozen
        assert options.logger is None

    def test_bad_logger_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ParseOptions(logger=object())

    def test_warn_style_logger_accepted(self, employee_dmmf: Dict[str, Any]) -> None:
        class WarnOnlyLogger:
            def __init__(self) -> None:
                self.warned: List[str] = []
                self.errored: List[str] = []

            def warn(self, msg: str) -> None:
                self.warned.append(msg)

            def error(self, msg: str) -> None:
                self.errored.append(msg)

        log = WarnOnlyLogger()
        assert isinstance(ParseOptions(logger=log).logger, WarnStyleLogger)

        employee_dmmf["models"].append({"name": "Broken", "fields": None})
        with pytest.raises(SchemaValidationError):
            parse_dmmf(employee_dmmf, logger=log, throw_on_error=True)
        assert len(log.warned) == 1
        assert "Broken" in log.warned[0]
        assert len(log.errored) == 1
        assert "Employee.manager" in log.errored[0]

    def test_unknown_option_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ParseOptions(verbose=True)

    def test_default_logger_is_fresh(self) -> None:
        first = default_logger()
        second = default_logger()
        assert first is not second
        assert isinstance(first, logging.LoggerAdapter)
        assert first.logger.name == "dmmf_ir"

    def test_default_logger_receives_warnings(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="dmmf_ir"):
            parse_dmmf({"models": [{"name": "Broken"}]})
        assert any("Skipping invalid model node" in r.getMessage() for r in caplog.records)


# ===========================================================================
# Concurrency
# ===========================================================================


def _document_with_bad_model(tag: str) -> Dict[str, Any]:
    return {
        "models": [
            model_node(f"Model{tag}", [id_node(), scalar_node("label")]),
            {"name": f"Broken{tag}", "fields": None},
        ]
    }


class TestConcurrentCalls:
    def test_loggers_do_not_mix(self) -> None:
        tags = [str(i) for i in range(16)]
        loggers = {tag: RecordingLogger() for tag in tags}

        def run(tag: str) -> Tuple[str, List[str]]:
            result = parse_dmmf(_document_with_bad_model(tag), logger=loggers[tag])
            return tag, result.schema.model_names

        with ThreadPoolExecutor(max_workers=8) as pool:
            outcomes = list(pool.map(run, tags))

        for tag, names in outcomes:
            assert names == [f"Model{tag}"]
            assert len(loggers[tag].warnings) == 1
            assert f"Broken{tag}" in loggers[tag].warnings[0]
