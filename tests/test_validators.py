"""
tests/test_validators.py
Comprehensive unit tests for dmmf_ir.validators.

Tests cover:
- ValidationResult accumulation and reporting
- Self-relation feasibility
- Circular insertion dependency detection and deduplication
- Generated-name collisions
- Primary key / unique constraint consistency
- Relation and enum references
- The merged validate_schema pipeline
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List

import pytest

from conftest import id_node, model_node, relation_node, scalar_node
from dmmf_ir.models import ParsedSchema
from dmmf_ir.parser import parse_dmmf
from dmmf_ir.validators import (
    ValidationResult,
    validate_circular_dependencies,
    validate_default_functions,
    validate_enums,
    validate_field_kinds,
    validate_keys,
    validate_naming_collisions,
    validate_relations,
    validate_schema,
    validate_self_relations,
)


# ===========================================================================
# Helper to build a ParsedSchema from raw nodes
# ===========================================================================


def _schema(models: List[Dict[str, Any]], enums: Any = ()) -> ParsedSchema:
    return parse_dmmf({"models": models, "enums": list(enums)}).schema


def _codes(result: ValidationResult) -> List[str]:
    return [issue.code for issue in result.issues]


# ===========================================================================
# ValidationResult
# ===========================================================================


class TestValidationResult:
    def test_empty_result_is_valid(self) -> None:
        result = ValidationResult()
        assert result.is_valid
        assert bool(result)
        assert len(result) == 0
        assert result.first_error is None

    def test_levels_and_prefixes(self) -> None:
        result = ValidationResult()
        result.add_error("E1", "broken")
        result.add_warning("W1", "odd")
        result.add_info("I1", "fyi")
        assert result.errors == ["broken"]
        assert result.warnings == ["odd"]
        assert result.infos == ["fyi"]
        assert result.all == ["ERROR: broken", "WARNING: odd", "INFO: fyi"]
        assert not result.is_valid
        assert result.first_error is not None and result.first_error.code == "E1"

    def test_merge_preserves_order(self) -> None:
        first = ValidationResult()
        first.add_warning("W1", "one")
        second = ValidationResult()
        second.add_error("E1", "two")
        first.merge(second)
        assert [i.message for i in first.issues] == ["one", "two"]

    def test_report_includes_context(self) -> None:
        result = ValidationResult()
        result.add_error("E1", "broken", {"model": "User"})
        result.add_info("I1", "fyi")
        report = result.format_report()
        assert "1 error(s)" in report
        assert "[E1] broken" in report
        assert "model: User" in report
        assert "fyi" not in report
        assert "fyi" in result.format_report(include_info=True)

    def test_to_dict(self) -> None:
        result = ValidationResult()
        result.add_error("E1", "broken")
        assert result.to_dict() == {"errors": ["broken"], "warnings": [], "infos": []}


# ===========================================================================
# Self relations
# ===========================================================================


class TestValidateSelfRelations:
    def test_required_self_relation_is_one_error(self, employee_dmmf: Dict[str, Any]) -> None:
        schema = parse_dmmf(employee_dmmf).schema
        result = validate_self_relations(schema)
        assert len(result.errors) == 1
        assert "Employee.manager" in result.errors[0]
        assert "two-step insert" in result.errors[0]
        assert len(result.infos) == 2

    def test_optional_self_relation_is_info_only(self, employee_dmmf: Dict[str, Any]) -> None:
        manager = employee_dmmf["models"][0]["fields"][2]
        manager["isRequired"] = False
        result = validate_self_relations(parse_dmmf(employee_dmmf).schema)
        assert result.errors == []
        assert len(result.infos) == 2

    def test_explicitly_nullable_self_relation_passes(self, employee_dmmf: Dict[str, Any]) -> None:
        employee_dmmf["models"][0]["fields"][2]["isNullable"] = True
        result = validate_self_relations(parse_dmmf(employee_dmmf).schema)
        assert result.errors == []


# ===========================================================================
# Circular dependencies
# ===========================================================================


class TestValidateCircularDependencies:
    def test_triangle_reported_once(self, triangle_dmmf: Dict[str, Any]) -> None:
        result = validate_circular_dependencies(parse_dmmf(triangle_dmmf).schema)
        assert len(result.errors) == 1
        assert "A -> B -> C -> A" in result.errors[0]
        assert result.issues[0].context["cycle"] == ["A", "B", "C", "A"]

    @pytest.mark.parametrize("order", [[0, 1, 2], [1, 2, 0], [2, 0, 1], [2, 1, 0]])
    def test_any_start_reports_one_cycle(
        self, triangle_dmmf: Dict[str, Any], order: List[int]
    ) -> None:
        models = triangle_dmmf["models"]
        triangle_dmmf["models"] = [models[i] for i in order]
        result = validate_circular_dependencies(parse_dmmf(triangle_dmmf).schema)
        assert len(result.errors) == 1

    def test_optional_edge_breaks_cycle(self, triangle_dmmf: Dict[str, Any]) -> None:
        c_a = triangle_dmmf["models"][2]["fields"][2]
        assert c_a["name"] == "a"
        c_a["isRequired"] = False
        result = validate_circular_dependencies(parse_dmmf(triangle_dmmf).schema)
        assert result.errors == []

    def test_list_and_implicit_edges_ignored(self) -> None:
        schema = _schema(
            [
                model_node("A", [id_node(), relation_node("bs", "B", isList=True)]),
                model_node(
                    "B",
                    [id_node(), scalar_node("aId", "Int"),
                     relation_node("a", "A", ["aId"], ["id"])],
                ),
            ]
        )
        assert validate_circular_dependencies(schema).errors == []

    def test_self_edge_not_a_cycle(self, employee_dmmf: Dict[str, Any]) -> None:
        result = validate_circular_dependencies(parse_dmmf(employee_dmmf).schema)
        assert result.errors == []

    def test_two_model_cycle(self) -> None:
        schema = _schema(
            [
                model_node("A", [id_node(), scalar_node("bId", "Int"),
                                 relation_node("b", "B", ["bId"], ["id"])]),
                model_node("B", [id_node(), scalar_node("aId", "Int"),
                                 relation_node("a", "A", ["aId"], ["id"])]),
            ]
        )
        result = validate_circular_dependencies(schema)
        assert len(result.errors) == 1
        assert "A -> B -> A" in result.errors[0]

    def test_one_cycle_per_back_edge(self) -> None:
        # X -> Z -> X shares its nodes with the walked X -> Y -> Z -> X ring
        schema = _schema(
            [
                model_node("X", [id_node(), scalar_node("yId", "Int"), scalar_node("zId", "Int"),
                                 relation_node("y", "Y", ["yId"], ["id"]),
                                 relation_node("z", "Z", ["zId"], ["id"])]),
                model_node("Y", [id_node(), scalar_node("zId", "Int"),
                                 relation_node("z", "Z", ["zId"], ["id"])]),
                model_node("Z", [id_node(), scalar_node("xId", "Int"),
                                 relation_node("x", "X", ["xId"], ["id"])]),
            ]
        )
        result = validate_circular_dependencies(schema)
        assert len(result.errors) == 1
        assert "X -> Y -> Z -> X" in result.errors[0]


# ===========================================================================
# Naming collisions
# ===========================================================================


class TestValidateNamingCollisions:
    def test_snake_case_collision(self) -> None:
        schema = _schema(
            [model_node("UserProfile", [id_node()]), model_node("User_Profile", [id_node()])]
        )
        result = validate_naming_collisions(schema)
        assert result.warnings
        assert "UserProfile" in result.warnings[0]
        assert "User_Profile" in result.warnings[0]

    def test_route_collision(self) -> None:
        schema = _schema([model_node("User", [id_node()]), model_node("Users", [id_node()])])
        result = validate_naming_collisions(schema)
        assert _codes(result) == ["MODEL_NAME_COLLISION"]

    def test_pair_reported_once(self) -> None:
        schema = _schema([model_node("Item", [id_node()]), model_node("item", [id_node()])])
        assert len(validate_naming_collisions(schema).warnings) == 1

    def test_field_collision(self) -> None:
        schema = _schema(
            [model_node("T", [id_node(), scalar_node("user_id"), scalar_node("userId")])]
        )
        result = validate_naming_collisions(schema)
        assert _codes(result) == ["FIELD_NAME_COLLISION"]
        assert "T.user_id" in result.warnings[0]

    def test_enum_model_collision(self) -> None:
        schema = _schema(
            [model_node("Status", [id_node()])],
            [{"name": "status", "values": [{"name": "A"}]}],
        )
        assert "ENUM_MODEL_NAME_COLLISION" in _codes(validate_naming_collisions(schema))

    def test_distinct_names_pass(self, blog_dmmf: Dict[str, Any]) -> None:
        assert len(validate_naming_collisions(parse_dmmf(blog_dmmf).schema)) == 0


# ===========================================================================
# Keys
# ===========================================================================


class TestValidateKeys:
    def test_missing_primary_key(self) -> None:
        result = validate_keys(_schema([model_node("Log", [scalar_node("message")])]))
        assert _codes(result) == ["MISSING_PRIMARY_KEY"]
        assert "has no @id field or @@id composite key" in result.errors[0]

    def test_composite_key_satisfies(self) -> None:
        schema = _schema(
            [model_node("Pair", [scalar_node("a"), scalar_node("b")],
                        primaryKey={"name": None, "fields": ["a", "b"]})]
        )
        assert validate_keys(schema).is_valid

    def test_primary_key_unknown_field(self) -> None:
        schema = _schema(
            [model_node("Pair", [scalar_node("a")], primaryKey={"fields": ["a", "ghost"]})]
        )
        result = validate_keys(schema)
        assert _codes(result) == ["PK_FIELD_NOT_FOUND"]
        assert "ghost" in result.errors[0]

    def test_unique_constraint_unknown_field(self) -> None:
        schema = _schema(
            [model_node("T", [id_node(), scalar_node("a")], uniqueFields=[["a", "b"]])]
        )
        result = validate_keys(schema)
        assert _codes(result) == ["UNIQUE_FIELD_NOT_FOUND"]
        assert "unique constraint references non-existent field 'b'" in result.errors[0]

    def test_duplicate_key_field_warns(self) -> None:
        schema = _schema(
            [model_node("T", [id_node(), scalar_node("a")], uniqueFields=[["a", "a"]])]
        )
        assert _codes(validate_keys(schema)) == ["DUPLICATE_KEY_FIELD"]

    def test_empty_primary_key_name_normalized(self) -> None:
        schema = _schema(
            [model_node("Pair", [scalar_node("a"), scalar_node("b")],
                        primaryKey={"name": "", "fields": ["a", "b"]})]
        )
        model = schema.get_model("Pair")
        assert model is not None and model.primary_key is not None
        assert model.primary_key.name is None


# ===========================================================================
# Relations, enums, kinds, defaults
# ===========================================================================


class TestValidateRelations:
    def test_unknown_target(self) -> None:
        schema = _schema([model_node("A", [id_node(), relation_node("ghost", "Ghost")])])
        result = validate_relations(schema)
        assert _codes(result) == ["UNKNOWN_RELATION_TARGET"]
        assert "references unknown model 'Ghost'" in result.errors[0]

    def test_from_without_to(self) -> None:
        schema = _schema(
            [
                model_node("A", [id_node(), scalar_node("bId", "Int"),
                                 relation_node("b", "B", ["bId"], [])]),
                model_node("B", [id_node()]),
            ]
        )
        result = validate_relations(schema)
        assert _codes(result) == ["MISSING_RELATION_TO_FIELDS"]

    def test_count_mismatch(self) -> None:
        schema = _schema(
            [
                model_node("A", [id_node(), scalar_node("bId", "Int"),
                                 relation_node("b", "B", ["bId"], ["id", "other"])]),
                model_node("B", [id_node(), scalar_node("other")]),
            ]
        )
        result = validate_relations(schema)
        assert _codes(result) == ["RELATION_FIELD_COUNT_MISMATCH"]
        assert "mismatched field counts" in result.errors[0]

    def test_unknown_key_fields(self) -> None:
        schema = _schema(
            [
                model_node("A", [id_node(), relation_node("b", "B", ["bId"], ["code"])]),
                model_node("B", [id_node()]),
            ]
        )
        result = validate_relations(schema)
        assert _codes(result) == ["RELATION_FIELD_NOT_FOUND", "RELATION_FIELD_NOT_FOUND"]

    def test_blog_relations_valid(self, blog_dmmf: Dict[str, Any]) -> None:
        assert validate_relations(parse_dmmf(blog_dmmf).schema).is_valid


class TestValidateEnums:
    def test_empty_enum(self) -> None:
        schema = _schema([], [{"name": "Nothing", "values": []}])
        assert _codes(validate_enums(schema)) == ["EMPTY_ENUM"]

    def test_unknown_enum_reference(self) -> None:
        schema = _schema([model_node("T", [id_node(), scalar_node("mood", "Mood", kind="enum")])])
        result = validate_enums(schema)
        assert _codes(result) == ["UNKNOWN_ENUM"]
        assert "references unknown enum 'Mood'" in result.errors[0]

    def test_default_not_in_enum(self) -> None:
        schema = _schema(
            [model_node("T", [id_node(), scalar_node("role", "Role", kind="enum",
                                                     hasDefaultValue=True, default="ROOT")])],
            [{"name": "Role", "values": [{"name": "USER"}]}],
        )
        assert _codes(validate_enums(schema)) == ["INVALID_ENUM_DEFAULT"]


class TestValidateFieldKindsAndDefaults:
    def test_unsupported_kind_warns(self) -> None:
        schema = _schema([model_node("T", [id_node(), scalar_node("geo", "Geo", kind="geo")])])
        assert _codes(validate_field_kinds(schema)) == ["UNSUPPORTED_FIELD_KIND"]

    def test_unknown_default_function_info(self) -> None:
        schema = _schema(
            [model_node("T", [id_node(), scalar_node("code", hasDefaultValue=True,
                                                     default={"name": "nanoid", "args": []})])]
        )
        result = validate_default_functions(schema)
        assert _codes(result) == ["UNKNOWN_DEFAULT_FUNCTION"]
        assert result.is_valid


# ===========================================================================
# validate_schema
# ===========================================================================


class TestValidateSchema:
    def test_blog_is_clean(self, blog_dmmf: Dict[str, Any]) -> None:
        result = validate_schema(parse_dmmf(blog_dmmf).schema)
        assert result.errors == []
        assert result.warnings == []

    def test_never_stops_early(self, triangle_dmmf: Dict[str, Any]) -> None:
        doc = copy.deepcopy(triangle_dmmf)
        doc["models"].append(model_node("Log", [scalar_node("message")]))
        doc["enums"] = [{"name": "Empty", "values": []}]
        result = validate_schema(parse_dmmf(doc).schema)
        codes = _codes(result)
        assert "CIRCULAR_RELATION" in codes
        assert "MISSING_PRIMARY_KEY" in codes
        assert "EMPTY_ENUM" in codes
