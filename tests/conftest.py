"""
tests/conftest.py
Shared fixtures for the dmmf_ir test suite.

Sample documents live as YAML under tests/fixtures/ and are loaded once per
session; function-scoped fixtures hand each test a deep copy it may mutate.
No external mocking libraries are used; ``RecordingLogger`` captures what
the parser reports.
"""

from __future__ import annotations

import copy
import pathlib
from typing import Any, Dict, List

import pytest
import yaml


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

FIXTURES_DIR: pathlib.Path = pathlib.Path(__file__).resolve().parent / "fixtures"


def load_fixture(name: str) -> Dict[str, Any]:
    path = FIXTURES_DIR / f"{name}.yaml"
    assert path.exists(), f"Fixture document not found at {path}."
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    assert isinstance(data, dict), "Top-level YAML must be a mapping."
    return data


# ---------------------------------------------------------------------------
# Logger double
# ---------------------------------------------------------------------------


class RecordingLogger:
    """Collects messages instead of emitting them."""

    def __init__(self) -> None:
        self.warnings: List[str] = []
        self.errors: List[str] = []

    def warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def error(self, msg: str) -> None:
        self.errors.append(msg)


@pytest.fixture()
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


# ---------------------------------------------------------------------------
# Raw document fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def raw_blog_dmmf() -> Dict[str, Any]:
    return load_fixture("blog")


@pytest.fixture()
def blog_dmmf(raw_blog_dmmf: Dict[str, Any]) -> Dict[str, Any]:
    """Five models (one junction table) and one enum; validates cleanly."""
    return copy.deepcopy(raw_blog_dmmf)


@pytest.fixture()
def employee_dmmf() -> Dict[str, Any]:
    """Employee with a required, key-owning ``manager`` self-relation."""
    return load_fixture("employee")


@pytest.fixture()
def triangle_dmmf() -> Dict[str, Any]:
    """A -> B -> C -> A, every edge blocking insertion."""
    return load_fixture("triangle")


@pytest.fixture()
def empty_dmmf() -> Dict[str, Any]:
    return {"models": [], "enums": []}


# ---------------------------------------------------------------------------
# Node builders
# ---------------------------------------------------------------------------


def scalar_node(name: str, type_: str = "String", **extra: Any) -> Dict[str, Any]:
    node: Dict[str, Any] = {
        "name": name,
        "kind": "scalar",
        "type": type_,
        "isRequired": True,
        "isList": False,
    }
    node.update(extra)
    return node


def id_node(name: str = "id", **extra: Any) -> Dict[str, Any]:
    return scalar_node(
        name,
        "Int",
        isId=True,
        hasDefaultValue=True,
        default={"name": "autoincrement", "args": []},
        **extra,
    )


def relation_node(
    name: str,
    target: str,
    from_fields: Any = None,
    to_fields: Any = None,
    **extra: Any,
) -> Dict[str, Any]:
    node: Dict[str, Any] = {
        "name": name,
        "kind": "object",
        "type": target,
        "isRequired": True,
        "isList": False,
        "relationFromFields": list(from_fields or []),
        "relationToFields": list(to_fields or []),
    }
    node.update(extra)
    return node


def model_node(name: str, fields: List[Dict[str, Any]], **extra: Any) -> Dict[str, Any]:
    node: Dict[str, Any] = {"name": name, "fields": fields}
    node.update(extra)
    return node
