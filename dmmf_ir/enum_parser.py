# File: dmmf_ir/enum_parser.py
"""
dmmf-ir - Enum Parser
=======================
Turns raw enum nodes into ``ParsedEnum`` values.

Nodes rejected by ``is_valid_enum_node`` are skipped with a warning.  Duplicate
value names keep their first occurrence.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Set

from dmmf_ir.guards import is_valid_enum_node, safe_stringify
from dmmf_ir.models import ParsedEnum, ParserLogger
from dmmf_ir.sanitize import sanitize_documentation
from dmmf_ir.utils import freeze_sequence

logger: logging.Logger = logging.getLogger("dmmf_ir.enum_parser")


def parse_enum(node: Any, log: ParserLogger, should_freeze: bool) -> ParsedEnum:
    """Build one ``ParsedEnum`` from a node that already passed the guard."""
    name: str = node["name"]
    seen: Set[str] = set()
    values: List[str] = []
    for value_node in node["values"]:
        value: str = value_node["name"]
        if value in seen:
            log.warning(f"Enum '{name}' declares value '{value}' more than once; keeping the first.")
            continue
        seen.add(value)
        values.append(value)

    enum = ParsedEnum(
        name=name,
        values=freeze_sequence(values, should_freeze),
        documentation=sanitize_documentation(node.get("documentation")),
    )
    if should_freeze:
        enum.freeze()
    return enum


def parse_enums(
    nodes: Iterable[Any], log: ParserLogger, should_freeze: bool = True
) -> List[ParsedEnum]:
    """
    Parse every valid enum node, skipping malformed ones.

    A later enum with an already-used name is skipped as well, so enum names
    stay unique in the result.
    """
    parsed: List[ParsedEnum] = []
    names: Set[str] = set()
    for node in nodes:
        if not is_valid_enum_node(node):
            log.warning(f"Skipping invalid enum node: {safe_stringify(node)}")
            continue
        if node["name"] in names:
            log.warning(f"Skipping duplicate enum '{node['name']}'.")
            continue
        names.add(node["name"])
        parsed.append(parse_enum(node, log, should_freeze))

    logger.debug("Parsed %d enum(s).", len(parsed))
    return parsed


__all__: List[str] = ["parse_enum", "parse_enums"]
