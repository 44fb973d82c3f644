"""Immutable query predicates rendered to PostgreSQL WHERE clauses.

Filters are composed as a small tree of ``Condition`` leaves joined by
``AllOf``/``AnyOf`` nodes. Nothing is mutated after construction; the tree
is rendered to SQL (with asyncpg ``$n`` placeholders) in one pass at the
end, so the same predicate can be inspected in tests without a database.
"""

import re
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple, Union


OPERATORS = {
    "eq": "=",
    "gt": ">",
    "lt": "<",
    "gte": ">=",
    "lte": "<=",
    "contains": "ILIKE",
}

_IDENTIFIER = re.compile(r"^[a-z_][a-z0-9_]*$")


@dataclass(frozen=True)
class Condition:
    """A single ``field <operator> value`` comparison."""
    field: str
    operator: str
    value: Any

    def __post_init__(self):
        if not _IDENTIFIER.match(self.field):
            raise ValueError(f"Invalid field name: {self.field!r}")
        if self.operator not in OPERATORS:
            raise ValueError(f"Unsupported operator: {self.operator!r}")


@dataclass(frozen=True)
class AllOf:
    """Conjunction of predicates."""
    predicates: Tuple["Predicate", ...]


@dataclass(frozen=True)
class AnyOf:
    """Disjunction of predicates."""
    predicates: Tuple["Predicate", ...]


Predicate = Union[Condition, AllOf, AnyOf]


def eq(field: str, value: Any) -> Condition:
    return Condition(field, "eq", value)


def gt(field: str, value: Any) -> Condition:
    return Condition(field, "gt", value)


def lt(field: str, value: Any) -> Condition:
    return Condition(field, "lt", value)


def contains(field: str, value: str) -> Condition:
    """Case-insensitive substring match."""
    return Condition(field, "contains", value)


def all_of(*predicates: Optional[Predicate]) -> Optional[Predicate]:
    """AND together the given predicates, skipping ``None``.

    Returns ``None`` when nothing is left and the predicate itself when only
    one remains.
    """
    remaining = tuple(p for p in predicates if p is not None)
    if not remaining:
        return None
    if len(remaining) == 1:
        return remaining[0]
    return AllOf(remaining)


def any_of(*predicates: Optional[Predicate]) -> Optional[Predicate]:
    """OR together the given predicates, skipping ``None``."""
    remaining = tuple(p for p in predicates if p is not None)
    if not remaining:
        return None
    if len(remaining) == 1:
        return remaining[0]
    return AnyOf(remaining)


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user input matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def render_sql(predicate: Optional[Predicate], start_index: int = 1) -> Tuple[str, List[Any]]:
    """Render a predicate to a SQL boolean expression.

    Args:
        predicate: Predicate tree, or None for "match everything"
        start_index: Number of the first ``$n`` placeholder to emit

    Returns:
        Tuple of (sql_expression, parameters)
    """
    params: List[Any] = []

    def visit(node: Predicate) -> str:
        if isinstance(node, Condition):
            value = node.value
            if node.operator == "contains":
                value = f"%{escape_like(str(value))}%"
            params.append(value)
            placeholder = f"${start_index + len(params) - 1}"
            return f"{node.field} {OPERATORS[node.operator]} {placeholder}"
        if isinstance(node, AllOf):
            return "(" + " AND ".join(visit(child) for child in node.predicates) + ")"
        if isinstance(node, AnyOf):
            return "(" + " OR ".join(visit(child) for child in node.predicates) + ")"
        raise TypeError(f"Unknown predicate node: {type(node).__name__}")

    if predicate is None:
        return "TRUE", params

    return visit(predicate), params
