"""Condition operators.

Evaluation is total: malformed predicates (unknown operator, non-numeric
comparison, invalid pattern) evaluate to False. When a diagnostics list is
supplied, such problems are also recorded there without changing the result.
"""

from __future__ import annotations

import json
import logging
import re
from enum import Enum
from functools import lru_cache
from typing import Any

from .facts import MISSING, get_in, is_absent
from .schema import Condition
from .trace import DiagnosticKind, EvaluationDiagnostic

logger = logging.getLogger(__name__)


class ConditionOperator(str, Enum):
    """Known condition operators."""
    EQ = "eq"
    NEQ = "neq"
    GT = "gt"
    LT = "lt"
    GTE = "gte"
    LTE = "lte"
    IN = "in"
    CONTAINS = "contains"
    MATCHES = "matches"
    NIL = "nil?"
    SOME = "some?"


KNOWN_OPERATORS: frozenset[str] = frozenset(op.value for op in ConditionOperator)

# Operators that test presence itself, so a missing fact is a valid input.
PRESENCE_OPERATORS: frozenset[str] = frozenset(
    [ConditionOperator.NIL.value, ConditionOperator.SOME.value]
)

_ORDERING = {
    ConditionOperator.GT.value: lambda a, b: a > b,
    ConditionOperator.LT.value: lambda a, b: a < b,
    ConditionOperator.GTE.value: lambda a, b: a >= b,
    ConditionOperator.LTE.value: lambda a, b: a <= b,
}


# =============================================================================
# Value Semantics
# =============================================================================


def is_number(value: Any) -> bool:
    """True for int/float values; booleans are not numbers."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def strict_equals(a: Any, b: Any) -> bool:
    """Equality without type coercion.

    Booleans never equal numbers and strings never equal numbers. Numbers
    compare by value (``1`` equals ``1.0``). Lists and mappings compare
    structurally with the same rules.
    """
    if a is MISSING or b is MISSING:
        return a is b
    if is_number(a) and is_number(b):
        return a == b
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        return len(a) == len(b) and all(strict_equals(x, y) for x, y in zip(a, b))
    if isinstance(a, dict) and isinstance(b, dict):
        return a.keys() == b.keys() and all(strict_equals(a[k], b[k]) for k in a)
    if type(a) is not type(b):
        return False
    return a == b


def strict_contains(items: list | tuple, needle: Any) -> bool:
    """Membership test using :func:`strict_equals`."""
    return any(strict_equals(item, needle) for item in items)


@lru_cache(maxsize=256)
def _compile_pattern(pattern: str) -> re.Pattern:
    return re.compile(pattern)


# =============================================================================
# Evaluation
# =============================================================================


def evaluate_condition(
    condition: Condition,
    facts: dict[str, Any],
    diagnostics: list[EvaluationDiagnostic] | None = None,
    node_id: str | None = None,
) -> bool:
    """Evaluate a single condition against facts.

    Args:
        condition: The condition to evaluate
        facts: The fact bag
        diagnostics: Optional list collecting authoring problems
        node_id: Node owning the condition, used to label diagnostics

    Returns:
        Whether the condition holds
    """
    fact_value = get_in(facts, condition.fact)
    return apply_operator(condition, fact_value, diagnostics, node_id)


def apply_operator(
    condition: Condition,
    fact_value: Any,
    diagnostics: list[EvaluationDiagnostic] | None = None,
    node_id: str | None = None,
) -> bool:
    """Apply ``condition.op`` to an already resolved fact value."""
    op = condition.op
    expected = condition.value

    def report(kind: DiagnosticKind, message: str) -> None:
        if diagnostics is not None:
            diagnostics.append(
                EvaluationDiagnostic(
                    kind=kind,
                    node_id=node_id,
                    fact_path=condition.fact,
                    op=op,
                    message=message,
                )
            )

    if op == ConditionOperator.EQ:
        return strict_equals(fact_value, expected)

    if op == ConditionOperator.NEQ:
        return not strict_equals(fact_value, expected)

    if op in _ORDERING:
        if is_number(fact_value) and is_number(expected):
            return _ORDERING[op](fact_value, expected)
        if not is_absent(fact_value):
            report(
                DiagnosticKind.TYPE_MISMATCH,
                f"'{op}' needs numbers, got {type(fact_value).__name__} "
                f"and {type(expected).__name__}",
            )
        return False

    if op == ConditionOperator.IN:
        if not isinstance(expected, (list, tuple)):
            report(DiagnosticKind.INVALID_OPERAND, "'in' needs a list value")
            return False
        return strict_contains(expected, fact_value)

    if op == ConditionOperator.CONTAINS:
        return isinstance(fact_value, (list, tuple)) and strict_contains(fact_value, expected)

    if op == ConditionOperator.MATCHES:
        if not isinstance(fact_value, str) or not isinstance(expected, str):
            if not is_absent(fact_value):
                report(DiagnosticKind.TYPE_MISMATCH, "'matches' needs string operands")
            return False
        try:
            pattern = _compile_pattern(expected)
        except re.error as exc:
            logger.warning(
                "Invalid pattern %r on fact %s (node %s): %s",
                expected, condition.fact, node_id, exc,
            )
            report(DiagnosticKind.INVALID_PATTERN, f"invalid pattern {expected!r}: {exc}")
            return False
        return pattern.search(fact_value) is not None

    if op == ConditionOperator.NIL:
        return is_absent(fact_value)

    if op == ConditionOperator.SOME:
        return not is_absent(fact_value)

    logger.warning(
        "Unknown operator %r on fact %s (node %s); evaluating as false",
        op, condition.fact, node_id,
    )
    report(DiagnosticKind.UNKNOWN_OPERATOR, f"unknown operator {op!r}")
    return False


# =============================================================================
# Formatting
# =============================================================================


def _format_value(value: Any) -> str:
    return json.dumps(value, default=str)


def format_condition(condition: Condition) -> str:
    """Format a condition as a human-readable string."""
    fact = condition.fact
    op = condition.op
    value = _format_value(condition.value)

    templates = {
        ConditionOperator.EQ.value: f"{fact} equals {value}",
        ConditionOperator.NEQ.value: f"{fact} does not equal {value}",
        ConditionOperator.GT.value: f"{fact} > {value}",
        ConditionOperator.LT.value: f"{fact} < {value}",
        ConditionOperator.GTE.value: f"{fact} >= {value}",
        ConditionOperator.LTE.value: f"{fact} <= {value}",
        ConditionOperator.IN.value: f"{fact} is in {value}",
        ConditionOperator.CONTAINS.value: f"{fact} contains {value}",
        ConditionOperator.MATCHES.value: f"{fact} matches {value}",
        ConditionOperator.NIL.value: f"{fact} is nil",
        ConditionOperator.SOME.value: f"{fact} has a value",
    }
    return templates.get(op, f"{fact} {op} {value}")
