"""
checks/thresholds.py

Threshold expressions: an operator prefix followed by a number.

    ">=85"  "<0.5"  "=0"

A threshold "matches" when the undesired condition holds, e.g. the value 96
matches ">=95". Two-character operators are tried before the one-character
ones so that ">=5" is never read as ">" with the literal "=5".

Note: "=" is exact float equality, there is no tolerance.
"""

from __future__ import annotations

import math
import operator
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .base import CheckResult, Severity, format_number


class ThresholdError(ValueError):
    pass


class Operator(Enum):
    GTE = (">=", operator.ge, "greater than or equal to")
    LTE = ("<=", operator.le, "less than or equal to")
    GT = (">", operator.gt, "greater than")
    LT = ("<", operator.lt, "less than")
    EQ = ("=", operator.eq, "equal to")

    def __init__(self, symbol, compare, phrase):
        self.symbol = symbol
        self.compare = compare
        self.phrase = phrase


# Enum iteration order is the parse order.
_PARSE_ORDER = tuple(Operator)

# Plain decimal literals only: no nan, inf or "1_000"
_LITERAL_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


@dataclass(frozen=True)
class Threshold:
    op: Operator
    limit: float
    text: str

    @classmethod
    def parse(cls, expression: str) -> "Threshold":
        expr = (expression or "").strip()
        for op in _PARSE_ORDER:
            if expr.startswith(op.symbol):
                literal = expr[len(op.symbol):].strip()
                limit = float(literal) if _LITERAL_RE.match(literal) else math.nan
                if not math.isfinite(limit):
                    raise ThresholdError(f"Invalid threshold literal: {expression!r}")
                return cls(op=op, limit=limit, text=literal)
        raise ThresholdError(f"Invalid threshold operator: {expression!r}")

    def matches(self, value: float) -> bool:
        return bool(self.op.compare(float(value), self.limit))

    def describe(self, label: str, value: float) -> str:
        return (
            f"The {label} is {self.op.phrase} expected. "
            f"Value = {format_number(value)}, Threshold = {self.text}"
        )


def evaluate(value: float, expression: str) -> bool:
    """True when `value` breaches `expression`. Raises ThresholdError if unparseable."""
    return Threshold.parse(expression).matches(value)


def check_threshold(
    result: CheckResult,
    label: str,
    value: float,
    expression: Optional[str],
    severity: Severity,
) -> CheckResult:
    if not expression:
        return result

    try:
        threshold = Threshold.parse(expression)
    except ThresholdError:
        return result.add_message(Severity.CRITICAL, f"Threshold invalid. {label} {expression}")

    if threshold.matches(value):
        return result.add_message(severity, threshold.describe(label, value))
    return result


def validate_threshold(
    result: CheckResult,
    label: str,
    expression: Optional[str],
) -> Tuple[CheckResult, Optional[str]]:
    """
    Reports an unparseable expression up front, whether or not a value is
    found to compare it with. Returns None in its place so it is not
    reported twice.
    """
    if not expression:
        return result, None
    try:
        Threshold.parse(expression)
    except ThresholdError:
        return result.add_message(Severity.CRITICAL, f"Threshold invalid. {label} {expression}"), None
    return result, expression
