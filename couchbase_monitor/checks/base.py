"""
checks/base.py

Result types shared by every check:

- Severity    : OK / WARNING / CRITICAL (+ UNKNOWN for the exit code)
- MetricSample: one perfdata entry
- CheckResult : messages + perfdata collected during one check run

CheckResult is immutable: every add_* returns a new instance.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import IntEnum
from typing import Iterable, Optional, Tuple

OK_MESSAGE = "Everything okay."


class Severity(IntEnum):
    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3

    @property
    def exit_code(self) -> int:
        return int(self)


def status_rank(severity: Severity) -> int:
    return {
        Severity.OK: 0,
        Severity.WARNING: 1,
        Severity.UNKNOWN: 2,
        Severity.CRITICAL: 3,
    }[severity]


def is_finite(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def format_number(value: float) -> str:
    # Plain decimal notation, perfdata parsers do not accept "1e-05"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        text = format(Decimal(repr(value)), "f")
        return text.rstrip("0").rstrip(".") if "." in text else text
    return str(value)


@dataclass(frozen=True)
class MetricSample:
    label: str
    value: float
    min: Optional[float] = 0
    max: Optional[float] = None
    unit: str = ""

    def perfdata(self) -> str:
        # label=value[UOM];warn;crit;min;max
        label = f"'{self.label}'" if " " in self.label else self.label
        lo = format_number(self.min) if is_finite(self.min) else ""
        hi = format_number(self.max) if is_finite(self.max) else ""
        return f"{label}={format_number(self.value)}{self.unit};;;{lo};{hi}"


@dataclass(frozen=True)
class CheckResult:
    name: str
    messages: Tuple[Tuple[Severity, str], ...] = field(default_factory=tuple)
    samples: Tuple[MetricSample, ...] = field(default_factory=tuple)

    def add_message(self, severity: Severity, message: str) -> "CheckResult":
        return replace(self, messages=self.messages + ((severity, message),))

    def add_samples(self, samples: Iterable[MetricSample]) -> "CheckResult":
        # NaN and infinities are not valid perfdata values
        kept = tuple(s for s in samples if is_finite(s.value))
        return replace(self, samples=self.samples + kept)

    def merge(self, other: "CheckResult") -> "CheckResult":
        return replace(
            self,
            messages=self.messages + other.messages,
            samples=self.samples + other.samples,
        )

    @property
    def status(self) -> Severity:
        return self.summary()[0]

    @property
    def exit_code(self) -> int:
        return self.status.exit_code

    def summary(self) -> Tuple[Severity, str]:
        """
        Worst severity wins. The message joins every entry recorded at that
        severity, in insertion order. No entries means OK.
        """
        if not self.messages:
            return Severity.OK, OK_MESSAGE

        worst = max((sev for sev, _ in self.messages), key=status_rank)
        text = " ".join(msg for sev, msg in self.messages if sev == worst)
        return worst, text

    def perfdata(self) -> str:
        return " ".join(s.perfdata() for s in self.samples)

    def render(self) -> str:
        severity, message = self.summary()
        line = f"{severity.name} - {message}"
        perf = self.perfdata()
        if perf:
            line += f" | {perf}"
        return line
