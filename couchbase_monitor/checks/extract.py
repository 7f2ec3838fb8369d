"""
checks/extract.py

Pulls numeric metrics out of Couchbase REST payloads.

- lookup        : dotted path access ("storageTotals.ram.total"), None if absent
- flatten       : object of numbers -> one MetricSample per field
- summarize     : sample array -> (mean, min, max)
- extract_group / extract_stat : same, but recording "not found" on the result
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .base import CheckResult, MetricSample, Severity, is_finite


def lookup(doc: Any, path: str) -> Any:
    node = doc
    for part in path.split("."):
        if isinstance(node, Mapping):
            if part not in node:
                return None
            node = node[part]
        elif isinstance(node, list) and part.isdigit():
            idx = int(part)
            if idx >= len(node):
                return None
            node = node[idx]
        else:
            return None
    return node


def is_number(value: Any) -> bool:
    return is_finite(value)


def prefixed_label(prefix: str, field: str) -> str:
    if not prefix:
        return field
    return prefix + field[:1].upper() + field[1:]


def flatten(
    obj: Mapping[str, Any],
    prefix: str = "",
    minimum: Optional[float] = 0,
    unit: str = "",
    maxima: Optional[Dict[str, Optional[float]]] = None,
) -> List[MetricSample]:
    maxima = maxima or {}
    samples = []
    for name, value in obj.items():
        if not is_number(value):
            continue
        samples.append(MetricSample(
            label=prefixed_label(prefix, name),
            value=value,
            min=minimum,
            max=maxima.get(name),
            unit=unit,
        ))
    return samples


def summarize(values: Optional[Sequence[Any]]) -> Optional[Tuple[float, float, float]]:
    numbers = [v for v in (values or []) if is_number(v)]
    if not numbers:
        return None
    return sum(numbers) / len(numbers), min(numbers), max(numbers)


def extract_group(
    result: CheckResult,
    doc: Any,
    path: str,
    prefix: str = "",
    unit: str = "",
    maxima: Optional[Dict[str, Optional[float]]] = None,
    missing: Optional[str] = None,
) -> CheckResult:
    obj = lookup(doc, path)
    if not isinstance(obj, Mapping):
        return result.add_message(Severity.WARNING, missing or f"{path} not found.")
    return result.add_samples(flatten(obj, prefix=prefix, unit=unit, maxima=maxima))


def extract_stat(
    result: CheckResult,
    samples: Any,
    name: str,
    unit: str = "",
) -> Tuple[CheckResult, Optional[float]]:
    """
    Adds the mean/min/max sample of `samples[name]` and returns the mean.
    A missing or empty array is CRITICAL, never a zero sample.
    """
    values = samples.get(name) if isinstance(samples, Mapping) else None
    stats = summarize(values if isinstance(values, list) else None)
    if stats is None:
        return result.add_message(Severity.CRITICAL, f"Stat {name} not found."), None

    mean, lo, hi = stats
    sample = MetricSample(label=name, value=mean, min=lo, max=hi, unit=unit)
    return result.add_samples([sample]), mean
