"""
checks/cluster.py

Cluster-wide check:
- GET /pools/default
- CRITICAL if the cluster is not balanced
- storageTotals.ram / storageTotals.hdd as perfdata (ramTotal, hddUsed, ...)
- spareNodes = (ram.quotaTotal - ram.quotaUsed) / ram.quotaTotalPerNode
"""

from typing import Any, Optional

from ..client import FetchError, PayloadError, build_url, fetch_json
from ..config import CHECKS
from .base import CheckResult, MetricSample, Severity
from .extract import extract_group, is_number, lookup


def _storage_maxima(totals: Any) -> dict:
    totals = totals if isinstance(totals, dict) else {}
    return {
        "used": totals.get("total"),
        "usedByData": totals.get("total"),
        "quotaUsed": totals.get("quotaTotal"),
        "quotaUsedPerNode": totals.get("quotaTotalPerNode"),
    }


def spare_nodes(ram: Any) -> Optional[float]:
    if not isinstance(ram, dict):
        return None
    total = ram.get("quotaTotal")
    used = ram.get("quotaUsed")
    per_node = ram.get("quotaTotalPerNode")
    if not (is_number(total) and is_number(used) and is_number(per_node)) or per_node == 0:
        return None
    return (total - used) / per_node


def evaluate(stats: Any) -> CheckResult:
    result = CheckResult(name="cluster")

    if lookup(stats, "balanced") is not True:
        result = result.add_message(Severity.CRITICAL, "Cluster is unbalanced.")

    for kind in ("ram", "hdd"):
        path = f"storageTotals.{kind}"
        result = extract_group(
            result, stats, path,
            prefix=kind, unit="B",
            maxima=_storage_maxima(lookup(stats, path)),
        )

    spare = spare_nodes(lookup(stats, "storageTotals.ram"))
    if spare is None:
        result = result.add_message(Severity.WARNING, "Unable to compute spare nodes.")
    else:
        result = result.add_samples([MetricSample(label="spareNodes", value=spare)])

    return result


def run(conn: dict, url: Optional[str] = None, *, session=None) -> CheckResult:
    stats_url = build_url(
        conn["host"], conn["port"], url or CHECKS["cluster"]["url"],
        conn.get("username"), conn.get("password"),
    )
    try:
        stats = fetch_json(stats_url, session=session)
    except FetchError as e:
        return CheckResult(name="cluster").add_message(Severity.CRITICAL, str(e))
    except PayloadError as e:
        return CheckResult(name="cluster").add_message(Severity.UNKNOWN, str(e))

    return evaluate(stats)
