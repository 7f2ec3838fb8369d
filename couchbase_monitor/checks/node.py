"""
checks/node.py

Check of a single Couchbase node:
- GET /pools/nodes
- Finds the node whose hostname is "<host>:<port>"
- CRITICAL if it is not healthy or not an active cluster member
- interestingStats + systemStats as perfdata
"""

from typing import Any, Dict, Optional

from ..client import FetchError, PayloadError, build_url, fetch_json
from ..config import CHECKS
from .base import CheckResult, Severity
from .extract import extract_group, lookup


def find_node(stats: Any, hostname: str) -> Optional[Dict[str, Any]]:
    for node in lookup(stats, "nodes") or []:
        if isinstance(node, dict) and node.get("hostname") == hostname:
            return node
    return None


def evaluate(stats: Any, host: str, port: int) -> CheckResult:
    result = CheckResult(name="node")

    node = find_node(stats, f"{host}:{port}")
    if node is None:
        return result.add_message(Severity.CRITICAL, "Node not found.")

    if node.get("status") != "healthy":
        result = result.add_message(Severity.CRITICAL, f"Node unhealthy. status = {node.get('status')}")

    if node.get("clusterMembership") != "active":
        result = result.add_message(
            Severity.CRITICAL,
            f"Node membership invalid. clusterMembership = {node.get('clusterMembership')}",
        )

    result = extract_group(
        result, node, "interestingStats",
        maxima={"mem_used": node.get("memoryTotal")},
        missing="Node interestingStats not found.",
    )

    system = node.get("systemStats")
    system = system if isinstance(system, dict) else {}
    result = extract_group(
        result, node, "systemStats",
        maxima={
            "cpu_utilization_rate": 100,
            "mem_free": system.get("mem_total"),
            "swap_used": system.get("swap_total"),
        },
        missing="Node systemStats not found.",
    )
    return result


def run(conn: dict, url: Optional[str] = None, *, session=None) -> CheckResult:
    stats_url = build_url(
        conn["host"], conn["port"], url or CHECKS["node"]["url"],
        conn.get("username"), conn.get("password"),
    )
    try:
        stats = fetch_json(stats_url, session=session)
    except FetchError as e:
        return CheckResult(name="node").add_message(Severity.CRITICAL, str(e))
    except PayloadError as e:
        return CheckResult(name="node").add_message(Severity.UNKNOWN, str(e))

    return evaluate(stats, conn["host"], conn["port"])
