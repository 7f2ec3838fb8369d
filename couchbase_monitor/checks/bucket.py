"""
checks/bucket.py

Bucket check:
- GET bucket metadata and bucket stats in parallel
- basicStats as perfdata
- quotaPercentUsed against the warning/critical quota thresholds
- derived stats from op.samples (hit_ratio, ep_tmp_oom_errors,
  ep_resident_items_rate) with their own default thresholds
"""

from __future__ import annotations

from typing import Any, Dict, Optional
from urllib.parse import quote

from ..client import FetchError, PayloadError, build_url, fetch_all
from ..config import BUCKET_STATS, CHECKS, DEFAULT_ZOOM
from .base import CheckResult, Severity
from .extract import extract_group, extract_stat, is_number, lookup
from .thresholds import check_threshold, validate_threshold


def evaluate(
    bucket: Any,
    stats: Any,
    warning_quota: Optional[str] = CHECKS["bucket"]["warning_quota"],
    critical_quota: Optional[str] = CHECKS["bucket"]["critical_quota"],
    derived: Optional[Dict[str, dict]] = None,
) -> CheckResult:
    result = CheckResult(name="bucket")
    derived = BUCKET_STATS if derived is None else derived

    result, warning_quota = validate_threshold(result, "quotaPercentUsed", warning_quota)
    result, critical_quota = validate_threshold(result, "quotaPercentUsed", critical_quota)

    result = extract_group(
        result, bucket, "basicStats",
        maxima={"quotaPercentUsed": 100, "memUsed": lookup(bucket, "quota.ram")},
    )

    quota_used = lookup(bucket, "basicStats.quotaPercentUsed")
    if is_number(quota_used):
        result = check_threshold(result, "quotaPercentUsed", quota_used, warning_quota, Severity.WARNING)
        result = check_threshold(result, "quotaPercentUsed", quota_used, critical_quota, Severity.CRITICAL)
    else:
        result = result.add_message(Severity.WARNING, "basicStats.quotaPercentUsed not found.")

    samples = lookup(stats, "op.samples")
    for name, cfg in derived.items():
        result, mean = extract_stat(result, samples, name, unit=cfg.get("unit", ""))
        if mean is None:
            continue
        result = check_threshold(result, name, mean, cfg.get("warning"), Severity.WARNING)
        result = check_threshold(result, name, mean, cfg.get("critical"), Severity.CRITICAL)

    return result


def run(
    conn: dict,
    bucket: str,
    warning_quota: Optional[str] = CHECKS["bucket"]["warning_quota"],
    critical_quota: Optional[str] = CHECKS["bucket"]["critical_quota"],
    zoom: str = DEFAULT_ZOOM,
    *,
    session=None,
) -> CheckResult:
    cfg = CHECKS["bucket"]
    name = quote(bucket, safe="")
    urls = [
        build_url(conn["host"], conn["port"], cfg[key].format(bucket=name, zoom=zoom),
                  conn.get("username"), conn.get("password"))
        for key in ("url", "stats_url")
    ]
    try:
        bucket_doc, stats_doc = fetch_all(urls, session=session)
    except FetchError as e:
        return CheckResult(name="bucket").add_message(Severity.CRITICAL, str(e))
    except PayloadError as e:
        return CheckResult(name="bucket").add_message(Severity.UNKNOWN, str(e))

    return evaluate(bucket_doc, stats_doc, warning_quota, critical_quota)
