"""
checks/bucket_stat.py

Single time-series stat of a bucket (op.samples.<stat>): mean/min/max as
perfdata, optional warning/critical thresholds applied to the mean.
"""

from typing import Any, Optional
from urllib.parse import quote

from ..client import FetchError, PayloadError, build_url, fetch_json
from ..config import CHECKS, DEFAULT_ZOOM
from .base import CheckResult, Severity
from .extract import extract_stat, lookup
from .thresholds import check_threshold, validate_threshold


def evaluate(stats: Any, stat: str, warning: Optional[str] = None,
             critical: Optional[str] = None) -> CheckResult:
    result, warning = validate_threshold(CheckResult(name="bucket-stat"), stat, warning)
    result, critical = validate_threshold(result, stat, critical)

    result, mean = extract_stat(result, lookup(stats, "op.samples"), stat)
    if mean is None:
        return result

    result = check_threshold(result, stat, mean, warning, Severity.WARNING)
    return check_threshold(result, stat, mean, critical, Severity.CRITICAL)


def run(conn: dict, bucket: str, stat: str, warning: Optional[str] = None,
        critical: Optional[str] = None, zoom: str = DEFAULT_ZOOM, *, session=None) -> CheckResult:
    path = CHECKS["bucket-stat"]["stats_url"].format(bucket=quote(bucket, safe=""), zoom=zoom)
    stats_url = build_url(conn["host"], conn["port"], path, conn.get("username"), conn.get("password"))
    try:
        stats = fetch_json(stats_url, session=session)
    except FetchError as e:
        return CheckResult(name="bucket-stat").add_message(Severity.CRITICAL, str(e))
    except PayloadError as e:
        return CheckResult(name="bucket-stat").add_message(Severity.UNKNOWN, str(e))

    return evaluate(stats, stat, warning, critical)
