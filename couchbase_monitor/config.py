"""
config.py

Central configuration for the probe.

- CHECKS      : REST paths and default thresholds per check
- BUCKET_STATS: derived bucket stats evaluated by the bucket check
- Credentials, HTTP timeout and log dir come from environment variables.

Avoid passing passwords on the command line when you can, e.g.:
    export COUCHBASE_USER=monitor
    export COUCHBASE_PASS=xxxx
"""

import math
import os

COUCHBASE_USER = os.environ.get("COUCHBASE_USER", "")
COUCHBASE_PASS = os.environ.get("COUCHBASE_PASS", "")


class ConfigError(ValueError):
    pass


def http_timeout():
    """COUCHBASE_HTTP_TIMEOUT in seconds. Unset means no timeout (transport default)."""
    raw = os.environ.get("COUCHBASE_HTTP_TIMEOUT", "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"Invalid COUCHBASE_HTTP_TIMEOUT: {raw!r}") from None
    if not math.isfinite(value) or value <= 0:
        raise ConfigError(f"Invalid COUCHBASE_HTTP_TIMEOUT: {raw!r}")
    return value


# Rotating log file is only written when this is set.
LOG_DIR = os.environ.get("COUCHBASE_MONITOR_LOG_DIR", "")

DEFAULT_PORT = 8091

ZOOMS = ("minute", "hour", "day", "week", "month", "year")
DEFAULT_ZOOM = "minute"

CHECKS = {
    "node": {
        "url": "/pools/nodes",
    },
    "cluster": {
        "url": "/pools/default",
    },
    "bucket": {
        "url": "/pools/default/buckets/{bucket}",
        "stats_url": "/pools/default/buckets/{bucket}/stats?zoom={zoom}",
        "warning_quota": ">=85",
        "critical_quota": ">=95",
    },
    "bucket-stat": {
        "stats_url": "/pools/default/buckets/{bucket}/stats?zoom={zoom}",
    },
}

BUCKET_STATS = {
    "hit_ratio": {"warning": None, "critical": None, "unit": ""},
    "ep_tmp_oom_errors": {"warning": None, "critical": ">0", "unit": ""},
    "ep_resident_items_rate": {"warning": None, "critical": None, "unit": "%"},
}
