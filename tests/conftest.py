# tests/conftest.py
import json
import sys
import time
from pathlib import Path

import pytest

# ---------- Ensure project root on sys.path ----------
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


class FakeResponse:
    def __init__(self, status_code=200, body=b""):
        self.status_code = status_code
        self.content = body if isinstance(body, bytes) else json.dumps(body).encode("utf-8")

    def json(self):
        return json.loads(self.content.decode("utf-8"))


class FakeSession:
    """
    Maps a URL path (without scheme/host) to a FakeResponse or an exception.
    `delays` holds seconds to sleep before answering a path.
    """

    def __init__(self, routes, delays=None):
        self.routes = routes
        self.delays = delays or {}
        self.calls = []
        self.timeouts = []

    def get(self, url, timeout=None):
        self.calls.append(url)
        self.timeouts.append(timeout)
        path = "/" + url.split("://", 1)[1].split("/", 1)[1]
        if path in self.delays:
            time.sleep(self.delays[path])
        reply = self.routes.get(path)
        if reply is None:
            return FakeResponse(404, b"not found")
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def ok_response():
    return FakeResponse


@pytest.fixture
def conn():
    return {"host": "cb1.local", "port": 8091, "username": None, "password": None}


@pytest.fixture
def nodes_doc():
    return {
        "nodes": [
            {
                "hostname": "cb1.local:8091",
                "status": "healthy",
                "clusterMembership": "active",
                "memoryTotal": 8000,
                "memoryFree": 2000,
                "interestingStats": {"cmd_get": 12, "curr_items": 500, "mem_used": 4000},
                "systemStats": {
                    "cpu_utilization_rate": 12.5,
                    "mem_total": 8000,
                    "mem_free": 2000,
                    "swap_total": 1000,
                    "swap_used": 10,
                },
            },
            {
                "hostname": "cb2.local:8091",
                "status": "unhealthy",
                "clusterMembership": "inactiveFailed",
                "interestingStats": {},
                "systemStats": {},
            },
        ]
    }


@pytest.fixture
def cluster_doc():
    return {
        "balanced": True,
        "storageTotals": {
            "ram": {
                "total": 16000,
                "quotaTotal": 8000,
                "quotaUsed": 4000,
                "used": 9000,
                "usedByData": 3000,
                "quotaUsedPerNode": 2000,
                "quotaTotalPerNode": 4000,
            },
            "hdd": {
                "total": 100000,
                "quotaTotal": 100000,
                "used": 20000,
                "usedByData": 15000,
                "free": 80000,
            },
        },
    }


@pytest.fixture
def bucket_doc():
    return {
        "name": "default",
        "quota": {"ram": 1024, "rawRAM": 1024},
        "basicStats": {
            "quotaPercentUsed": 40.0,
            "opsPerSec": 10,
            "diskFetches": 0,
            "itemCount": 100,
            "diskUsed": 2048,
            "dataUsed": 1024,
            "memUsed": 512,
        },
    }


@pytest.fixture
def stats_doc():
    return {
        "op": {
            "samples": {
                "hit_ratio": [90, 95, 100, 95],
                "ep_tmp_oom_errors": [0, 0, 0, 0],
                "ep_resident_items_rate": [100, 100, 100, 100],
                "cmd_get": [1, 2, 3, 4],
                "empty_stat": [],
            },
            "samplesCount": 4,
            "isPersistent": True,
        }
    }


@pytest.fixture(autouse=True)
def _no_timeout_env(monkeypatch):
    monkeypatch.delenv("COUCHBASE_HTTP_TIMEOUT", raising=False)
