import pytest
import requests

from couchbase_monitor.checks import cluster
from couchbase_monitor.checks.base import Severity


def test_balanced_cluster_is_ok(cluster_doc):
    result = cluster.evaluate(cluster_doc)
    assert result.status is Severity.OK

    perf = {s.label: s for s in result.samples}
    assert perf["ramTotal"].value == 16000
    assert perf["ramTotal"].unit == "B"
    assert perf["ramUsed"].max == 16000
    assert perf["ramQuotaUsed"].max == 8000
    assert perf["ramQuotaUsedPerNode"].max == 4000
    assert perf["hddUsedByData"].max == 100000
    assert perf["spareNodes"].value == 1.0


@pytest.mark.parametrize("balanced", [False, None, "true"])
def test_unbalanced_cluster_is_critical(cluster_doc, balanced):
    cluster_doc["balanced"] = balanced
    assert cluster.evaluate(cluster_doc).summary() == (Severity.CRITICAL, "Cluster is unbalanced.")


def test_spare_nodes():
    ram = {"quotaTotal": 12000, "quotaUsed": 2000, "quotaTotalPerNode": 4000}
    assert cluster.spare_nodes(ram) == 2.5
    assert cluster.spare_nodes({**ram, "quotaTotalPerNode": 0}) is None
    assert cluster.spare_nodes({}) is None
    assert cluster.spare_nodes(None) is None


def test_missing_storage_totals_are_warnings():
    result = cluster.evaluate({"balanced": True})
    status, message = result.summary()
    assert status is Severity.WARNING
    assert message == (
        "storageTotals.ram not found. storageTotals.hdd not found. Unable to compute spare nodes."
    )


def test_run_transport_error_is_critical(fake_session, conn):
    session = fake_session({"/pools/default": requests.ConnectionError("connection refused")})
    result = cluster.run(conn, session=session)
    assert result.summary() == (Severity.CRITICAL, "connection refused")


def test_run_invalid_json_is_unknown(fake_session, ok_response, conn):
    session = fake_session({"/pools/default": ok_response(200, b"<html>")})
    result = cluster.run(conn, session=session)
    assert result.status is Severity.UNKNOWN
    assert result.summary()[1].startswith("Invalid JSON response.")
