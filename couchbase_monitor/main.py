"""
main.py

Command-line entry point of couchbase_monitor.

- Parses the subcommand (node / cluster / bucket / bucket-stat)
- Runs one check against the Couchbase REST API
- Prints one Nagios plugin line: "STATUS - message | perfdata"
- Logs to stderr (and to a rotating file when COUCHBASE_MONITOR_LOG_DIR is set)
- Exit code:
    0 = OK
    1 = WARNING
    2 = CRITICAL
    3 = UNKNOWN
"""

import argparse
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
import sys
import time
import traceback

import requests

from . import config
from .config import CHECKS, DEFAULT_PORT, DEFAULT_ZOOM, LOG_DIR, ZOOMS
from .checks.base import CheckResult, Severity
from .checks import bucket, bucket_stat, cluster, node

__version__ = "1.0.0"


# ---------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------

def setup_logging(log_dir: str = LOG_DIR, verbose: bool = False) -> logging.Logger:
    logger = logging.getLogger("couchbase_monitor")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    # Avoid stacking handlers when main() runs several times in one process
    if logger.handlers:
        return logger

    fmt = logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")

    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(
            Path(log_dir) / "couchbase_monitor.log",
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=5,
            encoding="utf-8",
        )
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    # stdout is reserved for the plugin line
    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(logging.DEBUG if verbose else logging.WARNING)
    sh.setFormatter(fmt)
    logger.addHandler(sh)

    return logger


class PluginArgumentParser(argparse.ArgumentParser):
    """Usage errors exit UNKNOWN instead of argparse's code 2 (CRITICAL)."""

    def error(self, message):
        self.print_usage(sys.stderr)
        print(f"{Severity.UNKNOWN.name} - {message}")
        raise SystemExit(Severity.UNKNOWN.exit_code)


def _add_connection_args(p: argparse.ArgumentParser, url: bool = False) -> None:
    p.add_argument("--port", type=int, default=DEFAULT_PORT,
                   help=f"The port of the Couchbase HTTP REST API. Defaults to {DEFAULT_PORT}.")
    if url:
        p.add_argument("--url", default=None,
                       help="The path of the HTTP REST API to access the Couchbase stats.")
    p.add_argument("-u", "--username", default=config.COUCHBASE_USER or None,
                   help="The username to use to fetch the stats from the HTTP REST interface.")
    p.add_argument("-p", "--password", default=config.COUCHBASE_PASS or None,
                   help="The password to use to fetch the stats from the HTTP REST interface.")


def build_parser() -> argparse.ArgumentParser:
    parser = PluginArgumentParser(prog="couchbase-monitor", description="Nagios checks for Couchbase.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Outputs the verbose output for the program.")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("node", help="checks the status of a Couchbase node to ensure its working properly")
    p.add_argument("host")
    _add_connection_args(p, url=True)

    p = sub.add_parser("cluster", help="checks the balance and storage totals of a Couchbase cluster")
    p.add_argument("host")
    _add_connection_args(p, url=True)

    p = sub.add_parser("bucket", help="checks the quota usage and derived stats of a Couchbase bucket")
    p.add_argument("host")
    p.add_argument("bucket")
    _add_connection_args(p)
    p.add_argument("--warning-quota", default=CHECKS["bucket"]["warning_quota"],
                   help="Warning threshold for quotaPercentUsed. Defaults to %(default)s.")
    p.add_argument("--critical-quota", default=CHECKS["bucket"]["critical_quota"],
                   help="Critical threshold for quotaPercentUsed. Defaults to %(default)s.")
    p.add_argument("-z", "--zoom", choices=ZOOMS, default=DEFAULT_ZOOM, help="Stats sampling granularity.")

    p = sub.add_parser("bucket-stat", help="checks a single time-series stat of a Couchbase bucket")
    p.add_argument("host")
    p.add_argument("bucket")
    p.add_argument("stat")
    _add_connection_args(p)
    p.add_argument("-w", "--warning", default=None, help="Warning threshold, e.g. '>=100'.")
    p.add_argument("-c", "--critical", default=None, help="Critical threshold, e.g. '>=200'.")
    p.add_argument("-z", "--zoom", choices=ZOOMS, default=DEFAULT_ZOOM, help="Stats sampling granularity.")

    return parser


def run_check(args: argparse.Namespace, session: requests.Session) -> CheckResult:
    conn = {"host": args.host, "port": args.port, "username": args.username, "password": args.password}

    if args.command == "node":
        return node.run(conn, args.url, session=session)
    if args.command == "cluster":
        return cluster.run(conn, args.url, session=session)
    if args.command == "bucket":
        return bucket.run(conn, args.bucket, args.warning_quota, args.critical_quota, args.zoom,
                          session=session)
    if args.command == "bucket-stat":
        return bucket_stat.run(conn, args.bucket, args.stat, args.warning, args.critical, args.zoom,
                               session=session)
    raise RuntimeError(f"Unsupported check: {args.command}")


# ---------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------

def main(argv=None):
    args = build_parser().parse_args(argv)
    log = setup_logging(verbose=args.verbose)

    log.info(f"CHECK_START | name={args.command} host={args.host} port={args.port}")

    start = time.time()
    try:
        with requests.Session() as session:
            result = run_check(args, session)
    except Exception as e:
        elapsed = round(time.time() - start, 2)
        log.error(f"CHECK_EXC | name={args.command} host={args.host} dur_sec={elapsed} err={e}")
        log.debug(traceback.format_exc())
        result = CheckResult(name=args.command).add_message(Severity.UNKNOWN, str(e))
    else:
        elapsed = round(time.time() - start, 2)
        log.info(
            f"CHECK_DONE | name={args.command} host={args.host} "
            f"status={result.status.name} dur_sec={elapsed}"
        )

    print(result.render())
    raise SystemExit(result.exit_code)


if __name__ == "__main__":
    main()
