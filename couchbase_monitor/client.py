"""
client.py

HTTP access to the Couchbase REST API.

- build_url  : http://[user:pass@]host:port/path
- fetch_json : one GET, status/body checks, JSON decode
- fetch_all  : several GETs in parallel, first failure wins

Nothing is retried.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, List, Optional, Sequence
from urllib.parse import quote

import requests

from . import config

log = logging.getLogger("couchbase_monitor.client")


class FetchError(RuntimeError):
    """Transport failure, unexpected HTTP status or empty body."""


class PayloadError(ValueError):
    """Body is not valid JSON."""


def build_url(host: str, port: Optional[int], path: str,
              username: Optional[str] = None, password: Optional[str] = None) -> str:
    url = "http://"
    if username or password:
        url += f"{quote(username or '', safe='')}:{quote(password or '', safe='')}@"
    url += host
    if port:
        url += f":{port}"
    if not path.startswith("/"):
        path = "/" + path
    return url + path


def _redact(url: str) -> str:
    if "@" not in url:
        return url
    scheme, rest = url.split("://", 1)
    return f"{scheme}://***@{rest.split('@', 1)[1]}"


_UNSET = object()


def fetch_json(url: str, *, session: Optional[requests.Session] = None,
               timeout: Any = _UNSET) -> Any:
    if timeout is _UNSET:
        timeout = config.http_timeout()

    http = session or requests
    start = time.time()
    try:
        response = http.get(url, timeout=timeout)
    except requests.RequestException as e:
        log.debug(f"HTTP_GET | url={_redact(url)} err={e}")
        raise FetchError(str(e)) from e

    elapsed = round(time.time() - start, 3)
    log.debug(f"HTTP_GET | url={_redact(url)} status={response.status_code} dur_sec={elapsed}")

    if response.status_code != 200:
        raise FetchError(f"Unexpected status code. HTTP {response.status_code} returned.")
    if not response.content:
        raise FetchError("Empty response body.")

    try:
        return response.json()
    except ValueError as e:
        raise PayloadError(f"Invalid JSON response. {e}") from e


def fetch_all(urls: Sequence[str], *, session: Optional[requests.Session] = None,
              timeout: Any = _UNSET) -> List[Any]:
    """
    Fetch every url concurrently; results keep the order of `urls`.
    The first request to fail (in time) is raised without waiting for the others.
    """
    if timeout is _UNSET:
        timeout = config.http_timeout()

    pool = ThreadPoolExecutor(max_workers=max(len(urls), 1))
    try:
        futures = [pool.submit(fetch_json, url, session=session, timeout=timeout) for url in urls]
        for future in as_completed(futures):
            error = future.exception()
            if error is not None:
                raise error
        return [f.result() for f in futures]
    finally:
        pool.shutdown(wait=False, cancel_futures=True)
