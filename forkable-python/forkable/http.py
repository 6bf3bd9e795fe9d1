"""
HTTP collaborator - requests wrapped as Futures.

Usage:
    from forkable import http

    http.get_json("https://api.github.com/repos/python/cpython").map(
        lambda repo: repo["stargazers_count"]
    ).fork(on_rejected=print, on_resolved=print)

A 2xx response resolves with the body; any other status rejects with
HTTPStatusError, and transport failures reject with RequestFailedError.
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor
from typing import Any, Optional

import requests

from ._executor import io_future
from .config import Settings
from .exceptions import HTTPError, HTTPStatusError, RequestFailedError
from .future import Future
from .result import Result

logger = logging.getLogger(__name__)


def _send(session, method: str, url: str, timeout: float, kwargs: dict) -> Result:
    try:
        response = session.request(method, url, timeout=timeout, **kwargs)
    except requests.RequestException as exc:
        logger.debug("%s %s failed: %s", method, url, exc, extra={"method": method, "url": url})
        return Result.err(RequestFailedError(url, exc))
    logger.debug(
        "%s %s -> %s", method, url, response.status_code,
        extra={"method": method, "url": url, "status_code": response.status_code},
    )
    if not 200 <= response.status_code < 300:
        return Result.err(HTTPStatusError(url, response.status_code, response.reason or ""))
    return Result.ok(response)


def send(
    method: str,
    url: str,
    *,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
    executor: Optional[Executor] = None,
    **kwargs: Any,
) -> Future[HTTPError, requests.Response]:
    """Future resolving with the successful ``requests.Response`` itself."""
    if timeout is None:
        timeout = Settings().http_timeout
    method = method.upper()

    def work() -> Result:
        if session is not None:
            return _send(session, method, url, timeout, kwargs)
        with requests.Session() as own_session:
            return _send(own_session, method, url, timeout, kwargs)

    return io_future(work, executor)


def request(method: str, url: str, **options: Any) -> Future[HTTPError, str]:
    """Future resolving with the response body as text."""
    return send(method, url, **options).map(lambda response: response.text)


def get(url: str, **options: Any) -> Future[HTTPError, str]:
    return request("GET", url, **options)


def get_json(url: str, **options: Any) -> Future[Exception, Any]:
    """Future resolving with the decoded JSON body.

    A body that is not valid JSON rejects with the decoder's ValueError.
    """
    return send("GET", url, **options).map(lambda response: response.json())


__all__ = [
    'get',
    'get_json',
    'request',
    'send',
]
