"""Lightweight HTTP client util with retry.

Used for the backend's outbound calls (price feed, JSON-RPC node). Uses
stdlib urllib; the client package talks to this service over httpx instead.
"""

from __future__ import annotations

import json
import logging
import time
import urllib.request
import urllib.error
from typing import Any, Dict, Optional

logger = logging.getLogger("swiftchain.http")

_HEADERS = {"Accept": "application/json", "User-Agent": "swiftchain/0.1"}


class HttpError(Exception):
    pass


def _request_json(
    req: urllib.request.Request, *, timeout: float, retries: int, backoff: float
) -> Any:
    last_err: Optional[Exception] = None
    for attempt in range(retries + 1):
        try:
            with urllib.request.urlopen(req, timeout=timeout) as resp:  # nosec B310
                if resp.status >= 400:
                    raise HttpError(f"HTTP {resp.status} for {req.full_url}")
                data = resp.read()
                return json.loads(data.decode("utf-8"))
        except (
            urllib.error.URLError,
            TimeoutError,
            HttpError,
            ValueError,
        ) as e:  # ValueError for JSON decode
            last_err = e
            logger.warning(
                "request to %s failed (attempt %d/%d): %s",
                req.full_url,
                attempt + 1,
                retries + 1,
                e,
            )
            if attempt == retries:
                break
            time.sleep(backoff * (2**attempt))
    raise HttpError(f"Failed to fetch JSON from {req.full_url}: {last_err}")


def get_json(
    url: str, *, timeout: float = 5.0, retries: int = 2, backoff: float = 0.5
) -> Dict[str, Any]:
    req = urllib.request.Request(url, headers=_HEADERS, method="GET")
    return _request_json(req, timeout=timeout, retries=retries, backoff=backoff)


def post_json(
    url: str,
    payload: Any,
    *,
    timeout: float = 5.0,
    retries: int = 2,
    backoff: float = 0.5,
) -> Any:
    body = json.dumps(payload).encode("utf-8")
    headers = dict(_HEADERS, **{"Content-Type": "application/json"})
    req = urllib.request.Request(url, data=body, headers=headers, method="POST")
    return _request_json(req, timeout=timeout, retries=retries, backoff=backoff)
