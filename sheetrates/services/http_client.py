from __future__ import annotations

"""Lightweight HTTP helper: GET JSON with a bounded retry.

Transport failures and 5xx answers are retried with a fixed backoff; 3xx, 4xx
answers and undecodable bodies fail immediately since repeating the request
would not change them.
"""
import logging
import time
from typing import Any, Callable, Mapping, Optional

import httpx

logger = logging.getLogger("sheetrates.http")


class HttpError(Exception):
    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class HttpParseError(HttpError):
    pass


def get_json(
    client: httpx.Client,
    url: str,
    *,
    params: Optional[Mapping[str, str]] = None,
    retries: int = 1,
    backoff: float = 0.5,
    sleep: Callable[[float], None] = time.sleep,
) -> Any:
    last_err: Optional[Exception] = None
    for attempt in range(retries + 1):
        try:
            resp = client.get(url, params=params)
        except httpx.HTTPError as e:  # connect/read errors, timeouts
            last_err = e
        else:
            if resp.status_code >= 500:
                last_err = HttpError(
                    f"HTTP {resp.status_code} for {resp.request.url}",
                    status_code=resp.status_code,
                )
            elif resp.status_code >= 300:  # redirects are not followed
                raise HttpError(
                    f"HTTP {resp.status_code} for {resp.request.url}",
                    status_code=resp.status_code,
                )
            else:
                try:
                    return resp.json()
                except ValueError as e:  # JSONDecodeError / bad encoding
                    raise HttpParseError(
                        f"Invalid JSON from {resp.request.url}: {e}",
                        status_code=resp.status_code,
                    ) from e
        if attempt == retries:
            break
        logger.warning(
            "GET %s failed (attempt %d/%d): %s", url, attempt + 1, retries + 1, last_err
        )
        sleep(backoff)
    status = getattr(last_err, "status_code", None)
    raise HttpError(f"Failed to fetch JSON from {url}: {last_err}", status_code=status)
