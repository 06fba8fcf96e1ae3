"""Single GET helper that waits out rate limiting before giving up.

A ``429 Too Many Requests`` answer is retried up to ``MAX_RETRIES`` times,
sleeping for as many seconds as the server's ``Retry-After`` header asks.
Every other failure is reported straight away as ``TransportError``; an
empty success body is reported as ``EmptyResponseError``.
"""

from __future__ import annotations

import time
from typing import Callable, Mapping, Optional

import requests

from config import API_KEY_HEADER, MAX_RETRIES, REQUEST_TIMEOUT
from console_log import LOG_PREFIX_DEBUG, LOG_PREFIX_HTTP, LOG_PREFIX_WARN, log
from errors import EmptyResponseError, TransportError

TOO_MANY_REQUESTS = 429

# One pooled session for the whole process; callers may pass their own.
_SESSION = requests.Session()


def _retry_delay(response: requests.Response) -> Optional[int]:
    """Return the Retry-After hint in whole seconds, or None if unusable."""

    raw = response.headers.get("Retry-After")
    if raw is None:
        return None
    try:
        delay = int(raw.strip())
    except ValueError:
        return None
    return delay if delay >= 0 else None


def fetch_from_url(
    url: str,
    api_key: str | None = None,
    *,
    params: Mapping[str, object] | None = None,
    session: requests.Session | None = None,
    timeout: float = REQUEST_TIMEOUT,
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    """GET ``url`` and return the response body as text."""

    http = session if session is not None else _SESSION
    headers = {API_KEY_HEADER: api_key} if api_key else {}
    attempt = 0

    while True:
        log(LOG_PREFIX_DEBUG, f"GET {url} (attempt {attempt + 1})")
        try:
            response = http.get(url, headers=headers, params=params, timeout=timeout)
        except requests.exceptions.RequestException as exc:
            log(LOG_PREFIX_WARN, f"HTTP request to {url} failed: {exc}")
            raise TransportError(f"Request to {url} failed: {exc}", url) from exc

        if response.status_code == TOO_MANY_REQUESTS and attempt < MAX_RETRIES:
            delay = _retry_delay(response)
            if delay is not None:
                attempt += 1
                log(
                    LOG_PREFIX_HTTP,
                    f"Rate limited by {url}; retry {attempt}/{MAX_RETRIES} in {delay}s.",
                )
                sleep(delay)
                continue

        # Anything outside 2xx is a failure, including unfollowed 3xx answers.
        if not 200 <= response.status_code < 300:
            log(LOG_PREFIX_WARN, f"HTTP request to {url} failed with status {response.status_code}.")
            raise TransportError(
                f"Request to {url} failed with status {response.status_code}",
                url,
                status_code=response.status_code,
            )

        body = response.text
        if not body or not body.strip():
            raise EmptyResponseError(f"Response from {url} was empty.")

        return body
