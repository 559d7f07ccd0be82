"""
Outbound HTTP helper shared by the GitHub and Gemini clients.

Requests time out explicitly and transient failures (connection errors,
timeouts, 429 and 5xx responses) are retried with exponential backoff.
Other 4xx responses are returned immediately for the caller to judge.
"""
import logging
from typing import Optional

import requests
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from reporover.core.config import settings

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class TransientResponseError(Exception):
    """Raised internally for a response worth retrying."""

    def __init__(self, response: requests.Response):
        super().__init__(f"Transient HTTP {response.status_code} from {response.url}")
        self.response = response


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, (requests.ConnectionError, requests.Timeout, TransientResponseError))


def send_request(
    method: str,
    url: str,
    timeout: Optional[float] = None,
    max_retries: Optional[int] = None,
    **kwargs
) -> requests.Response:
    """
    Send an HTTP request with timeout and bounded retries.

    Args:
        method: HTTP method
        url: Absolute URL
        timeout: Seconds before giving up on one attempt (defaults to settings)
        max_retries: Extra attempts after the first (defaults to settings)
        **kwargs: Passed through to ``requests.request``

    Returns:
        The final response. When retries are exhausted on a transient status,
        the last response is returned.

    Raises:
        requests.RequestException: If every attempt failed at the network level
    """
    retries = settings.http_max_retries if max_retries is None else max_retries
    timeout = timeout or settings.http_timeout_seconds

    def _attempt() -> requests.Response:
        response = requests.request(method, url, timeout=timeout, **kwargs)
        if response.status_code in RETRYABLE_STATUS_CODES:
            raise TransientResponseError(response)
        return response

    retrying = Retrying(
        stop=stop_after_attempt(retries + 1),
        wait=wait_exponential(multiplier=0.5, max=4),
        retry=retry_if_exception(_is_transient),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    try:
        return retrying(_attempt)
    except TransientResponseError as e:
        logger.warning(f"Giving up on {method} {url} after {retries + 1} attempts: HTTP {e.response.status_code}")
        return e.response
