#!/usr/bin/env python3
"""
Retry Executor - Bounded retry with linear backoff for provider HTTP calls

Policy:
- 2xx and 4xx responses are returned immediately (4xx is not retryable)
- 5xx responses, timeouts and connection errors are retried
- delay before retry N is base_delay * N
- once retries are exhausted the last error is raised

Each attempt opens its own requests.Session inside a ``with`` block, so the
executor holds no state between calls and can be shared across threads.
"""

import time
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

import requests

from .errors import TerminalProviderError, TransientProviderError
from ..logger_utils import redact_url

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HttpRequest:
    url: str
    method: str = "POST"
    json: Optional[Dict[str, Any]] = None
    headers: Dict[str, str] = field(default_factory=dict)


class RetryExecutor:
    """Runs an HttpRequest with up to ``max_retries`` retries after the first attempt."""

    def __init__(
        self,
        max_retries: int = 3,
        base_delay: float = 1.0,
        timeout: float = 30.0,
        sleep: Callable[[float], None] = time.sleep,
        session_factory: Callable[[], requests.Session] = requests.Session,
        provider: str = "provider",
    ):
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.timeout = timeout
        self.sleep = sleep
        self.session_factory = session_factory
        self.provider = provider

    def execute(self, request: HttpRequest) -> requests.Response:
        """
        Send the request, retrying transient failures.

        Returns:
            The first response with a status below 500

        Raises:
            TransientProviderError: retries exhausted
            TerminalProviderError: request could not be sent at all (bad URL, etc.)
        """
        last_error: Optional[TransientProviderError] = None
        safe_url = redact_url(request.url)

        for attempt in range(self.max_retries + 1):
            try:
                with self.session_factory() as session:
                    response = session.request(
                        request.method,
                        request.url,
                        json=request.json,
                        headers=request.headers or None,
                        timeout=self.timeout,
                    )
            except (requests.Timeout, requests.ConnectionError) as e:
                last_error = TransientProviderError(
                    f"{self.provider} network error: {redact_url(str(e))}", provider=self.provider
                )
            except requests.RequestException as e:
                logger.error(f"❌ {self.provider} request could not be sent to {safe_url}: {redact_url(str(e))}")
                raise TerminalProviderError(
                    f"{self.provider} request error: {redact_url(str(e))}", provider=self.provider
                ) from e
            else:
                if response.status_code < 500:
                    if attempt:
                        logger.info(f"✅ {self.provider} succeeded after {attempt} retries")
                    return response
                last_error = TransientProviderError(
                    f"HTTP {response.status_code}: {response.reason}",
                    status_code=response.status_code,
                    provider=self.provider,
                )

            if attempt < self.max_retries:
                delay = self.base_delay * (attempt + 1)
                logger.warning(
                    f"🔁 {self.provider} attempt {attempt + 1} failed ({last_error}), retrying in {delay:.1f}s"
                )
                self.sleep(delay)

        logger.error(f"❌ {self.provider} failed after {self.max_retries + 1} attempts: {last_error}")
        raise last_error
