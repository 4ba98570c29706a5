"""
Shared plumbing for the backend HTTP clients.
"""

import logging
from typing import Optional

import httpx

from ..models import CheckState, HealthStatus


logger = logging.getLogger(__name__)


def build_http_client(timeout: float = 30.0) -> httpx.Client:
    """Create the httpx client shared by every call to one backend."""
    return httpx.Client(timeout=httpx.Timeout(timeout), follow_redirects=False)


def status_from_code(status_code: int) -> HealthStatus:
    if 200 <= status_code < 300:
        return HealthStatus.OK
    if status_code == 429:
        return HealthStatus.WARNING
    return HealthStatus.CRITICAL


class ServiceClient:
    """An httpx client bound to one backend service, with a health checker."""

    service = "service"

    def __init__(self, url: str, http_client: Optional[httpx.Client] = None, timeout: float = 30.0):
        self.url = url.rstrip("/")
        self._client = http_client or build_http_client(timeout)

    def checker(self, state: CheckState) -> None:
        """Poll the service's /health endpoint and record the outcome in state."""
        health_url = f"{self.url}/health"
        try:
            response = self._client.get(health_url)
        except httpx.HTTPError as exc:
            logger.warning("health check of %s failed: %s", self.service, exc)
            state.update(HealthStatus.CRITICAL, f"{self.service} is unreachable: {exc}", 0)
            return

        status = status_from_code(response.status_code)
        if status == HealthStatus.OK:
            message = f"{self.service} is ok"
        elif status == HealthStatus.WARNING:
            message = f"{self.service} is degraded, but at least partially functioning"
        else:
            message = f"{self.service} functionality is unavailable or non-functioning"
        state.update(status, message, response.status_code)

    def close(self) -> None:
        self._client.close()
