"""
Health checking

A HealthCheck polls every registered dependency on a fixed interval from a
background thread and aggregates the results into a single status. A failing
dependency only makes the service CRITICAL once the service has been up for
longer than the critical timeout. Before that it is reported as WARNING, so a
freshly started instance is not killed while its dependencies come up.
"""

import logging
import os
import platform
import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from . import __version__
from .models import CheckState, HealthReport, HealthStatus, VersionInfo


logger = logging.getLogger(__name__)

Checker = Callable[[CheckState], None]

HTTP_STATUS = {
    HealthStatus.OK: 200,
    HealthStatus.WARNING: 429,
    HealthStatus.CRITICAL: 500,
}


def version_info(
    build_time: Optional[str] = None,
    git_commit: Optional[str] = None,
    version: Optional[str] = None,
) -> VersionInfo:
    """Build version information, falling back to BUILD_TIME/GIT_COMMIT from the environment."""
    return VersionInfo(
        build_time=build_time or os.environ.get("BUILD_TIME"),
        git_commit=git_commit or os.environ.get("GIT_COMMIT"),
        version=version or __version__,
        language_version=platform.python_version(),
    )


class HealthCheck:
    """Periodically runs dependency checkers and reports aggregate health."""

    def __init__(self, version: VersionInfo, critical_timeout: float, interval: float):
        self.version = version
        self.critical_timeout = critical_timeout
        self.interval = interval
        self.start_time = datetime.now(timezone.utc)
        self._checks: dict[str, tuple[Checker, CheckState]] = {}
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def add_check(self, name: str, checker: Checker) -> None:
        """Register a checker. Names must be unique."""
        with self._lock:
            if name in self._checks:
                raise ValueError(f"a check named {name!r} is already registered")
            self._checks[name] = (checker, CheckState(name=name))

    def run_checks(self) -> None:
        """Run every checker once."""
        with self._lock:
            checks = [(name, checker, state.model_copy()) for name, (checker, state) in self._checks.items()]

        # checkers write to a private copy, published under the lock when done
        for name, checker, state in checks:
            try:
                checker(state)
            except Exception as exc:
                logger.exception("health checker %r raised", name)
                state.update(HealthStatus.CRITICAL, f"checker failed: {exc}", 0)
            with self._lock:
                self._checks[name] = (checker, state)

    def start(self) -> None:
        """Run the checks now and then every interval on a background thread."""
        if self._thread is not None:
            return
        self._stop.clear()
        self.start_time = datetime.now(timezone.utc)
        self._thread = threading.Thread(target=self._loop, name="healthcheck", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop the background thread and wait for it to finish."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def _loop(self) -> None:
        self.run_checks()
        while not self._stop.wait(self.interval):
            self.run_checks()

    def status(self, now: Optional[datetime] = None) -> HealthStatus:
        """Aggregate the individual check states into one status."""
        now = now or datetime.now(timezone.utc)
        with self._lock:
            states = [state for _, state in self._checks.values()]

        if any(state.status is None for state in states):
            return HealthStatus.WARNING
        if all(state.status == HealthStatus.OK for state in states):
            return HealthStatus.OK
        if any(state.status == HealthStatus.CRITICAL for state in states):
            if (now - self.start_time).total_seconds() > self.critical_timeout:
                return HealthStatus.CRITICAL
        return HealthStatus.WARNING

    def report(self, now: Optional[datetime] = None) -> HealthReport:
        now = now or datetime.now(timezone.utc)
        status = self.status(now)
        with self._lock:
            checks = [state.model_copy() for _, state in self._checks.values()]
        return HealthReport(
            status=status,
            version=self.version,
            uptime=int((now - self.start_time).total_seconds() * 1000),
            start_time=self.start_time,
            checks=checks,
        )

    @staticmethod
    def http_status(status: HealthStatus) -> int:
        return HTTP_STATUS[status]
