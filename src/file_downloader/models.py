"""
Data models for the file downloader.

These models describe a download request as it arrives from the router, the
envelope handed back to the router once the backends have been called, and
the health check state reported on /health.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterator, Optional, Protocol

from pydantic import BaseModel, Field

from .errors import BadRequestError


# ============================================================================
# Download models
# ============================================================================

class DownloadRequest(BaseModel):
    """A request to download a rendered table."""
    format: str = ""
    uri: str = ""
    locale: str = "en"
    collection_id: Optional[str] = None
    access_token: Optional[str] = None

    def validate_required(self) -> None:
        """Raise BadRequestError unless both format and uri are set."""
        if not self.format or not self.uri:
            raise BadRequestError()


class ByteStream(Protocol):
    """A readable stream of bytes that must be closed when finished with."""

    def iter_bytes(self, chunk_size: Optional[int] = None) -> Iterator[bytes]:
        ...

    def close(self) -> None:
        ...


@dataclass
class DownloadResult:
    """
    The outcome of a download, handed from a downloader to the router.

    When ``body`` is set the caller owns it and must close the result once the
    body has been written out, whether or not writing succeeded. The result is a
    context manager to make that explicit.
    """
    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: Optional[ByteStream] = None
    error: Optional[Exception] = None
    _closed: bool = field(default=False, init=False, repr=False)

    @classmethod
    def failure(cls, status: int, error: Exception) -> "DownloadResult":
        return cls(status=status, error=error)

    @property
    def closed(self) -> bool:
        return self._closed

    def iter_bytes(self, chunk_size: Optional[int] = None) -> Iterator[bytes]:
        if self.body is None:
            return iter(())
        return self.body.iter_bytes(chunk_size)

    def close(self) -> None:
        """Close the body stream. Calling close more than once is harmless."""
        if self._closed:
            return
        self._closed = True
        if self.body is not None:
            self.body.close()

    def __enter__(self) -> "DownloadResult":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


# ============================================================================
# Health models
# ============================================================================

class HealthStatus(str, Enum):
    """Health of a single dependency or of the whole service."""
    OK = "OK"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CheckState(BaseModel):
    """The latest result of polling one dependency."""
    name: str
    status: Optional[HealthStatus] = None
    status_code: int = 0
    message: str = ""
    last_checked: Optional[datetime] = None
    last_success: Optional[datetime] = None
    last_failure: Optional[datetime] = None

    def update(self, status: HealthStatus, message: str, status_code: int) -> None:
        """Record the outcome of a check."""
        now = _utcnow()
        self.status = status
        self.message = message
        self.status_code = status_code
        self.last_checked = now
        if status == HealthStatus.OK:
            self.last_success = now
        else:
            self.last_failure = now


class VersionInfo(BaseModel):
    """Build information reported alongside the health status."""
    build_time: Optional[str] = None
    git_commit: Optional[str] = None
    version: str = ""
    language: str = "python"
    language_version: str = ""


class HealthReport(BaseModel):
    """The body returned by the /health endpoint."""
    status: HealthStatus
    version: VersionInfo
    uptime: int = Field(description="Milliseconds since the health check started")
    start_time: datetime
    checks: list[CheckState] = Field(default_factory=list)
