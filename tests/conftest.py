"""
Shared fixtures
"""

import pytest

from file_downloader.health import HealthCheck
from file_downloader.models import VersionInfo


@pytest.fixture
def health_check():
    """A health check with no dependencies registered."""
    return HealthCheck(VersionInfo(version="test"), critical_timeout=90, interval=30)
