"""
HTTP clients for the backends the downloader depends on.
"""

from .base import ServiceClient, build_http_client
from .content import ZebedeeClient
from .renderer import TableRendererClient

__all__ = [
    "ServiceClient",
    "build_http_client",
    "ZebedeeClient",
    "TableRendererClient",
]
