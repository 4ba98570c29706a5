"""
File Downloader

Renders table definitions held on the content server into html, xlsx or csv
and serves them as file downloads.
"""

__version__ = "1.0.0"
__author__ = "File Downloader Team"

from .config import Config
from .table import TableDownloader
from .web import create_app
from .server import DownloaderService, build_service

__all__ = [
    "Config",
    "TableDownloader",
    "create_app",
    "DownloaderService",
    "build_service",
]
