"""
Service lifecycle

Wires the configuration, backend clients, health check and Flask application
together. The HTTP server runs on a background thread so the caller can wait
for an OS signal or a server failure and then shut everything down within
the configured timeout.
"""

import logging
import queue
import signal
import threading
from typing import Optional, Union

from flask import Flask
from werkzeug.serving import BaseWSGIServer, make_server

from .clients import ServiceClient, TableRendererClient, ZebedeeClient
from .config import Config
from .health import HealthCheck, version_info
from .table import TableDownloader
from .web import create_app


logger = logging.getLogger(__name__)


class DownloaderService:
    """A running (or ready to run) file downloader."""

    def __init__(
        self,
        config: Config,
        app: Flask,
        health_check: HealthCheck,
        clients: tuple[ServiceClient, ...] = (),
    ):
        self.config = config
        self.app = app
        self.health_check = health_check
        self.clients = clients
        self.errors: "queue.Queue[Union[BaseException, signal.Signals]]" = queue.Queue()
        self._server: Optional[BaseWSGIServer] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> Optional[int]:
        return self._server.server_port if self._server is not None else None

    def start(self) -> None:
        """Start the health check and serve HTTP on a background thread."""
        host, port = self.config.host_and_port()
        self._server = make_server(host, port, self.app, threaded=True)
        self.health_check.start()
        self._thread = threading.Thread(target=self._serve, name="http-server", daemon=True)
        self._thread.start()
        logger.info("starting file downloader on %s:%d", host, self._server.server_port)

    def _serve(self) -> None:
        try:
            self._server.serve_forever()
        except Exception as exc:
            logger.exception("error occurred when running the http server")
            self.errors.put(exc)

    def wait(self) -> Union[BaseException, signal.Signals]:
        """Block until SIGINT/SIGTERM is received or the server fails, and return the cause."""
        def on_signal(signum, frame):
            self.errors.put(signal.Signals(signum))

        signal.signal(signal.SIGINT, on_signal)
        signal.signal(signal.SIGTERM, on_signal)

        cause = self.errors.get()
        if isinstance(cause, signal.Signals):
            logger.info("os signal received: %s", cause.name)
        else:
            logger.error("api error received: %s", cause)
        return cause

    def shutdown(self) -> bool:
        """
        Stop the health check, the HTTP server and the backend clients.

        Returns False if this did not finish within the shutdown timeout.
        """
        timeout = self.config.shutdown_timeout
        logger.info("shutdown with timeout: %ss", timeout)

        finished = threading.Event()

        def stop_all():
            logger.info("stop health checkers")
            self.health_check.stop()
            if self._server is not None:
                self._server.shutdown()
                if self._thread is not None:
                    self._thread.join()
                logger.info("graceful shutdown of http server complete")
            for client in self.clients:
                client.close()
            finished.set()

        stopper = threading.Thread(target=stop_all, name="shutdown", daemon=True)
        stopper.start()
        if not finished.wait(timeout):
            logger.warning("shutdown deadline of %ss exceeded", timeout)
            return False

        logger.info("graceful shutdown complete")
        return True


def build_service(config: Config) -> DownloaderService:
    """Create the clients, health check and application described by config."""
    content_client = ZebedeeClient(config.api_router_url, timeout=config.http_timeout)
    renderer_client = TableRendererClient(config.table_renderer_host, timeout=config.http_timeout)

    health_check = HealthCheck(
        version_info(),
        critical_timeout=config.health_check_critical_timeout,
        interval=config.health_check_interval,
    )
    health_check.add_check("frontend renderer", renderer_client.checker)
    health_check.add_check("API router", content_client.checker)

    table_downloader = TableDownloader(content_client, renderer_client)
    app = create_app(health_check, table_downloader, cors_allowed_origins=config.cors_allowed_origins)

    return DownloaderService(config, app, health_check, clients=(content_client, renderer_client))
