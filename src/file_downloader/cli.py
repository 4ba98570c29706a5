"""
CLI Interface for the File Downloader

Runs the service and shows the configuration it would run with.
"""

import logging
import sys
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__
from .config import Config
from .server import build_service


console = Console()


def configure_logging(level: str) -> None:
    """Send log records through rich at the given level."""
    logging.basicConfig(
        level=level,
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(version=__version__)
def main():
    """
    File Downloader

    Renders tables held on the content server and serves them as downloads.
    """
    pass


@main.command()
@click.option(
    "--bind", "-b",
    "bind_addr",
    default=None,
    help="Address to listen on, e.g. ':23400' (default: BIND_ADDR)"
)
def serve(bind_addr: Optional[str]):
    """
    Run the file downloader until SIGINT or SIGTERM.
    """
    cfg = Config.get()
    if bind_addr:
        cfg = cfg.model_copy(update={"bind_addr": bind_addr})

    configure_logging(cfg.log_level)
    cfg.log()

    service = build_service(cfg)
    try:
        service.start()
    except OSError as e:
        logging.getLogger(__name__).error("unable to start http server: %s", e)
        sys.exit(1)

    service.wait()

    if not service.shutdown():
        sys.exit(1)


@main.command(name="config")
def show_config():
    """
    Show the effective configuration.
    """
    cfg = Config.get()

    table = Table(title="Configuration", show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    for name, value in cfg.model_dump().items():
        table.add_row(name, str(value))

    console.print(table)


if __name__ == "__main__":
    main()
