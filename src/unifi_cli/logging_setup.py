"""Logging configuration for the UniFi CLI."""

import logging

from rich.console import Console
from rich.logging import RichHandler

log = logging.getLogger("unifi_cli")


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    log.setLevel(level)
    log.handlers.clear()

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        log_time_format="%H:%M:%S",
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    log.addHandler(handler)
