from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass

from rich.logging import RichHandler

PACKAGE_LOGGER = "vivmarks"


@dataclass(frozen=True)
class LogConfig:
    level: str = "INFO"
    no_color: bool = False


def setup_logging(cfg: LogConfig) -> logging.Logger:
    """Attach one handler to the package logger.

    Only the ``vivmarks`` logger is touched, so a host application that embeds
    the store keeps its own root configuration.
    """
    level = getattr(logging, cfg.level.upper(), logging.INFO)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    logger.propagate = False
    for h in list(logger.handlers):
        logger.removeHandler(h)

    use_rich = not (cfg.no_color or os.getenv("NO_COLOR") is not None) and sys.stderr.isatty()
    if use_rich:
        handler: logging.Handler = RichHandler(rich_tracebacks=True, show_time=False, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))

    handler.setLevel(level)
    logger.addHandler(handler)
    return logger


def get_logger(name: str) -> logging.Logger:
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
