"""
i8085 Emulator — Logging Setup

All modules log under the 'i8085' hierarchy (i8085.emu, i8085.asm,
i8085.cli). Only entry points call setup_logging(); library code just
asks logging.getLogger() for its child logger.

Console output goes through rich's RichHandler. A file handler is added
when a log directory is given:  <log_dir>/<name>_YYYYMMDD_HHMMSS.log
"""

from __future__ import annotations
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "i8085"

FILE_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"
FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    name: str = ROOT_LOGGER,
    level: int = logging.DEBUG,
    console_level: int = logging.WARNING,
    log_dir: Optional[Path] = None,
    console: Optional[Console] = None,
) -> logging.Logger:
    """
    Configure and return the named logger.

    Calling it again replaces the previous handlers, so the CLI can be
    invoked repeatedly in one process (tests do this).
    """
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(level)

    # ── Console handler: WARNING+ by default ──
    ch = RichHandler(
        console=console or Console(stderr=True),
        level=console_level,
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    ch.setLevel(console_level)
    logger.addHandler(ch)

    # ── File handler: everything at `level` ──
    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        ts = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_dir / f"{name}_{ts}.log"
        fh = logging.FileHandler(str(log_file), encoding="utf-8")
        fh.setLevel(level)
        fh.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATEFMT))
        logger.addHandler(fh)
        logger.info("Log file: %s", log_file)

    logger.debug("Logger initialized: %s (console level %s)",
                 name, logging.getLevelName(console_level))
    return logger
