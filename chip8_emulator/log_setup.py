"""
CHIP-8 Emulator — Logging Setup

Console output goes through rich's RichHandler; an optional log file
captures everything at DEBUG with function/line context so a faulting
ROM run can be replayed from the log.

Log files: ``<log_dir>/<name>_YYYYMMDD_HHMMSS.log``
"""

from __future__ import annotations
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


def _add_file_handler(logger: logging.Logger, name: str, log_dir: Path) -> Path:
    """Attach a timestamped DEBUG file handler under log_dir."""
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"{name}_{ts}.log"
    file_fmt = logging.Formatter(
        "%(asctime)s | %(levelname)-7s | %(name)s | %(funcName)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(file_fmt)
    logger.addHandler(fh)
    return log_file


def _file_handler_in(logger: logging.Logger, log_dir: Path) -> Optional[logging.FileHandler]:
    target = Path(log_dir).resolve()
    for h in logger.handlers:
        if isinstance(h, logging.FileHandler) and Path(h.baseFilename).parent.resolve() == target:
            return h
    return None


def setup_logging(
    name: str = "chip8_emulator",
    level: int = logging.DEBUG,
    console_level: int = logging.WARNING,
    log_dir: Optional[Path] = None,
    rich_console: bool = True,
) -> logging.Logger:
    """
    Configure and return a logger.

    Calling this again for the same name never stacks a second console
    handler. It moves the existing console handler to ``console_level``
    and adds a file handler if ``log_dir`` has none yet.
    """
    logger = logging.getLogger(name)

    if logger.handlers:
        for h in logger.handlers:
            if not isinstance(h, logging.FileHandler):
                h.setLevel(console_level)
        if log_dir is not None and _file_handler_in(logger, log_dir) is None:
            log_file = _add_file_handler(logger, name, log_dir)
            logger.info("Log file: %s", log_file)
        return logger

    logger.setLevel(level)

    # ── File handler: captures everything (DEBUG+) ──
    log_file = None
    if log_dir is not None:
        log_file = _add_file_handler(logger, name, log_dir)

    # ── Console handler: only important stuff (WARNING+ default) ──
    if rich_console:
        ch = RichHandler(
            level=console_level,
            console=Console(stderr=True),
            show_time=True,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
    else:
        ch = logging.StreamHandler()
        ch.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-7s | %(message)s", datefmt="%H:%M:%S",
        ))
    ch.setLevel(console_level)
    logger.addHandler(ch)

    logger.info("=" * 60)
    logger.info("Logger initialized: %s", name)
    if log_file is not None:
        logger.info("Log file: %s", log_file)
    logger.info("Console level: %s", logging.getLevelName(console_level))
    logger.info("=" * 60)

    return logger
