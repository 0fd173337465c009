"""Logging setup for the ``fmforge`` logger tree.

Importing the package only attaches a console handler (and only when the host
application has not configured logging itself). The CLI reconfigures with a
console level that follows its flags and adds a log file for post-mortems.
"""

from __future__ import annotations

import logging
import os
import traceback
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

_LOGGER = logging.getLogger("fmforge.logging")
_ROOT_LOGGER = "fmforge"
_LOG_DIR_ENV = "FMFORGE_LOG_DIR"
_DEBUG_ENV = "FMFORGE_DEBUG"
_LOG_FILE = "fmforge.log"
_FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False


def debug_enabled() -> bool:
    return bool(os.environ.get(_DEBUG_ENV))


def get_log_dir() -> Path:
    configured = os.environ.get(_LOG_DIR_ENV)
    if configured:
        return Path(configured).expanduser()
    return Path.home() / ".cache" / "fmforge" / "logs"


def get_log_path() -> Path:
    return get_log_dir() / _LOG_FILE


def console_level(*, verbose: bool = False, machine_output: bool = False) -> int:
    """Console threshold: debug when asked, warnings only under JSON output."""
    if verbose or debug_enabled():
        return logging.DEBUG
    if machine_output:
        return logging.WARNING
    return logging.INFO


def _console_handler(level: int) -> logging.Handler:
    handler = RichHandler(
        level=level,
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    return handler


def _file_handler() -> logging.Handler | None:
    path = get_log_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8")
    except OSError as exc:
        _LOGGER.warning("File logging disabled (%s): %s", path, exc)
        return None
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATE_FORMAT))
    return handler


def configure_logging(
    *,
    level: int | None = None,
    log_file: bool = False,
    force: bool = False,
) -> None:
    """Attach handlers to the ``fmforge`` logger.

    Without ``force`` this runs once and leaves a host's root handlers alone.
    ``log_file`` adds a debug-level file under ``FMFORGE_LOG_DIR``.
    """
    global _configured
    if _configured and not force:
        return

    logger = logging.getLogger(_ROOT_LOGGER)
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if force or not logging.getLogger().handlers:
        logger.addHandler(_console_handler(console_level() if level is None else level))
    if log_file:
        handler = _file_handler()
        if handler is not None:
            logger.addHandler(handler)

    logger.propagate = True
    _configured = True


def log_exception(context: str, exc: BaseException) -> Path | None:
    """Append ``exc`` with its traceback to the log file; returns the path written."""
    path = get_log_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as handle:
            handle.write(f"[{datetime.now().isoformat()}] {context} failed: {type(exc).__name__}: {exc}\n")
            handle.write("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
            handle.write("\n")
    except OSError as log_exc:
        _LOGGER.warning("Could not write %s: %s", path, log_exc)
        return None
    return path
