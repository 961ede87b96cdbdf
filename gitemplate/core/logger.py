"""Unified logging for gitemplate with console and optional file output."""
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

console = Console(stderr=True)

ROOT_LOGGER_NAME = "gitemplate"
FILE_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"


def setup_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    """Configure the gitemplate logger hierarchy for a CLI run.

    Args:
        verbose: Enable debug-level logging (shell command tracing)
        log_file: Optional path to also write detailed logs to

    Note:
        Safe to call more than once; an existing file handler for the same
        path is not duplicated.
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    level = logging.DEBUG if verbose else logging.INFO
    root_logger.setLevel(level)

    if not any(isinstance(h, RichHandler) for h in root_logger.handlers):
        handler = RichHandler(console=console, show_path=False, show_time=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(handler)

    if not log_file:
        return

    target = Path(log_file).expanduser()
    for existing in root_logger.handlers:
        if isinstance(existing, logging.FileHandler) and Path(existing.baseFilename) == target.resolve():
            return

    target.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(target)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root_logger.addHandler(file_handler)

    root_logger.debug(f"gitemplate logging initialized: {target}")


def get_logger(name: str) -> logging.Logger:
    """Get a logger inside the gitemplate hierarchy.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger that propagates to the handlers installed by setup_logging()
    """
    return logging.getLogger(name)
