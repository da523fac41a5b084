"""Logging setup for LuneStock.

All modules log under the ``lunestock`` hierarchy so a single call to
``setup_logger`` (done once by the Streamlit entry point) configures them.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

ROOT_LOGGER = "lunestock"

_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logger(
    name: str = ROOT_LOGGER,
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Configure and return a logger.

    Args:
        name: Logger name.
        level: Logging level, as a number or a name such as "DEBUG".
        log_file: Optional path to log file. If None, logs to stderr only.

    Returns:
        Configured logger. Calling again is a no-op once handlers exist.
    """
    log = logging.getLogger(name)
    if log.handlers:
        return log

    log.setLevel(_resolve_level(level))
    fmt = logging.Formatter(_FORMAT, datefmt=_DATEFMT)

    h = logging.StreamHandler(sys.stderr)
    h.setFormatter(fmt)
    log.addHandler(h)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setFormatter(fmt)
        log.addHandler(fh)

    return log


def setup_from_config() -> logging.Logger:
    """Configure the root application logger from LOG_LEVEL / LOG_FILE."""
    from lunestock.utils.config import log_file, log_level

    return setup_logger(ROOT_LOGGER, level=log_level(), log_file=log_file())


def get_logger(suffix: Optional[str] = None) -> logging.Logger:
    """
    Return the application logger, or a child of it.

    ``get_logger("store")`` returns ``lunestock.store``.
    """
    if not suffix:
        return logging.getLogger(ROOT_LOGGER)
    return logging.getLogger(f"{ROOT_LOGGER}.{suffix}")
