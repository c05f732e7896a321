"""
Rich logging for DOCX assembly.

Provides colorful console logging using the rich library. The library itself
only creates module loggers; applications opt in by calling ``setup_logging``.
"""

import logging
import sys
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "docx_assembler"

_HANDLER_MARKER = "_docx_assembler_handler"


def _resolve_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), logging.INFO)


def _build_rich_handler(console: Optional[Console] = None) -> logging.Handler:
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=True,
        show_path=True,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt="[%X]"))
    return handler


def _build_standard_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    return handler


def setup_logging(
    level: Union[str, int] = "INFO",
    use_rich: bool = True,
    console: Optional[Console] = None,
) -> logging.Logger:
    """
    Setup logging for the docx_assembler package.

    Calling it again replaces the handler installed by the previous call.

    Args:
        level: Log level name or number
        use_rich: Whether to use rich logging
        console: Optional rich console (stderr by default)

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(_resolve_level(level))

    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            logger.removeHandler(handler)

    handler = _build_rich_handler(console) if use_rich else _build_standard_handler()
    setattr(handler, _HANDLER_MARKER, True)
    logger.addHandler(handler)

    logger.debug(f"Logging initialized at {logging.getLevelName(logger.level)} level")
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger below the package namespace.

    Args:
        name: Dotted suffix, or a full ``docx_assembler.*`` module name

    Returns:
        Logger instance
    """
    if not name:
        return logging.getLogger(PACKAGE_LOGGER)
    if name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
