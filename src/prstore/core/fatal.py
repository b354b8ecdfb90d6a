"""Process-aborting checks for programming errors."""

from typing import NoReturn, Optional, TypeVar

from loguru import logger

from .exceptions import FatalError

T = TypeVar("T")


def fatal_error(message: str) -> NoReturn:
    """Abort with a descriptive message.

    Args:
        message: Human readable description of the violated precondition.

    Raises:
        FatalError: Always.
    """
    logger.critical(message)
    raise FatalError(message)


def force_unwrap(message: str, value: Optional[T]) -> T:
    """Return ``value``, aborting with ``message`` if it is None."""
    if value is None:
        fatal_error(message)
    return value
