"""Centralized exception logging and process-level hooks."""

from __future__ import annotations

import logging
import sys
import threading
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Mapping
    from types import TracebackType

LOGGER = logging.getLogger(__name__)
COMMON_HANDLER_EXCEPTIONS = (
    AttributeError,
    LookupError,
    OSError,
    RuntimeError,
    TimeoutError,
    TypeError,
    ValueError,
)


def _format_context(context: Mapping[str, object]) -> str:
    """Render structured context as a stable key-value string."""
    return ", ".join(f"{key}={context[key]!r}" for key in sorted(context))


def log_exception(
    *,
    logger: logging.Logger,
    message: str,
    error: BaseException,
    context: Mapping[str, object] | None = None,
) -> None:
    """Write a structured exception log entry."""
    if context:
        logger.error(
            "%s | %s",
            message,
            _format_context(context),
            exc_info=error,
        )
        return
    logger.error(message, exc_info=error)


def describe_error(error: BaseException) -> str:
    """Return a single human-readable line for an exception."""
    text = str(error).strip()
    if text:
        return text
    return type(error).__name__


def register_asyncio_exception_handler(
    loop: asyncio.AbstractEventLoop,
    *,
    logger: logging.Logger | None = None,
) -> None:
    """Install a loop-level asyncio exception handler."""
    target_logger = logger or LOGGER

    def _handle_exception(
        _loop: asyncio.AbstractEventLoop,
        context: dict[str, Any],
    ) -> None:
        error = context.get("exception")
        message = str(context.get("message") or "Unhandled asyncio exception")
        if isinstance(error, BaseException):
            log_exception(
                logger=target_logger,
                message=message,
                error=error,
                context=context,
            )
            return
        target_logger.error("%s | %s", message, _format_context(context))

    loop.set_exception_handler(_handle_exception)


def install_global_exception_hooks(*, logger: logging.Logger | None = None) -> None:
    """Install process-level exception hooks for uncaught exceptions."""
    target_logger = logger or LOGGER
    previous_excepthook = sys.excepthook
    previous_thread_hook = threading.excepthook

    def _sys_excepthook(
        exc_type: type[BaseException],
        exc_value: BaseException,
        exc_traceback: TracebackType | None,
    ) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            previous_excepthook(exc_type, exc_value, exc_traceback)
            return
        target_logger.error(
            "Unhandled exception at process boundary",
            exc_info=(exc_type, exc_value, exc_traceback),
        )

    def _thread_excepthook(args: threading.ExceptHookArgs) -> None:
        if issubclass(args.exc_type, KeyboardInterrupt):
            previous_thread_hook(args)
            return
        thread_name = args.thread.name if args.thread else "unknown"
        exc_value = args.exc_value
        if not isinstance(exc_value, BaseException):
            target_logger.error("Unhandled thread exception | thread=%s", thread_name)
            return
        target_logger.error(
            "Unhandled thread exception | thread=%s",
            thread_name,
            exc_info=(args.exc_type, exc_value, args.exc_traceback),
        )

    sys.excepthook = _sys_excepthook
    threading.excepthook = _thread_excepthook


def configure_logging(level: str | int = logging.INFO) -> None:
    """Configure root logging for the console entry points."""
    resolved_level: int | str = level
    if isinstance(level, str):
        resolved_level = level.strip().upper() or logging.INFO
    logging.basicConfig(
        level=resolved_level,
        format="%(asctime)s %(levelname)s: %(message)s",
    )
    # httpx logs every request line at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
