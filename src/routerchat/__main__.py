"""Main entry point for running the routerchat application."""

import asyncio
import contextlib

import routerchat.entrypoint
from routerchat.core.config import ConfigFileEmptyError, get_config_or_default
from routerchat.core.error_handling import (
    configure_logging,
    install_global_exception_hooks,
    register_asyncio_exception_handler,
)


def main() -> None:
    """Run the application entry point."""
    try:
        log_level = get_config_or_default().get("log_level") or "WARNING"
    except ConfigFileEmptyError:
        log_level = "WARNING"
    configure_logging(str(log_level))
    install_global_exception_hooks()
    with asyncio.Runner() as runner:
        register_asyncio_exception_handler(runner.get_loop())
        with contextlib.suppress(KeyboardInterrupt):
            runner.run(routerchat.entrypoint.main())


if __name__ == "__main__":
    main()
