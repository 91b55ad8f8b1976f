"""Test fixtures."""
import logging

import coloredlogs
import pytest


@pytest.fixture(scope="session")
def logger(request) -> logging.Logger:
    """Initialize stdout logger using colored output."""

    logger = logging.getLogger()

    # pytest --log-level option
    log_level = request.config.getoption("--log-level") or logging.INFO

    # Set log format to dislay the logger name to hunt down verbose logging modules
    fmt = "%(name)-25s %(levelname)-8s %(message)s"

    coloredlogs.install(level=log_level, fmt=fmt, logger=logger)

    # Disable logging of JSON-RPC requests and replies
    logging.getLogger("web3.RequestManager").setLevel(logging.WARNING)
    logging.getLogger("web3.providers.HTTPProvider").setLevel(logging.WARNING)

    # Disable all internal debug logging of requests and urllib3
    # E.g. HTTP traffic
    logging.getLogger("requests").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    return logger
