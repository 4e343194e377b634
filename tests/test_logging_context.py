import logging

import structlog

from safeswap.logging_config import setup_logging, swap_log_context


def test_swap_context_is_bound_and_reset():
    """Attempt metadata is visible inside the block and gone after it."""

    structlog.contextvars.clear_contextvars()

    with swap_log_context("swap_1", "0xABC"):
        bound = structlog.contextvars.get_contextvars()
        assert bound == {"swap_attempt": "swap_1", "wallet": "0xabc"}

    assert structlog.contextvars.get_contextvars() == {}


def test_nested_contexts_restore_outer_values():
    structlog.contextvars.clear_contextvars()

    with swap_log_context("outer", "0x1"):
        with swap_log_context("inner", "0x2"):
            assert structlog.contextvars.get_contextvars()["swap_attempt"] == "inner"
        assert structlog.contextvars.get_contextvars()["swap_attempt"] == "outer"


def test_setup_logging_quiets_http_libraries():
    setup_logging("INFO")

    assert logging.getLogger().level == logging.INFO
    assert logging.getLogger("httpx").level == logging.WARNING
