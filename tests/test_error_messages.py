import logging

import pytest

from jumpmap.errors import ConfigError, DuplicateEntityError, JumpMapError, ParseError
from jumpmap.logging_utils import (
    configure_logging,
    get_user_message,
    log_exception,
    resolve_log_level,
    run_with_error_handling,
)


def test_error_hierarchy() -> None:
    for cls in (ConfigError, DuplicateEntityError, ParseError):
        assert issubclass(cls, JumpMapError)


def test_user_message_and_context() -> None:
    exc = DuplicateEntityError(
        "Duplicate system name: Jita",
        user_message="Input lists Jita twice.",
        context={"name": "Jita"},
    )

    assert exc.user_message == "Input lists Jita twice."
    assert get_user_message(exc) == "Input lists Jita twice."
    assert exc.log_message() == "Duplicate system name: Jita: {'name': 'Jita'}"
    assert ParseError("bad").log_message() == "bad"


def test_unexpected_errors_get_generic_message() -> None:
    assert get_user_message(RuntimeError("boom")) == "Unexpected error: boom"


def test_run_with_error_handling_logs_and_reraises(caplog) -> None:
    logger = logging.getLogger("jumpmap.test")
    logger.setLevel(logging.INFO)
    logger.propagate = True
    logger.handlers.clear()

    def _raise_parse_error() -> None:
        raise ParseError("record 'X' has non-numeric 'x': 'abc'.")

    with caplog.at_level(logging.INFO, logger=logger.name):
        with pytest.raises(ParseError):
            run_with_error_handling(_raise_parse_error, logger=logger)

    assert any("non-numeric" in record.getMessage() for record in caplog.records)


def test_log_exception_emits_traceback_at_debug_level(caplog) -> None:
    logger = logging.getLogger("jumpmap.test.debug")
    logger.setLevel(logging.DEBUG)
    logger.propagate = True
    logger.handlers.clear()

    with caplog.at_level(logging.DEBUG, logger=logger.name):
        log_exception(logger, ConfigError("Config not found: missing.yaml"))

    assert any(record.exc_info for record in caplog.records)
    assert all(
        record.levelno == logging.DEBUG for record in caplog.records if record.exc_info
    )


@pytest.mark.parametrize("level, expected", [("debug", logging.DEBUG), (30, 30), (None, logging.INFO)])
def test_resolve_log_level(level, expected) -> None:
    assert resolve_log_level(level) == expected


def test_resolve_log_level_rejects_unknown() -> None:
    with pytest.raises(ConfigError):
        resolve_log_level("chatty")


def test_configure_logging_returns_package_logger() -> None:
    logger = configure_logging("WARNING")

    assert logger.name == "jumpmap"
    assert logger.level == logging.WARNING
    logger.setLevel(logging.NOTSET)
