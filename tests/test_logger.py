import logging

from rich.logging import RichHandler

from skyforge.logger import setup_logger


def test_setup_logger_is_idempotent():
    first = setup_logger("skyforge-test")
    second = setup_logger("skyforge-test", level=logging.DEBUG)

    assert first is second
    assert len(second.handlers) == 1
    assert second.level == logging.DEBUG


def test_logs_go_to_stderr():
    handler = setup_logger("skyforge-test-stderr").handlers[0]

    assert isinstance(handler, RichHandler)
    assert handler.console.stderr is True
