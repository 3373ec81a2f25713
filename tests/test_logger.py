from __future__ import annotations

import logging

from gazelle.logger import TRACE, ColoredFormatter, resolve_level, setup_logging


def test_resolve_level():
    assert resolve_level("trace") == TRACE
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level("bogus") == logging.INFO


def test_noisy_loggers_are_held_back():
    setup_logging("DEBUG")
    assert logging.getLogger("web3").level == logging.WARNING

    setup_logging("TRACE")
    assert logging.getLogger("web3").level == TRACE


def test_colored_formatter_restores_levelname():
    record = logging.LogRecord("x", logging.WARNING, __file__, 1, "hi", None, None)

    output = ColoredFormatter("%(levelname)s %(message)s").format(record)

    assert "WARNING" in output and "\033[" in output
    assert record.levelname == "WARNING"
