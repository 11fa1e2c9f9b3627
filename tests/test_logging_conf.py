from __future__ import annotations

import logging

import pytest

from bagline.logging_conf import configure_logging


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    noisy = {name: logging.getLogger(name).level for name in ("nicegui", "uvicorn.access", "watchfiles")}
    yield root
    for h in list(root.handlers):
        root.removeHandler(h)
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)
    for name, lvl in noisy.items():
        logging.getLogger(name).setLevel(lvl)


def test_configure_logging_sets_level_and_single_handler(root_logger):
    assert configure_logging("debug") == logging.DEBUG
    configure_logging("debug")

    assert root_logger.level == logging.DEBUG
    assert len(root_logger.handlers) == 1
    assert logging.getLogger("nicegui").level == logging.WARNING
    assert logging.getLogger("uvicorn.access").level == logging.WARNING


def test_unknown_level_falls_back_to_info(root_logger):
    assert configure_logging("loud") == logging.INFO
    assert root_logger.level == logging.INFO
