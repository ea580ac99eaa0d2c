import logging

import pytest

from oee_tracker.logging_conf import LIBRARY_LEVELS, configure_logging


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    app_level = logging.getLogger("oee_tracker").level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("oee_tracker").setLevel(app_level)


def test_app_level_independent_of_root():
    configure_logging("DEBUG", "WARNING")
    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("oee_tracker").level == logging.WARNING
    for name, level in LIBRARY_LEVELS.items():
        assert logging.getLogger(name).level == level


def test_app_level_follows_root_when_empty():
    configure_logging("warning")
    assert logging.getLogger().level == logging.WARNING
    assert logging.getLogger("oee_tracker").level == logging.WARNING


def test_invalid_level_falls_back_to_info():
    configure_logging("LOUD")
    assert logging.getLogger().level == logging.INFO


def test_repeated_configuration_keeps_single_handler():
    configure_logging("INFO")
    configure_logging("INFO")
    assert len(logging.getLogger().handlers) == 1
