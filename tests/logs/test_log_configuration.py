import logging

import pytest

from apibind._core.loggers import LogFormat, ResourceJsonFormatter, configure


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    lowlevel = {name: (logging.getLogger(name).handlers[:], logging.getLogger(name).propagate)
                for name in ['asyncio', 'aiohttp']}
    try:
        yield
    finally:
        root.handlers[:] = handlers
        root.setLevel(level)
        for name, (lowhandlers, propagate) in lowlevel.items():
            logging.getLogger(name).handlers[:] = lowhandlers
            logging.getLogger(name).propagate = propagate


@pytest.mark.parametrize('kwargs, expected_level', [
    (dict(), logging.INFO),
    (dict(quiet=True), logging.WARNING),
    (dict(verbose=True), logging.DEBUG),
    (dict(debug=True), logging.DEBUG),
])
def test_levels(kwargs, expected_level):
    configure(**kwargs)
    assert logging.getLogger().level == expected_level


def test_json_format():
    configure(log_format=LogFormat.JSON)
    assert isinstance(logging.getLogger().handlers[-1].formatter, ResourceJsonFormatter)


def test_lowlevel_loggers_are_silenced_in_non_debug():
    configure(verbose=True)
    assert not logging.getLogger('aiohttp').propagate
    assert not logging.getLogger('asyncio').propagate


def test_lowlevel_loggers_propagate_in_debug():
    configure(debug=True)
    assert logging.getLogger('aiohttp').propagate
    assert logging.getLogger('asyncio').propagate


def test_repeated_configuration_replaces_own_handler():
    foreign = logging.NullHandler()
    logging.getLogger().addHandler(foreign)
    configure()
    configure(log_format=LogFormat.JSON)
    handlers = logging.getLogger().handlers
    own = [h for h in handlers if type(h).__module__ == 'apibind._core.loggers']
    assert len(own) == 1
    assert isinstance(own[0].formatter, ResourceJsonFormatter)
    assert foreign in handlers
