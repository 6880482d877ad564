import functools

import click.testing
import pytest

from apibind.cli import main


@pytest.fixture()
def runner():
    runner = click.testing.CliRunner()
    return runner


@pytest.fixture()
def invoke(runner):
    return functools.partial(runner.invoke, main)


@pytest.fixture(autouse=True)
def configure(mocker):
    return mocker.patch('apibind._core.loggers.configure')


@pytest.fixture(autouse=True)
def fake_transport(mocker, transport):
    mocker.patch('apibind._core.connections._make_transport', return_value=transport)
    return transport
