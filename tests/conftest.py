from unittest.mock import AsyncMock

import pytest

import apibind
from apibind._cogs.clients.transport import Response

HOST = 'https://api.families.com'
JSONAPI = {'Content-Type': 'application/vnd.api+json'}


class FakeTransport:
    """
    A transport that records the requests and responds with pre-set responses.

    By default, every request gets an empty "204 No Content" response.
    """

    def __init__(self) -> None:
        super().__init__()
        self.send = AsyncMock(return_value=Response(status=204))
        self.close = AsyncMock()


@pytest.fixture()
def transport():
    return FakeTransport()


@pytest.fixture()
def respond(transport):
    """
    Set the documents that the fake server responds with, in order.

    Sample usage::

        def test_me(api, respond):
            respond({'data': {'type': 'children', 'id': '1'}})
            await api.Child.get('1')
    """
    def responder(*bodies, status=200, headers=JSONAPI):
        responses = [Response(status=status, headers=headers, data=body) for body in bodies]
        if len(responses) == 1:
            transport.send.side_effect = None
            transport.send.return_value = responses[0]
        else:
            transport.send.side_effect = responses
    return responder


@pytest.fixture()
def api_cls():

    class FamilyApi(apibind.Connection):
        HOST = HOST

    @FamilyApi.register
    class Item(apibind.Resource):
        TYPE = 'items'

    @FamilyApi.register
    class Parent(apibind.Resource):
        TYPE = 'parents'

    @FamilyApi.register
    class Child(apibind.Resource):
        TYPE = 'children'

    return FamilyApi


@pytest.fixture()
def api(api_cls, transport):
    return api_cls(auth='TOKEN', transport=transport)


@pytest.fixture()
def assert_request(transport):
    """
    Assert on the last request sent, as seen by the transport.

    Only the specified keyword arguments are checked; the headers are
    checked only if specified, and only the specified ones.
    """
    def asserter(method, url, **kwargs):
        assert transport.send.await_count >= 1
        args, actual = transport.send.await_args
        assert args == (method, url if '://' in url else HOST + url)
        headers = kwargs.pop('headers', None)
        for key, value in kwargs.items():
            assert actual[key] == value, key
        for key, value in (headers or {}).items():
            assert actual['headers'][key] == value, key
    return asserter


@pytest.fixture(autouse=True)
def _caplog_all_levels(caplog):
    caplog.set_level(0)
