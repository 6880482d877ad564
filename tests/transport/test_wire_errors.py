import aiohttp
import pytest

import apibind
from apibind import JsonApiConflictError, JsonApiError, JsonApiForbiddenError, \
                    JsonApiNotFoundError, JsonApiUnauthorizedError


@pytest.mark.parametrize('status, cls', [
    (400, JsonApiError),
    (401, JsonApiUnauthorizedError),
    (403, JsonApiForbiddenError),
    (404, JsonApiNotFoundError),
    (409, JsonApiConflictError),
    (422, JsonApiError),
    (500, JsonApiError),
])
async def test_structured_errors(http, url, status, cls):
    with pytest.raises(JsonApiError) as err:
        await http.send('get', url(f'/errors/{status}'), headers={})
    assert type(err.value) is cls
    assert err.value.status == status
    assert err.value.errors == [
        {'status': str(status), 'code': 'oops', 'title': 'Oops', 'detail': 'Something failed'},
    ]
    assert err.value.codes == ['oops']
    assert err.value.titles == ['Oops']
    assert err.value.details == ['Something failed']
    assert isinstance(err.value.__cause__, aiohttp.ClientResponseError)


async def test_unstructured_errors_escalate_as_is(http, url):
    with pytest.raises(aiohttp.ClientResponseError) as err:
        await http.send('get', url('/crash'), headers={})
    assert err.value.status == 500


async def test_connection_errors_escalate_as_is(http):
    with pytest.raises(aiohttp.ClientConnectionError):
        await http.send('get', 'http://127.0.0.1:1/', headers={})


async def test_structured_errors_via_connection(url, server):
    async with apibind.Connection(host=url('/'), auth='TOKEN') as api:
        with pytest.raises(JsonApiNotFoundError):
            await api.request('get', '/errors/404')


def test_error_message_with_details():
    err = JsonApiError([{'detail': 'Name is required'}, {'title': 'Bad age'}], status=422)
    assert str(err) == '(422) Name is required; Bad age'


def test_error_message_without_errors():
    err = JsonApiError([], status=400)
    assert str(err) == '(400)'
    assert err.errors == []
