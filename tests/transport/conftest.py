import aiohttp.test_utils
import aiohttp.web
import pytest

from apibind._cogs.clients.transport import AiohttpTransport

JSONAPI = 'application/vnd.api+json'


async def items(request):
    return aiohttp.web.json_response({'data': [
        {'type': 'items', 'id': '1', 'attributes': {'name': 'first'}},
    ]}, content_type=JSONAPI)


async def echo(request):
    return aiohttp.web.json_response({
        'method': request.method,
        'headers': dict(request.headers),
        'query': dict(request.query),
        'body': await request.text(),
    }, content_type=JSONAPI)


async def redirect(request):
    raise aiohttp.web.HTTPFound('/items')


async def no_content(request):
    return aiohttp.web.Response(status=204)


async def plain(request):
    return aiohttp.web.Response(body=b'hello', content_type='text/plain')


async def structured_error(request):
    status = int(request.match_info['status'])
    return aiohttp.web.json_response({'errors': [
        {'status': str(status), 'code': 'oops', 'title': 'Oops', 'detail': 'Something failed'},
    ]}, status=status, content_type=JSONAPI)


async def unstructured_error(request):
    return aiohttp.web.Response(status=500, text='Internal error')


@pytest.fixture()
async def server():
    app = aiohttp.web.Application()
    app.router.add_route('GET', '/items', items)
    app.router.add_route('*', '/echo', echo)
    app.router.add_route('GET', '/redirect', redirect)
    app.router.add_route('DELETE', '/no-content', no_content)
    app.router.add_route('GET', '/plain', plain)
    app.router.add_route('GET', '/errors/{status}', structured_error)
    app.router.add_route('GET', '/crash', unstructured_error)
    server = aiohttp.test_utils.TestServer(app)
    await server.start_server()
    try:
        yield server
    finally:
        await server.close()


@pytest.fixture()
def url(server):
    def make_url(path):
        return str(server.make_url(path))
    return make_url


@pytest.fixture()
async def http():
    transport = AiohttpTransport()
    try:
        yield transport
    finally:
        await transport.close()
