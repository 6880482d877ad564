"""
The transport: the only place where the actual HTTP requests are made.

The rest of the library sees only the :class:`Transport` protocol: a single
``send()`` coroutine that takes the method, the absolute url, the headers,
the JSON payload, and the query parameters, and returns a :class:`Response`
with the status, the headers, and the already parsed body.

The transport does not interpret the {json:api} documents. It only fails on
the erroneous HTTP statuses (see :func:`errors.check_response`), and never
follows the redirects unless explicitly asked to.

The default implementation is based on ``aiohttp``. Tests and SDK authors can
provide their own transports with the same ``send()`` signature.
"""
import dataclasses
import json
from typing import Any, Dict, Mapping, Optional

import aiohttp
from typing_extensions import Protocol

from apibind._cogs.clients import errors
from apibind._cogs.configs import configuration
from apibind._cogs.helpers import typedefs, versions


@dataclasses.dataclass(frozen=True)
class Response:
    """
    A fully read response: no streams, no open connections behind it.

    ``data`` is the JSON-decoded body for the JSON-like content types,
    raw bytes for all other content types, ``None`` for the empty bodies.
    """
    status: int
    headers: Mapping[str, str] = dataclasses.field(default_factory=dict)
    data: Any = None

    @property
    def location(self) -> Optional[str]:
        for key, value in self.headers.items():
            if key.lower() == 'location':
                return value
        return None

    @property
    def is_redirect(self) -> bool:
        return 300 <= self.status < 400 and bool(self.location)


class Transport(Protocol):

    async def send(
            self,
            method: str,
            url: str,
            *,
            headers: Mapping[str, str],
            payload: Optional[object] = None,
            params: Optional[typedefs.QueryParams] = None,
            max_redirects: int = 0,
            timeout: Optional[Any] = None,
            **options: Any,
    ) -> Response: ...

    async def close(self) -> None: ...


class AiohttpTransport:
    """
    A transport over a single ``aiohttp.ClientSession``.

    The session is either provided (and then owned by the caller), or created
    on the first request (and then owned & closed by the transport).
    It cannot be created in the constructor, since the constructor can be
    called outside of the event loop (e.g. at the module level).
    """

    def __init__(
            self,
            session: Optional[aiohttp.ClientSession] = None,
            *,
            settings: Optional[configuration.ConnectionSettings] = None,
    ) -> None:
        super().__init__()
        self.settings = settings if settings is not None else configuration.ConnectionSettings()
        self._session = session
        self._owned = session is None

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            # It is a good practice to self-identify a bit.
            self._session = aiohttp.ClientSession(headers={
                'User-Agent': f'apibind/{versions.version or "unknown"}',
            })
            self._owned = True
        return self._session

    async def send(
            self,
            method: str,
            url: str,
            *,
            headers: Mapping[str, str],
            payload: Optional[object] = None,
            params: Optional[typedefs.QueryParams] = None,
            max_redirects: int = 0,
            timeout: Optional[aiohttp.ClientTimeout] = None,
            **options: Any,
    ) -> Response:

        if timeout is None:
            timeout = aiohttp.ClientTimeout(
                total=self.settings.networking.request_timeout,
                sock_connect=self.settings.networking.connect_timeout,
            )

        # The forms & multiparts must negotiate their own content type (with the boundaries).
        headers = dict(headers)
        if payload is not None:
            options['data'] = json.dumps(payload).encode('utf-8')
        elif isinstance(options.get('data'), aiohttp.FormData):
            headers = {key: val for key, val in headers.items() if key.lower() != 'content-type'}

        if max_redirects > 0:
            options.update(allow_redirects=True, max_redirects=max_redirects)
        else:
            options.update(allow_redirects=False)

        async with self.session.request(
            method=method.upper(),
            url=url,
            headers=headers,
            params=encode_params(params) if params else None,
            timeout=timeout,
            **options,
        ) as response:
            await errors.check_response(response)
            data = await parse_body(response)
            return Response(status=response.status, headers=dict(response.headers), data=data)

    async def close(self) -> None:
        if self._owned and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None


def encode_params(params: typedefs.QueryParams) -> Dict[str, str]:
    """
    Stringify the query values: ``aiohttp`` (in fact, ``yarl``) rejects booleans.
    """
    return {
        str(key): ('true' if value is True else 'false' if value is False else str(value))
        for key, value in params.items()
        if value is not None
    }


async def parse_body(response: aiohttp.ClientResponse) -> Any:
    body = await response.read()
    if not body:
        return None
    if 'json' in (response.content_type or ''):
        return json.loads(body.decode(response.charset or 'utf-8'))
    return body
