"""
Connections: the host, the credentials, and the resource types of an API.

An SDK for a specific {json:api} server is made by subclassing the connection
and registering the resource classes on it::

    class TransifexApi(apibind.Connection):
        HOST = 'https://rest.api.transifex.com'

    @TransifexApi.register
    class Organization(apibind.Resource):
        TYPE = 'organizations'

    api = TransifexApi(auth='TOKEN')
    organization = await api.Organization.get('o:acme')

The users of the SDK can then make several connections (e.g. with different
credentials) without any interference between them: every connection has its
own bindings of the resource types (see :mod:`apibind._core.registries`).
"""
import logging
import urllib.parse
from typing import Any, ClassVar, Dict, Mapping, Optional, Type, TypeVar

from apibind._cogs.clients import auth, transport
from apibind._cogs.configs import configuration
from apibind._cogs.helpers import typedefs
from apibind._cogs.structs import documents
from apibind._core import registries, relationships, resources

default_logger = logging.getLogger(__name__)

ResourceT = TypeVar('ResourceT', bound=resources.Resource)


class Connection:

    HOST: ClassVar[Optional[str]] = None
    """ The default host of the API, if not provided to the constructor. """

    _registry: ClassVar[registries.TypeRegistry] = registries.TypeRegistry()

    host: Optional[str]
    auth: Optional[auth.AuthProvider]
    settings: configuration.ConnectionSettings
    transport: transport.Transport

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._registry = registries.TypeRegistry(parent=cls._registry)

    def __init__(
            self,
            host: Optional[str] = None,
            auth: Any = None,
            *,
            settings: Optional[configuration.ConnectionSettings] = None,
            transport: Optional[transport.Transport] = None,
    ) -> None:
        super().__init__()
        self.host = self.HOST
        self.auth = None
        self.settings = settings if settings is not None else configuration.ConnectionSettings()
        self.transport = transport if transport is not None else _make_transport(self.settings)
        self._bindings: Dict[str, registries.BoundType] = {}
        self.configure(host=host, auth=auth)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.host}>"

    async def __aenter__(self) -> "Connection":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self.transport.close()

    def configure(self, host: Optional[str] = None, auth: Any = None) -> None:
        """
        Re-configure the connection after it is created.

        The ``auth`` is either a callable that returns the authentication headers
        (or an awaitable of them), or a token to be sent as a bearer token.
        """
        if host:
            self.host = host
        if auth:
            self.auth = _auth_provider(auth)

    #
    # The resource types.
    #

    @classmethod
    def register(cls, resource_cls: Type[ResourceT]) -> Type[ResourceT]:
        """
        Declare a resource class for this connection class and its descendants.

        Can be used as a decorator. Once registered, the resource type is
        available on every connection instance by the class name, by the type-tag,
        and by the type-tag as an item::

            api.Organization
            api.organizations
            api['organizations']
        """
        cls._registry.declare(resource_cls)
        return resource_cls

    def __getattr__(self, name: str) -> registries.BoundType:
        if name.startswith('_'):
            raise AttributeError(name)
        resource_cls = self._registry.get_by_name(name)
        if resource_cls is None:
            raise AttributeError(f"{self.__class__.__name__} has no resource type {name!r}")
        assert resource_cls.TYPE is not None  # for type-checking
        return self.bind(resource_cls.TYPE)

    def __getitem__(self, type: str) -> registries.BoundType:
        return self.bind(type)

    def bind(self, type: str) -> registries.BoundType:
        """
        Get the resource type bound to this connection, bind it if not yet.

        The undeclared type-tags are bound to the generic :class:`Resource`.
        """
        if type not in self._bindings:
            resource_cls = self._registry.get_by_type(type) or resources.Resource
            self._bindings[type] = registries.BoundType(self, resource_cls, type)
        return self._bindings[type]

    def instantiate(
            self,
            data: Mapping[str, Any],
            *,
            included_map: Optional[relationships.IncludedMap] = None,
    ) -> resources.Resource:
        """
        Construct a resource of the appropriate class from a raw document.
        """
        type = data.get('type')
        if not type:
            raise TypeError(f"Cannot instantiate a resource without a type: {data!r}")
        return self.bind(type)(data, _included_map=included_map)

    def coerce_to_resource(self, value: Any) -> Any:
        """
        Interpret a value as a resource if it is not a resource yet.

        Used when it is unknown whether the value is a resource, an identifier,
        or a relationship object with an identifier in it.
        """
        if value is None or isinstance(value, resources.Resource):
            return value
        elif isinstance(value, relationships.Identifier):
            return self.instantiate(value.as_resource_identifier())
        elif documents.has_data(value):
            return self.coerce_to_resource(value['data'])
        else:
            return self.instantiate(value)

    #
    # The requests.
    #

    async def request(
            self,
            method: str,
            url: str,
            *,
            payload: Optional[object] = None,
            params: Optional[typedefs.QueryParams] = None,
            bulk: bool = False,
            headers: Optional[Mapping[str, str]] = None,
            max_redirects: Optional[int] = None,
            timeout: Optional[Any] = None,
            logger: Optional[typedefs.Logger] = None,
            **options: Any,
    ) -> transport.Response:
        """
        Make a {json:api} request to the server.

        The relative urls are relative to the host. The authentication headers
        are added, and the explicitly given headers override all the others.
        The remote errors are raised as :class:`JsonApiError` if structured,
        or as the transport's errors as they are.
        """
        logger = logger if logger is not None else default_logger
        negotiation = self.settings.negotiation
        all_headers = {
            'Content-Type': negotiation.bulk_media_type if bulk else negotiation.media_type,
            **(await auth.resolve_headers(self.auth)),
            **(headers or {}),
        }
        url = self._make_url(url)
        max_redirects = self.settings.networking.max_redirects if max_redirects is None else max_redirects

        logger.debug(f"Requesting: {method.upper()} {url}")
        response = await self.transport.send(
            method, url,
            headers=all_headers,
            payload=payload,
            params=params,
            max_redirects=max_redirects,
            timeout=timeout,
            **options,
        )
        logger.debug(f"Responded with {response.status}: {method.upper()} {url}")
        return response

    async def follow(self, url: str) -> transport.Response:
        """
        Download a url outside of the {json:api} protocol (e.g. a redirect's
        target on a file storage), so without the API's headers and credentials.
        """
        default_logger.debug(f"Following: {url}")
        return await self.transport.send(
            'get', self._make_url(url),
            headers={},
            max_redirects=self.settings.networking.follow_max_redirects,
        )

    def _make_url(self, url: str) -> str:
        parsed = urllib.parse.urlsplit(url)
        if parsed.scheme and parsed.netloc:
            return url
        if not self.host:
            raise ValueError(f"Cannot request {url!r}: no host is configured.")
        return self.host.rstrip('/') + '/' + url.lstrip('/')


def _auth_provider(value: Any) -> auth.AuthProvider:
    return auth.as_provider(value)


def _make_transport(settings: configuration.ConnectionSettings) -> transport.Transport:
    return transport.AiohttpTransport(settings=settings)
