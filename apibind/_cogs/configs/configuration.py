"""
All configuration flags, options, settings to fine-tune a connection.

All settings are grouped semantically just for convenience
(instead of a flat mega-object with all the values in it).

In this library, they are called *"settings"* (plural).
Combined, they form a *"configuration"* (singular).

Some of the settings are scalars, some are optional, some are not
(but all of them have reasonable defaults). The settings are per-connection:
every :class:`apibind.Connection` instance has its own copy, which can be
modified after the connection is created::

    api = FamilyApi(auth='TOKEN')
    api.settings.networking.request_timeout = 30
"""
import dataclasses
from typing import Optional


@dataclasses.dataclass
class NetworkingSettings:

    request_timeout: Optional[float] = 5 * 60  # == aiohttp.client.DEFAULT_TIMEOUT
    """
    A timeout for a single request to the API, in seconds.

    It is used only if no explicit ``timeout=`` is passed to the request
    (e.g. by an SDK author). Set to ``None`` to wait forever.
    """

    connect_timeout: Optional[float] = None
    """
    A timeout for the TCP connection phase of a request, in seconds.
    ``None`` means that the overall ``request_timeout`` is the only limit.
    """

    max_redirects: int = 0
    """
    How many redirects are followed by the regular API requests.

    The default of zero means that the 3xx responses are returned as they are,
    so that the resources could capture the redirect location explicitly
    (see :meth:`apibind.Resource.reload` and :meth:`apibind.Resource.follow`).
    """

    follow_max_redirects: int = 10
    """
    How many redirects are followed by the plain GET requests of
    :meth:`apibind.Resource.follow` -- those which download the redirect's
    target outside of the {json:api} protocol.
    """


@dataclasses.dataclass
class NegotiationSettings:

    media_type: str = 'application/vnd.api+json'
    """
    The content type sent with every {json:api} request.
    """

    bulk_profile: str = 'bulk'
    """
    The profile appended to the content type for the bulk operations,
    e.g. ``application/vnd.api+json;profile="bulk"``.
    """

    @property
    def bulk_media_type(self) -> str:
        return f'{self.media_type};profile="{self.bulk_profile}"'


@dataclasses.dataclass
class ConnectionSettings:
    networking: NetworkingSettings = dataclasses.field(default_factory=NetworkingSettings)
    negotiation: NegotiationSettings = dataclasses.field(default_factory=NegotiationSettings)
