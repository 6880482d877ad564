"""
Authentication headers for the outgoing requests.

The library does not implement any login flows: the credentials are provided
by the callers, either as a static token or as a callable. The callable is
invoked for every request, so it can refresh the credentials on its own;
it returns the headers to be merged into the request (or an awaitable of them).

Static tokens are wrapped into :class:`BearerAuth`, which is a callable too,
so that the rest of the library deals with the callables only.
"""
import dataclasses
import inspect
from typing import Awaitable, Callable, Dict, Mapping, Optional, Union

AuthHeaders = Mapping[str, str]
AuthProvider = Callable[[], Union[AuthHeaders, Awaitable[AuthHeaders]]]


@dataclasses.dataclass(frozen=True)
class BearerAuth:
    """
    A static token sent as ``Authorization: Bearer <token>``.

    Being a frozen dataclass, two providers with the same token are equal,
    which makes the connections' states comparable regardless of whether
    the token was given at construction or via ``configure()``.
    """
    token: str
    scheme: str = 'Bearer'  # RFC-7235/5.1: e.g. Bearer, Basic, Digest, etc.

    def __call__(self) -> AuthHeaders:
        return {'Authorization': f'{self.scheme} {self.token}'}

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}(scheme={self.scheme!r}, token=...)'


def as_provider(auth: object) -> AuthProvider:
    """ Interpret the user-provided auth value as a headers-providing callable. """
    if callable(auth):
        return auth
    return BearerAuth(str(auth))


async def resolve_headers(auth: Optional[AuthProvider]) -> Dict[str, str]:
    if auth is None:
        return {}
    headers = auth()
    if inspect.isawaitable(headers):
        headers = await headers
    return dict(headers or {})
