"""
{json:api} wire errors.

The underlying client library (now, ``aiohttp``) can be replaced in the future.
We cannot rely on embedding its exceptions all over the code in the library.
Hence, we have our own hierarchy of exceptions for the remote API's rejections.

Low-level errors, such as the network connectivity issues, SSL/HTTPS issues,
etc, are escalated from the client library as is, since they are related not
to the domain of {json:api}, but rather to the networking and encryption.
The same applies to the erroneous HTTP responses which carry no structured
error payload: they are escalated as the client library's errors unchanged.

The original errors of the client library are chained as the causes of our own
specialised errors -- for better explainability of errors in the stack traces.

Some selected HTTP statuses are made into their own classes, so that they
could be intercepted and handled by the callers. All other statuses are raised
as the base error class and are indistinguishable from each other
(except via the exception's fields).
"""
import collections.abc
import json
from typing import Collection, List, Optional

import aiohttp

from apibind._cogs.structs import documents


class JsonApiError(Exception):
    """
    The remote API rejected the request with a list of error objects.

    See: https://jsonapi.org/format/#errors
    """

    def __init__(
            self,
            errors: Optional[Collection[documents.RawError]],
            *,
            status: int,
    ) -> None:
        errors = list(errors) if errors else []
        message = '; '.join(_describe(error) for error in errors) or None
        super().__init__(message, errors)
        self._status = status
        self._errors = errors

    def __str__(self) -> str:
        return f"({self._status}) {self.args[0]}" if self.args[0] else f"({self._status})"

    @property
    def status(self) -> int:
        return self._status

    @property
    def errors(self) -> List[documents.RawError]:
        return self._errors

    @property
    def codes(self) -> List[Optional[str]]:
        return [error.get('code') for error in self._errors]

    @property
    def titles(self) -> List[Optional[str]]:
        return [error.get('title') for error in self._errors]

    @property
    def details(self) -> List[Optional[str]]:
        return [error.get('detail') for error in self._errors]


class JsonApiUnauthorizedError(JsonApiError):
    pass


class JsonApiForbiddenError(JsonApiError):
    pass


class JsonApiNotFoundError(JsonApiError):
    pass


class JsonApiConflictError(JsonApiError):
    pass


def _describe(error: documents.RawError) -> str:
    if not isinstance(error, collections.abc.Mapping):
        return str(error)
    return str(error.get('detail') or error.get('title') or error.get('code') or error)


async def check_response(
        response: aiohttp.ClientResponse,
) -> None:
    """
    Check for the {json:api} errors, and raise with extended information.
    """
    if response.status >= 400:

        # Read the response's body before it is closed by raise_for_status().
        payload: Optional[documents.RawDocument]
        try:
            text = await response.text()
            payload = json.loads(text) if text else None
        except (json.JSONDecodeError, UnicodeDecodeError, aiohttp.ClientConnectionError):
            payload = None

        # Only the structured error documents are interpreted; all others escalate as is.
        errors: Optional[List[documents.RawError]]
        if isinstance(payload, collections.abc.Mapping) and isinstance(payload.get('errors'), list):
            errors = payload['errors']
        else:
            errors = None

        cls = (
            JsonApiUnauthorizedError if response.status == 401 else
            JsonApiForbiddenError if response.status == 403 else
            JsonApiNotFoundError if response.status == 404 else
            JsonApiConflictError if response.status == 409 else
            JsonApiError
        )

        # Raise the library-specific error while keeping the original error in scope.
        # This call also closes the response's body, so it cannot be read afterwards.
        try:
            response.raise_for_status()
        except aiohttp.ClientResponseError as e:
            if errors is None:
                raise
            raise cls(errors, status=response.status) from e
