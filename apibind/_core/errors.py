"""
Errors of the binding itself, as opposed to the remote API's wire errors
(see :mod:`apibind._cogs.clients.errors`).

All of them are raised at the point of detection, before or instead of
any network activity, and none of them are retried.
"""
from typing import Optional


class ApiBindError(Exception):
    """ A base class for all the binding's own errors. """


class TypeMismatchError(ApiBindError, ValueError):
    """ A document of one type is used to construct a resource of another type. """


class UnknownRelationshipError(ApiBindError, LookupError):
    """ A relationship operation on a name that is not a relationship. """


class UnknownFieldError(ApiBindError, LookupError):
    """ A field to be sent is neither an attribute nor a relationship. """


class MissingRelatedLinkError(ApiBindError):
    """ An unfetched plural relationship has no ``related`` link to fetch from. """


class NoRedirectError(ApiBindError):
    """ A redirect is followed, but no redirect was captured before. """


class DoesNotExist(ApiBindError, LookupError):
    """ A single object is requested from a collection, but none is found. """


class MultipleResults(ApiBindError, LookupError):
    """ A single object is requested from a collection, but many are found. """

    def __init__(self, message: Optional[str] = None, *, count: int) -> None:
        super().__init__(message or f"Multiple objects returned ({count})")
        self.count = count
