"""
All the structures coming from/to a {json:api} server.

The usage of these classes is spread over the codebase, so they are extracted
into a separate module of such type definitions.

For strict type-checking, they are detailed to the per-field level
(e.g. `TypedDict` instead of just ``Mapping[Any, Any]``) -- as used by
the library. The servers can send arbitrary fields at runtime, which are not
declared in the type definitions at type-checking time.

Everything marked "raw" is a plain unwrapped unprocessed data as JSON-decoded
from the server (or as prepared to be JSON-encoded for the server).
"""
import abc
import collections.abc
from typing import Any, List, Mapping, Optional, Sequence, Union

from typing_extensions import TypedDict


class RawIdentifier(TypedDict):
    type: str
    id: Optional[str]


class RawLinks(TypedDict, total=False):
    self: str
    related: str
    next: Optional[str]
    previous: Optional[str]


class RawRelationship(TypedDict, total=False):
    data: Union[None, RawIdentifier, List[RawIdentifier]]
    links: RawLinks


class RawResource(TypedDict, total=False):
    type: str
    id: Optional[str]
    attributes: Mapping[str, Any]
    relationships: Mapping[str, Optional[RawRelationship]]
    links: RawLinks


class RawErrorSource(TypedDict, total=False):
    pointer: str
    parameter: str


# https://jsonapi.org/format/#error-objects
class RawError(TypedDict, total=False):
    id: str
    status: str
    code: str
    title: str
    detail: str
    source: RawErrorSource
    meta: Mapping[str, Any]


class RawDocument(TypedDict, total=False):
    data: Union[None, RawResource, List[RawResource]]
    included: List[RawResource]
    links: RawLinks
    errors: List[RawError]
    meta: Mapping[str, Any]


class Identifiable(metaclass=abc.ABCMeta):
    """
    Anything that can be referenced in a relationship by its type and id.

    The resources are the main (and usually the only) implementation.
    The shape-checking functions below rely on this base class instead
    of the actual resources, so that the low-level modules do not depend
    on the high-level ones.
    """

    id: Optional[str]

    @property
    @abc.abstractmethod
    def type(self) -> str:
        raise NotImplementedError

    def as_resource_identifier(self) -> RawIdentifier:
        return {'type': self.type, 'id': self.id}


def is_mapping(value: Any) -> bool:
    return isinstance(value, collections.abc.Mapping)


def is_list(value: Any) -> bool:
    return (isinstance(value, collections.abc.Sequence) and
            not isinstance(value, (str, bytes, bytearray)))


def has_data(value: Any) -> bool:
    return is_mapping(value) and 'data' in value


def has_links(value: Any) -> bool:
    return is_mapping(value) and 'links' in value


def is_identifiable(value: Any) -> bool:
    return isinstance(value, Identifiable)


def is_resource_identifier(value: Any) -> bool:
    return is_mapping(value) and 'type' in value and 'id' in value


def included_key(type: str, id: Optional[str]) -> str:
    """ The key of a resource in the maps of included (side-loaded) resources. """
    return f'{type}__{id}'


def get_links(value: Any) -> Mapping[str, Any]:
    links = value.get('links') if is_mapping(value) else None
    return links if is_mapping(links) else {}


def iter_included(document: Any) -> Sequence[RawResource]:
    included = document.get('included') if is_mapping(document) else None
    return included if is_list(included) else []
