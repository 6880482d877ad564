"""
The shapes of the relationships: what is a relationship, and of which kind.

{json:api} allows several shapes of the relationship objects on the wire::

    "parent": null
    "parent": {"data": {"type": "parents", "id": "1"}, "links": {...}}
    "parent": {"data": null}
    "children": {"data": [{"type": "children", "id": "2"}, ...], "links": {...}}
    "children": {"links": {"related": "/parents/1/children"}}

On top of that, the callers can use the resources, the bare identifiers,
and the lists of them -- both in the canonical ``relationships={...}``
argument and "flattened" together with the attributes::

    api.Child(name='Hercules', parent=api.Parent(id='1'))
    api.Child(name='Hercules', parent={'type': 'parents', 'id': '1'})

All of these are normalized at the boundary into one of the tagged variants:
``None`` (an explicitly empty singular relationship), :class:`RelationshipEnvelope`
(a singular relationship), or :class:`PluralRelationship`. The SDK authors can
use the variants directly to avoid any guessing of the shapes.

Once resolved, every relationship of a resource is stored in a single
:class:`RelationshipSlot`, which holds both the serialized (wire) form and
the resolved object (a resource or a collection), so that they never diverge.
"""
import dataclasses
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from apibind._cogs.structs import documents

if TYPE_CHECKING:
    from apibind._core import collections, connections, resources


@dataclasses.dataclass(frozen=True)
class Identifier:
    """ A reference to a remote resource by its type and id only. """
    type: str
    id: Optional[str]

    def as_resource_identifier(self) -> documents.RawIdentifier:
        return {'type': self.type, 'id': self.id}


@dataclasses.dataclass(frozen=True)
class RelationshipEnvelope:
    """
    A singular relationship: a reference to one resource, or to none.

    The ``data`` is a resource, an :class:`Identifier`, a raw identifier,
    or ``None`` for the explicitly empty relationship.
    """
    data: Any = None
    links: Mapping[str, Any] = dataclasses.field(default_factory=dict)


@dataclasses.dataclass(frozen=True)
class PluralRelationship:
    """
    A plural relationship: references to many resources.

    The ``data`` is a sequence of resources, identifiers, or raw identifiers;
    or ``None`` if the members are not known (not fetched) yet -- usually,
    with a ``related`` link to fetch them from.
    """
    data: Optional[Sequence[Any]] = None
    links: Mapping[str, Any] = dataclasses.field(default_factory=dict)

    @property
    def related_url(self) -> Optional[str]:
        return self.links.get('related')


Relationship = Union[None, RelationshipEnvelope, PluralRelationship]


def is_reference(value: Any) -> bool:
    return (isinstance(value, Identifier) or
            documents.is_identifiable(value) or
            documents.is_resource_identifier(value))


def is_reference_list(value: Any) -> bool:
    return documents.is_list(value) and len(value) > 0 and all(is_reference(v) for v in value)


def is_relationship_like(value: Any) -> bool:
    """
    Determine if a value can be considered a relationship in any way.

    Used only for the "flattened" properties, where the relationships are mixed
    with the attributes. Everything that does not look like a relationship,
    is an attribute -- even if it is an empty list or a mapping.
    """
    if isinstance(value, (RelationshipEnvelope, PluralRelationship)):
        return True
    if is_reference(value):
        return True
    if documents.has_links(value):
        return True
    if documents.has_data(value):
        return is_reference(value['data']) or is_reference_list(value['data'])
    return is_reference_list(value)


def normalize(value: Any) -> Relationship:
    """
    Convert any accepted shape of a relationship into a tagged variant.
    """
    if value is None:
        return None
    if isinstance(value, (RelationshipEnvelope, PluralRelationship)):
        return value
    if isinstance(value, Identifier) or documents.is_identifiable(value):
        return RelationshipEnvelope(data=value)
    if documents.is_list(value):
        return PluralRelationship(data=list(value))
    if documents.is_mapping(value):
        links = documents.get_links(value)
        if 'data' in value:
            data = value['data']
            if documents.is_list(data):
                return PluralRelationship(data=list(data), links=links)
            elif data is None or is_reference(data):
                return RelationshipEnvelope(data=data, links=links)
        elif 'links' in value:
            return PluralRelationship(data=None, links=links)
        elif documents.is_resource_identifier(value):
            return RelationshipEnvelope(data=value)
    raise TypeError(f"Cannot interpret as a relationship: {value!r}")


@dataclasses.dataclass
class RelationshipSlot:
    """
    Both facets of one relationship: as serialized and as resolved.

    ``relationship`` is the wire form: ``None``, ``{"data": ..., "links": ...}``.
    ``related`` is the resolved form: ``None``, a resource, or a collection.

    The facets are always assigned together (see :meth:`assign`).
    """
    relationship: Optional[documents.RawRelationship] = None
    related: Any = None

    def assign(self, relationship: Optional[documents.RawRelationship], related: Any) -> None:
        self.relationship = relationship
        self.related = related

    @property
    def links(self) -> Mapping[str, Any]:
        return documents.get_links(self.relationship)

    @property
    def is_null(self) -> bool:
        return (self.relationship is None or
                ('data' in self.relationship and self.relationship['data'] is None))

    @property
    def is_plural(self) -> bool:
        if self.relationship is None:
            return False
        return 'data' not in self.relationship or documents.is_list(self.relationship['data'])

    @property
    def is_fetched(self) -> bool:
        """
        Does the related value carry more than the bare identity?

        This is a heuristic: an object that has no attributes and no relationships
        on the server side is indistinguishable from an unfetched one.
        """
        if self.related is None:
            return False
        elif self.is_plural:
            return getattr(self.related, 'data', None) is not None
        else:
            return is_rich(self.related)

    def rederive(self) -> None:
        """ Re-serialize the wire form from the resolved object (links are kept). """
        links = dict(self.links)
        if self.related is None:
            self.relationship = {'data': None, 'links': links} if links else None
        elif self.is_plural or documents.is_list(getattr(self.related, 'data', None)):
            self.relationship = serialize_plural(self.related.data, links)
        else:
            self.relationship = serialize_singular(self.related, links)


def is_rich(resource: Any) -> bool:
    """ Does the resource carry more data than its bare identity? """
    return bool(getattr(resource, 'attributes', None) or getattr(resource, 'relationships', None))


def serialize_singular(
        resource: documents.Identifiable,
        links: Mapping[str, Any],
) -> documents.RawRelationship:
    relationship: documents.RawRelationship = {'data': resource.as_resource_identifier()}
    if links:
        relationship['links'] = dict(links)  # type: ignore
    return relationship


def serialize_plural(
        resources: Optional[Iterable[documents.Identifiable]],
        links: Mapping[str, Any],
) -> documents.RawRelationship:
    relationship: documents.RawRelationship = {}
    if links:
        relationship['links'] = dict(links)  # type: ignore
    if resources is not None:
        relationship['data'] = [resource.as_resource_identifier() for resource in resources]
    return relationship


IncludedMap = Dict[str, "resources.Resource"]


def build_included_map(
        connection: "connections.Connection",
        included: Iterable[Any],
) -> IncludedMap:
    """
    Convert the side-loaded resources of a document into a lookup by type & id.
    """
    result: IncludedMap = {}
    for item in included:
        resource = connection.coerce_to_resource(item)
        result[documents.included_key(resource.type, resource.id)] = resource
    return result


def has_changed(
        current: Optional["collections.Collection"],
        resources: List["resources.Resource"],
) -> bool:
    """
    Should the currently related collection be replaced with the new resources?

    It is replaced if the members differ in length, order, or identity,
    or if any of the new members carries more data than the bare identity
    (the cached members might be older). Otherwise, the already fetched
    members are preserved on a cheap re-normalization.
    """
    current_data = getattr(current, 'data', None)
    if current_data is None or len(current_data) != len(resources):
        return True
    for previous, next in zip(current_data, resources):
        if previous.id != next.id or is_rich(next):
            return True
    return False
