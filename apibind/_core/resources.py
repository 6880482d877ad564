"""
Resources: the typed, mutable, relationship-aware remote entities.

Declare the resource types by subclassing and registering them on a connection
class (see :mod:`apibind._core.connections`)::

    class FamilyApi(apibind.Connection):
        HOST = 'https://api.families.com'

    @FamilyApi.register
    class Parent(apibind.Resource):
        TYPE = 'parents'

    @FamilyApi.register
    class Child(apibind.Resource):
        TYPE = 'children'

    api = FamilyApi(auth='TOKEN')

The resources are then created either locally, via the connection's bound
types, or from the server's documents::

    child = api.Child(name='Hercules', parent=api.Parent(id='1'))
    await child.save()
    child = await api.Child.get('1', include=['parent'])
    child.get('parent').get('name')

Every resource keeps its attributes and its relationships separately.
The relationships are kept in two facets: as serialized (``relationships``,
the wire form with the identifiers and links) and as resolved (``related``,
the resources and collections). Both facets are views of the same slots,
so they always have the same keys and never diverge.

The related resources are materialized lazily: unless included (side-loaded)
by the server, they are the stubs with only the type & id known, until they
are fetched with :meth:`Resource.fetch`.
"""
from typing import TYPE_CHECKING, Any, ClassVar, Dict, Iterable, List, Mapping, Optional, \
                   Sequence, Tuple

from apibind._cogs.clients import transport
from apibind._cogs.structs import documents
from apibind._core import collections, errors, loggers, relationships

if TYPE_CHECKING:
    from apibind._core import connections, registries


class Resource(documents.Identifiable):

    TYPE: ClassVar[Optional[str]] = None
    """
    The type-tag of the resources on the wire, e.g. ``"children"``.
    Required for the resource classes to be registered on a connection class.
    """

    COLLECTION_URL: ClassVar[Optional[str]] = None
    """
    The url of the resource type's list endpoint, if not ``/<type>``.
    The item url is overridable via :meth:`get_item_url`.
    """

    # Set by the bound type before the constructor is called.
    _binding: "registries.BoundType"

    id: Optional[str]
    attributes: Dict[str, Any]
    links: Dict[str, Any]
    redirect: Optional[str]
    _slots: Dict[str, relationships.RelationshipSlot]

    def __init__(
            self,
            data: Optional[Mapping[str, Any]] = None,
            /,
            *,
            _included_map: Optional[relationships.IncludedMap] = None,
            **props: Any,
    ) -> None:
        """
        The input should resemble the body of the ``data`` field of
        a {json:api} response. Apart from that, any key-value pairs can be used:
        the values that look like relationships are interpreted as such,
        while everything else is interpreted as an attribute::

            api.Child(
                attributes={'name': 'Hercules'},
                relationships={'parent': {'data': {'type': 'parents', 'id': '2'}}},
            )

            # is equivalent to

            api.Child(name='Hercules', parent={'data': {'type': 'parents', 'id': '2'}})
        """
        super().__init__()
        if getattr(self, '_binding', None) is None:
            cls = self.__class__.__name__
            raise TypeError(f"{cls} is not bound to a connection; use `connection.{cls}(...)`.")
        self.id = None
        self.attributes = {}
        self.links = {}
        self.redirect = None
        self._slots = {}
        self._logger: Optional[loggers.ResourceLogger] = None
        self._overwrite({**(data or {}), **props}, included_map=_included_map)

    @classmethod
    def _bind(
            cls,
            binding: "registries.BoundType",
            *args: Any,
            **kwargs: Any,
    ) -> "Resource":
        instance = cls.__new__(cls)
        instance._binding = binding
        instance.__init__(*args, **kwargs)
        return instance

    def __repr__(self) -> str:
        ident = f"{self.type}/{self.id}" if self.id is not None else f"{self.type} (new)"
        return f"<{self.__class__.__name__} {ident}>"

    @property
    def type(self) -> str:
        return self._binding.type

    @property
    def connection(self) -> "connections.Connection":
        return self._binding.connection

    @property
    def relationships(self) -> Dict[str, Optional[documents.RawRelationship]]:
        return {name: slot.relationship for name, slot in self._slots.items()}

    @property
    def related(self) -> Dict[str, Any]:
        return {name: slot.related for name, slot in self._slots.items()}

    @property
    def logger(self) -> loggers.ResourceLogger:
        if self._logger is None:
            self._logger = loggers.ResourceLogger(resource=self)
        return self._logger

    #
    # Construction & relationship resolution.
    #

    def _overwrite(
            self,
            data: Mapping[str, Any],
            *,
            included_map: Optional["relationships.IncludedMap"] = None,
    ) -> None:
        """
        Re-seed the whole resource from a document (or a caller's properties).

        Used by the constructor, :meth:`reload` and :meth:`save`. The already
        resolved related objects are preserved for the relationships that
        remain, unless the new data changes their identity or brings more data.
        """
        props = dict(data)
        type = props.pop('type', None)
        id = props.pop('id', None)
        attributes = dict(props.pop('attributes', None) or {})
        raw_relationships = dict(props.pop('relationships', None) or {})
        links = dict(props.pop('links', None) or {})
        redirect = props.pop('redirect', None)
        included = props.pop('included', None) or []

        if type and type != self.type:
            raise errors.TypeMismatchError(f"Received type {type!r}, expected {self.type!r}")

        for key, value in props.items():
            if isinstance(value, collections.Collection) or relationships.is_relationship_like(value):
                raw_relationships[key] = value
            else:
                attributes[key] = value

        self.id = id
        self.attributes = attributes
        self.links = links
        self.redirect = redirect

        lookup = dict(included_map or {})
        lookup.update(relationships.build_included_map(self.connection, included))

        self._slots = {name: slot for name, slot in self._slots.items() if name in raw_relationships}
        for name, value in raw_relationships.items():
            self._set_related(name, value, lookup)

    def _set_related(
            self,
            name: str,
            value: Any,
            included_map: Optional["relationships.IncludedMap"] = None,
    ) -> None:
        included_map = included_map if included_map is not None else {}

        # Already resolved forms are adopted as they are (see `_post_save`).
        if isinstance(value, relationships.RelationshipSlot):
            self._slots[name] = value
            return
        if isinstance(value, collections.Collection):
            links = {'related': value.url} if value.url else {}
            slot = self._slots.setdefault(name, relationships.RelationshipSlot())
            slot.assign(relationships.serialize_plural(value.data, links), value)
            return

        normalized = relationships.normalize(value)
        slot = self._slots.setdefault(name, relationships.RelationshipSlot())
        if normalized is None:
            slot.assign(None, None)
        elif isinstance(normalized, relationships.PluralRelationship):
            self._set_plural(slot, normalized, included_map)
        else:
            self._set_singular(slot, normalized, included_map)

    def _set_plural(
            self,
            slot: "relationships.RelationshipSlot",
            value: "relationships.PluralRelationship",
            included_map: "relationships.IncludedMap",
    ) -> None:
        links = dict(value.links or slot.links)

        # Unfetched: only the links are known. Keep whatever was fetched before.
        if value.data is None:
            related = slot.related
            if not isinstance(related, collections.Collection):
                url = value.related_url
                related = collections.Collection(self.connection, url) if url else None
            slot.assign(relationships.serialize_plural(None, links), related)
            return

        resources = [self._resolve(item, included_map) for item in value.data]
        related = slot.related
        if not isinstance(related, collections.Collection) or relationships.has_changed(related, resources):
            related = collections.Collection.from_data(self.connection, resources, url=value.related_url)
        slot.assign(relationships.serialize_plural(resources, links), related)

    def _set_singular(
            self,
            slot: "relationships.RelationshipSlot",
            value: "relationships.RelationshipEnvelope",
            included_map: "relationships.IncludedMap",
    ) -> None:
        links = dict(value.links or slot.links)

        if value.data is None:
            slot.assign({'data': None, 'links': links} if links else {'data': None}, None)
            return

        resource = self._resolve(value.data, included_map)
        related = slot.related
        if _identity(related) != _identity(resource) or relationships.is_rich(resource):
            related = resource
        slot.assign(relationships.serialize_singular(resource, links), related)

    def _resolve(self, item: Any, included_map: "relationships.IncludedMap") -> "Resource":
        resource: Resource = self.connection.coerce_to_resource(item)
        key = documents.included_key(resource.type, resource.id)
        return included_map.get(key, resource)

    #
    # Plain accessors.
    #

    def get(self, key: str) -> Any:
        if key in self._slots:
            return self._slots[key].related
        else:
            return self.attributes.get(key)

    def set(self, key: str, value: Any) -> None:
        if key in self._slots:
            self._set_related(key, value)
            self._slots[key].rederive()
        else:
            self.attributes[key] = value

    def as_resource_identifier(self) -> documents.RawIdentifier:
        return {'type': self.type, 'id': self.id}

    def as_relationship(self) -> documents.RawRelationship:
        return {'data': self.as_resource_identifier()}

    def as_document(self) -> documents.RawResource:
        document: documents.RawResource = {'type': self.type}
        if self.id is not None:
            document['id'] = self.id
        document['attributes'] = dict(self.attributes)
        document['relationships'] = self.relationships
        if self.links:
            document['links'] = self.links  # type: ignore
        return document

    def get_item_url(self) -> str:
        return self.links.get('self') or f'/{self.type}/{self.id}'

    def get_collection_url(self) -> str:
        return self._binding.get_collection_url()

    #
    # Fetching.
    #

    async def reload(self, include: Optional[Sequence[str]] = None) -> None:
        """
        Fetch fresh data from the server for the object.

        If the server responds with a redirect, the resource's data remains
        as it was, and only the redirect's location is remembered -- to be
        followed explicitly with :meth:`follow`.
        """
        if isinstance(include, str):
            include = [include]
        response = await self.connection.request(
            'get', self.get_item_url(),
            params={'include': ','.join(include)} if include else None,
            logger=self.logger,
        )
        if response.is_redirect:
            self.logger.debug(f"Redirected to {response.location}")
            self.redirect = response.location
            return

        body = response.data if documents.is_mapping(response.data) else {}
        if not documents.is_mapping(body.get('data')):
            self.logger.debug(f"Nothing to reload from: {response.status}")
            return  # e.g. "304 Not Modified": the local data remains as is.

        data = dict(body['data'])
        if 'included' in body:
            data['included'] = body['included']
        self._overwrite(data)

    async def fetch(self, name: str, force: bool = False) -> Any:
        """
        Fetch and return a relationship, if it was not included before.

        If the relationship was previously fetched, it will skip
        the interaction with the server, unless ``force`` is set to true.

        For the plural relationships known only by their ``related`` link,
        an unfetched collection is returned. Fetch it explicitly::

            children = await parent.fetch('children')
            await children.fetch()
        """
        if name not in self._slots:
            raise errors.UnknownRelationshipError(f"Resource does not have relationship {name!r}")

        slot = self._slots[name]
        if slot.is_null:
            return None
        if slot.is_fetched and not force:
            return slot.related

        if slot.relationship is not None and 'data' in slot.relationship and slot.related is not None:
            await slot.related.reload()
            slot.rederive()
            return slot.related

        url = slot.links.get('related')
        if not url:
            raise errors.MissingRelatedLinkError(f"Cannot fetch {name!r}, no 'related' link")
        related = collections.Collection(self.connection, url)
        slot.assign(slot.relationship, related)
        return related

    async def follow(self) -> transport.Response:
        if not self.redirect:
            raise errors.NoRedirectError("Cannot follow without redirect")
        return await self.connection.follow(self.redirect)

    #
    # Saving & deleting.
    #

    async def save(
            self,
            fields_or_props: Any = None,
            props: Optional[Mapping[str, Any]] = None,
            /,
            **kwargs: Any,
    ) -> None:
        """
        Save the resource to the server.

        If the resource has no ``id``, a POST request is sent, otherwise
        a PATCH request is sent. The resource's fields are then populated by
        the server's response, including the server-generated ``id`` if created.

        - The first argument, if a list, names the fields that will be sent.
        - The last argument, if a mapping, or the keyword arguments,
          are the key-value pairs set on the resource right before saving.
        - If no fields are specified by either argument, all the attributes
          and all the relationships are sent.

        Examples::

            parent = api.Parent(name='Zeus')
            await parent.save()

            parent.set('age', 54)
            await parent.save(['age'])
            # or
            await parent.save({'age': 54})
            # or
            await parent.save(age=54)
        """
        fields: List[str] = []
        overrides: Dict[str, Any] = {}
        if fields_or_props is not None and props is not None:
            fields = _as_fields(fields_or_props)
            overrides = dict(props)
        elif documents.is_mapping(fields_or_props):
            overrides = dict(fields_or_props)
        elif fields_or_props is not None:
            fields = _as_fields(fields_or_props)
        elif props is not None:
            overrides = dict(props)
        overrides.update(kwargs)

        for field, value in overrides.items():
            self.set(field, value)
            if field not in fields:
                fields.append(field)

        if self.id:
            await self._save_existing(fields)
        else:
            await self._save_new(fields)

    async def _save_existing(self, fields: Iterable[str] = ()) -> None:
        data = {**self.as_resource_identifier(), **self._generate_data_for_saving(fields)}
        response = await self.connection.request(
            'patch', self.get_item_url(), payload={'data': data}, logger=self.logger)
        self._post_save(response)

    async def _save_new(self, fields: Iterable[str] = ()) -> None:
        data: Dict[str, Any] = {'type': self.type}
        if self.id:
            data['id'] = self.id
        data.update(self._generate_data_for_saving(fields))
        response = await self.connection.request(
            'post', self.get_collection_url(), payload={'data': data}, logger=self.logger)
        self._post_save(response)

    def _generate_data_for_saving(self, fields: Iterable[str] = ()) -> Dict[str, Any]:
        fields = list(fields) or list(self.attributes) + list(self._slots)
        result: Dict[str, Any] = {}
        for field in fields:
            if field in self.attributes:
                result.setdefault('attributes', {})[field] = self.attributes[field]
            elif field in self._slots:
                relationship = _serialize_for_saving(self._slots[field])
                if relationship is None:
                    self.logger.debug(f"Skipping the unfetched relationship {field!r}.")
                    continue
                result.setdefault('relationships', {})[field] = relationship
            else:
                raise errors.UnknownFieldError(f"Unknown field {field!r}")
        return result

    def _post_save(self, response: transport.Response) -> None:
        body = response.data if documents.is_mapping(response.data) else {}
        data = body.get('data')
        if not documents.is_mapping(data):
            return  # e.g. "204 No Content": the server accepted the data as sent.

        # The relationships not reported by the server remain as they were.
        data = dict(data)
        reported = dict(data.pop('relationships', None) or {})
        merged: Dict[str, Any] = dict(reported)
        for name, slot in self._slots.items():
            if name not in reported:
                merged[name] = slot
        data['relationships'] = merged
        if 'included' in body:
            data['included'] = body['included']
        self._overwrite(data)

    async def delete(self) -> None:
        """
        Delete the resource from the server.

        After deletion, all the attributes and relationships remain,
        but the ``id`` is set to ``None``. This way, the resource can be
        re-created with the same fields or a subset::

            await parent.delete()
            await parent.save(['name'])
        """
        await self.connection.request('delete', self.get_item_url(), logger=self.logger)
        self.id = None

    #
    # Relationship editing.
    #

    async def change(self, field: str, value: Any) -> None:
        if field not in self._slots:
            raise errors.UnknownRelationshipError(f"{field!r} is not a relationship")

        resource = self.connection.coerce_to_resource(value) if value is not None else None
        identifier = resource.as_resource_identifier() if resource is not None else None
        await self._edit_relationship('patch', field, identifier)

        slot = self._slots[field]
        links = dict(slot.links)
        relationship: documents.RawRelationship = {'data': identifier}
        if links:
            relationship['links'] = links  # type: ignore
        related = slot.related
        if getattr(related, 'id', None) != getattr(resource, 'id', None):
            related = resource
        slot.assign(relationship, related)

    async def add(self, field: str, values: Iterable[Any]) -> None:
        await self._edit_plural_relationship('post', field, values)

    async def reset(self, field: str, values: Iterable[Any]) -> None:
        await self._edit_plural_relationship('patch', field, values)

    async def remove(self, field: str, values: Iterable[Any]) -> None:
        await self._edit_plural_relationship('delete', field, values)

    async def _edit_relationship(self, method: str, field: str, data: Any) -> None:
        url = self._slots[field].links.get('self') or f'/{self.type}/{self.id}/relationships/{field}'
        await self.connection.request(method, url, payload={'data': data}, logger=self.logger)

    async def _edit_plural_relationship(self, method: str, field: str, values: Iterable[Any]) -> None:
        if field not in self._slots:
            raise errors.UnknownRelationshipError(f"{field!r} is not a relationship")
        payload = [self.connection.coerce_to_resource(item).as_resource_identifier() for item in values]
        await self._edit_relationship(method, field, payload)


def _identity(value: Any) -> Tuple[Optional[str], Optional[str]]:
    if isinstance(value, documents.Identifiable):
        return value.type, value.id
    return None, None


def _as_fields(value: Any) -> List[str]:
    return [value] if isinstance(value, str) else list(value)


def _serialize_for_saving(
        slot: relationships.RelationshipSlot,
) -> Optional[documents.RawRelationship]:
    if slot.is_null:
        return {'data': None}
    assert slot.relationship is not None  # for type-checking
    if slot.is_plural and slot.relationship.get('data') is None:
        return None
    return {'data': slot.relationship['data']}
