"""
Registries of the resource types and their bindings to the connections.

There are two levels of registration:

* The resource classes are *declared* on a connection class
  (see :meth:`Connection.register`); every connection subclass has its own
  :class:`TypeRegistry`, which also looks up the declarations of the parents.

* The declared classes are *bound* to every connection instance separately
  (see :class:`BoundType`), so that two connections with different hosts
  or credentials can use the same resource classes without interference.
  Instead of generating a subclass per connection, a binding is a plain object
  that remembers the connection, the class, and the type-tag, and constructs
  the resources with itself injected.

The undeclared type-tags, as received from the server (e.g. in the relationships
or in the included resources), are bound lazily to the generic :class:`Resource`.
"""
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Mapping, Optional, Sequence, Type, \
                   Union

from apibind._cogs.structs import documents
from apibind._core import collections, errors, relationships, resources

if TYPE_CHECKING:
    from apibind._core import connections


class TypeRegistry:
    """
    The declared resource classes of a connection class, by their type-tags.

    The registry is append-only. The lookups fall back to the parent's registry
    (of the parent connection class), so the declarations are inherited.
    """

    def __init__(self, parent: Optional["TypeRegistry"] = None) -> None:
        super().__init__()
        self._parent = parent
        self._declared: Dict[str, Type[resources.Resource]] = {}

    def declare(self, resource_cls: Type[resources.Resource]) -> None:
        if not resource_cls.TYPE:
            raise TypeError(f"Cannot register {resource_cls.__name__}: TYPE is not defined.")
        self._declared[resource_cls.TYPE] = resource_cls

    def get_by_type(self, type: str) -> Optional[Type[resources.Resource]]:
        if type in self._declared:
            return self._declared[type]
        elif self._parent is not None:
            return self._parent.get_by_type(type)
        else:
            return None

    def get_by_name(self, name: str) -> Optional[Type[resources.Resource]]:
        """ Find a declared class either by its class name or by its type-tag. """
        for resource_cls in self._declared.values():
            if resource_cls.__name__ == name:
                return resource_cls
        if name in self._declared:
            return self._declared[name]
        elif self._parent is not None:
            return self._parent.get_by_name(name)
        else:
            return None

    def get_all(self) -> Dict[str, Type[resources.Resource]]:
        inherited = self._parent.get_all() if self._parent is not None else {}
        return {**inherited, **self._declared}


class BoundType:
    """
    A resource class as bound to a specific connection under a specific tag.

    Calling it constructs the resources::

        child = api.Child(name='Hercules')

    It also provides the type-level operations: the list queries, lookups,
    creation, and the bulk operations.
    """

    def __init__(
            self,
            connection: "connections.Connection",
            resource_cls: Type[resources.Resource],
            type: str,
    ) -> None:
        super().__init__()
        self._connection = connection
        self._resource_cls = resource_cls
        self._type = type

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self._resource_cls.__name__} as {self._type!r}>"

    def __call__(self, *args: Any, **kwargs: Any) -> resources.Resource:
        return self._resource_cls._bind(self, *args, **kwargs)

    @property
    def connection(self) -> "connections.Connection":
        return self._connection

    @property
    def resource_cls(self) -> Type[resources.Resource]:
        return self._resource_cls

    @property
    def type(self) -> str:
        return self._type

    def is_instance(self, value: Any) -> bool:
        """ Is the value a resource of this type and this connection? """
        return (isinstance(value, resources.Resource) and
                value.connection is self._connection and
                value.type == self._type)

    def get_collection_url(self) -> str:
        return self._resource_cls.COLLECTION_URL or f'/{self._type}'

    #
    # Listing.
    #

    def list(self) -> collections.Collection:
        return collections.Collection(self._connection, self.get_collection_url())

    def extra(self, params: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> collections.Collection:
        return self.list().extra(params, **kwargs)

    def filter(self, filters: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> collections.Collection:
        return self.list().filter(filters, **kwargs)

    def page(self, arg: Any) -> collections.Collection:
        return self.list().page(arg)

    def include(self, *names: str) -> collections.Collection:
        return self.list().include(*names)

    def sort(self, *names: str) -> collections.Collection:
        return self.list().sort(*names)

    def fields(self, *names: str) -> collections.Collection:
        return self.list().fields(*names)

    #
    # Single resources.
    #

    async def get(
            self,
            id_or_filter: Union[None, str, Mapping[str, Any]] = None,
            *,
            include: Optional[Sequence[str]] = None,
    ) -> resources.Resource:
        """
        Get a single resource, either by its id or by the filters.

        With the filters (or none), exactly one resource must match::

            child = await api.Child.get('1')
            child = await api.Child.get({'name': 'Hercules'}, include=['parent'])
        """
        if isinstance(include, str):
            include = [include]
        if id_or_filter is None or documents.is_mapping(id_or_filter):
            qs = self.list()
            if include:
                qs = qs.include(*include)
            return await qs.get(id_or_filter)
        else:
            instance = self(id=id_or_filter)
            await instance.reload(include=include)
            return instance

    async def create(self, *args: Any, **props: Any) -> resources.Resource:
        """
        Create a resource on the server. Unlike ``save()``, it always POSTs,
        so the client-generated ids can be used::

            child = await api.Child.create(id='c1', name='Hercules')
        """
        instance = self(*args, **props)
        await instance._save_new()
        return instance

    async def create_with_form(self, **options: Any) -> resources.Resource:
        """
        Create a resource by uploading a form (e.g. a file) instead of JSON::

            form = aiohttp.FormData()
            form.add_field('content', b'...', filename='strings.po')
            upload = await api.ResourceStringsUpload.create_with_form(data=form)
        """
        response = await self._connection.request('post', self.get_collection_url(), **options)
        body = response.data if documents.is_mapping(response.data) else {}
        data = dict(body.get('data') or {})
        if 'included' in body:
            data['included'] = body['included']
        return self(data)

    #
    # Bulk operations: one request for many resources, all or nothing.
    #

    async def bulk_create(self, items: Iterable[Any]) -> collections.Collection:
        payload: List[Dict[str, Any]] = []
        for item in items:
            resource = item if isinstance(item, resources.Resource) else self(item)
            data: Dict[str, Any] = {'type': resource.type}
            if resource.id:
                data['id'] = resource.id
            data.update(resource._generate_data_for_saving())
            payload.append(data)

        response = await self._connection.request(
            'post', self.get_collection_url(), payload={'data': payload}, bulk=True)
        return self._parse_rows(response.data)

    async def bulk_update(self, items: Iterable[Any], fields: Iterable[str] = ()) -> collections.Collection:
        fields = list(fields)
        payload: List[Dict[str, Any]] = []
        for item in items:
            resource = item if isinstance(item, resources.Resource) else self(item)
            for field in fields:
                if field not in resource.attributes and field not in resource.relationships:
                    raise errors.UnknownFieldError(f"Unknown field {field!r} on {resource!r}")
            data = {**resource.as_resource_identifier(), **resource._generate_data_for_saving(fields)}
            payload.append(data)

        response = await self._connection.request(
            'patch', self.get_collection_url(), payload={'data': payload}, bulk=True)
        return self._parse_rows(response.data)

    async def bulk_delete(self, items: Iterable[Any]) -> int:
        payload: List[documents.RawIdentifier] = []
        for item in items:
            if isinstance(item, (documents.Identifiable, relationships.Identifier)):
                payload.append(item.as_resource_identifier())
            elif documents.is_mapping(item):
                payload.append({'type': item.get('type', self._type), 'id': item['id']})
            else:
                payload.append({'type': self._type, 'id': item})

        await self._connection.request(
            'delete', self.get_collection_url(), payload={'data': payload}, bulk=True)
        return len(payload)

    def _parse_rows(self, body: Any) -> collections.Collection:
        body = body if documents.is_mapping(body) else {}
        included_map = relationships.build_included_map(
            self._connection, documents.iter_included(body))
        rows = [
            self._connection.instantiate(item, included_map=included_map)
            for item in body.get('data') or []
        ]
        return collections.Collection.from_data(self._connection, rows)
