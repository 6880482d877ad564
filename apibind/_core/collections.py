"""
Collections: lazily fetched, immutable, paginated lists of resources.

A collection is either a query over a resource type's list endpoint::

    children = api.Child.filter(name__startswith='H').sort('-age').include('parent')
    await children.fetch()

or over a relationship's ``related`` link (see :meth:`Resource.fetch`),
or a ready-made list of resources (see :meth:`Collection.from_data`).

The query-building methods never modify the collection: they return new
collections with the merged query parameters. Every collection instance is
fetched at most once: ``fetch()`` is a no-op for the already fetched ones.
To re-fetch, build a new collection (or use :meth:`reload`).
"""
import logging
from typing import TYPE_CHECKING, Any, AsyncIterator, Dict, Iterable, List, Mapping, Optional

from apibind._cogs.helpers import typedefs
from apibind._cogs.structs import documents
from apibind._core import errors, relationships

if TYPE_CHECKING:
    from apibind._core import connections, resources

logger = logging.getLogger(__name__)


class Collection:

    data: Optional[List["resources.Resource"]]
    next: Optional[str]
    previous: Optional[str]

    def __init__(
            self,
            connection: "connections.Connection",
            url: Optional[str],
            params: Optional[typedefs.QueryParams] = None,
    ) -> None:
        super().__init__()
        self._connection = connection
        self._url = url
        self._params = dict(params) if params is not None else None
        self.data = None
        self.next = self.previous = None

    def __repr__(self) -> str:
        state = f"{len(self.data)} items" if self.data is not None else "unfetched"
        return f"<{self.__class__.__name__} {self._url or ''} {self._params or {}} ({state})>"

    @property
    def connection(self) -> "connections.Connection":
        return self._connection

    @property
    def url(self) -> Optional[str]:
        return self._url

    @property
    def params(self) -> Mapping[str, Any]:
        return dict(self._params or {})

    @property
    def is_fetched(self) -> bool:
        return self.data is not None

    @classmethod
    def from_data(
            cls,
            connection: "connections.Connection",
            items: Iterable[Any],
            url: Optional[str] = None,
    ) -> "Collection":
        """
        Make an already fetched collection from resources or raw documents.
        """
        collection = cls(connection, url)
        collection.data = [connection.coerce_to_resource(item) for item in items]
        return collection

    async def fetch(self) -> None:
        if self.data is not None:
            return

        if self._url is None:
            raise errors.MissingRelatedLinkError("Cannot fetch a collection without a url.")

        response = await self._connection.request('get', self._url, params=self._params)
        body = response.data if documents.is_mapping(response.data) else {}

        included_map = relationships.build_included_map(
            self._connection, documents.iter_included(body))
        self.data = [
            self._connection.instantiate(item, included_map=included_map)
            for item in body.get('data') or []
        ]

        links = documents.get_links(body)
        self.next = links.get('next') or None
        self.previous = links.get('previous') or None

    async def reload(self) -> None:
        """
        Re-fetch the collection in place, ignoring the already fetched data.

        Without a url (e.g. for the collections made from the identifiers only),
        every member is reloaded individually, one request per member.
        """
        if self._url is not None:
            self.data = None
            await self.fetch()
        else:
            for resource in self.data or []:
                await resource.reload()

    async def get_next(self) -> "Collection":
        page = self.__class__(self._connection, self.next)
        await page.fetch()
        return page

    async def get_previous(self) -> "Collection":
        page = self.__class__(self._connection, self.previous)
        await page.fetch()
        return page

    def extra(self, params: Optional[typedefs.QueryParams] = None, **kwargs: Any) -> "Collection":
        new_params = {**(self._params or {}), **(params or {}), **kwargs}
        return self.__class__(self._connection, self._url, new_params)

    def filter(self, filters: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> "Collection":
        """
        Filter the collection. Double underscores denote the nested filters::

            api.Child.filter(name='Hercules', parent__name='Zeus')
            # ?filter[name]=Hercules&filter[parent][name]=Zeus

        Resources as values are replaced with their ids.
        """
        params: Dict[str, Any] = {}
        for key, value in dict(filters or {}, **kwargs).items():
            first, *rest = key.split('__')
            filter_key = f'filter[{first}]' + ''.join(f'[{part}]' for part in rest)
            if documents.is_identifiable(value):
                value = value.id
            params[filter_key] = value
        return self.extra(params)

    def page(self, arg: Any) -> "Collection":
        if documents.is_mapping(arg):
            params = {f'page[{key}]': value for key, value in arg.items()}
        else:
            params = {'page': arg}
        return self.extra(params)

    def include(self, *names: str) -> "Collection":
        return self.extra({'include': ','.join(names)})

    def sort(self, *names: str) -> "Collection":
        return self.extra({'sort': ','.join(names)})

    def fields(self, *names: str) -> "Collection":
        return self.extra({'fields': ','.join(names)})

    async def get(self, filters: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> "resources.Resource":
        qs = self.filter(filters, **kwargs)
        await qs.fetch()
        assert qs.data is not None  # for type-checking
        if len(qs.data) == 0:
            raise errors.DoesNotExist("Does not exist")
        elif len(qs.data) > 1:
            raise errors.MultipleResults(count=len(qs.data))
        else:
            return qs.data[0]

    async def all_pages(self) -> AsyncIterator["Collection"]:
        await self.fetch()
        page = self
        while True:
            yield page
            if page.next:
                logger.debug(f"Following to the next page: {page.next}")
                page = await page.get_next()
            else:
                break

    async def all(self) -> AsyncIterator["resources.Resource"]:
        async for page in self.all_pages():
            for item in page.data or []:
                yield item
