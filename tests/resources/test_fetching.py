import pytest

import apibind
from apibind import PluralRelationship


async def test_fetching_an_unknown_relationship_fails(api, transport):
    child = api.Child(id='1', name='Hercules')
    with pytest.raises(apibind.UnknownRelationshipError):
        await child.fetch('name')
    assert not transport.send.called


async def test_fetching_a_null_relationship(api, transport):
    child = api.Child(id='1', relationships={'parent': None})
    assert await child.fetch('parent') is None
    assert not transport.send.called


async def test_fetching_a_stub_reloads_it(api, respond, transport, assert_request):
    respond({'data': {'type': 'parents', 'id': '2', 'attributes': {'name': 'Zeus'}}})
    child = api.Child(id='1', parent={'type': 'parents', 'id': '2'})
    stub = child.get('parent')
    parent = await child.fetch('parent')
    assert parent is stub
    assert parent.get('name') == 'Zeus'
    assert_request('get', '/parents/2')
    assert transport.send.await_count == 1


async def test_fetching_twice_makes_one_request(api, respond, transport):
    respond({'data': {'type': 'parents', 'id': '2', 'attributes': {'name': 'Zeus'}}})
    child = api.Child(id='1', parent={'type': 'parents', 'id': '2'})
    parent1 = await child.fetch('parent')
    parent2 = await child.fetch('parent')
    assert parent1 is parent2
    assert transport.send.await_count == 1


async def test_fetching_with_force_makes_another_request(api, respond, transport):
    respond({'data': {'type': 'parents', 'id': '2', 'attributes': {'name': 'Zeus'}}})
    child = api.Child(id='1', parent={'type': 'parents', 'id': '2'})
    await child.fetch('parent')
    await child.fetch('parent', force=True)
    assert transport.send.await_count == 2


async def test_fetching_an_included_relationship_makes_no_requests(api, transport):
    child = api.Child({
        'type': 'children',
        'id': '1',
        'relationships': {'parent': {'data': {'type': 'parents', 'id': '2'}}},
        'included': [{'type': 'parents', 'id': '2', 'attributes': {'name': 'Zeus'}}],
    })
    parent = await child.fetch('parent')
    assert parent.get('name') == 'Zeus'
    assert not transport.send.called


async def test_fetching_a_linked_plural_gives_an_unfetched_collection(api, transport):
    parent = api.Parent(id='1', relationships={
        'children': {'links': {'related': '/parents/1/children'}},
    })
    children = await parent.fetch('children')
    assert isinstance(children, apibind.Collection)
    assert children.url == '/parents/1/children'
    assert not children.is_fetched
    assert parent.get('children') is children
    assert not transport.send.called


async def test_fetching_a_linked_plural_after_its_fetching(api, respond, transport, assert_request):
    respond({'data': [{'type': 'children', 'id': '2'}, {'type': 'children', 'id': '3'}]})
    parent = api.Parent(id='1', relationships={
        'children': {'links': {'related': '/parents/1/children'}},
    })
    children1 = await parent.fetch('children')
    await children1.fetch()
    children2 = await parent.fetch('children')
    assert children2 is children1
    assert [child.id for child in children2.data] == ['2', '3']
    assert_request('get', '/parents/1/children')
    assert transport.send.await_count == 1


async def test_fetching_a_plural_without_link_fails(api):
    parent = api.Parent(id='1', children=PluralRelationship())
    with pytest.raises(apibind.MissingRelatedLinkError):
        await parent.fetch('children')


async def test_fetching_an_inline_plural_is_cached(api, transport):
    parent = api.Parent(id='1', children=[{'type': 'children', 'id': '2'}])
    children = await parent.fetch('children')
    assert [child.id for child in children.data] == ['2']
    assert not transport.send.called


async def test_fetching_an_inline_plural_with_force_refetches_by_link(api, respond, assert_request):
    respond({'data': [{'type': 'children', 'id': '2', 'attributes': {'name': 'Hercules'}}]})
    parent = api.Parent(id='1', children={
        'data': [{'type': 'children', 'id': '2'}],
        'links': {'related': '/parents/1/children'},
    })
    children = await parent.fetch('children', force=True)
    assert_request('get', '/parents/1/children')
    assert children.data[0].get('name') == 'Hercules'


async def test_fetching_an_inline_plural_with_force_reloads_the_members(api, respond, transport):
    respond(
        {'data': {'type': 'children', 'id': '2', 'attributes': {'name': 'Hercules'}}},
        {'data': {'type': 'children', 'id': '3', 'attributes': {'name': 'Apollo'}}},
    )
    parent = api.Parent(id='1', children=[{'type': 'children', 'id': '2'},
                                          {'type': 'children', 'id': '3'}])
    children = await parent.fetch('children', force=True)
    assert [child.get('name') for child in children.data] == ['Hercules', 'Apollo']
    assert transport.send.await_count == 2


async def test_refetching_a_plural_updates_its_identifiers(api, respond, assert_request):
    respond({'data': [{'type': 'children', 'id': '9'}]})
    parent = api.Parent(id='1', children={
        'data': [{'type': 'children', 'id': '2'}],
        'links': {'related': '/parents/1/children'},
    })
    children = await parent.fetch('children', force=True)
    assert [child.id for child in children.data] == ['9']
    assert parent.relationships == {'children': {
        'data': [{'type': 'children', 'id': '9'}],
        'links': {'related': '/parents/1/children'},
    }}

    respond({'data': {'type': 'parents', 'id': '1'}})
    await parent.save(['children'])
    assert_request('patch', '/parents/1', payload={'data': {
        'type': 'parents',
        'id': '1',
        'relationships': {'children': {'data': [{'type': 'children', 'id': '9'}]}},
    }})
