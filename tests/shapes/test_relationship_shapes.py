import pytest

from apibind._core.collections import Collection
from apibind._core.relationships import Identifier, PluralRelationship, RelationshipEnvelope, \
                                        RelationshipSlot, has_changed, is_relationship_like, \
                                        normalize

IDENTIFIER = {'type': 'parents', 'id': '1'}


@pytest.mark.parametrize('value', [
    pytest.param(IDENTIFIER, id='identifier'),
    pytest.param(Identifier('parents', '1'), id='identifier-variant'),
    pytest.param(RelationshipEnvelope(), id='envelope-variant'),
    pytest.param(PluralRelationship(), id='plural-variant'),
    pytest.param({'data': IDENTIFIER}, id='data-of-identifier'),
    pytest.param({'data': [IDENTIFIER]}, id='data-of-identifiers'),
    pytest.param({'links': {}}, id='links'),
    pytest.param({'data': None, 'links': {}}, id='links-with-null-data'),
    pytest.param([IDENTIFIER, Identifier('parents', '2')], id='list-of-identifiers'),
])
def test_relationship_like(value):
    assert is_relationship_like(value)


@pytest.mark.parametrize('value', [
    pytest.param(None, id='none'),
    pytest.param('text', id='string'),
    pytest.param(123, id='number'),
    pytest.param([], id='empty-list'),
    pytest.param({}, id='empty-mapping'),
    pytest.param({'data': None}, id='data-of-null'),
    pytest.param({'data': []}, id='data-of-empty-list'),
    pytest.param({'data': ['text']}, id='data-of-strings'),
    pytest.param([IDENTIFIER, 'text'], id='mixed-list'),
    pytest.param({'id': '1'}, id='id-without-type'),
])
def test_not_relationship_like(value):
    assert not is_relationship_like(value)


def test_normalizing_none():
    assert normalize(None) is None


def test_normalizing_variants_keeps_them():
    envelope = RelationshipEnvelope(data=IDENTIFIER)
    plural = PluralRelationship(data=[IDENTIFIER])
    assert normalize(envelope) is envelope
    assert normalize(plural) is plural


@pytest.mark.parametrize('value, expected', [
    (IDENTIFIER, RelationshipEnvelope(data=IDENTIFIER)),
    (Identifier('parents', '1'), RelationshipEnvelope(data=Identifier('parents', '1'))),
    ({'data': IDENTIFIER}, RelationshipEnvelope(data=IDENTIFIER)),
    ({'data': None}, RelationshipEnvelope(data=None)),
    ({'data': IDENTIFIER, 'links': {'self': '/s'}}, RelationshipEnvelope(data=IDENTIFIER, links={'self': '/s'})),
    ([IDENTIFIER], PluralRelationship(data=[IDENTIFIER])),
    ([], PluralRelationship(data=[])),
    ({'data': [IDENTIFIER]}, PluralRelationship(data=[IDENTIFIER])),
    ({'links': {'related': '/r'}}, PluralRelationship(data=None, links={'related': '/r'})),
])
def test_normalizing(value, expected):
    assert normalize(value) == expected


@pytest.mark.parametrize('value', ['text', 123, {}, {'data': 'text'}, {'type': 'parents'}])
def test_normalizing_unknown_shapes_fails(value):
    with pytest.raises(TypeError, match=r"Cannot interpret as a relationship"):
        normalize(value)


def test_related_url():
    assert PluralRelationship(links={'related': '/r'}).related_url == '/r'
    assert PluralRelationship().related_url is None


def test_identifier_form():
    assert Identifier('parents', '1').as_resource_identifier() == IDENTIFIER


@pytest.mark.parametrize('relationship, is_null, is_plural', [
    (None, True, False),
    ({'data': None}, True, False),
    ({'data': IDENTIFIER}, False, False),
    ({'data': [IDENTIFIER]}, False, True),
    ({'data': []}, False, True),
    ({'links': {'related': '/r'}}, False, True),
])
def test_slot_kinds(relationship, is_null, is_plural):
    slot = RelationshipSlot(relationship=relationship)
    assert slot.is_null == is_null
    assert slot.is_plural == is_plural


def test_slot_links():
    assert RelationshipSlot().links == {}
    assert RelationshipSlot({'links': {'self': '/s'}}).links == {'self': '/s'}


def test_slot_fetching_of_singulars(api):
    stub = api.Parent(id='1')
    rich = api.Parent(id='1', name='Zeus')
    assert not RelationshipSlot({'data': IDENTIFIER}, stub).is_fetched
    assert RelationshipSlot({'data': IDENTIFIER}, rich).is_fetched
    assert not RelationshipSlot(None, None).is_fetched


def test_slot_fetching_of_plurals(api):
    unfetched = Collection(api, '/r')
    fetched = Collection.from_data(api, [])
    assert not RelationshipSlot({'links': {'related': '/r'}}, unfetched).is_fetched
    assert RelationshipSlot({'links': {'related': '/r'}}, fetched).is_fetched


def test_slot_assigns_both_facets(api):
    parent = api.Parent(id='1')
    slot = RelationshipSlot()
    slot.assign({'data': IDENTIFIER}, parent)
    assert slot.relationship == {'data': IDENTIFIER}
    assert slot.related is parent


def test_slot_rederiving_keeps_the_links(api):
    slot = RelationshipSlot({'data': IDENTIFIER, 'links': {'self': '/s'}}, api.Parent(id='2'))
    slot.rederive()
    assert slot.relationship == {'data': {'type': 'parents', 'id': '2'}, 'links': {'self': '/s'}}


def test_slot_rederiving_a_null_with_links(api):
    slot = RelationshipSlot({'data': IDENTIFIER, 'links': {'self': '/s'}}, None)
    slot.rederive()
    assert slot.relationship == {'data': None, 'links': {'self': '/s'}}


def test_collection_changes(api):
    a, b = api.Parent(id='1'), api.Parent(id='2')
    current = Collection.from_data(api, [a, b])
    assert not has_changed(current, [api.Parent(id='1'), api.Parent(id='2')])
    assert has_changed(current, [api.Parent(id='2'), api.Parent(id='1')])
    assert has_changed(current, [api.Parent(id='1')])
    assert has_changed(current, [api.Parent(id='1'), api.Parent(id='2', name='Hera')])
    assert has_changed(None, [])
    assert has_changed(Collection(api, '/r'), [])
