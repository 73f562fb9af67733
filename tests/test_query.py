import pytest

from datastore import DataStore, QueryOptions, create_query, with_filter, with_limit, with_projection, with_skip, with_sort
from datastore.query import as_query, find_kwargs


def test_create_query_defaults_to_empty_options():
    query = create_query()
    assert query == QueryOptions()
    assert query.filter_or_all() == {}


def test_create_query_returns_given_options():
    options = QueryOptions(limit=5)
    assert create_query(options) is options


def test_create_query_from_mapping_and_fields():
    query = create_query({"filter": {"active": True}}, limit=2)
    assert query == QueryOptions(filter={"active": True}, limit=2)


@pytest.mark.parametrize(
    "builder, field, value",
    [
        (with_filter, "filter", {"name": "Ada"}),
        (with_skip, "skip", 3),
        (with_limit, "limit", 7),
        (with_sort, "sort", {"age": -1}),
        (with_projection, "projection", {"name": 1}),
    ],
)
def test_builders_replace_only_their_field(builder, field, value):
    original = QueryOptions(filter={"active": True}, skip=1, limit=10, sort=[("name", 1)], projection={"_id": 0})
    snapshot = QueryOptions(**vars(original))

    query = builder(original, value)

    assert original == snapshot
    assert query is not original
    assert getattr(query, field) == value
    for other in ("filter", "skip", "limit", "sort", "projection"):
        if other != field:
            assert getattr(query, other) == getattr(original, other)


def test_builders_are_exposed_on_data_store():
    query = DataStore.with_limit(DataStore.with_filter(DataStore.create_query(), {"active": True}), 2)
    assert query == QueryOptions(filter={"active": True}, limit=2)


def test_query_options_are_immutable():
    query = QueryOptions()
    with pytest.raises(AttributeError):
        query.limit = 5


def test_as_query_rejects_other_types():
    with pytest.raises(TypeError):
        as_query(["not", "options"])


def test_find_kwargs_leaves_out_unset_options():
    assert find_kwargs(QueryOptions(filter={"active": True}), include_limit=True) == {}


def test_find_kwargs_translates_options():
    query = QueryOptions(skip=2, limit=3, sort={"age": -1, "name": 1}, projection={"name": 1})
    assert find_kwargs(query, include_limit=True) == {
        "projection": {"name": 1},
        "skip": 2,
        "limit": 3,
        "sort": [("age", -1), ("name", 1)],
    }


def test_find_kwargs_without_limit():
    assert find_kwargs(QueryOptions(limit=3, sort=[["age", 1]]), include_limit=False) == {"sort": [("age", 1)]}


@pytest.mark.parametrize(
    "sort, expected",
    [
        ("age", [("age", 1)]),
        (("age", -1), [("age", -1)]),
        ({"age": -1}, [("age", -1)]),
        ([("age", -1), ("name", 1)], [("age", -1), ("name", 1)]),
    ],
)
def test_find_kwargs_sort_forms(sort, expected):
    assert find_kwargs(QueryOptions(sort=sort), include_limit=False) == {"sort": expected}


def test_as_query_accepts_plain_mappings():
    assert as_query({"filter": {"active": True}, "limit": 2}) == QueryOptions(filter={"active": True}, limit=2)
    assert as_query({}) == QueryOptions()
