"""Query options and the builder functions used to assemble them.

A `QueryOptions` bundles the optional parts of a read or write: a filter, skip and
limit counts, a sort specification and a field projection. The builders never
modify the options they are given, they return a copy with one field replaced, so
a base query can be shared and refined freely.

Example:
    ```python
    from datastore.query import create_query, with_filter, with_limit, with_sort

    active = with_filter(create_query(), {"active": True})
    newest = with_limit(with_sort(active, {"created_at": -1}), 10)
    ```
"""
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any, TypeAlias

Document: TypeAlias = dict[str, Any]
Filter: TypeAlias = Mapping[str, Any]
Projection: TypeAlias = Mapping[str, Any]
Sort: TypeAlias = str | tuple[str, int] | Mapping[str, int] | Sequence[tuple[str, int]]


@dataclass(frozen=True)
class QueryOptions:
    filter: Filter | None = None
    skip: int | None = None
    limit: int | None = None
    sort: Sort | None = None
    projection: Projection | None = None

    def filter_or_all(self) -> Filter:
        """The filter to send to the driver, an empty filter matches every document."""
        return self.filter if self.filter is not None else {}


def create_query(options: "QueryOptions | Mapping[str, Any] | None" = None, **fields: Any) -> QueryOptions:
    """Creates query options from existing options, a mapping of fields, or keyword fields."""
    query = as_query(options)
    if fields:
        query = replace(query, **fields)

    return query


def with_filter(query: QueryOptions, filter: Filter) -> QueryOptions:
    return replace(query, filter=filter)


def with_skip(query: QueryOptions, skip: int) -> QueryOptions:
    return replace(query, skip=skip)


def with_limit(query: QueryOptions, limit: int) -> QueryOptions:
    return replace(query, limit=limit)


def with_sort(query: QueryOptions, sort: Sort) -> QueryOptions:
    return replace(query, sort=sort)


def with_projection(query: QueryOptions, projection: Projection) -> QueryOptions:
    return replace(query, projection=projection)


def as_query(options: "QueryOptions | Mapping[str, Any] | None") -> QueryOptions:
    match options:
        case None:
            return QueryOptions()

        case QueryOptions():
            return options

        case Mapping():
            return QueryOptions(**options)

        case _:
            raise TypeError(f"Expected QueryOptions or a mapping, got {type(options).__name__}")


def find_kwargs(query: QueryOptions, *, include_limit: bool) -> dict[str, Any]:
    """Builds the keyword arguments for a driver find call, leaving out every unset option.

    `find_one` has no use for a limit, so it is only included when `include_limit` is set.
    """
    kwargs: dict[str, Any] = {}
    if query.projection is not None:
        kwargs["projection"] = query.projection

    if query.skip is not None:
        kwargs["skip"] = query.skip

    if include_limit and query.limit is not None:
        kwargs["limit"] = query.limit

    if query.sort is not None:
        kwargs["sort"] = _sort_pairs(query.sort)

    return kwargs


def _sort_pairs(sort: Sort) -> list[tuple[str, int]]:
    """Normalises a sort to `(key, direction)` pairs.

    Accepts a field name (ascending), a single `(key, direction)` pair, a mapping of
    keys to directions, or a sequence of pairs.
    """
    match sort:
        case str():
            return [(sort, 1)]

        case Mapping():
            return list(sort.items())

        case (str() as key, int() as direction):
            return [(key, direction)]

        case _:
            return [tuple(pair) for pair in sort]
