"""DataStore package.

A small asynchronous CRUD and transaction wrapper around MongoDB, built on Motor, for
short lived processes like serverless function handlers.

-   **Connection Lifecycle**: `DataStore.connect` and `DataStore.disconnect`, or use the
    store as an async context manager.
-   **CRUD**: single and bulk inserts, filtered find, update, delete, and count.
-   **Transactions**: `DataStore.execute_in_transaction` commits on success, aborts and
    re-raises on failure, and always ends the session.
-   **Query Builders**: `create_query` and the `with_*` functions assemble `QueryOptions`
    without mutating their input.

Note:
This `__init__.py` file uses a custom `__getattr__` to lazily load the public symbols so
that importing the query builders does not import Motor.
"""
import importlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datastore.config import DataStoreConfig
    from datastore.connection_protocol import DocumentClient
    from datastore.query import (
        QueryOptions,
        create_query,
        with_filter,
        with_limit,
        with_projection,
        with_skip,
        with_sort,
    )
    from datastore.store import DataStore

__lookup = {
    "DataStore": "datastore.store",
    "DataStoreConfig": "datastore.config",
    "DocumentClient": "datastore.connection_protocol",
    "QueryOptions": "datastore.query",
    "create_query": "datastore.query",
    "with_filter": "datastore.query",
    "with_skip": "datastore.query",
    "with_limit": "datastore.query",
    "with_sort": "datastore.query",
    "with_projection": "datastore.query",
}

__all__ = list(__lookup.keys())


def __getattr__(name):
    """Lazily loads the public symbols of the datastore package.

    Raises:
        ImportError: If a symbol listed in `__lookup` cannot be imported from its module.
        AttributeError: If the requested name is not a known symbol.
    """
    if name in __lookup:
        try:
            module = importlib.import_module(__lookup[name])
        except Exception as e:
            raise ImportError(f"Failed to import {name} from {__lookup[name]}: {e}") from e

        return getattr(module, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
