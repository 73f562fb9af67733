"""MongoDB CRUD and transaction wrapper.

`DataStore` is a thin asynchronous surface over a Motor client intended for short lived
processes such as serverless function invocations: connect, run a handful of operations,
disconnect. Every operation forwards to the matching driver call. Driver errors are
never translated, they propagate to the caller with their original type.

Example:
    ```python
    from datastore import DataStore, DataStoreConfig, create_query, with_limit

    async def handler(event):
        async with DataStore(DataStoreConfig(url="mongodb://localhost:27017", database_name="app")) as store:
            user = await store.insert_one("users", {"name": "Ada", "active": True})
            active = await store.find("users", with_limit(create_query(filter={"active": True}), 2))

            async def transfer(session):
                await store.update_one("accounts", {"filter": {"_id": 1}}, {"$inc": {"balance": -5}}, session=session)
                await store.update_one("accounts", {"filter": {"_id": 2}}, {"$inc": {"balance": 5}}, session=session)
                return True

            await store.execute_in_transaction(transfer)
    ```
"""
import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Any, TypeAlias, TypeVar

from motor.motor_asyncio import AsyncIOMotorClient

import datastore.query as query_builder
from datastore.config import DataStoreConfig
from datastore.connection_protocol import DocumentClient
from datastore.query import Document, QueryOptions, as_query, find_kwargs

logger = logging.getLogger(__name__)

T = TypeVar("T")

Query: TypeAlias = QueryOptions | Mapping[str, Any] | None


class DataStore:
    """Wraps a MongoDB client and database for connection lifecycle, transactions, and CRUD.

    Creating a DataStore performs no network I/O, Motor connects lazily. Call `connect`
    (or enter the DataStore as an async context manager) to verify the server is reachable
    before issuing operations, and `disconnect` when done. This ordering is left to the
    caller and is not enforced.

    Attributes:
        config: The configuration the store was created with
        client: The underlying client, an AsyncIOMotorClient unless one was injected
        db: The database handle for `config.database_name`
    """

    create_query = staticmethod(query_builder.create_query)
    with_filter = staticmethod(query_builder.with_filter)
    with_skip = staticmethod(query_builder.with_skip)
    with_limit = staticmethod(query_builder.with_limit)
    with_sort = staticmethod(query_builder.with_sort)
    with_projection = staticmethod(query_builder.with_projection)

    def __init__(self, config: DataStoreConfig, client: DocumentClient | None = None):
        """Initialize a new DataStore.

        Args:
            config: Connection URL and database name
            client: Optional client to use instead of creating an AsyncIOMotorClient from the config
        """
        self.config = config
        self.client = client if client is not None else self._create_client(config)
        self.db = self.client[config.database_name]

    def __repr__(self):
        return f"{type(self).__name__}(database_name={self.config.database_name!r})"

    # ---------------------------------------- #
    # Connection Management                    #
    # ---------------------------------------- #
    async def connect(self):
        """Verifies the server is reachable by pinging the database.

        Raises:
            Whatever error the driver raises, after it has been logged.
        """
        try:
            await self.db.command("ping")
        except Exception as error:
            logger.error("Failed to connect to MongoDB", exc_info=True)
            error.add_note(f" - Using Store: {self!r}")
            raise

        logger.debug("Connected to MongoDB database %r", self.config.database_name)

    async def disconnect(self):
        """Closes the client, releasing its connections.

        Raises:
            Whatever error the driver raises, after it has been logged.
        """
        try:
            self.client.close()
        except Exception as error:
            logger.error("Failed to disconnect from MongoDB", exc_info=True)
            error.add_note(f" - Using Store: {self!r}")
            raise

        logger.debug("Disconnected from MongoDB database %r", self.config.database_name)

    async def __aenter__(self) -> "DataStore":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()

    # ---------------------------------------- #
    # Transaction Management                   #
    # ---------------------------------------- #
    async def execute_in_transaction(self, func: Callable[[Any], Awaitable[T]]) -> T:
        """Runs `func` inside a transaction and commits it.

        `func` receives the driver session, pass it as `session=` to the CRUD methods for
        them to take part in the transaction. If `func` or the commit raises, the transaction
        is aborted and the original error is re-raised. The session is ended exactly once
        whatever the outcome.

        Note: MongoDB transactions require a replica set or sharded cluster.

        Args:
            func: A coroutine function taking the session

        Returns:
            The value returned by `func`
        """
        session = await self.client.start_session()
        try:
            session.start_transaction()
            result = await func(session)
            await session.commit_transaction()
            logger.debug("Committed transaction")
            return result

        except Exception:
            await self._abort(session)
            raise

        finally:
            await session.end_session()

    async def _abort(self, session):
        if not session.in_transaction:
            return

        try:
            await session.abort_transaction()
        except Exception:
            # The error that caused the abort is the one the caller needs to see
            logger.error("Failed to abort transaction", exc_info=True)
        else:
            logger.debug("Aborted transaction")

    # ---------------------------------------- #
    # Query Execution                          #
    # ---------------------------------------- #
    async def insert_one(self, collection_name: str, doc: Document, *, session=None) -> Document:
        """Inserts a document and returns a copy of it with its assigned `_id`.

        The document passed in is left unchanged.
        """
        document = dict(doc)
        result = await self.get_collection(collection_name).insert_one(document, session=session)
        return {**document, "_id": result.inserted_id}

    async def insert_many(self, collection_name: str, docs: Iterable[Document], *, session=None) -> list[Document]:
        """Inserts documents and returns copies of them, in input order, with their assigned `_id`s."""
        documents = [dict(doc) for doc in docs]
        result = await self.get_collection(collection_name).insert_many(documents, session=session)
        return [
            {**document, "_id": inserted_id}
            for document, inserted_id in zip(documents, result.inserted_ids, strict=True)
        ]

    async def update_one(self, collection_name: str, query: Query, update: Mapping[str, Any], *, session=None):
        """Updates the first document matching the query's filter. Without a filter any document may match."""
        await self.get_collection(collection_name).update_one(
            as_query(query).filter_or_all(), update, session=session
        )

    async def update_many(self, collection_name: str, query: Query, update: Mapping[str, Any], *, session=None):
        """Updates every document matching the query's filter. Without a filter every document is updated."""
        await self.get_collection(collection_name).update_many(
            as_query(query).filter_or_all(), update, session=session
        )

    async def find_one(self, collection_name: str, query: Query = None, *, session=None) -> Document | None:
        """Finds the first matching document using the query's filter, skip, sort, and projection.

        Returns:
            The document, or None if nothing matches
        """
        options = as_query(query)
        return await self.get_collection(collection_name).find_one(
            options.filter_or_all(), session=session, **find_kwargs(options, include_limit=False)
        )

    async def find(self, collection_name: str, query: Query = None, *, session=None) -> list[Document]:
        """Finds all documents matching the query's filter, honoring skip, limit, sort, and projection."""
        options = as_query(query)
        cursor = self.get_collection(collection_name).find(
            options.filter_or_all(), session=session, **find_kwargs(options, include_limit=True)
        )
        return await cursor.to_list(length=None)

    async def delete_one(self, collection_name: str, query: Query = None, *, session=None):
        await self.get_collection(collection_name).delete_one(as_query(query).filter_or_all(), session=session)

    async def delete_many(self, collection_name: str, query: Query = None, *, session=None):
        await self.get_collection(collection_name).delete_many(as_query(query).filter_or_all(), session=session)

    async def count(self, collection_name: str, query: Query = None, *, session=None) -> int:
        return await self.get_collection(collection_name).count_documents(
            as_query(query).filter_or_all(), session=session
        )

    def get_collection(self, name: str):
        return self.db[name]

    @staticmethod
    def _create_client(config: DataStoreConfig) -> AsyncIOMotorClient:
        return AsyncIOMotorClient(
            config.url,
            serverSelectionTimeoutMS=config.timeout,
            **config.connection_options,
        )
