from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class DataStoreConfig:
    """Where a DataStore connects and which database it works in.

    Attributes:
        url: A "mongodb://" or "mongodb+srv://" URI, credentials and replica set included
        database_name: The database holding every collection the store touches
        timeout: Milliseconds the client waits to find a usable server before an operation fails
        connection_options: Extra AsyncIOMotorClient keyword arguments, e.g. {"appname": "orders-handler"}
    """
    url: str
    database_name: str
    timeout: int = 20000
    connection_options: dict[str, Any] = field(default_factory=dict)
