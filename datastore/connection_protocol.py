from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DocumentClient(Protocol):
    """The slice of a Motor client that DataStore depends on."""

    def __getitem__(self, database_name: str) -> Any:
        ...

    def close(self):
        ...

    async def start_session(self) -> Any:
        ...
