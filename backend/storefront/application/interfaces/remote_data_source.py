"""Abstract remote data source (port): the storefront's HTTP collections."""

from abc import ABC, abstractmethod
from typing import Any


class RemoteDataSource(ABC):
    """Port for the JSON collection endpoints: implemented in the infrastructure layer.

    Implementations raise ``RemoteDataSourceError`` subclasses on failure and
    return bodies whose records already carry the canonical ``id`` field.
    """

    @abstractmethod
    async def get(self, endpoint: str, params: dict[str, str] | None = None) -> Any:
        """Read a collection (bare list or paginated wrapper) or a singleton object."""
        ...

    @abstractmethod
    async def post(self, endpoint: str, body: Any) -> Any:
        """Create a record and return the server's response body."""
        ...

    @abstractmethod
    async def put(self, endpoint: str, body: Any) -> Any:
        """Update a record addressed by path or by an identity field in ``body``."""
        ...

    @abstractmethod
    async def delete(self, endpoint: str, params: dict[str, str] | None = None) -> Any:
        """Delete a record addressed by path or by query parameter."""
        ...

    async def aclose(self) -> None:
        """Release underlying connections. Default: nothing to release."""
        return None
