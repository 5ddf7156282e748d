from typing import Any, List, Protocol

from wingnest.domain.connections import Connection
from wingnest.domain.wing import Wing


class WingStore(Protocol):
    """Protocol for wing and connection storage implementations."""

    async def get_all_wings(self) -> List[Wing]:
        """Get every stored wing."""
        ...

    async def get_wing(self, wing_id: str) -> Wing | None:
        """Get a wing by its ID."""
        ...

    async def add_wing(self, wing: Wing) -> None:
        """Add a new wing or replace an existing one."""
        ...

    async def delete_wing(self, wing_id: str) -> None:
        """Delete a wing and every connection touching it."""
        ...

    async def get_connection_between(self, wing_id1: str, wing_id2: str) -> Connection | None:
        """Get the connection joining two wings, regardless of argument order."""
        ...

    async def get_connections_for_wing(self, wing_id: str) -> List[Connection]:
        """Get all connections touching a wing."""
        ...

    async def get_all_connections(self) -> List[Connection]:
        """Get every stored connection."""
        ...

    async def create_connection(self, connection: Connection) -> Connection:
        """Store a new connection."""
        ...

    async def update_connection(self, connection_id: str, patch: dict[str, Any]) -> Connection:
        """Apply a partial update to a stored connection and return the result."""
        ...

    async def delete_connection(self, connection_id: str) -> None:
        """Delete a connection by its ID."""
        ...

    async def delete_connections_for_wing(self, wing_id: str) -> None:
        """Delete all connections touching a wing."""
        ...

    async def batch_upsert_connections(self, connections: List[Connection]) -> None:
        """Insert or replace several connections in one write."""
        ...

    def save(self, filepath: str | None = None) -> None:
        """Save the store to disk."""
        ...
