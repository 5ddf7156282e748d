import json
from pathlib import Path
from typing import Any, Dict, List

from wingnest.domain.connections import Connection
from wingnest.domain.wing import Wing
from wingnest.stores.base import WingStore


class LocalWingStore(WingStore):
    """Local store that keeps wings and connections in a JSON file."""

    def __init__(self, filepath: str | Path | None = None) -> None:
        """Initialize LocalWingStore.

        Args:
            filepath: Path to store file. If provided and exists, will auto-load.
                     If provided and doesn't exist, will save to this path when save() is called.
                     If not provided, creates empty store in memory only.
        """
        self._filepath = str(filepath) if filepath else None

        if self._filepath and Path(self._filepath).exists():
            with open(self._filepath, "r") as f:
                data = json.load(f)
            self._wings = {
                wing_id: Wing.model_validate(wing_data)
                for wing_id, wing_data in data["wings"].items()
            }
            self._connections = {
                conn_id: Connection.model_validate(conn_data)
                for conn_id, conn_data in data.get("connections", {}).items()
            }
        else:
            self._wings = {}
            self._connections = {}

    @classmethod
    def from_data(
        cls,
        wings: Dict[str, Wing] | List[Wing] | None = None,
        connections: Dict[str, Connection] | List[Connection] | None = None,
    ) -> "LocalWingStore":
        """Create LocalWingStore from provided data (useful for testing).

        Args:
            wings: Wings keyed by ID, or a plain list of wings
            connections: Connections keyed by ID, or a plain list of connections

        Returns:
            LocalWingStore instance with provided data
        """
        instance = cls(filepath=None)
        if isinstance(wings, list):
            wings = {wing.id: wing for wing in wings}
        if isinstance(connections, list):
            connections = {conn.id: conn for conn in connections}
        instance._wings = dict(wings or {})
        instance._connections = dict(connections or {})
        return instance

    async def get_all_wings(self) -> List[Wing]:
        return list(self._wings.values())

    async def get_wing(self, wing_id: str) -> Wing | None:
        return self._wings.get(wing_id)

    async def add_wing(self, wing: Wing) -> None:
        self._wings[wing.id] = wing

    async def delete_wing(self, wing_id: str) -> None:
        """Delete a wing and every connection touching it."""
        if wing_id in self._wings:
            del self._wings[wing_id]

        await self.delete_connections_for_wing(wing_id)

    async def get_connection_between(self, wing_id1: str, wing_id2: str) -> Connection | None:
        for connection in self._connections.values():
            if connection.links(wing_id1, wing_id2):
                return connection
        return None

    async def get_connections_for_wing(self, wing_id: str) -> List[Connection]:
        return [conn for conn in self._connections.values() if conn.touches(wing_id)]

    async def get_all_connections(self) -> List[Connection]:
        return list(self._connections.values())

    async def create_connection(self, connection: Connection) -> Connection:
        self._connections[connection.id] = connection
        return connection

    async def update_connection(self, connection_id: str, patch: dict[str, Any]) -> Connection:
        """Apply a partial update to a stored connection.

        Raises:
            KeyError: If no connection with this ID is stored
        """
        if connection_id not in self._connections:
            raise KeyError(f"Connection {connection_id} not found")

        current = self._connections[connection_id].model_dump()
        updated = Connection.model_validate({**current, **patch})
        self._connections[connection_id] = updated
        return updated

    async def delete_connection(self, connection_id: str) -> None:
        self._connections.pop(connection_id, None)

    async def delete_connections_for_wing(self, wing_id: str) -> None:
        connections_to_delete = [
            conn_id for conn_id, conn in self._connections.items() if conn.touches(wing_id)
        ]
        for conn_id in connections_to_delete:
            del self._connections[conn_id]

    async def batch_upsert_connections(self, connections: List[Connection]) -> None:
        for connection in connections:
            self._connections[connection.id] = connection

    def save(self, filepath: str | None = None) -> None:
        """Save the store to a JSON file.

        Args:
            filepath: Path to save to. If not provided, uses the filepath from initialization.
        """
        save_path = filepath or self._filepath
        if not save_path:
            raise ValueError(
                "No filepath provided and no default filepath set during initialization"
            )

        save_path = str(save_path)
        Path(save_path).parent.mkdir(parents=True, exist_ok=True)
        data = {
            "wings": {
                wing_id: wing.model_dump(mode="json", by_alias=True)
                for wing_id, wing in self._wings.items()
            },
            "connections": {
                conn_id: conn.model_dump(mode="json", by_alias=True)
                for conn_id, conn in self._connections.items()
            },
        }
        with open(save_path, "w") as f:
            json.dump(data, f)
