"""Typed commands accepted from the extension and their dispatch."""

from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

from wingnest.connections.manager import ConnectionManager
from wingnest.domain.connections import Connection, ConnectionStats
from wingnest.domain.wing import RelatedWing, Wing


class _Command(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnalyzeConnections(_Command):
    action: Literal["analyzeConnections"] = "analyzeConnections"
    wing: Wing


class BatchAnalyzeConnections(_Command):
    action: Literal["batchAnalyzeConnections"] = "batchAnalyzeConnections"
    wings: List[Wing]


class CreateManualConnection(_Command):
    action: Literal["createManualConnection"] = "createManualConnection"
    wing_id1: str
    wing_id2: str


class RemoveConnection(_Command):
    action: Literal["removeConnection"] = "removeConnection"
    wing_id1: str
    wing_id2: str


class GetRelatedWings(_Command):
    action: Literal["getRelatedWings"] = "getRelatedWings"
    wing_id: str


class RefreshConnections(_Command):
    action: Literal["refreshConnections"] = "refreshConnections"
    wing_id: str


class GetConnectionStats(_Command):
    action: Literal["getConnectionStats"] = "getConnectionStats"


Command = Annotated[
    Union[
        AnalyzeConnections,
        BatchAnalyzeConnections,
        CreateManualConnection,
        RemoveConnection,
        GetRelatedWings,
        RefreshConnections,
        GetConnectionStats,
    ],
    Field(discriminator="action"),
]

_command_adapter: TypeAdapter[Command] = TypeAdapter(Command)

CommandResult = Union[List[Connection], List[RelatedWing], Connection, ConnectionStats, bool]

# Commands that change stored connections
MUTATING_COMMANDS = (
    AnalyzeConnections,
    BatchAnalyzeConnections,
    CreateManualConnection,
    RemoveConnection,
    RefreshConnections,
)


def parse_command(payload: dict) -> Command:
    """Validate a raw message into one of the known commands.

    Raises:
        pydantic.ValidationError: If the action is unknown or its payload is malformed
    """
    return _command_adapter.validate_python(payload)


async def dispatch(command: Command, manager: ConnectionManager) -> CommandResult:
    """Run a command against the connection manager."""
    match command:
        case AnalyzeConnections(wing=wing):
            return await manager.analyze_connections_for_wing(wing)
        case BatchAnalyzeConnections(wings=wings):
            return await manager.batch_analyze_connections(wings)
        case CreateManualConnection(wing_id1=wing_id1, wing_id2=wing_id2):
            return await manager.create_manual_connection(wing_id1, wing_id2)
        case RemoveConnection(wing_id1=wing_id1, wing_id2=wing_id2):
            return await manager.remove_connection(wing_id1, wing_id2)
        case GetRelatedWings(wing_id=wing_id):
            return await manager.get_related_wings(wing_id)
        case RefreshConnections(wing_id=wing_id):
            return await manager.refresh_connections(wing_id)
        case GetConnectionStats():
            return await manager.get_connection_stats()
        case _:
            raise ValueError(f"Unknown command: {command!r}")
