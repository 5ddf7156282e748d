from typing import List

from fastapi import APIRouter, Body, HTTPException
from loguru import logger
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from wingnest.commands import MUTATING_COMMANDS, dispatch, parse_command
from wingnest.connections.manager import ConnectionManager
from wingnest.stores.base import WingStore


class WingPair(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    wing_id1: str
    wing_id2: str


def _bad_request(e: ValueError) -> HTTPException:
    logger.warning(f"Rejected request: {e}")
    return HTTPException(status_code=400, detail=str(e))


def _create_analyze_endpoint(store: WingStore, manager: ConnectionManager):
    """Create the single wing analysis endpoint handler."""

    async def analyze_wing(wing_id: str):
        wing = await store.get_wing(wing_id)
        if not wing:
            raise HTTPException(status_code=404, detail="Wing not found")

        try:
            connections = await manager.analyze_connections_for_wing(wing)
            store.save()
            return connections
        except Exception as e:
            logger.error(f"Error analyzing connections for {wing_id}: {str(e)}")
            raise HTTPException(status_code=500, detail="Internal server error") from e

    return analyze_wing


def _create_batch_endpoint(store: WingStore, manager: ConnectionManager):
    """Create the batch analysis endpoint handler."""

    async def batch_analyze(wing_ids: List[str] = Body(...)):  # noqa: B008
        wings = []
        for wing_id in wing_ids:
            wing = await store.get_wing(wing_id)
            if wing:
                wings.append(wing)
            else:
                logger.warning(f"Skipping unknown wing {wing_id} in batch analysis")

        try:
            connections = await manager.batch_analyze_connections(wings)
            store.save()
            return connections
        except Exception as e:
            logger.error(f"Error in batch analysis: {str(e)}")
            raise HTTPException(status_code=500, detail="Internal server error") from e

    return batch_analyze


def _create_messages_endpoint(store: WingStore, manager: ConnectionManager):
    """Create the typed command endpoint used by the extension's background worker."""

    async def handle_message(payload: dict = Body(...)):  # noqa: B008
        try:
            command = parse_command(payload)
        except ValidationError as e:
            raise HTTPException(
                status_code=422, detail=e.errors(include_url=False, include_context=False)
            ) from e

        try:
            result = await dispatch(command, manager)
        except ValueError as e:
            raise _bad_request(e) from e

        if isinstance(command, MUTATING_COMMANDS):
            store.save()
        return {"action": command.action, "result": result}

    return handle_message


def get_endpoints_router(*, store: WingStore, manager: ConnectionManager) -> APIRouter:
    router = APIRouter()

    @router.get("/health")
    async def health_check():
        return {"status": "healthy"}

    @router.get("/api/wings/{wing_id}/related")
    async def related_wings(wing_id: str):
        return await manager.get_related_wings(wing_id)

    @router.post("/api/wings/{wing_id}/connections/refresh")
    async def refresh_wing(wing_id: str):
        connections = await manager.refresh_connections(wing_id)
        store.save()
        return connections

    @router.post("/api/connections")
    async def create_connection(pair: WingPair):
        try:
            connection = await manager.create_manual_connection(pair.wing_id1, pair.wing_id2)
        except ValueError as e:
            raise _bad_request(e) from e
        store.save()
        return connection

    @router.delete("/api/connections/{wing_id1}/{wing_id2}")
    async def delete_connection(wing_id1: str, wing_id2: str):
        removed = await manager.remove_connection(wing_id1, wing_id2)
        if removed:
            store.save()
        return {"removed": removed}

    @router.get("/api/connections/stats")
    async def connection_stats():
        return await manager.get_connection_stats()

    router.post("/api/wings/{wing_id}/connections/analyze")(
        _create_analyze_endpoint(store, manager)
    )
    router.post("/api/connections/batch")(_create_batch_endpoint(store, manager))
    router.post("/api/messages")(_create_messages_endpoint(store, manager))

    return router
