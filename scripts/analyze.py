"""CLI for discovering connections between wings stored in a local wing store"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from loguru import logger

from wingnest.config import settings
from wingnest.connections import ConnectionManager
from wingnest.domain.wing import Wing
from wingnest.llms.anthropic_generator import AnthropicTextGenerator
from wingnest.stores.local import LocalWingStore


async def import_wings(store: LocalWingStore, import_file: Path) -> list[Wing]:
    """Merge the wings of an extension export file into the store.

    The export nests its records under ``data``, e.g.
    ``{"version": 1, "exportedAt": ..., "data": {"wings": [...]}}``.

    Raises:
        ValueError: If the file has no ``data`` object
    """
    with open(import_file, "r", encoding="utf-8") as f:
        export = json.load(f)

    if not isinstance(export, dict) or not isinstance(export.get("data"), dict):
        raise ValueError("Invalid import data format")

    wings = [Wing.model_validate(wing_data) for wing_data in export["data"].get("wings") or []]
    for wing in wings:
        await store.add_wing(wing)

    logger.info(f"Imported {len(wings)} wings from {import_file}")
    return wings


async def main(
    db_path: str,
    import_file: str | None = None,
    wing_id: str | None = None,
) -> None:
    store = LocalWingStore(filepath=Path(db_path))
    generator = AnthropicTextGenerator(
        api_key=settings.anthropic_api_key,
        model=settings.anthropic_model,
        max_retries=settings.anthropic_max_retries,
    )
    manager = ConnectionManager(
        store=store,
        generator=generator,
        score_threshold=settings.score_threshold,
        high_score_threshold=settings.high_score_threshold,
    )

    if import_file:
        await import_wings(store, Path(import_file))

    if wing_id:
        connections = await manager.refresh_connections(wing_id)
    else:
        connections = await manager.batch_analyze_connections(await store.get_all_wings())

    store.save()

    stats = await manager.get_connection_stats()
    logger.info(f"Created {len(connections)} connections")
    print(json.dumps(stats.model_dump(by_alias=True), indent=2))


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--db",
        type=str,
        required=False,
        help="Local wing store file",
        default=settings.local_wing_store_path,
    )
    parser.add_argument(
        "--import-file",
        type=str,
        required=False,
        help="Extension export (JSON with a 'data.wings' list) to merge before analyzing",
    )
    parser.add_argument(
        "--wing-id",
        type=str,
        required=False,
        help="Refresh the connections of a single wing instead of batch analyzing all wings",
    )

    args = parser.parse_args()

    logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])
    asyncio.run(
        main(
            db_path=args.db,
            import_file=args.import_file,
            wing_id=args.wing_id,
        )
    )
