"""Discovery, storage and lookup of connections between wings."""

import logging
from itertools import combinations
from typing import List

from wingnest.domain.connections import Connection, ConnectionStats, ConnectionType
from wingnest.domain.wing import RelatedWing, Wing
from wingnest.llms.base import TextGenerator
from wingnest.stores.base import WingStore

from . import scoring
from .batch import batch_semantic_analysis, non_semantic_score

logger = logging.getLogger(__name__)

SCORE_THRESHOLD = 0.3
HIGH_SCORE_THRESHOLD = 0.7


def _require_ids(*wing_ids: str) -> None:
    if not all(wing_ids):
        raise ValueError("Wing IDs must be non-empty")


class ConnectionManager:
    """Finds related wings and maintains the connections between them."""

    def __init__(
        self,
        *,
        store: WingStore,
        generator: TextGenerator,
        score_threshold: float = SCORE_THRESHOLD,
        high_score_threshold: float = HIGH_SCORE_THRESHOLD,
    ):
        """Initialize the manager with its collaborators.

        Args:
            store: Store holding wings and connections
            generator: Text generator for semantic similarity
            score_threshold: Minimum combined score to create a connection
            high_score_threshold: Score at which a connection counts as highly relevant
        """
        self.store = store
        self.generator = generator
        self.score_threshold = score_threshold
        self.high_score_threshold = high_score_threshold

    async def analyze_connections_for_wing(self, wing: Wing) -> List[Connection]:
        """Score a wing against every other wing and store the pairs that clear the threshold.

        Pairs that are already connected are left alone, so running this twice
        creates nothing new the second time.

        Args:
            wing: Newly added or updated wing

        Returns:
            The connections created by this call
        """
        all_wings = await self.store.get_all_wings()
        other_wings = [w for w in all_wings if w.id != wing.id]

        created = []
        for other in other_wings:
            if await self.store.get_connection_between(wing.id, other.id):
                continue

            score = await scoring.calculate_connection_score(wing, other, self.generator)
            logger.debug(f"Scored {wing.id} / {other.id}: {score:.3f}")

            if score >= self.score_threshold:
                # Labelled semantic even when no summaries took part in the score
                connection = Connection.between(
                    wing.id, other.id, score=score, type=ConnectionType.SEMANTIC
                )
                await self.store.create_connection(connection)
                created.append(connection)

        logger.info(
            f"Analyzed {wing.id} against {len(other_wings)} wings, "
            f"created {len(created)} connections"
        )
        return created

    async def batch_analyze_connections(self, wings: List[Wing]) -> List[Connection]:
        """Analyze many wings at once, using one generator call for the semantic pass.

        Args:
            wings: Wings to connect among themselves, e.g. after an import

        Returns:
            The connections created by this call
        """
        if len(wings) < 2:
            return []

        accepted: dict[frozenset[str], Connection] = {}

        wings_with_summaries = [w for w in wings if w.summary]
        if len(wings_with_summaries) >= 2:
            semantic = await batch_semantic_analysis(
                wings_with_summaries, self.generator, self.score_threshold
            )
            for connection in semantic:
                pair = frozenset((connection.wing_id1, connection.wing_id2))
                if pair in accepted:
                    continue
                if await self.store.get_connection_between(
                    connection.wing_id1, connection.wing_id2
                ):
                    continue
                accepted[pair] = connection

        for wing1, wing2 in combinations(wings, 2):
            pair = frozenset((wing1.id, wing2.id))
            if len(pair) < 2 or pair in accepted:
                continue
            if await self.store.get_connection_between(wing1.id, wing2.id):
                continue

            score = non_semantic_score(wing1, wing2)
            if score >= self.score_threshold:
                accepted[pair] = Connection.between(
                    wing1.id, wing2.id, score=min(1.0, score), type=ConnectionType.TAXONOMY
                )

        created = list(accepted.values())
        if created:
            await self.store.batch_upsert_connections(created)

        logger.info(f"Batch analyzed {len(wings)} wings, created {len(created)} connections")
        return created

    async def create_manual_connection(self, wing_id1: str, wing_id2: str) -> Connection:
        """Link two wings by hand, promoting an existing connection if there is one.

        Raises:
            ValueError: If an ID is empty or both IDs are the same
        """
        _require_ids(wing_id1, wing_id2)
        if wing_id1 == wing_id2:
            raise ValueError(f"Cannot connect wing {wing_id1} to itself")

        existing = await self.store.get_connection_between(wing_id1, wing_id2)
        if existing:
            return await self.store.update_connection(
                existing.id, {"type": ConnectionType.MANUAL, "score": 1.0}
            )

        connection = Connection.between(
            wing_id1, wing_id2, score=1.0, type=ConnectionType.MANUAL
        )
        return await self.store.create_connection(connection)

    async def remove_connection(self, wing_id1: str, wing_id2: str) -> bool:
        """Remove the connection between two wings.

        Returns:
            True if a connection was removed, False if there was none
        """
        _require_ids(wing_id1, wing_id2)

        existing = await self.store.get_connection_between(wing_id1, wing_id2)
        if existing:
            await self.store.delete_connection(existing.id)
            return True
        return False

    async def get_related_wings(self, wing_id: str) -> List[RelatedWing]:
        """Get the wings connected to a wing, most relevant first.

        Connections pointing at wings that no longer exist are skipped.
        """
        _require_ids(wing_id)

        related = []
        for connection in await self.store.get_connections_for_wing(wing_id):
            other = await self.store.get_wing(connection.other_wing_id(wing_id))
            if not other:
                continue
            related.append(
                RelatedWing(
                    **other.model_dump(),
                    connection_score=connection.score,
                    connection_type=connection.type,
                    connection_id=connection.id,
                )
            )

        related.sort(key=lambda w: w.connection_score, reverse=True)
        return related

    async def refresh_connections(self, wing_id: str) -> List[Connection]:
        """Drop all connections of a wing and analyze it again.

        Returns:
            The new connections, or an empty list if the wing no longer exists
        """
        _require_ids(wing_id)

        await self.store.delete_connections_for_wing(wing_id)

        wing = await self.store.get_wing(wing_id)
        if not wing:
            return []

        return await self.analyze_connections_for_wing(wing)

    async def get_connection_stats(self) -> ConnectionStats:
        connections = await self.store.get_all_connections()
        wings = await self.store.get_all_wings()

        average_score = (
            sum(c.score for c in connections) / len(connections) if connections else 0.0
        )

        by_type: dict[str, int] = {}
        for connection in connections:
            by_type[connection.type.value] = by_type.get(connection.type.value, 0) + 1

        return ConnectionStats(
            total_connections=len(connections),
            total_wings=len(wings),
            average_score=average_score,
            high_score_connections=sum(
                1 for c in connections if c.score >= self.high_score_threshold
            ),
            connections_by_type=by_type,
        )
