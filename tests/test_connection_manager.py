"""Tests for ConnectionManager using an in-memory store and a fake text generator."""

import pytest

from wingnest.connections.manager import ConnectionManager
from wingnest.domain.connections import Connection, ConnectionStats, ConnectionType
from wingnest.domain.wing import Wing
from wingnest.stores.local import LocalWingStore
from tests.fakes import FailingTextGenerator, FakeTextGenerator


def build_manager(
    wings: list[Wing],
    generator: FakeTextGenerator | FailingTextGenerator | None = None,
    connections: list[Connection] | None = None,
    **kwargs,
) -> ConnectionManager:
    store = LocalWingStore.from_data(wings=wings, connections=connections)
    return ConnectionManager(store=store, generator=generator or FakeTextGenerator(), **kwargs)


@pytest.mark.asyncio
async def test_analyze_connections_for_wing(
    manager: ConnectionManager, test_wings: dict[str, Wing], fake_generator: FakeTextGenerator
) -> None:
    created = await manager.analyze_connections_for_wing(test_wings["mdn-js"])

    # Shared collection and host carry the pair over the threshold without any semantic score
    assert len(created) == 1
    assert {created[0].wing_id1, created[0].wing_id2} == {"mdn-js", "mdn-css"}
    assert created[0].score == pytest.approx(0.32)
    assert created[0].type == ConnectionType.SEMANTIC
    # Only the pairs where both wings have a summary reach the generator
    assert len(fake_generator.requests) == 2

    stored = await manager.store.get_connection_between("mdn-css", "mdn-js")
    assert stored == created[0]


@pytest.mark.asyncio
async def test_analyze_connections_without_other_wings() -> None:
    wing = Wing(id="only", url="https://example.com", summary="x")
    manager = build_manager([wing])

    assert await manager.analyze_connections_for_wing(wing) == []


@pytest.mark.asyncio
async def test_analyze_connections_respects_threshold() -> None:
    wing = Wing(id="a", url="https://a.com", summary="x")
    below = Wing(id="b", url="https://b.org", summary="y")
    above = Wing(id="c", url="https://c.net", summary="z")
    manager = build_manager([wing, below, above], FakeTextGenerator(["0.29", "0.31"]))

    created = await manager.analyze_connections_for_wing(wing)

    assert [c.other_wing_id("a") for c in created] == ["c"]
    assert created[0].score == pytest.approx(0.31)


@pytest.mark.asyncio
async def test_analyze_connections_accepts_score_equal_to_threshold() -> None:
    wing = Wing(id="a", url="https://a.com", summary="x")
    other = Wing(id="b", url="https://b.org", summary="y")
    manager = build_manager([wing, other], FakeTextGenerator("0.5"), score_threshold=0.5)

    created = await manager.analyze_connections_for_wing(wing)

    assert len(created) == 1
    assert created[0].score == 0.5


@pytest.mark.asyncio
async def test_analyze_connections_twice_creates_no_duplicates(
    manager: ConnectionManager, test_wings: dict[str, Wing], fake_generator: FakeTextGenerator
) -> None:
    first = await manager.analyze_connections_for_wing(test_wings["blog"])
    calls_after_first = len(fake_generator.requests)

    second = await manager.analyze_connections_for_wing(test_wings["blog"])

    assert len(first) == 1
    assert second == []
    assert len(await manager.store.get_all_connections()) == 1
    assert len(fake_generator.requests) == calls_after_first


@pytest.mark.asyncio
async def test_analyze_connections_survives_generator_failure(
    test_wings: dict[str, Wing],
) -> None:
    manager = build_manager(list(test_wings.values()), FailingTextGenerator())

    created = await manager.analyze_connections_for_wing(test_wings["mdn-js"])

    assert [c.other_wing_id("mdn-js") for c in created] == ["mdn-css"]


@pytest.mark.asyncio
async def test_per_wing_and_batch_label_the_same_pair_differently() -> None:
    wing_a = Wing(id="a", url="https://a.com", collection_ids=["c1"], summary="x")
    wing_b = Wing(id="b", url="https://b.org", collection_ids=["c1"])

    per_wing = await build_manager([wing_a, wing_b]).analyze_connections_for_wing(wing_a)
    batch = await build_manager([wing_a, wing_b]).batch_analyze_connections([wing_a, wing_b])

    assert per_wing[0].type == ConnectionType.SEMANTIC
    assert per_wing[0].score == 1.0
    assert batch[0].type == ConnectionType.TAXONOMY
    assert batch[0].score == pytest.approx(0.6)


@pytest.mark.asyncio
async def test_batch_analyze_single_wing_makes_no_call() -> None:
    generator = FakeTextGenerator("0,1,0.9")
    wing = Wing(id="a", summary="x")
    manager = build_manager([wing], generator)

    assert await manager.batch_analyze_connections([wing]) == []
    assert generator.requests == []


@pytest.mark.asyncio
async def test_batch_analyze_combines_semantic_and_taxonomy(
    test_wings: dict[str, Wing],
) -> None:
    # Summarized wings are listed in order: mdn-js, mdn-css, pasta
    risotto = Wing(id="risotto", url="https://food.example.org/risotto", collection_ids=["food"])
    wings = [*test_wings.values(), risotto]
    generator = FakeTextGenerator("0,2,0.55\nnot a pair\n0,1,0.9")
    manager = build_manager(wings, generator)

    created = await manager.batch_analyze_connections(wings)

    by_pair = {frozenset((c.wing_id1, c.wing_id2)): c for c in created}
    assert set(by_pair) == {
        frozenset(("mdn-js", "pasta")),
        frozenset(("mdn-js", "mdn-css")),
        frozenset(("pasta", "risotto")),
    }
    assert by_pair[frozenset(("mdn-js", "mdn-css"))].type == ConnectionType.SEMANTIC
    assert by_pair[frozenset(("mdn-js", "mdn-css"))].score == 0.9
    assert by_pair[frozenset(("pasta", "risotto"))].type == ConnectionType.TAXONOMY
    assert by_pair[frozenset(("pasta", "risotto"))].score == pytest.approx(0.6)
    assert len(generator.requests) == 1
    assert len(await manager.store.get_all_connections()) == 3


@pytest.mark.asyncio
async def test_batch_analyze_falls_back_when_generator_fails(
    test_wings: dict[str, Wing],
) -> None:
    manager = build_manager(list(test_wings.values()), FailingTextGenerator())

    created = await manager.batch_analyze_connections(list(test_wings.values()))

    assert {frozenset((c.wing_id1, c.wing_id2)) for c in created} == {
        frozenset(("mdn-js", "mdn-css")),
    }
    assert created[0].type == ConnectionType.TAXONOMY
    # 1.0 * 0.6 + 0.8 * 0.4
    assert created[0].score == pytest.approx(0.92)


@pytest.mark.asyncio
async def test_batch_analyze_keeps_existing_manual_connection(
    test_wings: dict[str, Wing],
) -> None:
    manual = Connection.between("mdn-js", "mdn-css", score=1.0, type=ConnectionType.MANUAL)
    generator = FakeTextGenerator("0,1,0.4")
    manager = build_manager(list(test_wings.values()), generator, connections=[manual])

    created = await manager.batch_analyze_connections(list(test_wings.values()))

    assert frozenset(("mdn-js", "mdn-css")) not in {
        frozenset((c.wing_id1, c.wing_id2)) for c in created
    }
    stored = await manager.store.get_connection_between("mdn-css", "mdn-js")
    assert stored.type == ConnectionType.MANUAL
    assert stored.score == 1.0


@pytest.mark.asyncio
async def test_create_manual_connection_is_idempotent(manager: ConnectionManager) -> None:
    first = await manager.create_manual_connection("blog", "pasta")
    second = await manager.create_manual_connection("pasta", "blog")

    connections = await manager.store.get_all_connections()
    assert len(connections) == 1
    assert first.id == second.id
    assert connections[0].score == 1.0
    assert connections[0].type == ConnectionType.MANUAL


@pytest.mark.asyncio
async def test_create_manual_connection_promotes_existing(
    manager: ConnectionManager, test_wings: dict[str, Wing]
) -> None:
    [existing] = await manager.analyze_connections_for_wing(test_wings["docs"])

    promoted = await manager.create_manual_connection("docs", "blog")

    assert promoted.id == existing.id
    assert promoted.type == ConnectionType.MANUAL
    assert promoted.score == 1.0
    assert len(await manager.store.get_all_connections()) == 1

    # Analysis afterwards leaves the manual connection alone
    assert await manager.analyze_connections_for_wing(test_wings["blog"]) == []
    stored = await manager.store.get_connection_between("blog", "docs")
    assert stored.type == ConnectionType.MANUAL


@pytest.mark.asyncio
async def test_create_manual_connection_leaves_other_pairs_alone() -> None:
    manual = Connection.between("a|b", "c", score=1.0, type=ConnectionType.MANUAL)
    manager = build_manager(
        [Wing(id="a|b"), Wing(id="c"), Wing(id="a"), Wing(id="b|c")], connections=[manual]
    )

    await manager.create_manual_connection("a", "b|c")

    assert await manager.store.get_connection_between("a|b", "c") == manual
    assert len(await manager.store.get_all_connections()) == 2


@pytest.mark.asyncio
async def test_create_manual_connection_rejects_bad_ids(manager: ConnectionManager) -> None:
    with pytest.raises(ValueError):
        await manager.create_manual_connection("blog", "blog")
    with pytest.raises(ValueError):
        await manager.create_manual_connection("", "blog")


@pytest.mark.asyncio
async def test_remove_connection(manager: ConnectionManager) -> None:
    await manager.create_manual_connection("blog", "pasta")

    assert await manager.remove_connection("pasta", "blog") is True
    assert await manager.remove_connection("pasta", "blog") is False
    assert await manager.store.get_all_connections() == []


@pytest.mark.asyncio
async def test_get_related_wings_sorted_by_score(test_wings: dict[str, Wing]) -> None:
    connections = [
        Connection.between("blog", "docs", score=0.4, type=ConnectionType.TAXONOMY),
        Connection.between("pasta", "blog", score=1.0, type=ConnectionType.MANUAL),
        Connection.between("blog", "mdn-js", score=0.7, type=ConnectionType.SEMANTIC),
        Connection.between("blog", "deleted-wing", score=0.9, type=ConnectionType.SEMANTIC),
    ]
    manager = build_manager(list(test_wings.values()), connections=connections)

    related = await manager.get_related_wings("blog")

    assert [w.id for w in related] == ["pasta", "mdn-js", "docs"]
    assert [w.connection_score for w in related] == [1.0, 0.7, 0.4]
    assert related[0].connection_type == ConnectionType.MANUAL
    assert related[0].connection_id == connections[1].id
    assert related[0].url == test_wings["pasta"].url


@pytest.mark.asyncio
async def test_get_related_wings_without_connections(manager: ConnectionManager) -> None:
    assert await manager.get_related_wings("pasta") == []


@pytest.mark.asyncio
async def test_refresh_connections_reanalyzes(test_wings: dict[str, Wing]) -> None:
    stale = Connection.between("blog", "pasta", score=0.9, type=ConnectionType.SEMANTIC)
    manager = build_manager(list(test_wings.values()), connections=[stale])

    refreshed = await manager.refresh_connections("blog")

    assert [c.other_wing_id("blog") for c in refreshed] == ["docs"]
    assert await manager.store.get_connection_between("blog", "pasta") is None


@pytest.mark.asyncio
async def test_refresh_connections_for_missing_wing(test_wings: dict[str, Wing]) -> None:
    dangling = Connection.between("ghost", "blog", score=0.5, type=ConnectionType.SEMANTIC)
    manager = build_manager(list(test_wings.values()), connections=[dangling])

    assert await manager.refresh_connections("ghost") == []
    assert await manager.store.get_all_connections() == []


@pytest.mark.asyncio
async def test_connection_stats_empty() -> None:
    manager = build_manager([])

    stats = await manager.get_connection_stats()

    assert stats == ConnectionStats()
    assert stats.model_dump(by_alias=True) == {
        "totalConnections": 0,
        "totalWings": 0,
        "averageScore": 0,
        "highScoreConnections": 0,
        "connectionsByType": {},
    }


@pytest.mark.asyncio
async def test_connection_stats(test_wings: dict[str, Wing]) -> None:
    connections = [
        Connection.between("blog", "docs", score=0.6, type=ConnectionType.TAXONOMY),
        Connection.between("pasta", "blog", score=1.0, type=ConnectionType.MANUAL),
        Connection.between("mdn-js", "mdn-css", score=0.5, type=ConnectionType.SEMANTIC),
    ]
    manager = build_manager(list(test_wings.values()), connections=connections)

    stats = await manager.get_connection_stats()

    assert stats.total_connections == 3
    assert stats.total_wings == 5
    assert stats.average_score == pytest.approx(0.7)
    assert stats.high_score_connections == 1
    assert stats.connections_by_type == {"taxonomy": 1, "manual": 1, "semantic": 1}
