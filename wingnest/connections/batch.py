"""Batch connection analysis: one LLM call for many wings plus a non-semantic pass."""

import logging
from typing import List

from wingnest.domain.connections import Connection, ConnectionType
from wingnest.domain.wing import Wing
from wingnest.llms.base import TextGenerator
from wingnest.llms.schemas import GenerationRequest
from wingnest.prompt import get_batch_similarity_prompt

from .scoring import collection_proximity, domain_similarity, parse_number

logger = logging.getLogger(__name__)

BATCH_MIN_SIMILARITY = 0.4
BATCH_MAX_TOKENS = 500

BATCH_COLLECTION_WEIGHT = 0.6
BATCH_DOMAIN_WEIGHT = 0.4


def non_semantic_score(wing1: Wing, wing2: Wing) -> float:
    """Score a pair from collection and domain signals only."""
    return (
        collection_proximity(wing1, wing2) * BATCH_COLLECTION_WEIGHT
        + domain_similarity(wing1, wing2) * BATCH_DOMAIN_WEIGHT
    )


def parse_batch_pairs(text: str, wings: List[Wing], min_score: float) -> List[Connection]:
    """Parse ``index1,index2,score`` lines from a batch similarity reply.

    Bad lines are skipped one by one so a single garbled line does not
    discard the rest of the reply. A line reading ``none`` ends parsing.

    Args:
        text: Raw model reply
        wings: The wings in the order they were listed in the prompt
        min_score: Scores below this are dropped

    Returns:
        Semantic connections for the accepted pairs, scores capped at 1.0
    """
    connections = []
    seen_pairs: set[frozenset[str]] = set()

    for raw_line in text.strip().splitlines():
        line = raw_line.strip()
        if line.lower() == "none":
            break

        parts = [part.strip() for part in line.split(",")]
        if len(parts) != 3:
            continue

        try:
            idx1 = int(parts[0])
            idx2 = int(parts[1])
        except ValueError:
            continue

        score = parse_number(parts[2])
        if score is None or score < min_score:
            continue

        if not (0 <= idx1 < len(wings) and 0 <= idx2 < len(wings)) or idx1 == idx2:
            continue

        wing1, wing2 = wings[idx1], wings[idx2]
        pair = frozenset((wing1.id, wing2.id))
        if len(pair) < 2 or pair in seen_pairs:
            continue
        seen_pairs.add(pair)

        connections.append(
            Connection.between(
                wing1.id, wing2.id, score=min(1.0, score), type=ConnectionType.SEMANTIC
            )
        )

    return connections


async def batch_semantic_analysis(
    wings: List[Wing], generator: TextGenerator, min_score: float
) -> List[Connection]:
    """Find semantically related pairs among wings with a single generator call.

    Args:
        wings: Wings that all have summaries
        generator: Text generator used for the comparison
        min_score: Acceptance threshold for parsed scores

    Returns:
        Semantic connections, or an empty list if the call fails
    """
    if len(wings) < 2:
        return []

    request = GenerationRequest(
        prompt=get_batch_similarity_prompt(wings, BATCH_MIN_SIMILARITY),
        max_tokens=BATCH_MAX_TOKENS,
    )
    try:
        result = await generator.generate(request)
    except Exception as e:
        logger.error(f"Batch semantic analysis failed for {len(wings)} wings: {e}")
        return []

    connections = parse_batch_pairs(result.text, wings, min_score)
    logger.debug(f"Batch semantic analysis accepted {len(connections)} pairs")
    return connections
