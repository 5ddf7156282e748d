"""Signals and weighting used to score how related two wings are."""

import logging
import re
from urllib.parse import urlparse

from wingnest.domain.wing import Wing
from wingnest.llms.base import TextGenerator
from wingnest.llms.schemas import GenerationRequest
from wingnest.prompt import get_similarity_prompt

logger = logging.getLogger(__name__)

COLLECTION_WEIGHT = 0.2
DOMAIN_WEIGHT = 0.15
SEMANTIC_WEIGHT = 0.65
# Without summaries the remaining signals carry double weight
NO_SEMANTIC_BOOST = 2.0

SAME_HOST_SCORE = 0.8
SAME_ROOT_DOMAIN_SCORE = 0.5

SIMILARITY_MAX_TOKENS = 10

_LEADING_NUMBER = re.compile(r"\s*([-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?)")


def parse_number(text: str) -> float | None:
    """Parse the leading decimal number of a model reply, if there is one."""
    match = _LEADING_NUMBER.match(text)
    if not match:
        return None
    return float(match.group(1))


def parse_score(text: str) -> float | None:
    """Parse a model reply as a score.

    Args:
        text: Raw text returned by the model

    Returns:
        The leading number if it lies within [0, 1], otherwise None
    """
    score = parse_number(text)
    if score is None or not 0.0 <= score <= 1.0:
        return None
    return score


def collection_proximity(wing1: Wing, wing2: Wing) -> float:
    """Calculate how much the collections of two wings overlap.

    Args:
        wing1: First wing
        wing2: Second wing

    Returns:
        Shared collections divided by the larger collection count, 0.0 if nothing is shared
    """
    collections1 = set(wing1.collection_ids)
    collections2 = set(wing2.collection_ids)

    if not collections1 or not collections2:
        return 0.0

    shared = collections1 & collections2
    if not shared:
        return 0.0

    return len(shared) / max(len(collections1), len(collections2))


def root_domain(hostname: str) -> str:
    """Last two labels of a hostname, e.g. ``docs.example.com`` -> ``example.com``.

    This is a plain string heuristic, not a public suffix lookup.
    """
    parts = hostname.split(".")
    if len(parts) <= 2:
        return hostname
    return ".".join(parts[-2:])


def _hostname(url: str) -> str | None:
    try:
        return urlparse(url).hostname
    except ValueError:
        return None


def domain_similarity(wing1: Wing, wing2: Wing) -> float:
    """Calculate domain similarity between the URLs of two wings.

    Args:
        wing1: First wing
        wing2: Second wing

    Returns:
        0.8 for the same host, 0.5 for the same root domain, 0.0 otherwise
        or when either URL has no parseable host
    """
    host1 = _hostname(wing1.url)
    host2 = _hostname(wing2.url)
    if not host1 or not host2:
        return 0.0

    if host1 == host2:
        return SAME_HOST_SCORE

    if root_domain(host1) == root_domain(host2):
        return SAME_ROOT_DOMAIN_SCORE

    return 0.0


def has_summaries(wing1: Wing, wing2: Wing) -> bool:
    return bool(wing1.summary) and bool(wing2.summary)


async def semantic_similarity(wing1: Wing, wing2: Wing, generator: TextGenerator) -> float:
    """Ask the text generator how similar the summaries of two wings are.

    Args:
        wing1: First wing, must have a summary
        wing2: Second wing, must have a summary
        generator: Text generator used for the comparison

    Returns:
        The model's score between 0.0 and 1.0; 0.0 when the call fails or
        the reply is not a number in range
    """
    request = GenerationRequest(
        prompt=get_similarity_prompt(wing1, wing2),
        max_tokens=SIMILARITY_MAX_TOKENS,
    )
    try:
        result = await generator.generate(request)
    except Exception as e:
        logger.warning(f"Semantic similarity failed for {wing1.id} / {wing2.id}: {e}")
        return 0.0

    score = parse_score(result.text)
    if score is None:
        logger.debug(f"Discarding similarity reply {result.text!r} for {wing1.id} / {wing2.id}")
        return 0.0
    return score


async def calculate_connection_score(wing1: Wing, wing2: Wing, generator: TextGenerator) -> float:
    """Combine collection, domain and semantic signals into one score.

    Collection and domain only count when they are positive. The semantic
    signal counts whenever both wings have a summary, even when it scores 0.

    Args:
        wing1: First wing
        wing2: Second wing
        generator: Text generator for the semantic signal

    Returns:
        Weighted average of the contributing signals, capped at 1.0
    """
    semantic_applicable = has_summaries(wing1, wing2)
    boost = 1.0 if semantic_applicable else NO_SEMANTIC_BOOST

    signals: list[tuple[float, float]] = []

    collection_score = collection_proximity(wing1, wing2)
    if collection_score > 0:
        signals.append((collection_score, COLLECTION_WEIGHT * boost))

    domain_score = domain_similarity(wing1, wing2)
    if domain_score > 0:
        signals.append((domain_score, DOMAIN_WEIGHT * boost))

    if semantic_applicable:
        semantic_score = await semantic_similarity(wing1, wing2, generator)
        signals.append((semantic_score, SEMANTIC_WEIGHT))

    if not signals:
        return 0.0

    total_weight = sum(weight for _, weight in signals)
    weighted_sum = sum(score * weight for score, weight in signals)

    return min(1.0, weighted_sum / total_weight)
