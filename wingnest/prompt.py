from typing import List

from wingnest.domain.wing import Wing

SIMILARITY_PROMPT_TEMPLATE = """Compare these two web page summaries and rate their topical/semantic similarity on a scale of 0.0 to 1.0.
Only respond with a single decimal number between 0.0 and 1.0, nothing else.

Page 1: "{title1}"
Summary: {summary1}

Page 2: "{title2}"
Summary: {summary2}

Similarity score (0.0 to 1.0):"""

BATCH_SIMILARITY_PROMPT_TEMPLATE = """Analyze these web pages and identify which pairs are semantically related (same topic, complementary information, etc.).

{wing_list}

List only the pairs with similarity >= {min_similarity}. Format each line as: index1,index2,score
Example: 0,2,0.75

Only output the pairs, one per line, nothing else. If no pairs meet the threshold, output "none"."""

BATCH_SUMMARY_CHARS = 200


def get_similarity_prompt(wing1: Wing, wing2: Wing) -> str:
    return SIMILARITY_PROMPT_TEMPLATE.format(
        title1=wing1.title,
        summary1=wing1.summary,
        title2=wing2.title,
        summary2=wing2.summary,
    )


def get_wing_list(wings: List[Wing]) -> str:
    """Render wings as an indexed list, one line per wing."""
    lines = []
    for i, wing in enumerate(wings):
        summary = (wing.summary or "")[:BATCH_SUMMARY_CHARS]
        lines.append(f'[{i}] "{wing.title}": {summary}')
    return "\n".join(lines)


def get_batch_similarity_prompt(wings: List[Wing], min_similarity: float) -> str:
    return BATCH_SIMILARITY_PROMPT_TEMPLATE.format(
        wing_list=get_wing_list(wings),
        min_similarity=min_similarity,
    )
