from __future__ import annotations

from typing import AbstractSet, List, Sequence

from ..state import CoverageState, Paper
from ...tools.logger import get_logger
from ...tools.text_utils import tokenize

logger = get_logger(__name__)


TITLE_PREFIX_CHARS = 30
TITLE_PREFIX_BONUS = 5
RECENCY_BASE_YEAR = 2015
RECENCY_MAX_BONUS = 5


def _recency_bonus(year) -> int:
    if not year:
        return 0
    return max(0, min(RECENCY_MAX_BONUS, year - RECENCY_BASE_YEAR))


def relevance_score(claim_tokens: AbstractSet[str], claim_prefix: str, paper: Paper) -> int:
    text = f"{paper.title} {paper.abstract or ''}"
    score = sum(1 for token in tokenize(text) if token in claim_tokens)
    if claim_prefix in paper.title.lower():
        score += TITLE_PREFIX_BONUS
    return score + _recency_bonus(paper.year)


def rank_papers(claim: str, papers: Sequence[Paper], k: int) -> List[Paper]:
    """Order papers by crude lexical relevance to the claim and keep the top k.

    Ties keep their input order (sorted() is stable).
    """
    if k <= 0:
        return []
    claim_tokens = set(tokenize(claim))
    claim_prefix = (claim or "").lower()[:TITLE_PREFIX_CHARS]
    scored = [(relevance_score(claim_tokens, claim_prefix, p), p) for p in papers]
    scored.sort(key=lambda item: item[0], reverse=True)
    return [p for _, p in scored[:k]]


def rank_node(state: CoverageState) -> dict:
    ranked = rank_papers(state.claim, state.papers, state.top_k)
    logger.info("[rank] Selected %d of %d papers (top_k=%d)", len(ranked), len(state.papers), state.top_k)
    return {"ranked": ranked}
