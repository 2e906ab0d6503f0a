from __future__ import annotations

from typing import List, Sequence

from ..state import CoverageState, EvidenceItem, Paper
from ...tools.logger import get_logger

logger = get_logger(__name__)


MAX_AUTHORS = 5
MAX_ABSTRACT_CHARS = 1200


def to_evidence_item(paper: Paper) -> EvidenceItem:
    # abstracts can be long; a plain character cut keeps prompts bounded
    return EvidenceItem(
        id=paper.id,
        title=paper.title,
        year=paper.year or "n/a",
        authors=", ".join(paper.authors[:MAX_AUTHORS]),
        abstract=(paper.abstract or "")[:MAX_ABSTRACT_CHARS],
    )


def package_evidence(papers: Sequence[Paper]) -> List[EvidenceItem]:
    return [to_evidence_item(p) for p in papers]


def package_node(state: CoverageState) -> dict:
    evidence = package_evidence(state.ranked)
    logger.debug("[package] Packaged %d evidence items", len(evidence))
    return {"evidence": evidence}
