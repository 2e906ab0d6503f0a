from __future__ import annotations

from typing import Callable, List, Sequence

from ..prompts import COVERAGE_PAPER, COVERAGE_SYSTEM, COVERAGE_USER
from ..state import ChatMessage, CoverageState, EvidenceItem
from ...tools.llm import ReasoningClient, system_user
from ...tools.logger import get_logger

logger = get_logger(__name__)


COVERAGE_TEMPERATURE = 0.2


def format_evidence(evidence: Sequence[EvidenceItem]) -> str:
    return "\n\n".join(
        COVERAGE_PAPER.format(index=i + 1, **item.model_dump())
        for i, item in enumerate(evidence)
    )


def build_coverage_messages(claim: str, evidence: Sequence[EvidenceItem]) -> List[ChatMessage]:
    user = COVERAGE_USER.format(claim=claim, papers=format_evidence(evidence))
    return system_user(COVERAGE_SYSTEM, user)


def make_review_node(llm: ReasoningClient) -> Callable:
    async def review_node(state: CoverageState) -> dict:
        logger.info("[review] Asking the model to rate %d papers", len(state.evidence))
        messages = build_coverage_messages(state.claim, state.evidence)
        raw = await llm.chat(messages, temperature=COVERAGE_TEMPERATURE)
        logger.debug("[review] Model returned %d chars", len(raw))
        return {"raw_response": raw}

    return review_node
