from __future__ import annotations

from typing import Sequence

from tqdm.asyncio import tqdm as tqdm_asyncio

from .graph.prompts import (
    PAPER_SUMMARY_SYSTEM,
    PAPER_SUMMARY_USER,
    PROJECT_SUMMARY_SYSTEM,
    PROJECT_SUMMARY_USER,
)
from .graph.state import Paper
from .tools.llm import DEFAULT_TEMPERATURE, ReasoningClient, system_user
from .tools.logger import get_logger

logger = get_logger(__name__)


NO_PAPERS = "No papers in project."


async def summarize_paper(llm: ReasoningClient, paper: Paper) -> str:
    user = PAPER_SUMMARY_USER.format(
        title=paper.title,
        authors=", ".join(paper.authors),
        year=paper.year or "n/a",
        abstract=paper.abstract or "(no abstract)",
    )
    out = await llm.chat(system_user(PAPER_SUMMARY_SYSTEM, user), temperature=DEFAULT_TEMPERATURE)
    return out.strip()


async def summarize_project(llm: ReasoningClient, papers: Sequence[Paper], max_papers: int = 10) -> str:
    """Summarize the first ``max_papers`` papers, then synthesize a short review."""
    subset = list(papers)[:max(0, max_papers)]
    if not subset:
        return NO_PAPERS
    logger.info("Summarizing %d papers", len(subset))
    bullets = await tqdm_asyncio.gather(
        *(summarize_paper(llm, p) for p in subset),
        desc="Summarizing papers",
        unit="paper",
    )
    numbered = "\n\n".join(f"[{i + 1}] {p.title}\n{b}" for i, (p, b) in enumerate(zip(subset, bullets)))
    out = await llm.chat(
        system_user(PROJECT_SUMMARY_SYSTEM, PROJECT_SUMMARY_USER.format(summaries=numbered)),
        temperature=DEFAULT_TEMPERATURE,
    )
    return out.strip()
