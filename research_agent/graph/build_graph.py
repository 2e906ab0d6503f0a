from __future__ import annotations

from typing import Optional, Sequence

from langgraph.graph import END, StateGraph

from .nodes.package import package_node
from .nodes.rank import rank_node
from .nodes.reconcile import reconcile_node
from .nodes.review import make_review_node
from .state import CoverageResult, CoverageState, OverallVerdict, Paper
from ..tools.llm import ReasoningClient
from ..tools.logger import get_logger
from ..tools.progress import NoOpProgressCallback, ProgressCallback

logger = get_logger(__name__)


NO_PAPERS_EXPLANATION = "No papers in project."
DEFAULT_TOP_K = 8


def empty_result() -> CoverageResult:
    return CoverageResult(
        overall=OverallVerdict(
            follows=False,
            coverage_percent=0,
            confidence=0.2,
            explanation=NO_PAPERS_EXPLANATION,
        ),
        per_paper=[],
    )


def no_papers_node(state: CoverageState) -> dict:
    logger.info("[coverage] No papers to evaluate; skipping the model call")
    return {"result": empty_result()}


def _has_evidence(state: CoverageState) -> bool:
    return bool(state.ranked)


def build_coverage_graph(llm: ReasoningClient):
    graph = StateGraph(CoverageState)
    graph.add_node("rank", rank_node)
    graph.add_node("no_papers", no_papers_node)
    graph.add_node("package", package_node)
    graph.add_node("review", make_review_node(llm))
    graph.add_node("reconcile", reconcile_node)

    graph.set_entry_point("rank")
    graph.add_conditional_edges(
        "rank",
        _has_evidence,
        {True: "package", False: "no_papers"},
    )
    graph.add_edge("no_papers", END)
    graph.add_edge("package", "review")
    graph.add_edge("review", "reconcile")
    graph.add_edge("reconcile", END)

    return graph.compile()


async def evaluate_coverage(
    llm: ReasoningClient,
    papers: Sequence[Paper],
    claim: str,
    top_k: int = DEFAULT_TOP_K,
    progress: Optional[ProgressCallback] = None,
) -> CoverageResult:
    """Judge whether ``claim`` follows from the most relevant of ``papers``.

    Always returns a well-formed result unless the model call itself fails,
    in which case the error is re-raised unchanged.
    """
    progress = progress or NoOpProgressCallback()
    graph = build_coverage_graph(llm)
    progress.on_start("Analyzing claim against selected papers")
    try:
        out = await graph.ainvoke({"claim": claim, "papers": list(papers), "top_k": top_k})
    except Exception as exc:
        progress.on_error(exc)
        raise
    progress.on_complete("Analysis complete.")
    return out["result"]
