import asyncio
import json

import pytest

from research_agent.graph.build_graph import NO_PAPERS_EXPLANATION, evaluate_coverage
from research_agent.graph.nodes.reconcile import NON_JSON_EXPLANATION
from research_agent.graph.nodes.review import build_coverage_messages
from research_agent.graph.nodes.package import package_evidence
from research_agent.tools.progress import ProgressCallback

from conftest import FakeLlm, make_paper


class RecordingProgress(ProgressCallback):
    def __init__(self):
        self.events = []

    def on_start(self, label):
        self.events.append(("start", label))

    def on_complete(self, message):
        self.events.append(("complete", message))

    def on_error(self, error):
        self.events.append(("error", type(error).__name__))


def _evaluate(llm, papers, claim, **kwargs):
    return asyncio.run(evaluate_coverage(llm, papers, claim, **kwargs))


def _deep_learning_paper():
    return make_paper(
        "arxiv:2301.00001v1",
        title="Deep Learning for X",
        abstract="We show that X causes Y. " + "Details follow. " * 200,
        year=2023,
        authors=["Ada Lovelace", "Alan Turing"],
    )


def test_empty_project_skips_the_model():
    llm = FakeLlm(reply="should not be used")
    result = _evaluate(llm, [], "X causes Y")
    assert result.model_dump() == {
        "overall": {
            "follows": False,
            "coverage_percent": 0,
            "confidence": 0.2,
            "explanation": NO_PAPERS_EXPLANATION,
        },
        "per_paper": [],
    }
    assert llm.calls == []


def test_non_positive_top_k_also_skips_the_model():
    llm = FakeLlm(reply="{}")
    result = _evaluate(llm, [_deep_learning_paper()], "X causes Y", top_k=0)
    assert result.overall.explanation == NO_PAPERS_EXPLANATION
    assert llm.calls == []


def test_single_paper_is_ranked_and_packaged():
    paper = _deep_learning_paper()
    llm = FakeLlm(reply="I cannot help with that.")
    _evaluate(llm, [paper], "X causes Y", top_k=8)

    assert len(llm.calls) == 1
    call = llm.calls[0]
    assert call["temperature"] == 0.2
    system, user = call["messages"]
    assert system.role == "system" and "careful scientific reviewer" in system.content
    assert user.role == "user"
    assert "Claim:\nX causes Y" in user.content
    assert "ID: arxiv:2301.00001v1" in user.content
    assert "[1] Deep Learning for X (2023) by Ada Lovelace, Alan Turing" in user.content
    assert "[2]" not in user.content
    assert paper.abstract[:1200] in user.content
    assert paper.abstract[:1201] not in user.content
    assert "STRICT JSON ONLY" in user.content


def test_refusal_gives_one_degraded_entry_per_evidence_item():
    papers = [_deep_learning_paper(), make_paper("arxiv:2", title="Y in the wild", year=2016)]
    llm = FakeLlm(reply="I cannot help with that.")
    result = _evaluate(llm, papers, "X causes Y")
    assert result.overall.follows is False
    assert result.overall.coverage_percent == 0
    assert result.overall.confidence == 0.2
    assert result.overall.explanation == NON_JSON_EXPLANATION
    assert [p.id for p in result.per_paper] == ["arxiv:2301.00001v1", "arxiv:2"]
    assert all(p.verdict == "irrelevant" and p.coverage_percent == 0 for p in result.per_paper)


def test_fenced_reply_is_returned_as_is():
    payload = {
        "overall": {"follows": True, "coverage_percent": 85, "confidence": 0.7, "explanation": "Direct evidence."},
        "per_paper": [
            {
                "id": "arxiv:2301.00001v1",
                "title": "Deep Learning for X",
                "coverage_percent": 85,
                "verdict": "supports",
                "rationale": "Abstract states it.",
            }
        ],
    }
    llm = FakeLlm(reply="```json" + json.dumps(payload) + "```")
    result = _evaluate(llm, [_deep_learning_paper()], "X causes Y")
    assert result.model_dump() == payload


def test_top_k_limits_evidence():
    papers = [make_paper(f"arxiv:{i}", title=f"X causes Y, part {i}") for i in range(12)]
    llm = FakeLlm(reply="no json")
    result = _evaluate(llm, papers, "X causes Y", top_k=3)
    assert len(result.per_paper) == 3
    assert [p.id for p in result.per_paper] == ["arxiv:0", "arxiv:1", "arxiv:2"]


def test_transport_errors_propagate():
    llm = FakeLlm(error=ConnectionError("network down"))
    progress = RecordingProgress()
    with pytest.raises(ConnectionError):
        _evaluate(llm, [_deep_learning_paper()], "X causes Y", progress=progress)
    assert progress.events == [
        ("start", "Analyzing claim against selected papers"),
        ("error", "ConnectionError"),
    ]


def test_progress_reports_start_and_completion():
    progress = RecordingProgress()
    _evaluate(FakeLlm(reply="nope"), [_deep_learning_paper()], "X causes Y", progress=progress)
    assert progress.events == [
        ("start", "Analyzing claim against selected papers"),
        ("complete", "Analysis complete."),
    ]


def test_concurrent_evaluations_are_independent():
    papers = [_deep_learning_paper(), make_paper("arxiv:2", title="Z")]
    claims = ["X causes Y", "Z matters", "nothing"]

    async def run_all():
        return await asyncio.gather(*(evaluate_coverage(FakeLlm(reply="nope"), papers, c) for c in claims))

    results = asyncio.run(run_all())
    assert [len(r.per_paper) for r in results] == [2, 2, 2]
    assert [p.id for p in results[0].per_paper] == ["arxiv:2301.00001v1", "arxiv:2"]


def test_messages_are_built_from_evidence():
    evidence = package_evidence([make_paper("arxiv:1", title="T")])
    system, user = build_coverage_messages("claim text", evidence)
    assert "[1] T (n/a) by " in user.content
    assert "Abstract: " in user.content
    assert "Do not invent sources." in system.content
