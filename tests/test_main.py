import argparse

from research_agent.graph.state import AgentConfig, CoverageResult
from research_agent.main import _build_config, auth_status, build_parser, format_coverage


def test_format_coverage():
    result = CoverageResult.model_validate(
        {
            "overall": {"follows": True, "coverage_percent": 66.6, "confidence": 0.5, "explanation": "Mostly."},
            "per_paper": [
                {"id": "arxiv:1", "title": "T", "coverage_percent": 40.4, "verdict": "partial", "rationale": "Some."}
            ],
        }
    )
    text = format_coverage(result)
    assert text.splitlines()[0] == "Overall: FOLLOWS | coverage 67% | conf 0.50"
    assert "- T [arxiv:1]" in text
    assert "  PARTIAL | 40%" in text
    assert "  Some." in text


def test_parser_coverage_flags():
    args = build_parser().parse_args(["--project", "p", "coverage", "X causes Y", "--topk", "3", "--json"])
    assert args.command == "coverage"
    assert args.claim == "X causes Y"
    assert args.topk == 3
    assert args.json is True


def test_build_config_from_env(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "replace_me")
    monkeypatch.setenv("COVERAGE_TOP_K", "5")
    monkeypatch.setenv("LIT_DIR", "/tmp/lit")
    args = argparse.Namespace(model=None, project="p")
    config = _build_config(args)
    assert config.openai_api_key is None
    assert config.coverage_top_k == 5
    assert config.lit_dir == "/tmp/lit"
    assert config.project == "p"


def test_auth_status_redacts_key():
    text = auth_status(AgentConfig(openai_api_key="sk-secret-1234"))
    assert "sk-secret" not in text
    assert "1234" in text
    assert "No credentials detected" in auth_status(AgentConfig())


def test_format_coverage_prints_non_numeric_values_as_sent():
    result = CoverageResult.model_validate(
        {
            "overall": {"follows": "true", "coverage_percent": float("nan"), "confidence": "high", "explanation": None},
            "per_paper": [
                {"id": "arxiv:1", "title": "T", "coverage_percent": float("inf"), "verdict": None},
                {"id": "arxiv:2", "title": "U", "coverage_percent": "80%", "verdict": "supports"},
            ],
        }
    )
    lines = format_coverage(result).splitlines()
    assert lines[0] == "Overall: DOES NOT FOLLOW | coverage nan | conf high"
    assert lines[1] == ""
    assert "  NONE | inf" in lines
    assert "  SUPPORTS | 80%" in lines


def test_parser_limits_default_to_none():
    parser = build_parser()
    assert parser.parse_args(["search", "q"]).limit is None
    assert parser.parse_args(["search", "q", "--limit", "0"]).limit == 0
    assert parser.parse_args(["summary", "--max-papers", "0"]).max_papers == 0
