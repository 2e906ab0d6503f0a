from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from typing import Any, List, Optional

from dotenv import load_dotenv

from .graph.build_graph import evaluate_coverage
from .graph.nodes.reconcile import as_number
from .graph.state import AgentConfig, CoverageResult
from .summarize import summarize_paper, summarize_project
from .tools.arxiv import ArxivClient, search_and_add
from .tools.llm import LlmClient
from .tools.logger import get_logger, setup_logging
from .tools.progress import TqdmProgressCallback
from .tools.store import create_project, describe_project, open_project
from .tools.text_utils import redact

logger = get_logger(__name__)


def _env_int(key: str, default: int) -> int:
    val = os.getenv(key)
    if val is None or not val.strip():
        return default
    return int(val)


def _normalize_key(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    if value.strip().lower() in {"optional_if_needed", "replace_me", "none", "null"}:
        return None
    return value


def _build_config(args: argparse.Namespace) -> AgentConfig:
    return AgentConfig(
        openai_api_key=_normalize_key(os.getenv("OPENAI_API_KEY")),
        openai_base_url=os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1"),
        openai_model=args.model or os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        arxiv_base_url=os.getenv("ARXIV_BASE_URL", "http://export.arxiv.org/api/query"),
        lit_dir=os.getenv("LIT_DIR", "lit"),
        project=args.project or os.getenv("RESEARCH_PROJECT"),
        coverage_top_k=_env_int("COVERAGE_TOP_K", 8),
        search_limit=_env_int("SEARCH_LIMIT", 20),
        summary_max_papers=_env_int("SUMMARY_MAX_PAPERS", 10),
    )


def _llm(config: AgentConfig) -> LlmClient:
    return LlmClient(
        api_key=config.openai_api_key,
        base_url=config.openai_base_url,
        model=config.openai_model,
    )


def _require_project(config: AgentConfig) -> str:
    if not config.project:
        raise ValueError("No project selected. Pass --project NAME or set RESEARCH_PROJECT.")
    return config.project


def _percent(value: Any) -> str:
    number = as_number(value)
    return f"{round(number)}%" if number is not None else f"{value}"


def _confidence(value: Any) -> str:
    number = as_number(value)
    return f"{number:.2f}" if number is not None else f"{value}"


def format_coverage(result: CoverageResult) -> str:
    # values are printed as the model sent them; only finite numbers are rounded
    overall = result.overall
    lines = [
        f"Overall: {'FOLLOWS' if overall.follows is True else 'DOES NOT FOLLOW'} | "
        f"coverage {_percent(overall.coverage_percent)} | conf {_confidence(overall.confidence)}",
        f"{overall.explanation or ''}",
        "",
        "Per-paper coverage:",
    ]
    for p in result.per_paper:
        lines.append(f"- {p.title} [{p.id}]")
        lines.append(f"  {str(p.verdict).upper()} | {_percent(p.coverage_percent)}")
        lines.append(f"  {p.rationale or ''}")
    return "\n".join(lines)


def auth_status(config: AgentConfig) -> str:
    lines = [
        "Auth status:",
        "  Engine: OpenAI-compatible chat completions",
        f"  Endpoint: {config.openai_base_url}",
        f"  Model: {config.openai_model}",
        f"  Method: {'API Key' if config.openai_api_key else 'None detected'}",
    ]
    if config.openai_api_key:
        lines.append(f"  OPENAI_API_KEY: {redact(config.openai_api_key)}")
    else:
        lines.append("")
        lines.append("No credentials detected. Set OPENAI_API_KEY in the environment or a .env file.")
    return "\n".join(lines)


async def _run(args: argparse.Namespace, config: AgentConfig) -> int:
    if args.command == "auth":
        print(auth_status(config))
        return 0

    if args.command == "create":
        create_project(args.name, root=config.lit_dir, overwrite=args.overwrite)
        print(f'Created project "{args.name}".')
        return 0

    store = open_project(_require_project(config), root=config.lit_dir)

    if args.command == "show":
        print(describe_project(store))
        return 0

    if args.command == "search":
        client = ArxivClient(config.arxiv_base_url)
        limit = args.limit if args.limit is not None else config.search_limit
        results = await search_and_add(client, store, args.query, limit=limit, add=args.add)
        if args.add:
            print(f"Added {len(results)} paper(s).")
        for i, p in enumerate(results):
            print(f"[{i + 1}] {p.id} | {p.title} ({p.year or 'n/a'}) - {', '.join(p.authors[:3])}")
        return 0

    if args.command == "paper":
        paper = store.find(args.id)
        if paper is None:
            print("Paper not found in this project.")
            return 1
        print(await summarize_paper(_llm(config), paper))
        return 0

    if args.command == "summary":
        max_papers = args.max_papers if args.max_papers is not None else config.summary_max_papers
        print(await summarize_project(_llm(config), store.papers, max_papers=max_papers))
        return 0

    if args.command == "coverage":
        top_k = args.topk if args.topk is not None else config.coverage_top_k
        progress = None if args.json else TqdmProgressCallback(file=sys.stderr)
        result = await evaluate_coverage(_llm(config), store.papers, args.claim, top_k=top_k, progress=progress)
        if args.json:
            print(json.dumps(result.to_payload(), ensure_ascii=False, indent=2))
        else:
            print(format_coverage(result))
        return 0

    raise ValueError(f"Unknown command: {args.command}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="research-agent")
    parser.add_argument("--project", default=None, help="Project name")
    parser.add_argument("--model", default=None, help="Chat model name")
    parser.add_argument("--log-level", default=None, help="Logging level (default: LOG_LEVEL or INFO)")
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create", help="Create a project")
    create.add_argument("name")
    create.add_argument("--overwrite", action="store_true")

    sub.add_parser("show", help="Show papers in the project")

    search = sub.add_parser("search", help="Search arXiv for papers")
    search.add_argument("query")
    search.add_argument("--limit", type=int, default=None)
    search.add_argument("--add", action="store_true", help="Add results to the project")

    paper = sub.add_parser("paper", help="Summarize one paper of the project")
    paper.add_argument("id", help="Paper id, e.g. arxiv:2301.00001v1")

    summary = sub.add_parser("summary", help="Synthesize a literature review of the project")
    summary.add_argument("--max-papers", type=int, default=None)

    coverage = sub.add_parser("coverage", help="Estimate whether a claim follows from the project's papers")
    coverage.add_argument("claim")
    coverage.add_argument("--topk", type=int, default=None)
    coverage.add_argument("--json", action="store_true", help="Print the raw JSON result")

    sub.add_parser("auth", help="Show auth status")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    config = _build_config(args)
    try:
        code = asyncio.run(_run(args, config))
    except Exception as exc:
        logger.error("Error: %s", exc)
        raise SystemExit(1) from exc
    if code:
        raise SystemExit(code)


if __name__ == "__main__":
    main()
