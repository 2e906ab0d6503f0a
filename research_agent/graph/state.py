from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


VERDICTS = ("supports", "partial", "contradicts", "irrelevant")


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class AgentConfig(BaseModel):
    openai_api_key: Optional[str] = None
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4o-mini"
    arxiv_base_url: str = "http://export.arxiv.org/api/query"

    lit_dir: str = "lit"
    project: Optional[str] = None
    coverage_top_k: int = 8
    search_limit: int = 20
    summary_max_papers: int = 10


class Paper(BaseModel):
    id: str
    title: str
    authors: List[str] = Field(default_factory=list)
    year: Optional[int] = None
    url: Optional[str] = None
    abstract: Optional[str] = None
    added_at: str = Field(default_factory=_utc_now)


class EvidenceItem(BaseModel):
    id: str
    title: str
    year: Union[int, str] = "n/a"
    authors: str = ""
    abstract: str = ""


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


# Leaf values are typed Any: whatever the model sent is kept as sent,
# including nulls, strings and out-of-range numbers.
class OverallVerdict(BaseModel):
    model_config = ConfigDict(extra="allow")

    follows: Any = None
    coverage_percent: Any = None
    confidence: Any = None
    explanation: Any = None


class PaperVerdict(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Any = None
    title: Any = None
    coverage_percent: Any = None
    verdict: Any = None
    rationale: Any = None


class CoverageResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    overall: OverallVerdict
    per_paper: List[PaperVerdict] = Field(default_factory=list)

    def to_payload(self) -> dict:
        """The result as plain JSON data, without keys the source never set."""
        return self.model_dump(exclude_unset=True)


class CoverageState(BaseModel):
    claim: str
    papers: List[Paper] = Field(default_factory=list)
    top_k: int = 8
    ranked: List[Paper] = Field(default_factory=list)
    evidence: List[EvidenceItem] = Field(default_factory=list)
    raw_response: str = ""
    result: Optional[CoverageResult] = None
