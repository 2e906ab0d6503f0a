from __future__ import annotations

import html
import re
from typing import List, Optional

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..graph.state import Paper
from .logger import get_logger
from .store import ProjectStore
from .text_utils import collapse_whitespace

logger = get_logger(__name__)


_ENTRY_SPLIT = "<entry>"
_AUTHOR_NAME_RE = re.compile(r"<name>(.*?)</name>", re.DOTALL)


def _pick(block: str, tag: str) -> Optional[str]:
    match = re.search(rf"<{tag}(?:\s[^>]*)?>([\s\S]*?)</{tag}>", block)
    if not match:
        return None
    return html.unescape(match.group(1).strip())


def _year(published: Optional[str]) -> Optional[int]:
    if not published or not published[:4].isdigit():
        return None
    return int(published[:4]) or None


def parse_arxiv_feed(xml: str) -> List[Paper]:
    papers = []
    for block in xml.split(_ENTRY_SPLIT)[1:]:
        id_url = _pick(block, "id") or ""
        external_id = id_url.split("/abs/", 1)[1] if "/abs/" in id_url else id_url
        papers.append(
            Paper(
                id=f"arxiv:{external_id}",
                title=collapse_whitespace(_pick(block, "title") or ""),
                authors=[html.unescape(n.strip()) for n in _AUTHOR_NAME_RE.findall(block)],
                year=_year(_pick(block, "published")),
                url=id_url or None,
                abstract=collapse_whitespace(_pick(block, "summary") or ""),
            )
        )
    return papers


class ArxivClient:
    def __init__(self, base_url: str = "http://export.arxiv.org/api/query", timeout: float = 30.0) -> None:
        self.base_url = base_url
        self.timeout = timeout

    @retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(httpx.TransportError),
    )
    async def _fetch(self, params: dict) -> str:
        async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
            resp = await client.get(self.base_url, params=params, headers={"User-Agent": "research-agent/0.1"})
            try:
                resp.raise_for_status()
            except httpx.HTTPStatusError as exc:
                logger.error("arXiv API error: %s", exc)
                raise
            return resp.text

    async def search(self, query: str, limit: int = 20) -> List[Paper]:
        xml = await self._fetch(
            {"search_query": f"all:{query}", "start": 0, "max_results": limit}
        )
        papers = parse_arxiv_feed(xml)
        logger.info("arXiv query '%s' returned %d papers", query, len(papers))
        return papers


async def search_and_add(
    client: ArxivClient, store: ProjectStore, topic: str, limit: int = 20, add: bool = False
) -> List[Paper]:
    results = await client.search(topic, limit)
    if add:
        for paper in results:
            store.upsert(paper)
        logger.info("Added %d papers to project %s", len(results), store.name)
    return results
