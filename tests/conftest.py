from __future__ import annotations

from typing import List, Sequence

import pytest

from research_agent.graph.state import ChatMessage, Paper


class FakeLlm:
    """Reasoning client that replays a canned reply and records each call."""

    def __init__(self, reply: str = "", error: Exception = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: List[dict] = []

    async def chat(self, messages: Sequence[ChatMessage], temperature: float = 0.2) -> str:
        self.calls.append({"messages": list(messages), "temperature": temperature})
        if self.error is not None:
            raise self.error
        return self.reply


def make_paper(pid: str, title: str = "Untitled", abstract: str = None, year: int = None, authors=None) -> Paper:
    return Paper(id=pid, title=title, abstract=abstract, year=year, authors=authors or [])


@pytest.fixture
def fake_llm():
    return FakeLlm()
