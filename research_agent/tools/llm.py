from __future__ import annotations

import os
from typing import List, Optional, Protocol, Sequence

from openai import AsyncOpenAI

from ..graph.state import ChatMessage
from .logger import get_logger

logger = get_logger(__name__)


DEFAULT_TEMPERATURE = 0.2


class ReasoningClient(Protocol):
    """Anything that can answer a role-tagged conversation with plain text."""

    async def chat(self, messages: Sequence[ChatMessage], temperature: float = DEFAULT_TEMPERATURE) -> str:
        ...


def system_user(system_prompt: str, user_prompt: str) -> List[ChatMessage]:
    return [
        ChatMessage(role="system", content=system_prompt),
        ChatMessage(role="user", content=user_prompt),
    ]


class LlmClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
    ) -> None:
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        self.base_url = base_url or os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
        self.model = model or os.getenv("OPENAI_MODEL", "gpt-4o-mini")
        self._client: Optional[AsyncOpenAI] = None

    @property
    def client(self) -> AsyncOpenAI:
        # Built on first use so commands that never reach the model need no credentials.
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key, base_url=self.base_url)
        return self._client

    async def chat(self, messages: Sequence[ChatMessage], temperature: float = DEFAULT_TEMPERATURE) -> str:
        # Errors from the API are left to the caller; no retries here.
        logger.debug("Sending %d messages to %s", len(messages), self.model)
        resp = await self.client.chat.completions.create(
            model=self.model,
            messages=[m.model_dump() for m in messages],
            temperature=temperature,
        )
        content = resp.choices[0].message.content or ""
        logger.debug("Received %d chars from %s", len(content), self.model)
        return content.strip()
