"""OpenAI chat-completions adapter implementing the LLMService port."""
from __future__ import annotations

import logging
import time
from typing import Dict, List, Optional

from openai import AsyncOpenAI

from coach_backend.domain.ports.llm import LLMService

logger = logging.getLogger(__name__)


class OpenAILLM(LLMService):
    def __init__(self, api_key: Optional[str], model: str) -> None:
        self._api_key = api_key
        self._model = model
        self._client: Optional[AsyncOpenAI] = None

    def _get_client(self) -> AsyncOpenAI:
        # created on first use so importing the DI graph never needs a key
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self._api_key)
        return self._client

    async def generate_response(
        self,
        messages: List[Dict[str, str]],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        response_format: Optional[Dict[str, str]] = None,
    ) -> Optional[str]:
        kwargs = {"model": self._model, "messages": messages}
        if temperature is not None:
            kwargs["temperature"] = temperature
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens
        if response_format is not None:
            kwargs["response_format"] = response_format

        start = time.time()
        completion = await self._get_client().chat.completions.create(**kwargs)
        logger.debug(f"OpenAI {self._model} completion in {time.time() - start:.2f}s")

        if not completion.choices:
            return None
        return completion.choices[0].message.content
