"""
ClaudeLanguageModel — sends prompts to the Anthropic Messages API.

One user-role message per call, no system prompt, no retries.  Timeouts
are whatever the anthropic client enforces by default.
"""

import os

import anthropic

from smart_booking.config import DEFAULT_MODEL
from smart_booking.domain.model import LanguageModel, ModelError


class ClaudeLanguageModel(LanguageModel):

    def __init__(self, api_key: str | None = None, model: str = DEFAULT_MODEL):
        self._client = anthropic.AsyncAnthropic(
            api_key=api_key or os.environ["ANTHROPIC_API_KEY"],
            max_retries=0,
        )
        self._model = model

    @property
    def model(self) -> str:
        return self._model

    async def complete(self, prompt: str, max_tokens: int) -> str:
        try:
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as exc:
            raise ModelError(f"{type(exc).__name__}: {exc}") from exc

        texts = [block.text for block in response.content if block.type == "text"]
        if not texts:
            raise ModelError("model returned no text content")
        return texts[0]

    async def close(self) -> None:
        await self._client.close()
