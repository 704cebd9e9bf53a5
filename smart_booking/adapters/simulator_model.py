"""
SimulatorLanguageModel — scripted model for tests and offline development.

No network.  Replies are served in the order they were queued; a queued
exception is raised instead of replying.  With nothing queued the model
behaves like an unreachable endpoint and raises ModelError.
"""

from collections import deque

from smart_booking.domain.model import LanguageModel, ModelError


class SimulatorLanguageModel(LanguageModel):

    def __init__(self, replies: list[str | Exception] | None = None):
        self._queue: deque[str | Exception] = deque(replies or [])
        self.prompts: list[str] = []
        self.max_tokens: list[int] = []

    @property
    def calls(self) -> int:
        return len(self.prompts)

    def queue_reply(self, text: str) -> None:
        self._queue.append(text)

    def queue_failure(self, exc: Exception | None = None) -> None:
        self._queue.append(exc or ModelError("simulated outage"))

    async def complete(self, prompt: str, max_tokens: int) -> str:
        self.prompts.append(prompt)
        self.max_tokens.append(max_tokens)
        if not self._queue:
            raise ModelError("no scripted reply left")
        reply = self._queue.popleft()
        if isinstance(reply, Exception):
            raise reply
        return reply
