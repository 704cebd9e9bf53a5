"""
LanguageModel port: the hosted model that answers our prompts.

The assistant depends ONLY on this interface.  It treats every
implementation as unreliable: complete() may raise, hang until the
client library gives up, or return text that fails extraction.
"""

from abc import ABC, abstractmethod


class ModelError(Exception):
    """The model call itself failed (network, rate limit, empty reply...)."""


class LanguageModel(ABC):

    @abstractmethod
    async def complete(self, prompt: str, max_tokens: int) -> str:
        """Send a single user-role prompt and return the raw reply text."""
        ...

    async def close(self) -> None:
        """Release client resources. No-op by default."""
