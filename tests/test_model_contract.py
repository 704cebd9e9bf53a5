"""
LanguageModel contract tests.

Runs the shared contract against:
  - SimulatorLanguageModel  (always, no API key needed)
  - ClaudeLanguageModel     (skipped without ANTHROPIC_API_KEY)
"""

import os

import pytest

from smart_booking.adapters.claude_model import ClaudeLanguageModel
from smart_booking.adapters.simulator_model import SimulatorLanguageModel
from smart_booking.domain.model import ModelError
from tests.contracts.language_model_contract import LanguageModelContract


class TestSimulatorLanguageModel(LanguageModelContract):

    def create_model(self):
        return SimulatorLanguageModel(["pong"])


@pytest.mark.skipif(
    not os.environ.get("ANTHROPIC_API_KEY"),
    reason="ANTHROPIC_API_KEY not set",
)
class TestClaudeLanguageModel(LanguageModelContract):

    def create_model(self):
        return ClaudeLanguageModel()


# ---------------------------------------------------------------------------
# Simulator scripting
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_simulator_serves_replies_in_order():
    model = SimulatorLanguageModel(["one", "two"])
    assert await model.complete("a", max_tokens=10) == "one"
    assert await model.complete("b", max_tokens=20) == "two"
    assert model.prompts == ["a", "b"]
    assert model.max_tokens == [10, 20]


@pytest.mark.asyncio
async def test_simulator_raises_queued_failure():
    model = SimulatorLanguageModel()
    model.queue_failure()
    with pytest.raises(ModelError):
        await model.complete("a", max_tokens=10)


@pytest.mark.asyncio
async def test_simulator_with_nothing_queued_is_unreachable():
    model = SimulatorLanguageModel()
    with pytest.raises(ModelError):
        await model.complete("a", max_tokens=10)
    assert model.calls == 1


@pytest.mark.asyncio
async def test_bad_api_key_surfaces_as_model_error():
    model = ClaudeLanguageModel(api_key="sk-ant-invalid")
    # Point at a closed local port so nothing leaves the machine.
    model._client = model._client.with_options(base_url="http://127.0.0.1:9", timeout=2)
    try:
        with pytest.raises(ModelError):
            await model.complete("hello", max_tokens=10)
    finally:
        await model.close()
