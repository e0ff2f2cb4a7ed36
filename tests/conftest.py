"""Shared test configuration and fixtures."""

import asyncio
from collections.abc import Callable
from typing import Any

import pytest

from callosum.core import CorpusCallosum
from callosum.models import Response
from callosum.utils.config import CallosumConfig, SequentialConfig, TimeoutConfig


class MockAgent:
    """Scripted agent for testing modes and the orchestrator.

    Returns the scripted responses in order (the last one repeats), or the
    handler's return value when a handler is given.
    """

    def __init__(
        self,
        name: str,
        responses: list[Any] | None = None,
        handler: Callable[[str, Any], Any] | None = None,
        fail: bool = False,
        delay: float = 0.0,
    ):
        self.name = name
        self.responses = list(responses or [])
        self.handler = handler
        self.fail = fail
        self.delay = delay
        self.calls: list[tuple[str, Any]] = []

    @property
    def prompts(self) -> list[str]:
        return [message for message, _ in self.calls]

    async def process_message(self, message: str, context: Any = None) -> Any:
        self.calls.append((message, context))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise RuntimeError(f"{self.name} is unavailable")
        if self.handler is not None:
            return self.handler(message, context)
        if self.responses:
            if len(self.responses) > 1:
                return self.responses.pop(0)
            return self.responses[0]
        return Response(content=f"{self.name} response", model=f"{self.name}-model")


class Recorder:
    """Stand-in for the orchestrator's communication callback."""

    def __init__(self) -> None:
        self.entries: list[dict[str, Any]] = []

    def __call__(
        self,
        sender: str,
        recipient: str,
        message: Any,
        comm_type: str,
        round_number: int | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        self.entries.append(
            {
                "from": sender,
                "to": recipient,
                "message": message,
                "type": comm_type,
                "round": round_number,
                "metadata": metadata or {},
            }
        )

    @property
    def types(self) -> list[str]:
        return [entry["type"] for entry in self.entries]


@pytest.fixture
def config() -> CallosumConfig:
    """Configuration without sequential delay and with short timeouts."""
    return CallosumConfig(
        sequential=SequentialConfig(delay=0),
        timeout=TimeoutConfig(agent=2.0),
    )


@pytest.fixture
def alpha() -> MockAgent:
    return MockAgent("alpha")


@pytest.fixture
def beta() -> MockAgent:
    return MockAgent("beta")


@pytest.fixture
def agents(alpha: MockAgent, beta: MockAgent) -> dict[str, MockAgent]:
    return {"alpha": alpha, "beta": beta}


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def orchestrator(
    alpha: MockAgent, beta: MockAgent, config: CallosumConfig
) -> CorpusCallosum:
    return CorpusCallosum(alpha, beta, config)


@pytest.fixture
def character_card() -> dict[str, Any]:
    return {
        "spec": "chara_card_v2",
        "data": {
            "name": "Mira",
            "description": "A lighthouse keeper on a remote island.",
            "personality": "Dry humour, patient, {{char}} distrusts {{user}} at first.",
            "first_mes": "*{{char}} looks up from the logbook.* Storm's coming.",
            "mes_example": "<START>\n{{user}}: Hello?\n{{char}}: Door's open.",
            "scenario": "{{user}} washes ashore near {{char}}'s lighthouse.",
            "system_prompt": "",
            "alternate_greetings": ["Another one washed up, then."],
            "tags": ["drama"],
        },
    }
