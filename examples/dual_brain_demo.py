#!/usr/bin/env python
"""Dual Brain Example - basic usage.

Runs one message through every mode with two toy agents, then plays a
short role-play scene. No model server is needed: the agents are plain
coroutines wrapped in FunctionAgent.

Usage:
    python examples/dual_brain_demo.py
"""

import asyncio
import sys
from pathlib import Path

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from callosum import CallosumConfig, CorpusCallosum, FunctionAgent, OrchestrationMode
from callosum.utils.config import SequentialConfig
from callosum.utils.logging import setup_logging


async def analytical(message: str, context) -> str:
    """Toy Alpha: answers with a structured breakdown."""
    first_line = message.splitlines()[0]
    return f"Breakdown of '{first_line[:60]}': define terms, list facts, conclude."


async def creative(message: str, context) -> str:
    """Toy Beta: answers with an image and asks for a check."""
    first_line = message.splitlines()[0]
    return (
        f"Picture '{first_line[:60]}' as a tide rising over a map. "
        "Need analytical review of the details."
    )


def print_result(result) -> None:
    print(f"[{result.mode}] {result.duration:.3f}s")
    if result.alpha_response:
        print(f"  Alpha: {result.alpha_response.content}")
    if result.beta_response:
        print(f"  Beta:  {result.beta_response.content}")
    if result.synthesis:
        print(f"  Synthesis ({result.synthesizer}): {result.synthesis.content}")
    if result.rounds is not None:
        print(f"  Rounds: {result.rounds}, converged: {result.converged}")
    if result.primary:
        print(f"  Primary: {result.primary} (handoff: {result.handoff_occurred})")
    for comm in result.communications:
        print(f"  {comm.sender} -> {comm.recipient} [{comm.type}]")
    print()


async def run_demo():
    print("=" * 60)
    print("Dual Brain Example")
    print("=" * 60)
    print()

    setup_logging(level="WARNING", json_format=False)
    config = CallosumConfig(sequential=SequentialConfig(delay=0))
    callosum = CorpusCallosum(
        FunctionAgent("alpha", analytical, role="analytical", model="llama3.1:8b"),
        FunctionAgent("beta", creative, role="creative", model="qwen2.5:7b"),
        config,
    )

    question = "How do tides shape coastal towns?"
    for mode in OrchestrationMode:
        if mode is OrchestrationMode.ROLEPLAY:
            continue
        result = await callosum.orchestrate(question, "demo", mode=mode)
        print_result(result)

    info = callosum.load_character(
        {
            "name": "Mira",
            "description": "A lighthouse keeper on a remote island.",
            "first_mes": "*{{char}} looks up from the logbook.* Storm's coming.",
        }
    )
    print(f"{info['name']}: {info['first_mes']}")
    callosum.set_mode("roleplay")
    result = await callosum.orchestrate("Can I wait out the storm here?", "demo")
    print(f"{result.character}: {result.ic_response}")
    print()

    print("Stats:", callosum.get_stats())


if __name__ == "__main__":
    asyncio.run(run_demo())
