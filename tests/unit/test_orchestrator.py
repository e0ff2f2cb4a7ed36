"""Unit tests for the CorpusCallosum orchestrator."""

import asyncio
import logging
import os
import tempfile
from unittest.mock import patch

import pytest
import structlog
from pydantic import ValidationError
from structlog.testing import LogCapture

from callosum.agents import AgentCallFailedError, FunctionAgent
from callosum.core import CorpusCallosum, InvalidModeError
from callosum.models import CommunicationType, OrchestrationMode, OrchestrationResult
from callosum.modes import (
    BaseMode,
    NoCharacterLoadedError,
    SequentialMode,
    UnknownModeError,
)
from callosum.utils.config import (
    CallosumConfig,
    OrchestratorSettings,
    SequentialConfig,
    get_config,
    init_config,
    reset_config,
)
from callosum.utils.exceptions import InvalidConfigurationError
from callosum.utils.logging import add_process_id, current_process_id
from tests.conftest import MockAgent

ALL_MODES = [mode.value for mode in OrchestrationMode]


class EchoMode(BaseMode):
    """Minimal custom executor used to test registration."""

    @property
    def mode(self) -> str:
        return "echo"

    async def execute(self, message, process_id, record_communication, params=None):
        record_communication("alpha", "beta", message, "echo")
        response = await self._call("alpha", message)
        return self._slots({"alpha": response})


class VoteMode(BaseMode):
    """Custom executor returning fields of its own."""

    @property
    def mode(self) -> str:
        return "vote"

    async def execute(self, message, process_id, record_communication, params=None):
        response = await self._call("alpha", message)
        return {**self._slots({"alpha": response}), "agreement": 0.5, "winner": "alpha"}


class BrokenMode(BaseMode):
    """Custom executor whose output does not fit the result model."""

    @property
    def mode(self) -> str:
        return "broken"

    async def execute(self, message, process_id, record_communication, params=None):
        return {"alpha_response": 42, "beta_response": None}


class TestOrchestratorInit:
    def test_defaults(self, orchestrator):
        assert orchestrator.current_mode == "parallel"
        assert orchestrator.active_processes == 0
        assert set(orchestrator.available_modes) == set(ALL_MODES)

    def test_default_mode_from_config(self, alpha, beta):
        config = CallosumConfig(orchestrator=OrchestratorSettings(default_mode="debate"))
        assert CorpusCallosum(alpha, beta, config).current_mode == "debate"

    def test_unregistered_default_mode(self, alpha, beta):
        config = CallosumConfig(orchestrator=OrchestratorSettings(default_mode="telepathy"))
        with pytest.raises(InvalidConfigurationError):
            CorpusCallosum(alpha, beta, config)


class TestOrchestrate:
    """Tests for orchestrate()."""

    @pytest.mark.asyncio
    async def test_parallel_result(self, orchestrator):
        result = await orchestrator.orchestrate("Hello", "conv-1")

        assert isinstance(result, OrchestrationResult)
        assert result.mode == "parallel"
        assert result.alpha_response.content == "alpha response"
        assert result.beta_response.content == "beta response"
        assert result.communications == []
        assert result.timestamp is not None
        assert result.conversation_id == "conv-1"
        assert result.process_id.startswith("proc_")
        assert result.duration >= 0

    @pytest.mark.asyncio
    async def test_sequential_result_carries_communications(self, orchestrator):
        result = await orchestrator.orchestrate("Hello", "conv-1", mode="sequential")

        assert result.mode == "sequential"
        assert result.order == ["alpha", "beta"]
        assert len(result.communications) == 1
        comm = result.communications[0]
        assert comm.sender == "alpha"
        assert comm.recipient == "beta"
        assert comm.type == CommunicationType.HANDOFF.value
        assert orchestrator.communication_history == result.communications

    @pytest.mark.asyncio
    async def test_mode_name_is_case_insensitive(self, orchestrator):
        result = await orchestrator.orchestrate("Hello", "conv-1", mode="SEQUENTIAL")
        assert result.mode == "sequential"

    @pytest.mark.asyncio
    async def test_enum_mode(self, orchestrator):
        result = await orchestrator.orchestrate(
            "Hello", "conv-1", mode=OrchestrationMode.HANDOFF
        )
        assert result.mode == "handoff"
        assert result.handoff_occurred is False

    @pytest.mark.asyncio
    async def test_to_dict(self, orchestrator):
        result = await orchestrator.orchestrate("Hello", "conv-1", mode="sequential")
        payload = result.to_dict()

        assert payload["mode"] == "sequential"
        assert payload["alphaResponse"]["content"] == "alpha response"
        assert payload["conversationId"] == "conv-1"
        assert payload["communications"][0]["from"] == "alpha"
        assert payload["communications"][0]["to"] == "beta"
        assert "synthesis" not in payload

    @pytest.mark.asyncio
    async def test_to_dict_keeps_missing_slots(self, orchestrator):
        result = await orchestrator.orchestrate("Hello", "conv-1", mode="handoff")
        payload = result.to_dict()
        assert payload["betaResponse"] is None
        assert payload["primary"] == "alpha"

    @pytest.mark.asyncio
    async def test_options_reach_executor(self, orchestrator, beta):
        result = await orchestrator.orchestrate(
            "Hello", "conv-1", mode="sequential", options={"order": ["beta", "alpha"]}
        )
        assert result.order == ["beta", "alpha"]
        assert beta.calls[0] == ("Hello", None)

    @pytest.mark.asyncio
    async def test_unknown_mode(self, orchestrator, alpha, beta):
        with pytest.raises(UnknownModeError):
            await orchestrator.orchestrate("Hello", "conv-1", mode="telepathy")

        assert alpha.calls == []
        assert beta.calls == []
        assert orchestrator.active_processes == 0
        assert orchestrator.get_stats()["patterns"] == {}

    @pytest.mark.asyncio
    async def test_concurrent_calls(self, orchestrator):
        results = await asyncio.gather(
            *(
                orchestrator.orchestrate(f"message {i}", f"conv-{i}", mode="sequential")
                for i in range(5)
            )
        )
        assert len({result.process_id for result in results}) == 5
        assert all(len(result.communications) == 1 for result in results)
        assert orchestrator.active_processes == 0
        assert len(orchestrator.communication_history) == 5


class TestProcessLifecycle:
    """Every call removes its process, whatever the outcome."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("mode", ALL_MODES)
    async def test_no_leak_on_success(self, orchestrator, character_card, mode):
        orchestrator.load_character(character_card)
        await orchestrator.orchestrate("Hello", "conv-1", mode=mode)
        assert orchestrator.active_processes == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("mode", ["sequential", "debate", "synthesis", "handoff"])
    async def test_no_leak_on_failure(self, config, mode):
        orchestrator = CorpusCallosum(
            MockAgent("alpha", fail=True), MockAgent("beta", fail=True), config
        )
        with pytest.raises(AgentCallFailedError):
            await orchestrator.orchestrate("Hello", "conv-1", mode=mode)

        assert orchestrator.active_processes == 0
        patterns = orchestrator.get_patterns(mode, "general")
        assert [entry.success for entry in patterns] == [False]

    @pytest.mark.asyncio
    async def test_roleplay_without_character(self, orchestrator):
        with pytest.raises(NoCharacterLoadedError):
            await orchestrator.orchestrate("Hello", "conv-1", mode="roleplay")
        assert orchestrator.active_processes == 0

    @pytest.mark.asyncio
    async def test_parallel_failure_still_succeeds(self, config):
        orchestrator = CorpusCallosum(
            MockAgent("alpha", fail=True), MockAgent("beta", fail=True), config
        )
        result = await orchestrator.orchestrate("Hello", "conv-1")
        assert result.alpha_response is None
        assert result.beta_response is None
        assert orchestrator.get_patterns("parallel", "general")[0].success is True


class TestInterrupt:
    @pytest.mark.asyncio
    async def test_interrupt_idle(self, orchestrator):
        orchestrator.interrupt()
        assert orchestrator.active_processes == 0

    @pytest.mark.asyncio
    async def test_interrupt_in_flight(self, config):
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow_alpha(message, context):
            started.set()
            await release.wait()
            return "alpha done"

        async def quick_beta(message, context):
            return "beta done"

        orchestrator = CorpusCallosum(
            FunctionAgent("alpha", slow_alpha), FunctionAgent("beta", quick_beta), config
        )
        task = asyncio.create_task(
            orchestrator.orchestrate("Hello", "conv-1", mode="sequential")
        )
        await started.wait()
        assert orchestrator.active_processes == 1

        orchestrator.interrupt()
        assert orchestrator.active_processes == 0

        release.set()
        result = await task

        assert orchestrator.active_processes == 0
        assert result.communications == []
        assert orchestrator.get_communication_history() == []
        assert result.beta_response.content == "beta done"


class TestSetMode:
    def test_set_mode(self, orchestrator):
        orchestrator.set_mode("debate")
        assert orchestrator.current_mode == "debate"
        assert orchestrator.get_stats()["current_mode"] == "debate"

    def test_set_mode_enum(self, orchestrator):
        orchestrator.set_mode(OrchestrationMode.ROLEPLAY)
        assert orchestrator.current_mode == "roleplay"

    def test_invalid_mode(self, orchestrator):
        with pytest.raises(InvalidModeError) as exc_info:
            orchestrator.set_mode("telepathy")
        assert orchestrator.current_mode == "parallel"
        assert "parallel" in exc_info.value.details["available_modes"]

    @pytest.mark.asyncio
    async def test_parameters_apply_to_later_calls(self, orchestrator):
        orchestrator.set_mode("debate", {"max_rounds": 1, "convergence_threshold": 1.0})
        result = await orchestrator.orchestrate("Hello", "conv-1")
        assert result.mode == "debate"
        assert result.rounds == 1
        assert result.converged is False

    @pytest.mark.asyncio
    async def test_options_override_parameters(self, orchestrator):
        orchestrator.set_mode("debate", {"max_rounds": 1, "convergence_threshold": 1.0})
        result = await orchestrator.orchestrate(
            "Hello", "conv-1", options={"max_rounds": 2}
        )
        assert result.rounds == 2

    @pytest.mark.asyncio
    async def test_parameters_are_per_mode(self, orchestrator):
        orchestrator.set_mode("sequential", {"order": ["beta", "alpha"]})
        orchestrator.set_mode("parallel")
        result = await orchestrator.orchestrate("Hello", "conv-1", mode="sequential")
        assert result.order == ["beta", "alpha"]


class TestRoleplayApi:
    @pytest.mark.asyncio
    async def test_load_and_play(self, orchestrator, character_card):
        info = orchestrator.load_character(character_card)
        assert info["name"] == "Mira"

        orchestrator.set_mode("roleplay")
        result = await orchestrator.orchestrate("Hello?", "conv-1")
        assert result.character == "Mira"
        assert result.message_type == "ic"
        assert result.ic_response
        assert [c.type for c in result.communications] == [
            "character_analysis",
            "refinement",
        ]

    @pytest.mark.asyncio
    async def test_reset_roleplay(self, orchestrator, character_card):
        assert orchestrator.reset_roleplay() is None
        orchestrator.load_character(character_card)
        await orchestrator.orchestrate("Hello?", "conv-1", mode="roleplay")
        greeting = orchestrator.reset_roleplay()
        assert greeting.startswith("*Mira looks up")


class TestStatsAndPatterns:
    @pytest.mark.parametrize(
        ("message", "expected"),
        [
            ("What is a tide?", "question"),
            ("Write a poem about the sea", "creation"),
            ("Analyze the quarterly numbers", "analysis"),
            ("Please help me with my essay", "assistance"),
            ("Hello there", "general"),
        ],
    )
    def test_classify_message(self, orchestrator, message, expected):
        assert orchestrator.classify_message(message) == expected

    @pytest.mark.asyncio
    async def test_stats(self, orchestrator):
        await orchestrator.orchestrate("Hello there", "conv-1")
        await orchestrator.orchestrate("What now?", "conv-1", mode="sequential")

        stats = orchestrator.get_stats()
        assert stats["current_mode"] == "parallel"
        assert stats["active_processes"] == 0
        assert stats["total_communications"] == 1
        assert stats["patterns"] == {"parallel_general": 1, "sequential_question": 1}
        assert set(stats["available_modes"]) == set(ALL_MODES)

    @pytest.mark.asyncio
    async def test_get_patterns(self, orchestrator):
        await orchestrator.orchestrate("What now?", "conv-1")
        entries = orchestrator.get_patterns("parallel", "question")
        assert len(entries) == 1
        assert entries[0].success is True
        assert orchestrator.get_patterns("debate", "question") == []

    @pytest.mark.asyncio
    async def test_communication_history_limit(self, orchestrator):
        for i in range(3):
            await orchestrator.orchestrate(f"message {i}", "conv-1", mode="sequential")

        assert len(orchestrator.get_communication_history()) == 3
        latest = orchestrator.get_communication_history(limit=2)
        assert len(latest) == 2
        assert latest[-1] == orchestrator.communication_history[-1]
        assert orchestrator.get_communication_history(limit=0) == []


class TestRegisterMode:
    @pytest.mark.asyncio
    async def test_custom_mode(self, orchestrator, agents, config):
        orchestrator.register_mode("echo", EchoMode(agents, config))
        assert "echo" in orchestrator.available_modes

        result = await orchestrator.orchestrate("ping", "conv-1", mode="echo")
        assert result.mode == "echo"
        assert result.communications[0].type == "echo"
        assert result.alpha_response.content == "alpha response"
        assert result.beta_response is None

    @pytest.mark.asyncio
    async def test_replace_builtin(self, orchestrator, agents):
        config = CallosumConfig(sequential=SequentialConfig(order=["beta", "alpha"], delay=0))
        orchestrator.register_mode("sequential", SequentialMode(agents, config))
        result = await orchestrator.orchestrate("Hello", "conv-1", mode="sequential")
        assert result.order == ["beta", "alpha"]

    @pytest.mark.asyncio
    async def test_custom_mode_with_own_fields(self, orchestrator, agents, config):
        orchestrator.register_mode("vote", VoteMode(agents, config))

        result = await orchestrator.orchestrate("ping", "conv-1", mode="vote")

        assert result.model_extra == {"agreement": 0.5, "winner": "alpha"}
        payload = result.to_dict()
        assert payload["agreement"] == 0.5
        assert payload["winner"] == "alpha"
        assert orchestrator.get_patterns("vote", "general")[0].success is True

    @pytest.mark.asyncio
    async def test_malformed_output_records_failure(self, orchestrator, agents, config):
        orchestrator.register_mode("broken", BrokenMode(agents, config))

        with pytest.raises(ValidationError):
            await orchestrator.orchestrate("ping", "conv-1", mode="broken")

        assert orchestrator.active_processes == 0
        entries = orchestrator.get_patterns("broken", "general")
        assert [entry.success for entry in entries] == [False]


class TestProcessLogging:
    """The running process id reaches every event logged under it."""

    def teardown_method(self):
        structlog.reset_defaults()

    @pytest.mark.asyncio
    async def test_agents_run_inside_process_scope(self, config):
        seen = []

        async def observe(message, context):
            seen.append(current_process_id())
            return "ok"

        orchestrator = CorpusCallosum(
            FunctionAgent("alpha", observe), FunctionAgent("beta", observe), config
        )
        result = await orchestrator.orchestrate("Hello", "conv-1")

        assert seen == [result.process_id, result.process_id]
        assert current_process_id() is None

    @pytest.mark.asyncio
    async def test_agent_call_events_carry_process_id(self, orchestrator):
        capture = LogCapture()
        structlog.reset_defaults()
        structlog.configure(processors=[add_process_id, capture])

        result = await orchestrator.orchestrate("Hello", "conv-1", mode="sequential")

        agent_events = [
            entry for entry in capture.entries if entry["event"].startswith("agent_call_")
        ]
        assert agent_events
        assert {entry["process_id"] for entry in agent_events} == {result.process_id}
        completed = [
            entry for entry in capture.entries if entry["event"] == "orchestration_completed"
        ]
        assert completed[0]["process_id"] == result.process_id
        assert completed[0]["conversation_id"] == "conv-1"


class TestFromConfig:
    def setup_method(self):
        reset_config()

    def teardown_method(self):
        reset_config()
        structlog.reset_defaults()

    def test_builds_from_yaml_and_sets_global(self, alpha, beta):
        with tempfile.TemporaryDirectory() as tmpdir:
            yaml_path = os.path.join(tmpdir, "callosum.yaml")
            with open(yaml_path, "w") as f:
                f.write("orchestrator:\n  default_mode: debate\nlogging:\n  level: WARNING\n")
            orchestrator = CorpusCallosum.from_config(
                alpha, beta, yaml_path=yaml_path, env_file="/nonexistent/.env"
            )

        assert orchestrator.current_mode == "debate"
        assert get_config() is orchestrator.config
        assert logging.getLogger().level == logging.WARNING

    def test_constructor_uses_global_config(self, alpha, beta):
        with patch.dict(os.environ, {"CALLOSUM_DEFAULT_MODE": "synthesis"}):
            config = init_config(env_file="/nonexistent/.env")
        assert CorpusCallosum(alpha, beta).config is config
        assert CorpusCallosum(alpha, beta).current_mode == "synthesis"

    def test_constructor_defaults_without_global(self, alpha, beta):
        assert CorpusCallosum(alpha, beta).current_mode == "parallel"
