"""Stage orchestration for a single QA agent run.

This module drives the fixed pipeline

    INGEST → CURATE_CONTEXT → DIAGNOSE → GENERATE_REPRO → EXECUTE → VERIFY → DONE

by coordinating the evidence curator with the reasoning and execution
ports. The raw stack trace stays inside the curation stage; every later
stage works from curated records only.
"""

import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from .errors import CurationFault, PipelineError, StageSequenceError
from .evidence import EvidenceCurator
from .models import (
    AgentStage,
    ContextPack,
    Diagnosis,
    ExecutionResult,
    ReproAndFix,
    RunResult,
    Verification,
)
from .ports import ExecutionPort, ReasoningPort

logger = logging.getLogger(__name__)

StageListener = Callable[[AgentStage], None]
StageHandler = Callable[["_RunState"], Awaitable[AgentStage]]

T = TypeVar("T")


@dataclass
class _RunState:
    """Scratch state owned by exactly one run.

    Mutable while the run is in progress; never shared between runs.
    """

    raw: str | None
    context_pack: ContextPack | None = None
    diagnosis: Diagnosis | None = None
    repro_and_fix: ReproAndFix | None = None
    execution: ExecutionResult | None = None
    verification: Verification | None = None


class PipelineOrchestrator:
    """Runs the six-stage triage pipeline.

    Uses ports but contains no adapter-specific logic. The orchestrator
    holds no per-run state, so one instance can serve concurrent runs.
    """

    def __init__(
        self,
        reasoning: ReasoningPort,
        execution: ExecutionPort,
        stage_listener: StageListener | None = None,
    ):
        self.reasoning = reasoning
        self.execution = execution
        self.stage_listener = stage_listener

    async def run_pipeline(self, raw: str) -> RunResult:
        """Run every stage once, in order, and return the aggregate result.

        Raises:
            PipelineError: If curation or a collaborator call fails. The
                run is aborted at the first failure; nothing partial is
                returned.
            StageSequenceError: If the stage loop itself misbehaves.
        """
        handlers = self._stage_handlers()
        state = _RunState(raw=raw)
        visited: set[AgentStage] = set()
        stage = AgentStage.INGEST

        while stage in handlers:
            if stage in visited:
                raise StageSequenceError(f"Stage {stage.value} was re-entered")
            visited.add(stage)
            self._enter(stage)
            stage = await handlers[stage](state)

        if stage is not AgentStage.DONE:
            raise StageSequenceError(
                f"Agent did not reach DONE state; stopped at {stage.value}"
            )
        self._enter(stage)

        return self._assemble(state)

    def _stage_handlers(self) -> dict[AgentStage, StageHandler]:
        """Ordered table of stage handlers; each returns the next stage."""
        return {
            AgentStage.INGEST: self._ingest,
            AgentStage.CURATE_CONTEXT: self._curate_context,
            AgentStage.DIAGNOSE: self._diagnose,
            AgentStage.GENERATE_REPRO: self._generate_repro,
            AgentStage.EXECUTE: self._execute,
            AgentStage.VERIFY: self._verify,
        }

    def _enter(self, stage: AgentStage) -> None:
        logger.info(f"Entering stage {stage.value}")
        if self.stage_listener is not None:
            self.stage_listener(stage)

    async def _ingest(self, state: _RunState) -> AgentStage:
        # The raw trace is accepted as-is and kept local to the run.
        return AgentStage.CURATE_CONTEXT

    async def _curate_context(self, state: _RunState) -> AgentStage:
        raw = state.raw or ""
        # No stage after this one may see the raw trace.
        state.raw = None
        try:
            state.context_pack = EvidenceCurator.curate(raw)
        except Exception as e:
            logger.error(f"Evidence curation failed: {e}", exc_info=True)
            fault = CurationFault(str(e))
            raise PipelineError(AgentStage.CURATE_CONTEXT, fault) from e

        logger.debug(
            f"Curated context: {len(state.context_pack.top_frames)} frames, "
            f"{len(state.context_pack.serialize())} chars"
        )
        return AgentStage.DIAGNOSE

    async def _diagnose(self, state: _RunState) -> AgentStage:
        context = self._require(state.context_pack, "context_pack")
        started = time.perf_counter()
        try:
            diagnosis, repro_and_fix = await self.reasoning.diagnose_and_plan(context)
        except Exception as e:
            logger.error(f"Diagnosis failed: {e}", exc_info=True)
            raise PipelineError(AgentStage.DIAGNOSE, e) from e
        self._log_duration(AgentStage.DIAGNOSE, started)

        state.diagnosis = diagnosis
        state.repro_and_fix = repro_and_fix
        return AgentStage.GENERATE_REPRO

    async def _generate_repro(self, state: _RunState) -> AgentStage:
        # Repro steps and fix were produced by the DIAGNOSE call; this stage
        # only marks the boundary.
        self._require(state.repro_and_fix, "repro_and_fix")
        return AgentStage.EXECUTE

    async def _execute(self, state: _RunState) -> AgentStage:
        repro_and_fix = self._require(state.repro_and_fix, "repro_and_fix")
        started = time.perf_counter()
        try:
            state.execution = await self.execution.run(repro_and_fix.repro_steps)
        except Exception as e:
            logger.error(f"Sandbox execution failed: {e}", exc_info=True)
            raise PipelineError(AgentStage.EXECUTE, e) from e
        self._log_duration(AgentStage.EXECUTE, started)

        if not state.execution.success:
            logger.info("Sandbox reported an unsuccessful repro run")
        return AgentStage.VERIFY

    async def _verify(self, state: _RunState) -> AgentStage:
        context = self._require(state.context_pack, "context_pack")
        diagnosis = self._require(state.diagnosis, "diagnosis")
        repro_and_fix = self._require(state.repro_and_fix, "repro_and_fix")
        execution = self._require(state.execution, "execution")

        started = time.perf_counter()
        try:
            state.verification = await self.reasoning.verify(
                context, diagnosis, repro_and_fix, execution
            )
        except Exception as e:
            logger.error(f"Verification failed: {e}", exc_info=True)
            raise PipelineError(AgentStage.VERIFY, e) from e
        self._log_duration(AgentStage.VERIFY, started)

        return AgentStage.DONE

    @staticmethod
    def _require(value: T | None, name: str) -> T:
        if value is None:
            raise StageSequenceError(f"{name} missing when its consumer stage ran")
        return value

    @staticmethod
    def _log_duration(stage: AgentStage, started: float) -> None:
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.debug(f"Stage {stage.value} took {elapsed_ms:.1f}ms")

    @staticmethod
    def _assemble(state: _RunState) -> RunResult:
        return RunResult(
            context_pack=PipelineOrchestrator._require(state.context_pack, "context_pack"),
            diagnosis=PipelineOrchestrator._require(state.diagnosis, "diagnosis"),
            repro_and_fix=PipelineOrchestrator._require(state.repro_and_fix, "repro_and_fix"),
            execution=PipelineOrchestrator._require(state.execution, "execution"),
            verification=PipelineOrchestrator._require(state.verification, "verification"),
        )


async def run_pipeline(
    raw: str, reasoning: ReasoningPort, execution: ExecutionPort
) -> RunResult:
    """Run the pipeline once with the given collaborators."""
    return await PipelineOrchestrator(reasoning, execution).run_pipeline(raw)
