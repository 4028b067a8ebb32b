"""Port interfaces for the QA agent.

These abstract base classes define the boundaries between core
domain logic and external adapters. Implementations live in the
adapters/ package.

Driven ports (core calls out to adapters):
   - ReasoningPort: LLM-powered diagnosis, repro planning and verification
   - ExecutionPort: Sandboxed execution of a reproduction recipe

Both ports only ever receive curated records. Neither is given the raw
stack trace.
"""

from abc import ABC, abstractmethod

from .models import ContextPack, Diagnosis, ExecutionResult, ReproAndFix, Verification


class ReasoningPort(ABC):
    """Port for LLM-backed reasoning over curated evidence.

    Adapters implementing this port should invoke an LLM (OpenAI-compatible
    API, Claude Code, etc.) and return typed records.

    Implementations must handle:
    - Prompt construction from the records they are given
    - Extracting and validating structured output from freeform text
    - Timeouts on the underlying call
    """

    @abstractmethod
    async def diagnose_and_plan(
        self, context: ContextPack
    ) -> tuple[Diagnosis, ReproAndFix]:
        """Diagnose the error and plan a reproduction and fix.

        Args:
            context: Curated evidence for the error.

        Returns:
            Tuple of (diagnosis, repro_and_fix) from a single reasoning call.

        Raises:
            ReasoningError: If the call fails or its output does not
                parse into the expected shape.
        """

    @abstractmethod
    async def verify(
        self,
        context: ContextPack,
        diagnosis: Diagnosis,
        repro_and_fix: ReproAndFix,
        execution: ExecutionResult,
    ) -> Verification:
        """Judge whether the proposed fix worked given the sandbox outcome.

        Args:
            context: Curated evidence for the error.
            diagnosis: Diagnosis produced by diagnose_and_plan().
            repro_and_fix: Repro recipe and fix produced by diagnose_and_plan().
            execution: Outcome reported by the execution collaborator.

        Returns:
            Verification verdict.

        Raises:
            ReasoningError: If the call fails or its output does not
                parse into the expected shape.
        """


class ExecutionPort(ABC):
    """Port for running a reproduction recipe in an isolated sandbox.

    The pipeline has no retry path around this port, so implementations
    must not raise: any failure degrades to ``ExecutionResult(success=False)``
    with diagnostic stdout.
    """

    @abstractmethod
    async def run(self, repro_steps: str) -> ExecutionResult:
        """Run the reproduction described by ``repro_steps``.

        Args:
            repro_steps: Plain-text repro recipe from the reasoning step.

        Returns:
            ExecutionResult with success flag and captured output.
        """
