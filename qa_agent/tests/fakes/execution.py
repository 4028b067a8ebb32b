"""Fake ExecutionPort implementation for testing."""

from qa_agent.core.models import ExecutionResult
from qa_agent.core.ports import ExecutionPort

from .reasoning import assert_isolated


class FakeExecutionPort(ExecutionPort):
    """In-memory sandbox for testing.

    Returns a configurable result and records every repro it was asked
    to run.
    """

    def __init__(self, forbidden: list[str] | None = None):
        self.forbidden: list[str] = list(forbidden or [])
        self.result = ExecutionResult(success=True, stdout="fake sandbox output")
        self.run_calls: list[str] = []
        self.raise_error: Exception | None = None

    async def run(self, repro_steps: str) -> ExecutionResult:
        assert_isolated(self.forbidden, repro_steps)
        self.run_calls.append(repro_steps)

        if self.raise_error is not None:
            raise self.raise_error
        return self.result
