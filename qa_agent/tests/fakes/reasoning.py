"""Fake ReasoningPort implementation for testing."""

from typing import Any

from qa_agent.core.models import (
    ContextPack,
    Diagnosis,
    ExecutionResult,
    ReproAndFix,
    Verification,
)
from qa_agent.core.ports import ReasoningPort


class IsolationViolation(AssertionError):
    """A forbidden text reached a collaborator."""


def _strings(value: Any) -> list[str]:
    """Every string reachable from a record, dict, list or plain value."""
    if hasattr(value, "to_dict"):
        value = value.to_dict()
    if isinstance(value, str):
        return [value]
    if isinstance(value, dict):
        return [s for item in value.values() for s in _strings(item)]
    if isinstance(value, (list, tuple)):
        return [s for item in value for s in _strings(item)]
    return []


def assert_isolated(forbidden: list[str], *args: Any) -> None:
    """Fail if any forbidden text appears in any field of the arguments."""
    fields = _strings(list(args))
    # Also catch text spread over several fields, e.g. consecutive frames.
    fields.append("\n".join(fields))
    for text in forbidden:
        if text and any(text in field for field in fields):
            raise IsolationViolation(f"Forbidden text reached collaborator: {text[:80]!r}")


class FakeReasoningPort(ReasoningPort):
    """In-memory reasoning engine for testing.

    Returns configurable canned records and tracks all requests for test
    assertions. Every call checks its arguments against ``forbidden``.
    """

    def __init__(self, forbidden: list[str] | None = None):
        """Initialize with default values."""
        self.forbidden: list[str] = list(forbidden or [])
        self.diagnosis = Diagnosis(
            root_cause="Fake root cause",
            impact_summary="Fake impact",
        )
        self.repro_and_fix = ReproAndFix(
            repro_steps="- npm test\n- expect tests green",
            fix_snippet="```diff\n- broken()\n+ fixed()\n```",
            notes="Fake notes",
        )
        self.verification = Verification(fix_worked=True, explanation="Fake verdict")
        self.diagnose_calls: list[ContextPack] = []
        self.verify_calls: list[
            tuple[ContextPack, Diagnosis, ReproAndFix, ExecutionResult]
        ] = []
        self.fail_diagnose: Exception | None = None
        self.fail_verify: Exception | None = None

    async def diagnose_and_plan(
        self, context: ContextPack
    ) -> tuple[Diagnosis, ReproAndFix]:
        assert_isolated(self.forbidden, context)
        self.diagnose_calls.append(context)

        if self.fail_diagnose is not None:
            raise self.fail_diagnose
        return self.diagnosis, self.repro_and_fix

    async def verify(
        self,
        context: ContextPack,
        diagnosis: Diagnosis,
        repro_and_fix: ReproAndFix,
        execution: ExecutionResult,
    ) -> Verification:
        assert_isolated(self.forbidden, context, diagnosis, repro_and_fix, execution)
        self.verify_calls.append((context, diagnosis, repro_and_fix, execution))

        if self.fail_verify is not None:
            raise self.fail_verify
        return self.verification

    def reset(self) -> None:
        """Reset all collected data and failure modes."""
        self.diagnose_calls.clear()
        self.verify_calls.clear()
        self.fail_diagnose = None
        self.fail_verify = None
