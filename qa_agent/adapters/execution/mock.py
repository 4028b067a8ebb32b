"""Mock sandbox execution adapter.

Implements ExecutionPort without running anything. The outcome is derived
deterministically from keywords in the repro steps, and the output is
structured the way a real sandbox report would be so the verification
step has something to reason over.
"""

import logging

from qa_agent.core.models import ExecutionResult
from qa_agent.core.ports import ExecutionPort

logger = logging.getLogger(__name__)

SUCCESS_MARKERS = ("tests green", "no error")
FAILURE_MARKERS = ("still failing", "throws")


class MockSandboxExecutor(ExecutionPort):
    """Deterministic, fake execution environment.

    Outcome rules, checked in order:
    - repro mentions a success marker → success
    - repro mentions a failure marker → failure
    - anything else → failure (unverified is never reported as success)
    """

    async def run(self, repro_steps: str) -> ExecutionResult:
        success = self.classify(repro_steps)
        logger.debug(f"Mock sandbox outcome: success={success}")
        return ExecutionResult(success=success, stdout=self._format_report(repro_steps, success))

    @staticmethod
    def classify(repro_steps: str) -> bool:
        normalized = repro_steps.lower()
        if any(marker in normalized for marker in SUCCESS_MARKERS):
            return True
        if any(marker in normalized for marker in FAILURE_MARKERS):
            return False
        return False

    @staticmethod
    def _format_report(repro_steps: str, success: bool) -> str:
        lines = [
            "=== Sandboxed Execution (Mock) ===",
            "",
            "This is a deterministic, fake execution environment.",
            "No real user code or infrastructure is touched.",
            "",
            "--- Repro Script (high level) ---",
            repro_steps.strip() or "(no repro steps provided)",
            "",
            "--- Outcome ---",
        ]
        if success:
            lines.extend(
                [
                    "All relevant steps completed without any simulated errors.",
                    "No error matching the original ContextPack was reproduced.",
                ]
            )
        else:
            lines.extend(
                [
                    "Repro appears to still expose issues or could not be validated.",
                    "Either the repro is incomplete or the proposed fix does not fully address the bug.",
                ]
            )
        return "\n".join(lines)
