"""Claude Code reasoning adapter.

Implements ReasoningPort by invoking Claude Code CLI in headless mode.

Invocation format: claude -p --output-format json --model <model>, with the
prompt written to stdin so its size is not bound by argv limits.

With ``--output-format json`` the CLI wraps the model's answer in an
envelope whose ``result`` field holds the text; that text is then parsed
like any other model response.
"""

import asyncio
import json
import logging
import subprocess

from qa_agent.core.errors import ReasoningError
from qa_agent.core.models import (
    ContextPack,
    Diagnosis,
    ExecutionResult,
    ReproAndFix,
    Verification,
)
from qa_agent.core.ports import ReasoningPort

from .prompts import (
    DIAGNOSE_SYSTEM_PROMPT,
    VERIFY_SYSTEM_PROMPT,
    build_diagnose_prompt,
    build_verify_prompt,
    parse_plan,
    parse_verification,
)

logger = logging.getLogger(__name__)


class ClaudeCodeReasoningAdapter(ReasoningPort):
    """Claude Code CLI-based reasoning adapter."""

    def __init__(
        self,
        model: str = "sonnet",
        timeout_seconds: float = 60.0,
        executable: str = "claude",
    ):
        """Initialize Claude Code reasoning adapter.

        Args:
            model: Claude model alias or name (e.g., 'sonnet', 'opus').
            timeout_seconds: Timeout for a single CLI invocation.
            executable: Name or path of the Claude Code binary.
        """
        self.model = model
        self.timeout_seconds = timeout_seconds
        self.executable = executable

    async def diagnose_and_plan(
        self, context: ContextPack
    ) -> tuple[Diagnosis, ReproAndFix]:
        prompt = f"{DIAGNOSE_SYSTEM_PROMPT}\n\n{build_diagnose_prompt(context)}"
        output = await self._invoke_claude_code(prompt)
        try:
            return parse_plan(self._unwrap(output))
        except ReasoningError as e:
            logger.error(f"Failed to parse Claude Code diagnosis: {e}", exc_info=True)
            raise

    async def verify(
        self,
        context: ContextPack,
        diagnosis: Diagnosis,
        repro_and_fix: ReproAndFix,
        execution: ExecutionResult,
    ) -> Verification:
        user_prompt = build_verify_prompt(context, diagnosis, repro_and_fix, execution)
        output = await self._invoke_claude_code(f"{VERIFY_SYSTEM_PROMPT}\n\n{user_prompt}")
        try:
            return parse_verification(self._unwrap(output))
        except ReasoningError as e:
            logger.error(f"Failed to parse Claude Code verification: {e}", exc_info=True)
            raise

    async def _invoke_claude_code(self, prompt: str) -> str:
        """Invoke Claude Code CLI with the prompt asynchronously.

        Raises:
            ReasoningError: If the CLI cannot be started, times out, or exits
                non-zero.
        """
        loop = asyncio.get_running_loop()

        def _run_claude_code() -> str:
            """Synchronous wrapper for subprocess call."""
            try:
                result = subprocess.run(
                    [
                        self.executable,
                        "-p",
                        "--output-format",
                        "json",
                        "--model",
                        self.model,
                    ],
                    input=prompt,
                    capture_output=True,
                    text=True,
                    timeout=self.timeout_seconds,
                )
            except subprocess.TimeoutExpired:
                raise ReasoningError(
                    f"Claude Code CLI timed out after {self.timeout_seconds} seconds"
                )
            except FileNotFoundError:
                raise ReasoningError(f"Claude Code CLI not found: {self.executable}")
            except OSError as e:
                raise ReasoningError(f"Claude Code CLI could not be started: {e}") from e

            if result.returncode != 0:
                error_output = result.stderr or result.stdout
                raise ReasoningError(f"Claude Code CLI failed: {error_output}")

            return result.stdout.strip()

        try:
            # Run in executor to avoid blocking
            return await loop.run_in_executor(None, _run_claude_code)
        except ReasoningError as e:
            logger.error(f"Claude Code CLI error: {e}", exc_info=True)
            raise

    @staticmethod
    def _unwrap(output: str) -> str:
        """Return the model text from the CLI's JSON envelope.

        Output that is not an envelope is returned unchanged.

        Raises:
            ReasoningError: If the envelope reports an error.
        """
        try:
            envelope = json.loads(output)
        except json.JSONDecodeError:
            return output

        if not isinstance(envelope, dict) or "result" not in envelope:
            return output
        if envelope.get("is_error"):
            raise ReasoningError(f"Claude Code reported an error: {envelope.get('result')}")

        result = envelope["result"]
        if not isinstance(result, str):
            raise ReasoningError("Claude Code envelope 'result' is not a string")
        return result
