"""Tests for the Claude Code reasoning adapter."""

import json
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from qa_agent.adapters.reasoning.claude_code import ClaudeCodeReasoningAdapter
from qa_agent.core.errors import ReasoningError
from qa_agent.core.models import (
    ContextPack,
    Diagnosis,
    ExecutionResult,
    ReproAndFix,
)

PLAN_TEXT = json.dumps(
    {
        "diagnosis": {"rootCause": "x is undefined", "impactSummary": "500s"},
        "reproAndFix": {"reproSteps": "- npm test", "fixSnippet": "x ?? {}"},
    }
)


@pytest.fixture
def adapter() -> ClaudeCodeReasoningAdapter:
    return ClaudeCodeReasoningAdapter(model="opus", timeout_seconds=5)


@pytest.fixture
def context() -> ContextPack:
    return ContextPack(error="TypeError: x", top_frames=("at foo (/app/src/a.ts:1:1)",))


def _completed(stdout: str = "", stderr: str = "", returncode: int = 0) -> MagicMock:
    result = MagicMock()
    result.stdout = stdout
    result.stderr = stderr
    result.returncode = returncode
    return result


def test_adapter_initialization() -> None:
    adapter = ClaudeCodeReasoningAdapter()

    assert adapter.model == "sonnet"
    assert adapter.timeout_seconds == 60.0
    assert adapter.executable == "claude"


@pytest.mark.asyncio
async def test_diagnose_unwraps_cli_envelope(adapter, context) -> None:
    envelope = json.dumps({"type": "result", "is_error": False, "result": PLAN_TEXT})

    with patch("subprocess.run", return_value=_completed(stdout=envelope)) as mock_run:
        diagnosis, plan = await adapter.diagnose_and_plan(context)

    assert diagnosis.root_cause == "x is undefined"
    assert plan.fix_snippet == "x ?? {}"
    assert plan.notes is None

    args = mock_run.call_args.args[0]
    assert args == ["claude", "-p", "--output-format", "json", "--model", "opus"]
    assert '"error": "TypeError: x"' in mock_run.call_args.kwargs["input"]
    assert mock_run.call_args.kwargs["timeout"] == 5


@pytest.mark.asyncio
async def test_plain_text_output_is_parsed_directly(adapter, context) -> None:
    with patch("subprocess.run", return_value=_completed(stdout=f"Result:\n{PLAN_TEXT}\n")):
        diagnosis, _ = await adapter.diagnose_and_plan(context)

    assert diagnosis.impact_summary == "500s"


@pytest.mark.asyncio
async def test_verify(adapter, context) -> None:
    envelope = json.dumps({"result": '{"fixWorked": false, "explanation": "Still throws"}'})

    with patch("subprocess.run", return_value=_completed(stdout=envelope)):
        verdict = await adapter.verify(
            context,
            Diagnosis(root_cause="rc", impact_summary="impact"),
            ReproAndFix(repro_steps="npm test", fix_snippet="fix"),
            ExecutionResult(success=False, stdout="1 failing"),
        )

    assert verdict.fix_worked is False


@pytest.mark.asyncio
async def test_nonzero_exit_raises(adapter, context) -> None:
    with patch("subprocess.run", return_value=_completed(stderr="auth failed", returncode=1)):
        with pytest.raises(ReasoningError, match="auth failed"):
            await adapter.diagnose_and_plan(context)


@pytest.mark.asyncio
async def test_timeout_raises(adapter, context) -> None:
    with patch("subprocess.run", side_effect=subprocess.TimeoutExpired("claude", 5)):
        with pytest.raises(ReasoningError, match="timed out"):
            await adapter.diagnose_and_plan(context)


@pytest.mark.asyncio
async def test_missing_binary_raises(adapter, context) -> None:
    with patch("subprocess.run", side_effect=FileNotFoundError()):
        with pytest.raises(ReasoningError, match="not found"):
            await adapter.diagnose_and_plan(context)


@pytest.mark.asyncio
async def test_error_envelope_raises(adapter, context) -> None:
    envelope = json.dumps({"is_error": True, "result": "usage limit reached"})

    with patch("subprocess.run", return_value=_completed(stdout=envelope)):
        with pytest.raises(ReasoningError, match="usage limit reached"):
            await adapter.diagnose_and_plan(context)


def test_unwrap_leaves_non_envelope_json_alone() -> None:
    output = '{"fixWorked": true, "explanation": "ok"}'

    assert ClaudeCodeReasoningAdapter._unwrap(output) == output


def test_unwrap_rejects_non_string_result() -> None:
    with pytest.raises(ReasoningError, match="not a string"):
        ClaudeCodeReasoningAdapter._unwrap('{"result": {"nested": true}}')


@pytest.mark.asyncio
async def test_unstartable_binary_raises(adapter, context) -> None:
    with patch("subprocess.run", side_effect=PermissionError(13, "Permission denied")):
        with pytest.raises(ReasoningError, match="could not be started"):
            await adapter.diagnose_and_plan(context)


@pytest.mark.asyncio
async def test_large_verify_prompt_goes_through_stdin(adapter, context) -> None:
    envelope = json.dumps({"result": '{"fixWorked": false, "explanation": "Too noisy"}'})
    sandbox_output = "x" * 200_000

    with patch("subprocess.run", return_value=_completed(stdout=envelope)) as mock_run:
        verdict = await adapter.verify(
            context,
            Diagnosis(root_cause="rc", impact_summary="impact"),
            ReproAndFix(repro_steps="npm test", fix_snippet="fix"),
            ExecutionResult(success=False, stdout=sandbox_output),
        )

    assert verdict.fix_worked is False
    assert sandbox_output in mock_run.call_args.kwargs["input"]
    assert all(len(arg) < 100 for arg in mock_run.call_args.args[0])
