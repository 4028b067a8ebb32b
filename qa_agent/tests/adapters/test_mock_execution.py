"""Tests for the deterministic mock sandbox."""

import pytest

from qa_agent.adapters.execution.mock import MockSandboxExecutor


@pytest.fixture
def executor() -> MockSandboxExecutor:
    return MockSandboxExecutor()


@pytest.mark.parametrize(
    "repro_steps,expected",
    [
        ("- npm test\n- expect tests green", True),
        ("Reload the page, NO ERROR should appear", True),
        ("- npm test\n- the suite is still failing", False),
        ("Calling getUser() throws", False),
        ("Open the page", False),
        ("", False),
        ("tests green unless it throws", True),
    ],
)
@pytest.mark.asyncio
async def test_outcome_from_keywords(
    executor: MockSandboxExecutor, repro_steps: str, expected: bool
) -> None:
    result = await executor.run(repro_steps)

    assert result.success is expected


@pytest.mark.asyncio
async def test_report_echoes_repro(executor: MockSandboxExecutor) -> None:
    result = await executor.run("  - npm test\n- expect tests green  ")

    assert result.stdout.startswith("=== Sandboxed Execution (Mock) ===")
    assert "- npm test\n- expect tests green" in result.stdout
    assert "--- Outcome ---" in result.stdout
    assert "without any simulated errors" in result.stdout


@pytest.mark.asyncio
async def test_report_for_empty_repro(executor: MockSandboxExecutor) -> None:
    result = await executor.run("   ")

    assert "(no repro steps provided)" in result.stdout
    assert "could not be validated" in result.stdout


@pytest.mark.asyncio
async def test_is_deterministic(executor: MockSandboxExecutor) -> None:
    first = await executor.run("still failing")
    second = await executor.run("still failing")

    assert first == second
