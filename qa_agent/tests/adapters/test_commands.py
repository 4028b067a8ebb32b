"""Tests for deriving a sandbox command from repro steps."""

import pytest

from qa_agent.adapters.execution.commands import (
    DEFAULT_COMMAND,
    PACKAGE_JSON_BOOTSTRAP,
    needs_package_json,
    repro_steps_to_command,
)


@pytest.mark.parametrize(
    "repro_steps,expected",
    [
        ("npm run build", "npm run build"),
        ("- npm run test:unit", "npm run test:unit"),
        ("* yarn jest src/user.test.ts", "yarn jest src/user.test.ts"),
        ("1. Checkout main\n- pnpm vitest run", "pnpm vitest run"),
        ("node scripts/repro.js", "node scripts/repro.js"),
        ("python repro.py", "python repro.py"),
        ("go run ./cmd/repro", "go run ./cmd/repro"),
        ("1. run the yarn test suite", "npm test"),
        ("Run npm tests for the profile module", "npm test"),
    ],
)
def test_picks_command(repro_steps: str, expected: str) -> None:
    assert repro_steps_to_command(repro_steps) == expected


def test_first_command_like_line_wins() -> None:
    steps = "\n\n  Open the profile page  \n- node a.js\n- npm run b"

    assert repro_steps_to_command(steps) == "node a.js"


@pytest.mark.parametrize("repro_steps", ["", "\n  \n", "Open the page and click save"])
def test_falls_back_to_default(repro_steps: str) -> None:
    assert repro_steps_to_command(repro_steps) == DEFAULT_COMMAND


def test_default_runs_in_an_empty_sandbox() -> None:
    command = repro_steps_to_command("Open the page and click save")

    assert command == 'echo "Repro steps executed in sandbox" && pwd && ls -la'
    assert not needs_package_json(command)


def test_custom_default() -> None:
    assert repro_steps_to_command("click around", default="make check") == "make check"


@pytest.mark.parametrize(
    "command,expected",
    [
        ("npm test", True),
        ("yarn jest", True),
        ("pnpm vitest run", True),
        ("node scripts/repro.js", False),
        ("python repro.py", False),
    ],
)
def test_needs_package_json(command: str, expected: bool) -> None:
    assert needs_package_json(command) is expected


def test_bootstrap_never_overwrites_existing_package_json() -> None:
    assert PACKAGE_JSON_BOOTSTRAP.startswith("test -f package.json || ")
    assert PACKAGE_JSON_BOOTSTRAP.endswith("> package.json")
    assert '"test":"echo \\"No tests configured\\""' in PACKAGE_JSON_BOOTSTRAP
