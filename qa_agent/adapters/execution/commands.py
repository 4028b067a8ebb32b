"""Derivation of a single shell command from plain-text repro steps.

This is a simple heuristic: the first command-like line wins.
"""

import re

# Fresh sandboxes have no project checked out, so the fallback must work
# in an empty directory.
DEFAULT_COMMAND = 'echo "Repro steps executed in sandbox" && pwd && ls -la'

# Creates a minimal package.json only when none exists.
PACKAGE_JSON_BOOTSTRAP = (
    "test -f package.json || echo "
    r"""'{"name":"qa-repro","version":"1.0.0","scripts":{"test":"echo \"No tests configured\""}}'"""
    " > package.json"
)

_COMMAND_PREFIXES = ("npm ", "yarn ", "pnpm ", "node ", "python ", "go run ")
_PACKAGE_MANAGERS = ("npm ", "yarn ", "pnpm ")
_BULLET = re.compile(r"^[-*]\s*")


def repro_steps_to_command(repro_steps: str, default: str = DEFAULT_COMMAND) -> str:
    """Pick the one command a sandbox should run for these repro steps.

    Examples:
    '- npm run build' → 'npm run build'
    '1. run the yarn test suite' → 'npm test'
    'Open the page and click save' → default
    """
    lines = [line.strip() for line in repro_steps.split("\n")]
    lines = [line for line in lines if line]

    for line in lines:
        command = _BULLET.sub("", line)
        if command.startswith(_COMMAND_PREFIXES):
            return command
        if "test" in line and ("npm" in line or "yarn" in line):
            return "npm test"

    return default


def needs_package_json(command: str) -> bool:
    """True when the command runs through a Node package manager."""
    return any(manager in command for manager in _PACKAGE_MANAGERS)
