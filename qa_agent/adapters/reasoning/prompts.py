"""Prompt construction and response parsing shared by reasoning adapters.

LLMs answer in freeform text. The helpers here pull the first ``{...}``
block out of that text and validate it into typed records, raising
ReasoningError instead of coercing anything that does not conform.
"""

import json
from typing import Any

from qa_agent.core.errors import ReasoningError
from qa_agent.core.models import (
    ContextPack,
    Diagnosis,
    ExecutionResult,
    ReproAndFix,
    Verification,
)

DIAGNOSE_SYSTEM_PROMPT = (
    "You are a senior TypeScript full-stack engineer. You only see curated error context, "
    "never full production logs. Answer concisely and return strict JSON."
)

VERIFY_SYSTEM_PROMPT = (
    "You verify whether a proposed bug fix actually worked based on sandboxed execution output. "
    "Be honest and concise. Answer strictly as JSON."
)


def _pretty(data: dict[str, Any]) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def build_diagnose_prompt(context: ContextPack) -> str:
    """Build the user prompt asking for diagnosis, repro steps and a fix."""
    return "\n".join(
        [
            "You are given a ContextPack derived from a production stack trace.",
            "",
            "ContextPack JSON:",
            _pretty(context.to_dict()),
            "",
            "Tasks:",
            "1. Diagnose the most likely root cause and its impact on users.",
            "2. Generate minimal, deterministic repro steps a teammate can follow.",
            "3. Propose a concrete fix as a small code snippet or diff.",
            "",
            "Respond as **strict JSON** with the following shape:",
            "{",
            '  "diagnosis": {',
            '    "rootCause": "string",',
            '    "impactSummary": "string"',
            "  },",
            '  "reproAndFix": {',
            '    "reproSteps": "bullet-point steps in plain text",',
            '    "fixSnippet": "code snippet or diff in a fenced block",',
            '    "notes": "any caveats or assumptions"',
            "  }",
            "}",
        ]
    )


def build_verify_prompt(
    context: ContextPack,
    diagnosis: Diagnosis,
    repro_and_fix: ReproAndFix,
    execution: ExecutionResult,
) -> str:
    """Build the user prompt asking whether the fix worked."""
    return "\n".join(
        [
            "You are given:",
            "",
            "ContextPack:",
            _pretty(context.to_dict()),
            "",
            "Diagnosis:",
            _pretty(diagnosis.to_dict()),
            "",
            "Repro + Fix:",
            _pretty(repro_and_fix.to_dict()),
            "",
            "Sandbox Execution Result:",
            _pretty(execution.to_dict()),
            "",
            "Decide whether the fix likely worked.",
            "",
            "Respond as **strict JSON** with:",
            "{",
            '  "fixWorked": boolean,',
            '  "explanation": "short explanation; if false, explain what is still broken or uncertain"',
            "}",
        ]
    )


def extract_json_object(text: str) -> dict[str, Any]:
    """Parse the span from the first ``{`` to the last ``}`` as a JSON object.

    Raises:
        ReasoningError: If no such span exists or it is not a JSON object.
    """
    first = text.find("{")
    last = text.rfind("}")
    if first == -1 or last < first:
        raise ReasoningError(f"No JSON object found in response: {text[:200]}")

    try:
        parsed = json.loads(text[first : last + 1])
    except json.JSONDecodeError as e:
        raise ReasoningError(f"Response is not valid JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise ReasoningError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed


def _require_str(data: dict[str, Any], key: str, where: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ReasoningError(f"Response missing string field '{where}.{key}'")
    return value


def _require_object(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    if not isinstance(value, dict):
        raise ReasoningError(f"Response missing object field '{key}'")
    return value


def parse_plan(text: str) -> tuple[Diagnosis, ReproAndFix]:
    """Parse a diagnose-and-plan response.

    Raises:
        ReasoningError: If required fields are missing or have the wrong type.
    """
    data = extract_json_object(text)

    diagnosis_raw = _require_object(data, "diagnosis")
    plan_raw = _require_object(data, "reproAndFix")

    notes = plan_raw.get("notes")
    if notes is not None and not isinstance(notes, str):
        raise ReasoningError("Field 'reproAndFix.notes' must be a string when present")

    diagnosis = Diagnosis(
        root_cause=_require_str(diagnosis_raw, "rootCause", "diagnosis"),
        impact_summary=_require_str(diagnosis_raw, "impactSummary", "diagnosis"),
    )
    repro_and_fix = ReproAndFix(
        repro_steps=_require_str(plan_raw, "reproSteps", "reproAndFix"),
        fix_snippet=_require_str(plan_raw, "fixSnippet", "reproAndFix"),
        notes=notes,
    )
    return diagnosis, repro_and_fix


def parse_verification(text: str) -> Verification:
    """Parse a verification response.

    Raises:
        ReasoningError: If ``fixWorked`` is not a boolean or
            ``explanation`` is not a string.
    """
    data = extract_json_object(text)

    fix_worked = data.get("fixWorked")
    if not isinstance(fix_worked, bool):
        raise ReasoningError("Response field 'fixWorked' must be a boolean")

    return Verification(
        fix_worked=fix_worked,
        explanation=_require_str(data, "explanation", "verification"),
    )
