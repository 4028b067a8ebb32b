"""Domain models for the QA agent.

All models in this module use only Python standard library types,
ensuring zero external dependencies in the core domain.

Records are immutable. Each exposes ``to_dict()`` returning the camelCase
wire shape used when records are embedded in reasoning prompts or printed
as a run result.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

# Maximum number of stack frames kept in a context pack.
MAX_FRAMES = 5

# Hard cap on the serialized size of a context pack, in characters.
MAX_CONTEXT_CHARS = 1200

# Cap on the curated error message, in characters.
MAX_ERROR_CHARS = 280


class AgentStage(Enum):
    """Progress markers of a single pipeline run.

    The sequence is linear:
    INGEST → CURATE_CONTEXT → DIAGNOSE → GENERATE_REPRO → EXECUTE → VERIFY → DONE

    INGEST and GENERATE_REPRO carry no work of their own; they exist so the
    boundaries they mark show up in logs and stage listeners.
    """

    INGEST = "INGEST"
    CURATE_CONTEXT = "CURATE_CONTEXT"
    DIAGNOSE = "DIAGNOSE"
    GENERATE_REPRO = "GENERATE_REPRO"
    EXECUTE = "EXECUTE"
    VERIFY = "VERIFY"
    DONE = "DONE"


@dataclass(frozen=True)
class ContextPack:
    """Bounded, deterministic summary of a raw stack trace.

    This is the only representation of the error that reasoning and
    execution collaborators ever see.
    """

    error: str
    top_frames: tuple[str, ...]  # immutable for frozen dataclass
    suspected_file: str | None = None

    def __post_init__(self) -> None:
        """Validate context pack invariants on creation."""
        if isinstance(self.top_frames, list):
            object.__setattr__(self, "top_frames", tuple(self.top_frames))
        if len(self.top_frames) > MAX_FRAMES:
            raise ValueError(
                f"top_frames must hold at most {MAX_FRAMES} frames, "
                f"got {len(self.top_frames)}"
            )

    def to_dict(self) -> dict[str, Any]:
        """Return the wire shape; ``suspectedFile`` is omitted when unknown."""
        data: dict[str, Any] = {
            "error": self.error,
            "topFrames": list(self.top_frames),
        }
        if self.suspected_file is not None:
            data["suspectedFile"] = self.suspected_file
        return data

    def serialize(self) -> str:
        """Compact JSON used for the size budget."""
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)


@dataclass(frozen=True)
class Diagnosis:
    """Root cause analysis produced by the reasoning collaborator."""

    root_cause: str
    impact_summary: str

    def to_dict(self) -> dict[str, Any]:
        return {"rootCause": self.root_cause, "impactSummary": self.impact_summary}


@dataclass(frozen=True)
class ReproAndFix:
    """Reproduction recipe and proposed fix, produced alongside the diagnosis."""

    repro_steps: str
    fix_snippet: str
    notes: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "reproSteps": self.repro_steps,
            "fixSnippet": self.fix_snippet,
        }
        if self.notes is not None:
            data["notes"] = self.notes
        return data


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of running a reproduction in a sandbox.

    ``success=False`` is ordinary data for the verification step, not an error.
    """

    success: bool
    stdout: str

    def to_dict(self) -> dict[str, Any]:
        return {"success": self.success, "stdout": self.stdout}


@dataclass(frozen=True)
class Verification:
    """Verdict on whether the proposed fix resolves the error."""

    fix_worked: bool
    explanation: str

    def to_dict(self) -> dict[str, Any]:
        return {"fixWorked": self.fix_worked, "explanation": self.explanation}


@dataclass(frozen=True)
class RunResult:
    """Aggregate of every record produced by one complete pipeline run."""

    context_pack: ContextPack
    diagnosis: Diagnosis
    repro_and_fix: ReproAndFix
    execution: ExecutionResult
    verification: Verification

    def to_dict(self) -> dict[str, Any]:
        return {
            "contextPack": self.context_pack.to_dict(),
            "diagnosis": self.diagnosis.to_dict(),
            "reproAndFix": self.repro_and_fix.to_dict(),
            "execution": self.execution.to_dict(),
            "verification": self.verification.to_dict(),
        }
