"""Core domain logic for the QA agent.

This package contains zero external dependencies and represents
the pure business logic of the application. All adapters and
external integrations are handled by the adapters package.
"""

from .errors import (
    CurationFault,
    PipelineError,
    QAAgentError,
    ReasoningError,
    StageSequenceError,
)
from .evidence import EvidenceCurator, curate
from .models import (
    AgentStage,
    ContextPack,
    Diagnosis,
    ExecutionResult,
    ReproAndFix,
    RunResult,
    Verification,
)
from .orchestrator import PipelineOrchestrator, run_pipeline

__all__ = [
    "AgentStage",
    "ContextPack",
    "CurationFault",
    "Diagnosis",
    "EvidenceCurator",
    "ExecutionResult",
    "PipelineError",
    "PipelineOrchestrator",
    "QAAgentError",
    "ReasoningError",
    "ReproAndFix",
    "RunResult",
    "StageSequenceError",
    "Verification",
    "curate",
    "run_pipeline",
]
