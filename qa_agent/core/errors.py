"""Error taxonomy for the QA agent.

A sandbox reporting ``success=False`` is not represented here: it is
ordinary data flowing into verification.
"""

from .models import AgentStage


class QAAgentError(Exception):
    """Base class for all QA agent errors."""


class CurationFault(QAAgentError):
    """The evidence curator raised.

    Curation is not supposed to fail on any input; this classifies a
    violation of that contract if one ever happens.
    """


class ReasoningError(QAAgentError):
    """The reasoning collaborator failed or returned non-conforming content."""


class PipelineError(QAAgentError):
    """A stage failed and the run was aborted.

    The originating error is available as ``cause`` (and ``__cause__``).
    """

    def __init__(self, stage: AgentStage, cause: BaseException):
        super().__init__(f"Pipeline failed at {stage.value}: {cause}")
        self.stage = stage
        self.cause = cause


class StageSequenceError(QAAgentError):
    """The orchestrator did not follow its own stage sequence.

    This is a programming fault, deliberately not a PipelineError.
    """
