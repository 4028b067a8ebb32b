"""Composition root for the QA agent.

This module is the ONLY location that imports both core domain logic
and concrete adapter implementations. All wiring of dependencies
happens here, creating a clear entry point for the application.

Module Structure:
- Configuration loading via config module
- Adapter instantiation
- Core service initialization
- Dependency injection
- One pipeline run over a stack trace read from a file or stdin

Usage:
    qa-agent path/to/stacktrace.txt
    cat stacktrace.txt | qa-agent
"""

import asyncio
import json
import logging
import sys
from pathlib import Path

from qa_agent.adapters.execution.mock import MockSandboxExecutor
from qa_agent.adapters.reasoning.claude_code import ClaudeCodeReasoningAdapter
from qa_agent.config import Settings, load_settings
from qa_agent.core.errors import PipelineError
from qa_agent.core.orchestrator import PipelineOrchestrator
from qa_agent.core.ports import ExecutionPort, ReasoningPort


def configure_logging(log_level: str, log_format: str) -> None:
    """Configure application logging.

    Logs go to stderr so that stdout carries only the run result.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Log format (json, text).
    """
    level = getattr(logging, log_level, logging.INFO)

    if log_format == "json":
        format_str = '{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s"}'
    else:
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stderr),
        ],
    )


def build_reasoning(settings: Settings) -> ReasoningPort:
    """Instantiate the reasoning adapter selected by configuration."""
    logger = logging.getLogger(__name__)

    if settings.reasoning_backend == "openai":
        # Lazy import for optional OpenAI dependency
        from qa_agent.adapters.reasoning.openai import OpenAIReasoningAdapter

        if not settings.openai_api_key:
            logger.error("OpenAI backend selected but OPENAI_API_KEY not set")
            sys.exit(1)
        logger.info("Reasoning adapter: OpenAI")
        return OpenAIReasoningAdapter(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            base_url=settings.openai_base_url,
            temperature=settings.openai_temperature,
            timeout_seconds=settings.reasoning_timeout_seconds,
        )

    if settings.reasoning_backend == "claude_code":
        logger.info("Reasoning adapter: Claude Code")
        return ClaudeCodeReasoningAdapter(
            model=settings.claude_code_model,
            timeout_seconds=settings.reasoning_timeout_seconds,
        )

    logger.error(f"Unknown reasoning backend: {settings.reasoning_backend}")
    sys.exit(1)


def build_execution(settings: Settings) -> ExecutionPort:
    """Instantiate the execution adapter selected by configuration."""
    logger = logging.getLogger(__name__)

    if settings.execution_backend == "mock":
        logger.info("Execution adapter: mock sandbox")
        return MockSandboxExecutor()

    if settings.execution_backend == "daytona":
        from qa_agent.adapters.execution.daytona import DaytonaSandboxExecutor

        if not settings.daytona_api_key:
            logger.error("Daytona backend selected but DAYTONA_API_KEY not set")
            sys.exit(1)
        logger.info("Execution adapter: Daytona")
        return DaytonaSandboxExecutor(
            api_key=settings.daytona_api_key,
            api_url=settings.daytona_api_url,
            language=settings.daytona_language,
            ready_timeout_seconds=settings.daytona_ready_timeout_seconds,
            poll_interval_seconds=settings.daytona_poll_interval_seconds,
            request_timeout_seconds=settings.daytona_request_timeout_seconds,
        )

    logger.error(f"Unknown execution backend: {settings.execution_backend}")
    sys.exit(1)


def read_stack_trace(args: list[str]) -> str:
    """Read the stack trace from the file named in ``args`` or from stdin."""
    if args:
        return Path(args[0]).read_text(encoding="utf-8")
    return sys.stdin.read()


async def bootstrap(args: list[str]) -> None:
    """Load configuration, wire adapters, and run the pipeline once.

    Steps:
    1. Load configuration from environment
    2. Configure logging
    3. Instantiate adapters with configuration
    4. Initialize the orchestrator
    5. Run the pipeline and print the result as JSON

    Raises:
        SystemExit: On fatal configuration errors or empty input.
        PipelineError: If any stage of the run fails.
    """
    # Step 1: Load configuration
    settings = load_settings()

    # Step 2: Configure logging
    configure_logging(settings.log_level, settings.log_format)
    logger = logging.getLogger(__name__)

    stack_trace = read_stack_trace(args)
    if not stack_trace.strip():
        logger.error("Missing stack trace: pass a file path or pipe it on stdin")
        sys.exit(2)

    # Step 3: Instantiate adapters
    logger.info("Initializing adapters...")
    reasoning = build_reasoning(settings)
    execution = build_execution(settings)

    # Step 4: Initialize core services
    orchestrator = PipelineOrchestrator(reasoning=reasoning, execution=execution)

    # Step 5: Run
    try:
        result = await orchestrator.run_pipeline(stack_trace)
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    finally:
        # Close execution adapter if it has a close method
        if hasattr(execution, "close"):
            await execution.close()


def main() -> None:
    """Application entry point.

    Exit codes:
        0: Run completed
        1: Pipeline failure or fatal bootstrap error
        2: No stack trace given
        130: Interrupted by user (SIGINT/KeyboardInterrupt)
    """
    logger = logging.getLogger(__name__)
    try:
        asyncio.run(bootstrap(sys.argv[1:]))
    except KeyboardInterrupt:
        logger.warning("Shutdown requested by user (SIGINT)")
        sys.exit(130)
    except PipelineError as e:
        logger.error(f"Agent run failed: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
