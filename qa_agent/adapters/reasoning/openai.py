"""OpenAI reasoning adapter.

Implements ReasoningPort by invoking an OpenAI-compatible Chat Completions
API. Point ``base_url`` at any endpoint that speaks the same protocol.
"""

import asyncio
import logging
from typing import Any

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


class OpenAIReasoningAdapter(ReasoningPort):
    """OpenAI API-based reasoning adapter."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4.1-mini",
        base_url: str | None = None,
        temperature: float = 0.1,
        timeout_seconds: float = 60.0,
    ):
        """Initialize OpenAI reasoning adapter.

        Args:
            api_key: OpenAI API key.
            model: Chat model to use (e.g., 'gpt-4.1-mini', 'gpt-4o').
            base_url: Optional base URL of an OpenAI-compatible API.
            temperature: Sampling temperature.
            timeout_seconds: Per-request timeout.

        Raises:
            ValueError: If API key is empty or not provided.
        """
        if not api_key or not api_key.strip():
            raise ValueError(
                "OpenAI API key must be provided and non-empty. "
                "Set OPENAI_API_KEY environment variable."
            )
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.temperature = temperature
        self.timeout_seconds = timeout_seconds

        # Lazy import to avoid requiring openai if not used
        self._client: Any | None = None

    def _get_client(self) -> Any:
        """Get or initialize the OpenAI synchronous client."""
        if self._client is None:
            try:
                from openai import OpenAI
            except ImportError:
                raise ImportError(
                    "openai package required for OpenAI adapter. "
                    "Install with: pip install openai"
                )
            self._client = OpenAI(api_key=self.api_key, base_url=self.base_url)
        return self._client

    async def diagnose_and_plan(
        self, context: ContextPack
    ) -> tuple[Diagnosis, ReproAndFix]:
        """Ask the model for a diagnosis, repro steps and a fix."""
        content = await self._chat(DIAGNOSE_SYSTEM_PROMPT, build_diagnose_prompt(context))
        try:
            return parse_plan(content)
        except ReasoningError as e:
            logger.error(f"Failed to parse OpenAI diagnosis: {e}", exc_info=True)
            raise

    async def verify(
        self,
        context: ContextPack,
        diagnosis: Diagnosis,
        repro_and_fix: ReproAndFix,
        execution: ExecutionResult,
    ) -> Verification:
        """Ask the model whether the fix worked given the sandbox outcome."""
        prompt = build_verify_prompt(context, diagnosis, repro_and_fix, execution)
        content = await self._chat(VERIFY_SYSTEM_PROMPT, prompt)
        try:
            return parse_verification(content)
        except ReasoningError as e:
            logger.error(f"Failed to parse OpenAI verification: {e}", exc_info=True)
            raise

    async def _chat(self, system_prompt: str, user_prompt: str) -> str:
        """Run one chat completion and return the message content.

        Raises:
            ReasoningError: If the API call fails or returns no text content.
        """
        loop = asyncio.get_running_loop()

        def _call_openai() -> Any:
            """Synchronous wrapper for OpenAI API call."""
            return self._get_client().chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=self.temperature,
                timeout=self.timeout_seconds,
            )

        try:
            # Run in executor to avoid blocking the event loop
            response = await loop.run_in_executor(None, _call_openai)
        except Exception as e:
            logger.error(f"OpenAI API call failed: {e}", exc_info=True)
            raise ReasoningError(f"LLM error: {e}") from e

        if not response.choices or response.choices[0].message is None:
            raise ReasoningError("LLM response missing content")

        content = response.choices[0].message.content
        if not isinstance(content, str):
            raise ReasoningError("LLM response missing content")
        return content
