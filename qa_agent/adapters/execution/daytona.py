"""Daytona sandbox execution adapter.

Implements ExecutionPort by running the derived repro command inside a
fresh Daytona sandbox through the Daytona REST API:

1. Create a sandbox (POST /sandbox)
2. Wait until it reports state ``started`` (GET /sandbox/{id})
3. For npm, yarn and pnpm commands, create a minimal package.json if the
   sandbox has none
4. Execute the command (POST /toolbox/{id}/toolbox/process/execute)
5. Always delete the sandbox (DELETE /sandbox/{id})

Any failure along the way is reported as an unsuccessful ExecutionResult;
this adapter never raises from run().
"""

import asyncio
import logging
from typing import Any

import httpx

from qa_agent.core.models import ExecutionResult
from qa_agent.core.ports import ExecutionPort

from .commands import (
    PACKAGE_JSON_BOOTSTRAP,
    needs_package_json,
    repro_steps_to_command,
)

logger = logging.getLogger(__name__)

_READY_STATE = "started"
_FAILED_STATES = frozenset({"error", "build_failed", "destroyed"})


class DaytonaSandboxExecutor(ExecutionPort):
    """Daytona-backed sandbox executor via the REST API."""

    def __init__(
        self,
        api_key: str,
        api_url: str = "https://app.daytona.io/api",
        language: str = "javascript",
        ready_timeout_seconds: float = 60.0,
        poll_interval_seconds: float = 2.0,
        request_timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize Daytona adapter.

        Args:
            api_key: Daytona API key.
            api_url: Base URL for the Daytona API.
            language: Toolbox language of created sandboxes.
            ready_timeout_seconds: How long to wait for a sandbox to start.
            poll_interval_seconds: Delay between sandbox state checks.
            request_timeout_seconds: Timeout for each HTTP request.
            transport: Optional httpx transport (used by tests).

        Raises:
            ValueError: If API key is empty or not provided.
        """
        if not api_key or not api_key.strip():
            raise ValueError(
                "Daytona API key must be provided and non-empty. "
                "Set DAYTONA_API_KEY environment variable."
            )
        self.api_url = api_url.rstrip("/")
        self.language = language
        self.ready_timeout_seconds = ready_timeout_seconds
        self.poll_interval_seconds = poll_interval_seconds
        self.request_timeout_seconds = request_timeout_seconds
        self.client = httpx.AsyncClient(
            base_url=self.api_url,
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=request_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "DaytonaSandboxExecutor":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.client.aclose()

    async def close(self) -> None:
        """Close the httpx client and clean up resources."""
        await self.client.aclose()

    async def run(self, repro_steps: str) -> ExecutionResult:
        """Run the command derived from ``repro_steps`` in a fresh sandbox."""
        command = repro_steps_to_command(repro_steps)
        sandbox_id: str | None = None

        try:
            sandbox_id = await self._create_sandbox()
            await self._wait_until_ready(sandbox_id)
            if needs_package_json(command):
                await self._ensure_package_json(sandbox_id)
            logger.info(f"Executing command in sandbox {sandbox_id}: {command}")
            exit_code, output = await self._execute(sandbox_id, command)
        except Exception as e:
            logger.error(f"Daytona execution failed: {e}", exc_info=True)
            return ExecutionResult(
                success=False,
                stdout=(
                    f"$ {command}\n"
                    f"Failed to create or execute in Daytona sandbox: {e}"
                ),
            )
        finally:
            if sandbox_id is not None:
                await self._delete_sandbox(sandbox_id)

        return ExecutionResult(
            success=exit_code == 0,
            stdout=f"$ {command}\n{output}\n[exit code {exit_code}]",
        )

    async def _create_sandbox(self) -> str:
        response = await self.client.post(
            "/sandbox",
            json={"labels": {"code-toolbox-language": self.language}},
        )
        response.raise_for_status()
        data = response.json()

        sandbox_id = data.get("id")
        if not isinstance(sandbox_id, str) or not sandbox_id:
            raise RuntimeError(f"Daytona API returned no sandbox id: {data}")
        logger.info(f"Created Daytona sandbox {sandbox_id}")
        return sandbox_id

    async def _wait_until_ready(self, sandbox_id: str) -> None:
        """Poll the sandbox until it has started.

        Raises:
            RuntimeError: If the sandbox fails to start.
            TimeoutError: If it does not start within the ready timeout.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.ready_timeout_seconds

        while True:
            response = await self.client.get(f"/sandbox/{sandbox_id}")
            response.raise_for_status()
            state = str(response.json().get("state", "")).lower()

            if state == _READY_STATE:
                return
            if state in _FAILED_STATES:
                raise RuntimeError(f"Sandbox {sandbox_id} entered state '{state}'")
            if loop.time() >= deadline:
                raise TimeoutError(
                    f"Sandbox {sandbox_id} did not start within "
                    f"{self.ready_timeout_seconds}s (state: {state or 'unknown'})"
                )

            logger.debug(f"Waiting for sandbox {sandbox_id} (state: {state})")
            await asyncio.sleep(self.poll_interval_seconds)

    async def _ensure_package_json(self, sandbox_id: str) -> None:
        exit_code, output = await self._execute(sandbox_id, PACKAGE_JSON_BOOTSTRAP)
        if exit_code != 0:
            logger.warning(
                f"package.json bootstrap in sandbox {sandbox_id} exited with "
                f"{exit_code}: {output}"
            )

    async def _execute(self, sandbox_id: str, command: str) -> tuple[int, str]:
        response = await self.client.post(
            f"/toolbox/{sandbox_id}/toolbox/process/execute",
            json={"command": command, "timeout": int(self.request_timeout_seconds)},
        )
        response.raise_for_status()
        data = response.json()

        exit_code = data.get("exitCode")
        if not isinstance(exit_code, int):
            raise RuntimeError(f"Daytona API returned no exit code: {data}")
        return exit_code, str(data.get("result") or "")

    async def _delete_sandbox(self, sandbox_id: str) -> None:
        # Cleanup failures must not change the reported outcome.
        try:
            response = await self.client.delete(f"/sandbox/{sandbox_id}")
            response.raise_for_status()
            logger.info(f"Deleted Daytona sandbox {sandbox_id}")
        except Exception as e:
            logger.error(f"Failed to delete sandbox {sandbox_id}: {e}", exc_info=True)
