"""Adapter implementations for QA agent ports.

Adapters are organized by port type:
- reasoning/: LLM-backed diagnosis and verification (OpenAI, Claude Code)
- execution/: Sandboxed repro execution (mock, Daytona)
"""
