"""Reasoning adapters for LLM-powered diagnosis and verification.

Implementations support multiple LLM providers:
- OpenAI-compatible Chat Completions APIs
- Claude Code (headless CLI mode)
"""
