"""Test suite for the QA agent.

Organized into three categories:

1. core/: Unit tests for core domain logic
   - Minimal dependencies, fast execution
   - Uses in-memory fakes for ports

2. adapters/: Integration tests for adapter implementations
   - External SDKs, CLIs and HTTP APIs are mocked
   - Validates adapter behavior and error handling

3. fakes/: Port implementations for testing
   - In-memory implementations of ReasoningPort and ExecutionPort
   - Used by core unit tests
"""
