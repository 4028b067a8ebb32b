"""Fake implementations of core ports for testing.

These in-memory implementations allow core domain logic to be tested
without external dependencies:

- FakeReasoningPort: Canned diagnosis/verification responses
- FakeExecutionPort: Canned sandbox outcomes

Both record every call and can be told which texts must never appear in
their arguments, so tests can assert the raw stack trace stays private.
"""

from .execution import FakeExecutionPort
from .reasoning import FakeReasoningPort

__all__ = [
    "FakeExecutionPort",
    "FakeReasoningPort",
]
