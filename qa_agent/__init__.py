"""QA agent: automated triage of stack traces.

Curates a raw stack trace into bounded evidence, asks a reasoning backend
for a diagnosis, repro and fix, runs the repro in a sandbox, and asks the
reasoning backend to verify the outcome.
"""

__version__ = "0.1.0"
