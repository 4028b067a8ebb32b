"""Execution adapters for running repro steps in a sandbox.

- mock: deterministic keyword-driven sandbox, touches nothing
- daytona: remote Daytona sandbox via REST API
"""
