"""Integration tests for adapter implementations.

These tests verify adapters against mocked SDKs, subprocesses and HTTP
transports.
"""
