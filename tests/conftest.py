"""Pytest configuration and shared fixtures for all tests."""

import os

import pytest

from flatten_bom.console import reset_audit_trail


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Keep FLATTEN_BOM_* settings of the calling shell out of the tests.

    Every test also starts with a fresh audit trail.
    """
    for name in list(os.environ):
        if name.startswith("FLATTEN_BOM_"):
            monkeypatch.delenv(name, raising=False)
    reset_audit_trail()
