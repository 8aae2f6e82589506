"""Shared fixtures for agents tests."""

import os

import pytest


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Run every test without ambient TRANSITORIA_* variables or a .env file."""
    for name in list(os.environ):
        if name.startswith("TRANSITORIA_") or name == "ANTHROPIC_API_KEY":
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
