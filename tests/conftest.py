"""Shared pytest fixtures."""

from __future__ import annotations

import os

import pytest


@pytest.fixture(autouse=True)
def isolated_ats_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Run every test without ambient ATS_* variables or a developer `.env` file."""

    for variable_name in list(os.environ):
        if variable_name.upper().startswith("ATS_") or variable_name.upper() == "LOG_LEVEL":
            monkeypatch.delenv(variable_name, raising=False)
    monkeypatch.chdir(tmp_path)
