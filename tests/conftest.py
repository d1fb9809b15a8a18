"""Shared pytest fixtures for flux_inventory tests."""

from __future__ import annotations

import logging
import os
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
import typer
from typer.testing import CliRunner

from flux_inventory.cli.main import app


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Reset environment variables for each test."""
    # Clear any FLUXINV_ prefixed environment variables
    for key in list(os.environ.keys()):
        if key.startswith("FLUXINV_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def isolate_log_files(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Keep file logs written by CLI invocations inside the test's tmp dir."""
    log_dir = tmp_path / "logs"
    monkeypatch.setattr("flux_inventory.logging.config.LOG_DIR", log_dir)
    monkeypatch.setattr("flux_inventory.logging.config.LOG_FILE", log_dir / "fluxinv.log")
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    yield
    for handler in root.handlers:
        if handler not in original_handlers:
            handler.close()
    root.handlers = original_handlers


@pytest.fixture
def capture_logs(caplog: pytest.LogCaptureFixture) -> pytest.LogCaptureFixture:
    """Fixture to capture log output."""
    caplog.set_level(logging.DEBUG)
    return caplog


@pytest.fixture
def cli_app() -> typer.Typer:
    """Return the CLI app for testing."""
    return app


def make_flux_object(
    kind: str,
    name: str,
    namespace: str | None = "flux-system",
    spec: dict[str, Any] | None = None,
    ready: str | None = "True",
    reason: str = "ReconciliationSucceeded",
    inventory: list[str] | None = None,
) -> dict[str, Any]:
    """Build a raw Flux object as returned by CustomObjectsApi."""
    metadata: dict[str, Any] = {
        "name": name,
        "creationTimestamp": "2026-01-01T00:00:00Z",
    }
    if namespace is not None:
        metadata["namespace"] = namespace
    status: dict[str, Any] = {}
    if ready is not None:
        status["conditions"] = [{"type": "Ready", "status": ready, "reason": reason}]
    if inventory is not None:
        status["inventory"] = {"entries": [{"id": i, "v": "v1"} for i in inventory]}
    return {
        "apiVersion": "toolkit.fluxcd.io/v1",
        "kind": kind,
        "metadata": metadata,
        "spec": spec or {},
        "status": status,
    }


@pytest.fixture
def flux_object() -> Any:
    """Factory for raw Flux objects."""
    return make_flux_object
