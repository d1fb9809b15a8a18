"""Shared fixtures for Kubernetes service tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from flux_inventory.integrations.kubernetes.client import KubernetesClient
from flux_inventory.integrations.kubernetes.config import (
    ClusterConfig,
    KubernetesDefaultsConfig,
    KubernetesPluginConfig,
)

RESOURCE_TYPES = ["Kustomization", "HelmRelease", "GitRepository"]


@pytest.fixture
def plugin_config() -> KubernetesPluginConfig:
    """Configuration with two clusters and a reduced set of resource types."""
    return KubernetesPluginConfig(
        clusters={
            "staging": ClusterConfig(context="staging-ctx"),
            "production": ClusterConfig(context="prod-ctx"),
        },
        defaults=KubernetesDefaultsConfig(fetch_timeout=1.0, cache_ttl=0),
        resource_types=RESOURCE_TYPES,
    )


@pytest.fixture
def mock_k8s_client(plugin_config: KubernetesPluginConfig) -> MagicMock:
    """Create a mock Kubernetes client carrying a real configuration.

    Error translation delegates to the real implementation so error
    messages match what the client produces.
    """
    mock_client = MagicMock()
    mock_client.config = plugin_config
    mock_client.translate_api_exception.side_effect = KubernetesClient.translate_api_exception
    return mock_client


@pytest.fixture
def make_fetcher() -> Callable[[dict[str, Any]], AsyncMock]:
    """Build an async fetcher answering per resource type.

    Values are returned as the list response; exceptions are raised.
    Types missing from the mapping return an empty list.
    """

    def _make(responses: dict[str, Any]) -> AsyncMock:
        async def _fetch(
            resource_type: str, context: str | None, namespace: str | None
        ) -> Any:
            response = responses.get(resource_type, {"items": []})
            if isinstance(response, Exception):
                raise response
            return response

        return AsyncMock(side_effect=_fetch)

    return _make
