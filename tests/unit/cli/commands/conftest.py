"""Shared fixtures for inventory command tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import typer

from flux_inventory.cli.commands.inventory import register_inventory_commands
from flux_inventory.integrations.kubernetes.models.flux import FluxResource
from flux_inventory.integrations.kubernetes.models.snapshot import InventoryData
from flux_inventory.utils.relationships import build_relationship_map


def build_inventory_data(
    objects: dict[str, list[dict[str, Any]]],
    cluster: str = "default",
    errors: dict[str, str] | None = None,
) -> InventoryData:
    """Assemble an InventoryData the way InventoryManager does."""
    resource_map = {
        kind: [FluxResource.from_k8s_object(obj, kind=kind) for obj in items]
        for kind, items in objects.items()
    }
    return InventoryData(
        cluster=cluster,
        resource_map=resource_map,
        relationships=build_relationship_map(resource_map),
        all_resources=[r for items in resource_map.values() for r in items],
        errors=errors or {},
    )


@pytest.fixture
def inventory_data_factory() -> Callable[..., InventoryData]:
    return build_inventory_data


@pytest.fixture
def sample_data(flux_object: Any) -> InventoryData:
    """A cluster with sources, two Kustomizations and a suspended HelmRelease."""
    return build_inventory_data(
        {
            "Kustomization": [
                flux_object(
                    "Kustomization",
                    "apps",
                    spec={
                        "sourceRef": {"kind": "GitRepository", "name": "fleet"},
                        "dependsOn": [{"name": "infra"}],
                    },
                    inventory=["apps_web_apps_Deployment"],
                ),
                flux_object(
                    "Kustomization",
                    "infra",
                    spec={"sourceRef": {"kind": "GitRepository", "name": "fleet"}},
                    ready="False",
                    reason="BuildFailed",
                ),
            ],
            "HelmRelease": [
                flux_object(
                    "HelmRelease",
                    "nginx",
                    namespace="web",
                    spec={
                        "suspend": True,
                        "chart": {
                            "spec": {
                                "chart": "nginx",
                                "sourceRef": {
                                    "kind": "HelmRepository",
                                    "name": "bitnami",
                                    "namespace": "flux-system",
                                },
                            }
                        },
                    },
                )
            ],
            "GitRepository": [flux_object("GitRepository", "fleet")],
        }
    )


@pytest.fixture
def cyclic_data(flux_object: Any) -> InventoryData:
    """Two Kustomizations depending on each other plus a self-managing bootstrap."""
    return build_inventory_data(
        {
            "Kustomization": [
                flux_object("Kustomization", "a", spec={"dependsOn": [{"name": "b"}]}),
                flux_object(
                    "Kustomization", "b", spec={"dependsOn": [{"name": "a"}]}, ready="False"
                ),
                flux_object(
                    "Kustomization",
                    "flux-system",
                    inventory=["flux-system_flux-system_kustomize.toolkit.fluxcd.io_Kustomization"],
                ),
            ]
        }
    )


@pytest.fixture
def mock_inventory_manager() -> MagicMock:
    """Create a mock InventoryManager."""
    manager = MagicMock()
    manager.get_inventory_data = AsyncMock()
    manager.get_overview = AsyncMock()
    return manager


@pytest.fixture
def mock_multicluster_manager() -> MagicMock:
    """Create a mock MultiClusterInventoryManager."""
    manager = MagicMock()
    manager.get_inventory_data = AsyncMock()
    return manager


@pytest.fixture
def app(mock_inventory_manager: MagicMock, mock_multicluster_manager: MagicMock) -> typer.Typer:
    """Create a test app with the inventory commands."""
    app = typer.Typer()
    register_inventory_commands(
        app, lambda: mock_inventory_manager, lambda: mock_multicluster_manager
    )
    return app
