"""Base manager for Kubernetes service managers.

Provides shared infrastructure for the inventory managers, including
client access, cluster resolution, and error translation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from flux_inventory.integrations.kubernetes.client import KubernetesClient
    from flux_inventory.integrations.kubernetes.config import KubernetesPluginConfig
    from flux_inventory.integrations.kubernetes.exceptions import KubernetesError

logger = structlog.get_logger()

DEFAULT_CLUSTER = "default"


class K8sBaseManager:
    """Base class for Kubernetes service managers.

    Provides shared concerns for all managers:
    - Client reference and configuration access
    - Structured logging with entity binding
    - Cluster key resolution for caches and results
    - Consistent API error translation

    Subclasses set ``_entity_name`` for structured log context.

    Example:
        >>> class InventoryManager(K8sBaseManager):
        ...     _entity_name = "inventory"
    """

    _entity_name: str = ""

    def __init__(self, client: KubernetesClient) -> None:
        """Initialize the manager.

        Args:
            client: Kubernetes API client instance.
        """
        self._client = client
        self._log = logger.bind(entity=self._entity_name)

    @property
    def config(self) -> KubernetesPluginConfig:
        """Configuration of the underlying client."""
        return self._client.config

    def _cluster_key(self, context: str | None) -> str:
        """Key identifying a cluster in caches and results.

        Args:
            context: Cluster name, kubeconfig context, or None for the default.
        """
        return context or DEFAULT_CLUSTER

    def _translate_error(
        self,
        e: Exception,
        resource_type: str | None = None,
        namespace: str | None = None,
    ) -> KubernetesError:
        """Translate an exception raised while listing resources.

        Args:
            e: The original exception (typically ApiException).
            resource_type: Type of resource being listed.
            namespace: Namespace being listed, None for cluster-wide.

        Returns:
            An appropriate KubernetesError subclass.
        """
        return self._client.translate_api_exception(
            e,
            resource_type=resource_type,
            namespace=namespace,
        )
