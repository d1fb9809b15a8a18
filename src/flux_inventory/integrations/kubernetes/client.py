"""Kubernetes API client wrapper.

Wraps the official kubernetes Python client with per-context
``CustomObjectsApi`` instances, retry logic for transient connection
errors, and consistent error translation. Flux resources are returned as
the raw ``dict`` payloads produced by ``CustomObjectsApi``.
"""

from __future__ import annotations

import asyncio
import threading
from typing import TYPE_CHECKING, Any

import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from urllib3.exceptions import HTTPError as Urllib3HTTPError

from flux_inventory.integrations.kubernetes.exceptions import (
    KubernetesAuthError,
    KubernetesConflictError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesNotFoundError,
    KubernetesValidationError,
    UnknownResourceTypeError,
)
from flux_inventory.integrations.kubernetes.flux_resources import get_resource_def

if TYPE_CHECKING:
    from kubernetes.client import CustomObjectsApi

    from flux_inventory.integrations.kubernetes.config import KubernetesPluginConfig

logger = structlog.get_logger()


class KubernetesClient:
    """Multi-cluster Kubernetes API client for Flux custom resources.

    Wraps the official kubernetes Python client with:
    - Default context loaded from kubeconfig or in-cluster config
    - One lazily built ``CustomObjectsApi`` per additional context, so
      several clusters can be queried concurrently without switching the
      process-wide kubeconfig
    - Automatic retry with tenacity for transient connection errors
    - Consistent error translation to custom exceptions

    Example:
        ```python
        from flux_inventory.integrations.kubernetes import KubernetesClient
        from flux_inventory.integrations.kubernetes.config import (
            KubernetesPluginConfig,
        )

        config = KubernetesPluginConfig.from_env()
        with KubernetesClient(config) as client:
            result = client.list_flux_resources("Kustomization")
            print(f"{len(result['items'])} Kustomizations")
        ```
    """

    def __init__(self, plugin_config: KubernetesPluginConfig) -> None:
        """Initialize the client and load the default context.

        Args:
            plugin_config: Complete Kubernetes configuration.
        """
        self._config = plugin_config
        self._retries = plugin_config.defaults.retry_attempts
        self._current_context: str | None = None

        self._custom_objects: CustomObjectsApi | None = None
        self._context_apis: dict[str, CustomObjectsApi] = {}
        self._context_lock = threading.Lock()

        self._load_config()

        logger.info(
            "kubernetes_client_initialized",
            context=self._current_context,
            clusters=sorted(plugin_config.clusters),
        )

    def _load_config(self) -> None:
        """Load Kubernetes configuration from kubeconfig or in-cluster."""
        from kubernetes import config
        from kubernetes.config import ConfigException

        active_context = self._config.get_active_context()

        try:
            kubeconfig_path = None
            if self._config.active_cluster and self._config.active_cluster in self._config.clusters:
                cluster_cfg = self._config.clusters[self._config.active_cluster]
                kubeconfig_path = cluster_cfg.kubeconfig

            config.load_kube_config(
                config_file=kubeconfig_path,
                context=active_context,
            )
            self._current_context = active_context
            logger.debug(
                "loaded_kubeconfig",
                context=active_context,
                kubeconfig=kubeconfig_path,
            )
        except ConfigException:
            try:
                config.load_incluster_config()
                self._current_context = "in-cluster"
                logger.debug("loaded_incluster_config")
            except ConfigException as e:
                raise KubernetesConnectionError(
                    message="Cannot load Kubernetes configuration. "
                    "Ensure kubeconfig exists or running inside a cluster.",
                    original_error=e,
                ) from e

        self._invalidate_api_cache()

    def _invalidate_api_cache(self) -> None:
        """Clear cached API instances."""
        self._custom_objects = None
        self._context_apis.clear()

    # =========================================================================
    # API Accessors
    # =========================================================================

    @property
    def custom_objects(self) -> CustomObjectsApi:
        """Get the CustomObjectsApi for the default context."""
        with self._context_lock:
            if self._custom_objects is None:
                from kubernetes.client import CustomObjectsApi

                self._custom_objects = CustomObjectsApi()
            return self._custom_objects

    def custom_objects_for(self, context: str | None) -> CustomObjectsApi:
        """Get a CustomObjectsApi bound to a specific context.

        Args:
            context: A named cluster from the configuration, a raw kubeconfig
                context name, or None for the default context.

        Raises:
            KubernetesConnectionError: If the context cannot be loaded.
        """
        if context is None or context in ("default", self._current_context):
            return self.custom_objects

        # Called from worker threads during a fan-out
        with self._context_lock:
            if context not in self._context_apis:
                self._context_apis[context] = self._new_context_api(context)
            return self._context_apis[context]

    def _new_context_api(self, context: str) -> CustomObjectsApi:
        from kubernetes import config
        from kubernetes.client import CustomObjectsApi
        from kubernetes.config import ConfigException

        context_name = context
        kubeconfig_path = None
        if context in self._config.clusters:
            cluster_cfg = self._config.clusters[context]
            context_name = cluster_cfg.context or context
            kubeconfig_path = cluster_cfg.kubeconfig

        try:
            api_client = config.new_client_from_config(
                config_file=kubeconfig_path,
                context=context_name,
            )
        except ConfigException as e:
            raise KubernetesConnectionError(
                message=f"Failed to load context '{context_name}'",
                original_error=e,
            ) from e

        logger.debug("created_context_client", context=context_name)
        return CustomObjectsApi(api_client)

    # =========================================================================
    # Flux Resources
    # =========================================================================

    def list_flux_resources(
        self,
        resource_type: str,
        context: str | None = None,
        namespace: str | None = None,
        *,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """List Flux resources of one type.

        Args:
            resource_type: Flux kind (e.g. ``Kustomization``).
            context: Cluster name or kubeconfig context, None for the default.
            namespace: Restrict to one namespace; None lists cluster-wide.
            timeout: Request timeout in seconds (defaults to the cluster timeout).

        Returns:
            The raw list payload; resources are under ``items``.

        Raises:
            UnknownResourceTypeError: If the kind is not a Flux resource.
            KubernetesError: On API failure, after retries for connection errors.
        """
        resource_def = get_resource_def(resource_type)
        if resource_def is None:
            raise UnknownResourceTypeError(resource_type)

        api = self.custom_objects_for(context)
        request_timeout = timeout or self.timeout

        @self.make_retry_decorator()
        def _list() -> dict[str, Any]:
            try:
                if namespace:
                    result: dict[str, Any] = api.list_namespaced_custom_object(
                        resource_def.group,
                        resource_def.version,
                        namespace,
                        resource_def.plural,
                        _request_timeout=request_timeout,
                    )
                else:
                    result = api.list_cluster_custom_object(
                        resource_def.group,
                        resource_def.version,
                        resource_def.plural,
                        _request_timeout=request_timeout,
                    )
            except Exception as e:
                raise self.translate_api_exception(
                    e,
                    resource_type=resource_type,
                    namespace=namespace,
                ) from e
            return result

        logger.debug(
            "listing_flux_resources",
            resource_type=resource_type,
            context=context,
            namespace=namespace,
        )
        return _list()

    async def alist_flux_resources(
        self,
        resource_type: str,
        context: str | None = None,
        namespace: str | None = None,
    ) -> dict[str, Any]:
        """Async variant of :meth:`list_flux_resources`, run in a worker thread."""
        return await asyncio.to_thread(
            self.list_flux_resources,
            resource_type,
            context,
            namespace,
        )

    # =========================================================================
    # Error Translation
    # =========================================================================

    @staticmethod
    def translate_api_exception(
        e: Exception,
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> KubernetesError:
        """Translate a kubernetes ApiException to a custom exception.

        Args:
            e: The original exception.
            resource_type: Type of resource being operated on.
            resource_name: Name of the resource.
            namespace: Namespace of the resource.

        Returns:
            An appropriate KubernetesError subclass.
        """
        from kubernetes.client import ApiException

        if isinstance(e, KubernetesError):
            return e

        if isinstance(e, Urllib3HTTPError | ConnectionError):
            return KubernetesConnectionError(
                message=f"Kubernetes API unreachable: {e}",
                original_error=e,
            )

        if not isinstance(e, ApiException):
            return KubernetesError(
                message=str(e),
                resource_type=resource_type,
                resource_name=resource_name,
                namespace=namespace,
            )

        status = e.status

        if status in (401, 403):
            return KubernetesAuthError(
                message=e.reason or "Authentication/authorization failed",
                status_code=status,
                reason=e.reason,
            )

        if status == 404:
            return KubernetesNotFoundError(
                resource_type=resource_type,
                resource_name=resource_name,
                namespace=namespace,
            )

        if status == 409:
            return KubernetesConflictError(
                resource_type=resource_type,
                resource_name=resource_name,
                namespace=namespace,
            )

        if status in (400, 422):
            return KubernetesValidationError(
                message=e.reason or "Validation failed",
                status_code=status,
            )

        return KubernetesError(
            message=e.reason or f"Kubernetes API error: {status}",
            status_code=status,
            resource_type=resource_type,
            resource_name=resource_name,
            namespace=namespace,
        )

    # =========================================================================
    # Retry Decorator
    # =========================================================================

    def make_retry_decorator(self) -> Any:
        """Create a retry decorator for transient connection errors.

        Returns:
            A tenacity retry decorator configured with exponential backoff.
        """
        return retry(
            retry=retry_if_exception_type(KubernetesConnectionError),
            stop=stop_after_attempt(self._retries),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            reraise=True,
        )

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def config(self) -> KubernetesPluginConfig:
        """The configuration this client was built from."""
        return self._config

    @property
    def timeout(self) -> int:
        """Get the configured timeout."""
        return self._config.get_active_timeout()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> None:
        """Close the client and release resources."""
        for api in self._context_apis.values():
            api.api_client.close()
        self._invalidate_api_cache()
        logger.debug("kubernetes_client_closed")

    def __enter__(self) -> KubernetesClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
