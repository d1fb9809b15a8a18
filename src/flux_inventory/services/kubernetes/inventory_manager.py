"""Flux inventory aggregation.

Fetches every Flux resource type of one cluster concurrently and assembles
the resource map, relationship edges and flattened resource list. A failure
to list one type never fails the aggregation: the type degrades to an
empty list and the error is recorded in ``InventoryData.errors``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any

from flux_inventory.integrations.kubernetes.exceptions import (
    KubernetesError,
    KubernetesTimeoutError,
)
from flux_inventory.integrations.kubernetes.models.flux import FluxResource
from flux_inventory.integrations.kubernetes.models.health import ResourceTypeHealthSummary
from flux_inventory.integrations.kubernetes.models.snapshot import InventoryData
from flux_inventory.services.kubernetes.base import K8sBaseManager
from flux_inventory.services.kubernetes.cache import CacheKey, ResourceCache
from flux_inventory.utils.health import summarize_health
from flux_inventory.utils.relationships import build_relationship_map

if TYPE_CHECKING:
    from flux_inventory.integrations.kubernetes.client import KubernetesClient

# async (resource_type, context, namespace) -> {"items": [...]}
Fetcher = Callable[[str, str | None, str | None], Awaitable[Mapping[str, Any]]]

OVERVIEW_KEY = "overview"


class InventoryManager(K8sBaseManager):
    """Aggregates Flux resources of a cluster.

    Each resource type (and namespace, when several are requested) is
    fetched in its own task. Successful lists are cached for
    ``defaults.cache_ttl`` seconds and concurrent requests for the same
    list share one in-flight fetch.
    """

    _entity_name: str = "inventory"

    def __init__(
        self,
        client: KubernetesClient,
        *,
        fetcher: Fetcher | None = None,
        cache: ResourceCache | None = None,
        overview_cache: ResourceCache | None = None,
        include_inventory: bool = True,
    ) -> None:
        """Initialize the manager.

        Args:
            client: Kubernetes API client instance.
            fetcher: List capability; defaults to ``client.alist_flux_resources``.
            cache: Cache for resource lists.
            overview_cache: Cache for per-cluster health overviews.
            include_inventory: Emit ``owns`` edges from ``status.inventory``.
        """
        super().__init__(client)
        defaults = client.config.defaults
        self._fetcher: Fetcher = fetcher or client.alist_flux_resources
        self._cache = cache if cache is not None else ResourceCache(defaults.cache_ttl)
        self._overview_cache = (
            overview_cache
            if overview_cache is not None
            else ResourceCache(defaults.overview_cache_ttl)
        )
        self._include_inventory = include_inventory
        self._in_flight: dict[CacheKey, asyncio.Task[list[FluxResource]]] = {}

    @property
    def resource_types(self) -> list[str]:
        """Resource types fetched for every aggregation."""
        return list(self.config.resource_types)

    # =========================================================================
    # Aggregation
    # =========================================================================

    async def get_inventory_data(
        self,
        context: str | None = None,
        *,
        namespaces: Iterable[str] | None = None,
    ) -> InventoryData:
        """Fetch all Flux resource types of a cluster.

        Args:
            context: Cluster name or kubeconfig context, None for the default.
            namespaces: Restrict the fetch to these namespaces; None or empty
                lists every namespace.

        Returns:
            The aggregated snapshot. Never raises for per-type failures.
        """
        cluster = self._cluster_key(context)
        resource_types = self.resource_types
        # Each namespace is listed once
        scopes: list[str | None] = list(dict.fromkeys(namespaces or ())) or [None]
        slots = [(t, ns) for t in resource_types for ns in scopes]

        self._log.info(
            "fetching_inventory",
            cluster=cluster,
            resource_types=len(resource_types),
            namespaces=scopes if scopes != [None] else None,
        )

        results = await asyncio.gather(
            *(self._fetch_slot(context, t, ns) for t, ns in slots)
        )

        resource_map: dict[str, list[FluxResource]] = {t: [] for t in resource_types}
        errors: dict[str, str] = {}
        for (resource_type, _), (items, error) in zip(slots, results, strict=True):
            resource_map[resource_type].extend(items)
            if error is not None:
                errors.setdefault(resource_type, error)

        all_resources = [r for items in resource_map.values() for r in items]
        relationships = build_relationship_map(
            resource_map, include_inventory=self._include_inventory
        )

        self._log.info(
            "inventory_fetched",
            cluster=cluster,
            resources=len(all_resources),
            relationships=len(relationships),
            failed_types=sorted(errors),
        )
        return InventoryData(
            cluster=cluster,
            resource_map=resource_map,
            relationships=relationships,
            all_resources=all_resources,
            errors=errors,
        )

    async def get_overview(self, context: str | None = None) -> list[ResourceTypeHealthSummary]:
        """Per-type health counts of a cluster, cached per cluster."""
        key = CacheKey(self._cluster_key(context), OVERVIEW_KEY)
        cached = self._overview_cache.get(key)
        if cached is not None:
            self._log.debug("overview_cache_hit", cluster=key.cluster)
            return cached

        data = await self.get_inventory_data(context)
        summary = summarize_health(data.resource_map, data.errors)
        self._overview_cache.set(key, summary)
        return summary

    def invalidate(self, context: str | None = None) -> None:
        """Drop cached lists and overview of a cluster."""
        cluster = self._cluster_key(context)
        self._cache.invalidate(cluster)
        self._overview_cache.invalidate(cluster)

    # =========================================================================
    # Fetching
    # =========================================================================

    async def _fetch_slot(
        self,
        context: str | None,
        resource_type: str,
        namespace: str | None,
    ) -> tuple[list[FluxResource], str | None]:
        """Fetch one list, turning any failure into an error message."""
        try:
            return await self._list_resources(context, resource_type, namespace), None
        except Exception as e:
            error = self._translate_error(e, resource_type=resource_type, namespace=namespace)
            self._log.warning(
                "resource_fetch_failed",
                cluster=self._cluster_key(context),
                resource_type=resource_type,
                namespace=namespace,
                error=str(error),
            )
            return [], str(error)

    async def _list_resources(
        self,
        context: str | None,
        resource_type: str,
        namespace: str | None,
    ) -> list[FluxResource]:
        key = CacheKey(self._cluster_key(context), resource_type, namespace)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch(key, context))
            self._in_flight[key] = task
            task.add_done_callback(lambda done, key=key: self._forget(key, done))
        else:
            self._log.debug("joining_in_flight_fetch", resource_type=resource_type)

        # A cancelled caller must not cancel the fetch other callers share.
        return await asyncio.shield(task)

    def _forget(self, key: CacheKey, task: asyncio.Task[list[FluxResource]]) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]

    async def _fetch(self, key: CacheKey, context: str | None) -> list[FluxResource]:
        timeout = self.config.defaults.fetch_timeout
        try:
            response = await asyncio.wait_for(
                self._fetcher(key.resource_type, context, key.namespace),
                timeout=timeout,
            )
        except TimeoutError as e:
            raise KubernetesTimeoutError(
                message=f"Listing {key.resource_type} timed out",
                timeout_seconds=timeout,
            ) from e

        items = response.get("items") if isinstance(response, Mapping) else None
        if not isinstance(items, list):
            raise KubernetesError(
                message=f"Malformed {key.resource_type} list response: no items",
                resource_type=key.resource_type,
                namespace=key.namespace,
            )

        resources = self._parse_items(key.resource_type, items)
        self._cache.set(key, resources)
        return resources

    def _parse_items(self, resource_type: str, items: list[Any]) -> list[FluxResource]:
        resources: list[FluxResource] = []
        for index, item in enumerate(items):
            if not isinstance(item, dict):
                self._log.warning("skipping_invalid_item", resource_type=resource_type, index=index)
                continue
            try:
                resource = FluxResource.from_k8s_object(item, kind=resource_type)
            except ValueError as e:
                self._log.warning(
                    "skipping_invalid_item",
                    resource_type=resource_type,
                    index=index,
                    error=str(e),
                )
                continue
            if not resource.name:
                self._log.warning("skipping_unnamed_item", resource_type=resource_type, index=index)
                continue
            resources.append(resource)
        return resources


async def get_inventory_data(
    client: KubernetesClient,
    context: str | None = None,
    *,
    namespaces: Iterable[str] | None = None,
) -> InventoryData:
    """Aggregate one cluster's Flux resources with a fresh manager."""
    return await InventoryManager(client).get_inventory_data(context, namespaces=namespaces)
