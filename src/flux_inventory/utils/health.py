"""Health classification for Flux resources."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from flux_inventory.integrations.kubernetes.models.base import as_dict, as_list
from flux_inventory.integrations.kubernetes.models.flux import FluxCondition, FluxResource
from flux_inventory.integrations.kubernetes.models.health import (
    HealthStatus,
    ResourceStatus,
    ResourceTypeHealthSummary,
)

PROGRESSING_REASONS = frozenset({"Progressing", "ProgressingWithRetry"})


def _conditions_of(resource: FluxResource | Mapping[str, Any]) -> list[FluxCondition]:
    if isinstance(resource, FluxResource):
        return resource.status.conditions
    status = as_dict(resource.get("status"))
    return [
        FluxCondition.from_k8s_object(c)
        for c in as_list(status.get("conditions"))
        if isinstance(c, dict)
    ]


def _is_suspended(resource: FluxResource | Mapping[str, Any]) -> bool:
    if isinstance(resource, FluxResource):
        return resource.suspended
    return as_dict(resource.get("spec")).get("suspend") is True


def _find(conditions: Iterable[FluxCondition], condition_type: str) -> FluxCondition | None:
    return next((c for c in conditions if c.type == condition_type), None)


def get_resource_status(resource: FluxResource | Mapping[str, Any] | None) -> ResourceStatus:
    """Classify a resource by its Ready condition.

    Suspension wins over any condition state. Without a Ready condition the
    status is unknown, as it is for any Ready status other than True/False.
    Never raises; missing or malformed ``spec``/``status`` yield unknown.
    """
    if not isinstance(resource, FluxResource | Mapping):
        return ResourceStatus.UNKNOWN

    if _is_suspended(resource):
        return ResourceStatus.SUSPENDED

    ready = _find(_conditions_of(resource), "Ready")
    if ready is None:
        return ResourceStatus.UNKNOWN
    if ready.status == "True":
        return ResourceStatus.READY
    if ready.status == "False":
        return ResourceStatus.FAILED
    return ResourceStatus.UNKNOWN


def get_resource_health(
    conditions: Iterable[FluxCondition] | None,
    suspended: bool = False,
) -> HealthStatus:
    """Finer-grained health used by dashboards.

    Unlike ``get_resource_status`` this separates resources that are still
    reconciling from those that failed.
    """
    if suspended:
        return HealthStatus.SUSPENDED

    conditions = list(conditions or ())
    if not conditions:
        return HealthStatus.UNKNOWN

    ready = _find(conditions, "Ready")
    if ready is not None:
        if ready.status == "True":
            return HealthStatus.HEALTHY
        if ready.status == "False":
            if ready.reason in PROGRESSING_REASONS:
                return HealthStatus.PROGRESSING
            return HealthStatus.FAILED
        if ready.status == "Unknown":
            return HealthStatus.PROGRESSING

    reconciling = _find(conditions, "Reconciling")
    if reconciling is not None and reconciling.status == "True":
        return HealthStatus.PROGRESSING

    stalled = _find(conditions, "Stalled")
    if stalled is not None and stalled.status == "True":
        return HealthStatus.FAILED

    return HealthStatus.UNKNOWN


def build_health_map(resources: Iterable[FluxResource]) -> dict[str, ResourceStatus]:
    """Map resource keys to their status."""
    return {resource.key: get_resource_status(resource) for resource in resources}


def summarize_health(
    resource_map: Mapping[str, Iterable[FluxResource]],
    errors: Mapping[str, str] | None = None,
) -> list[ResourceTypeHealthSummary]:
    """Per-type health counts, in ``resource_map`` order.

    Args:
        resource_map: Kind -> fetched resources.
        errors: Kind -> fetch error message for types that failed to list.
    """
    errors = errors or {}
    summaries: list[ResourceTypeHealthSummary] = []
    for kind, resources in resource_map.items():
        summary = ResourceTypeHealthSummary(type=kind, error=kind in errors)
        for resource in resources:
            summary.total += 1
            match get_resource_status(resource):
                case ResourceStatus.SUSPENDED:
                    summary.suspended += 1
                case ResourceStatus.READY:
                    summary.healthy += 1
                case ResourceStatus.FAILED:
                    summary.failed += 1
        summaries.append(summary)
    return summaries
