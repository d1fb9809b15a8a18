"""Flux CD custom resource definitions.

CRD coordinates for every Flux resource type the client knows how to list,
grouped by the controller that owns them.
"""

from __future__ import annotations

from typing import NamedTuple


class FluxResourceDef(NamedTuple):
    """API coordinates of a Flux custom resource."""

    group: str
    version: str
    plural: str
    kind: str
    controller: str
    namespaced: bool = True

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}"


SOURCE_GROUP = "source.toolkit.fluxcd.io"
KUSTOMIZE_GROUP = "kustomize.toolkit.fluxcd.io"
HELM_GROUP = "helm.toolkit.fluxcd.io"
NOTIFICATION_GROUP = "notification.toolkit.fluxcd.io"
IMAGE_GROUP = "image.toolkit.fluxcd.io"

FLUX_RESOURCES: dict[str, FluxResourceDef] = {
    # source-controller
    "GitRepository": FluxResourceDef(
        SOURCE_GROUP, "v1", "gitrepositories", "GitRepository", "source-controller"
    ),
    "HelmRepository": FluxResourceDef(
        SOURCE_GROUP, "v1", "helmrepositories", "HelmRepository", "source-controller"
    ),
    "HelmChart": FluxResourceDef(
        SOURCE_GROUP, "v1", "helmcharts", "HelmChart", "source-controller"
    ),
    "Bucket": FluxResourceDef(SOURCE_GROUP, "v1", "buckets", "Bucket", "source-controller"),
    "OCIRepository": FluxResourceDef(
        SOURCE_GROUP, "v1beta2", "ocirepositories", "OCIRepository", "source-controller"
    ),
    # kustomize-controller
    "Kustomization": FluxResourceDef(
        KUSTOMIZE_GROUP, "v1", "kustomizations", "Kustomization", "kustomize-controller"
    ),
    # helm-controller
    "HelmRelease": FluxResourceDef(
        HELM_GROUP, "v2", "helmreleases", "HelmRelease", "helm-controller"
    ),
    # notification-controller
    "Alert": FluxResourceDef(
        NOTIFICATION_GROUP, "v1beta3", "alerts", "Alert", "notification-controller"
    ),
    "Provider": FluxResourceDef(
        NOTIFICATION_GROUP, "v1beta3", "providers", "Provider", "notification-controller"
    ),
    "Receiver": FluxResourceDef(
        NOTIFICATION_GROUP, "v1", "receivers", "Receiver", "notification-controller"
    ),
    # image-reflector-controller / image-automation-controller
    "ImageRepository": FluxResourceDef(
        IMAGE_GROUP, "v1beta2", "imagerepositories", "ImageRepository", "image-reflector-controller"
    ),
    "ImagePolicy": FluxResourceDef(
        IMAGE_GROUP, "v1beta2", "imagepolicies", "ImagePolicy", "image-reflector-controller"
    ),
    "ImageUpdateAutomation": FluxResourceDef(
        IMAGE_GROUP,
        "v1beta2",
        "imageupdateautomations",
        "ImageUpdateAutomation",
        "image-automation-controller",
    ),
}

# Types fetched for an inventory aggregation, in result order.
INVENTORY_RESOURCE_TYPES: tuple[str, ...] = (
    "Kustomization",
    "HelmRelease",
    "GitRepository",
    "HelmRepository",
    "OCIRepository",
    "Bucket",
    "Alert",
    "Provider",
    "Receiver",
    "ImagePolicy",
    "ImageRepository",
    "ImageUpdateAutomation",
)


def get_resource_def(resource_type: str) -> FluxResourceDef | None:
    """Look up a resource definition by kind."""
    return FLUX_RESOURCES.get(resource_type)
