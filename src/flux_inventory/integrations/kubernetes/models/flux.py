"""Flux CD resource models.

Flux CRDs are accessed via ``CustomObjectsApi`` which returns raw
``dict`` objects rather than typed SDK classes. ``FluxResource`` is a
generic envelope over those dicts; ``from_k8s_object`` uses ``dict.get()``
and tolerates missing or wrongly typed sub-objects.

The shape of ``spec`` depends on the kind. ``FluxResource.spec_view()``
builds the typed view registered for the kind in ``SPEC_VIEWS``.
"""

from __future__ import annotations

from typing import Any, ClassVar

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from flux_inventory.integrations.kubernetes.models.base import (
    K8sEntityBase,
    as_dict,
    as_list,
    string_map,
)
from flux_inventory.integrations.kubernetes.models.inventory import InventoryEntry
from flux_inventory.integrations.kubernetes.models.relationships import (
    ResourceRef,
    resource_key,
)

logger = structlog.get_logger()


class FluxCondition(BaseModel):
    """Flux status condition from ``.status.conditions[]``."""

    model_config = ConfigDict(extra="ignore")

    type: str = Field(default="", description="Condition type (Ready, Reconciling, Stalled, etc.)")
    status: str = Field(default="Unknown", description="Condition status (True, False, Unknown)")
    reason: str = Field(default="", description="Machine-readable reason")
    message: str | None = Field(default=None, description="Human-readable message")
    last_transition_time: str | None = Field(default=None, description="Last transition timestamp")

    @classmethod
    def from_k8s_object(cls, obj: dict[str, Any]) -> FluxCondition:
        """Create from a condition dict."""
        message = obj.get("message")
        transition = obj.get("lastTransitionTime")
        # Only the literal strings True and False carry meaning
        status = obj.get("status")
        return cls(
            type=str(obj.get("type", "")),
            status=status if isinstance(status, str) else "Unknown",
            reason=str(obj.get("reason") or ""),
            message=str(message) if message is not None else None,
            last_transition_time=str(transition) if transition is not None else None,
        )


class FluxArtifact(BaseModel):
    """Source artifact from ``.status.artifact``."""

    model_config = ConfigDict(extra="ignore")

    path: str = ""
    url: str = ""
    revision: str = ""
    digest: str | None = None
    last_update_time: str | None = None


class FluxResourceStatus(BaseModel):
    """Common fields of a Flux ``.status``."""

    model_config = ConfigDict(extra="ignore")

    conditions: list[FluxCondition] = Field(default_factory=list)
    observed_generation: int | None = None
    last_applied_revision: str | None = None
    last_attempted_revision: str | None = None
    artifact: FluxArtifact | None = None
    inventory: list[InventoryEntry] = Field(
        default_factory=list, description="Objects applied by the resource"
    )

    @classmethod
    def from_k8s_object(cls, obj: Any) -> FluxResourceStatus:
        """Create from a ``.status`` dict; anything else yields an empty status."""
        status = as_dict(obj)
        artifact = as_dict(status.get("artifact"))
        entries = as_list(as_dict(status.get("inventory")).get("entries"))
        observed = status.get("observedGeneration")

        return cls(
            conditions=[
                FluxCondition.from_k8s_object(c)
                for c in as_list(status.get("conditions"))
                if isinstance(c, dict)
            ],
            observed_generation=observed if isinstance(observed, int) else None,
            last_applied_revision=status.get("lastAppliedRevision"),
            last_attempted_revision=status.get("lastAttemptedRevision"),
            artifact=(
                FluxArtifact(
                    path=artifact.get("path", ""),
                    url=artifact.get("url", ""),
                    revision=artifact.get("revision", ""),
                    digest=artifact.get("digest") or artifact.get("checksum"),
                    last_update_time=artifact.get("lastUpdateTime"),
                )
                if artifact
                else None
            ),
            inventory=[
                InventoryEntry(id=str(e.get("id", "")), v=str(e.get("v", "")))
                for e in entries
                if isinstance(e, dict)
            ],
        )


# =============================================================================
# Spec views
# =============================================================================

_VIEW_CONFIG = ConfigDict(extra="ignore", populate_by_name=True, alias_generator=to_camel)


class CrossNamespaceSourceReference(BaseModel):
    """``sourceRef``/``chartRef``: a source object, optionally in another namespace."""

    model_config = _VIEW_CONFIG

    api_version: str | None = None
    kind: str = ""
    name: str = ""
    namespace: str | None = None


class NamespacedObjectReference(BaseModel):
    """``dependsOn[]`` / ``imageRepositoryRef`` entry."""

    model_config = _VIEW_CONFIG

    name: str = ""
    namespace: str | None = None


class LocalObjectReference(BaseModel):
    """Reference to an object in the same namespace."""

    model_config = _VIEW_CONFIG

    name: str = ""


class CrossNamespaceObjectReference(BaseModel):
    """``eventSources[]`` / ``resources[]`` entry; name may be ``*`` with labels."""

    model_config = _VIEW_CONFIG

    api_version: str | None = None
    kind: str = ""
    name: str = ""
    namespace: str | None = None
    match_labels: dict[str, str] | None = None


class FluxSpec(BaseModel):
    """Fields every Flux spec shares."""

    model_config = _VIEW_CONFIG

    kind: ClassVar[str] = ""

    suspend: bool = False
    interval: str | None = None


class SourceSpec(FluxSpec):
    """Spec of kinds without outgoing references (sources, providers)."""

    url: str | None = None


class KustomizationSpec(FluxSpec):
    kind: ClassVar[str] = "Kustomization"

    source_ref: CrossNamespaceSourceReference | None = None
    depends_on: list[NamespacedObjectReference] = Field(default_factory=list)
    path: str | None = None
    prune: bool = False
    target_namespace: str | None = None


class HelmChartTemplateSpec(BaseModel):
    model_config = _VIEW_CONFIG

    chart: str = ""
    version: str | None = None
    source_ref: CrossNamespaceSourceReference | None = None


class HelmChartTemplate(BaseModel):
    model_config = _VIEW_CONFIG

    spec: HelmChartTemplateSpec | None = None


class HelmReleaseSpec(FluxSpec):
    kind: ClassVar[str] = "HelmRelease"

    chart: HelmChartTemplate | None = None
    chart_ref: CrossNamespaceSourceReference | None = None
    depends_on: list[NamespacedObjectReference] = Field(default_factory=list)
    release_name: str | None = None
    target_namespace: str | None = None


class AlertSpec(FluxSpec):
    kind: ClassVar[str] = "Alert"

    provider_ref: LocalObjectReference | None = None
    event_sources: list[CrossNamespaceObjectReference] = Field(default_factory=list)
    event_severity: str | None = None


class ReceiverSpec(FluxSpec):
    kind: ClassVar[str] = "Receiver"

    type: str | None = None
    resources: list[CrossNamespaceObjectReference] = Field(default_factory=list)


class ImagePolicySpec(FluxSpec):
    kind: ClassVar[str] = "ImagePolicy"

    image_repository_ref: NamespacedObjectReference | None = None


class ImageUpdateAutomationSpec(FluxSpec):
    kind: ClassVar[str] = "ImageUpdateAutomation"

    source_ref: CrossNamespaceSourceReference | None = None


FluxSpecView = (
    SourceSpec
    | KustomizationSpec
    | HelmReleaseSpec
    | AlertSpec
    | ReceiverSpec
    | ImagePolicySpec
    | ImageUpdateAutomationSpec
)

SPEC_VIEWS: dict[str, type[FluxSpec]] = {
    "GitRepository": SourceSpec,
    "HelmRepository": SourceSpec,
    "HelmChart": SourceSpec,
    "Bucket": SourceSpec,
    "OCIRepository": SourceSpec,
    "Provider": SourceSpec,
    "ImageRepository": SourceSpec,
    "Kustomization": KustomizationSpec,
    "HelmRelease": HelmReleaseSpec,
    "Alert": AlertSpec,
    "Receiver": ReceiverSpec,
    "ImagePolicy": ImagePolicySpec,
    "ImageUpdateAutomation": ImageUpdateAutomationSpec,
}


def build_spec_view(kind: str, spec: dict[str, Any]) -> FluxSpec:
    """Build the typed spec view for a kind.

    Unknown kinds and specs that fail validation yield an empty
    ``SourceSpec``, which carries no references.
    """
    view_cls = SPEC_VIEWS.get(kind, SourceSpec)
    try:
        return view_cls.model_validate(spec)
    except ValidationError as e:
        logger.debug("spec_view_invalid", kind=kind, errors=e.error_count())
        return SourceSpec()


# =============================================================================
# Envelope
# =============================================================================


class FluxResource(K8sEntityBase):
    """Generic Flux custom resource snapshot."""

    _entity_name: ClassVar[str] = "flux_resource"

    kind: str = Field(default="", description="Resource kind")
    api_version: str | None = Field(default=None, description="API version")
    generation: int | None = Field(default=None, description="metadata.generation")
    spec: dict[str, Any] = Field(default_factory=dict, description="Raw spec")
    status: FluxResourceStatus = Field(default_factory=FluxResourceStatus, description="Status")

    @classmethod
    def from_k8s_object(cls, obj: dict[str, Any], kind: str | None = None) -> FluxResource:
        """Create from a Flux CRD dict.

        Args:
            obj: Raw object as returned by ``CustomObjectsApi``.
            kind: Kind to use when the object omits it (list items usually
                carry their own ``kind``).
        """
        metadata = as_dict(obj.get("metadata"))
        generation = metadata.get("generation")

        return cls(
            name=metadata.get("name") or "",
            namespace=metadata.get("namespace") or None,
            uid=metadata.get("uid"),
            creation_timestamp=metadata.get("creationTimestamp"),
            labels=string_map(metadata.get("labels")),
            annotations=string_map(metadata.get("annotations")),
            kind=obj.get("kind") or kind or "",
            api_version=obj.get("apiVersion"),
            generation=generation if isinstance(generation, int) else None,
            spec=as_dict(obj.get("spec")),
            status=FluxResourceStatus.from_k8s_object(obj.get("status")),
        )

    @property
    def ref(self) -> ResourceRef:
        """Reference to this resource."""
        return ResourceRef(
            kind=self.kind,
            name=self.name,
            namespace=self.namespace,
            api_version=self.api_version,
        )

    @property
    def key(self) -> str:
        """Composite identity key ``Kind/namespace/name``."""
        return resource_key(self.kind, self.namespace, self.name)

    @property
    def suspended(self) -> bool:
        """Whether ``spec.suspend`` is literally true."""
        return self.spec.get("suspend") is True

    def get_condition(self, condition_type: str) -> FluxCondition | None:
        """Return the first condition of the given type."""
        for condition in self.status.conditions:
            if condition.type == condition_type:
                return condition
        return None

    def spec_view(self) -> FluxSpec:
        """Typed view of ``spec`` for this resource's kind."""
        return build_spec_view(self.kind, self.spec)
