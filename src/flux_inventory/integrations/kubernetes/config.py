"""Kubernetes integration configuration models."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, field_validator

from flux_inventory.integrations.kubernetes.flux_resources import (
    FLUX_RESOURCES,
    INVENTORY_RESOURCE_TYPES,
)

ENV_PREFIX = "FLUXINV_K8S_"


class ClusterConfig(BaseModel):
    """Configuration for a single Kubernetes cluster."""

    model_config = ConfigDict(extra="forbid")

    context: str = ""
    kubeconfig: str = "~/.kube/config"
    timeout: int = 300

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        """Validate timeout is positive."""
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    @field_validator("kubeconfig")
    @classmethod
    def validate_kubeconfig(cls, v: str) -> str:
        """Expand ~ in kubeconfig path."""
        return str(Path(v).expanduser())


class KubernetesDefaultsConfig(BaseModel):
    """Default settings for Kubernetes operations."""

    model_config = ConfigDict(extra="forbid")

    timeout: int = 300
    retry_attempts: int = 3
    fetch_timeout: float = 30.0
    cache_ttl: float = 5.0
    overview_cache_ttl: float = 30.0

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        """Validate timeout is positive."""
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    @field_validator("retry_attempts")
    @classmethod
    def validate_retry_attempts(cls, v: int) -> int:
        """Validate retry_attempts is at least one attempt."""
        if v < 1:
            raise ValueError("retry_attempts must be at least 1")
        return v

    @field_validator("fetch_timeout")
    @classmethod
    def validate_fetch_timeout(cls, v: float) -> float:
        """Validate fetch_timeout is positive."""
        if v <= 0:
            raise ValueError("fetch_timeout must be positive")
        return v

    @field_validator("cache_ttl", "overview_cache_ttl")
    @classmethod
    def validate_ttl(cls, v: float) -> float:
        """Validate cache TTLs are non-negative (0 disables caching)."""
        if v < 0:
            raise ValueError("cache TTL must be non-negative")
        return v


class KubernetesPluginConfig(BaseModel):
    """Complete Kubernetes configuration for inventory aggregation."""

    model_config = ConfigDict(extra="forbid")

    clusters: dict[str, ClusterConfig] = {}
    active_cluster: str | None = None
    defaults: KubernetesDefaultsConfig = KubernetesDefaultsConfig()
    resource_types: list[str] = list(INVENTORY_RESOURCE_TYPES)

    @field_validator("resource_types")
    @classmethod
    def validate_resource_types(cls, v: list[str]) -> list[str]:
        """Validate every resource type is a known Flux kind."""
        unknown = [t for t in v if t not in FLUX_RESOURCES]
        if unknown:
            raise ValueError(f"unknown Flux resource types: {', '.join(unknown)}")
        return v

    @classmethod
    def from_file(cls, path: str | Path) -> KubernetesPluginConfig:
        """Load configuration from a YAML file, then apply environment overrides.

        A missing file is treated as an empty configuration.
        """
        config_path = Path(path).expanduser()
        data: dict[str, Any] = {}
        if config_path.exists():
            loaded = yaml.safe_load(config_path.read_text())
            if loaded is not None and not isinstance(loaded, dict):
                raise ValueError(f"{config_path}: top level must be a mapping")
            data = loaded or {}
        return cls.from_env(data)

    @classmethod
    def from_env(cls, base_config: dict[str, Any] | None = None) -> KubernetesPluginConfig:
        """Create configuration with environment variable overrides.

        Environment variables take precedence over base_config values.

        Supported environment variables:
            FLUXINV_K8S_CONTEXT: Override active cluster / context
            FLUXINV_K8S_KUBECONFIG: Override kubeconfig path
            FLUXINV_K8S_TIMEOUT: Default timeout in seconds
            FLUXINV_K8S_FETCH_TIMEOUT: Per resource type fetch timeout in seconds
            FLUXINV_K8S_CACHE_TTL: Resource list cache TTL in seconds
        """
        config_dict = base_config.copy() if base_config else {}
        config_dict["defaults"] = dict(config_dict.get("defaults") or {})
        config_dict.setdefault("clusters", {})

        if context := os.environ.get(f"{ENV_PREFIX}CONTEXT"):
            config_dict["active_cluster"] = context

        if timeout := os.environ.get(f"{ENV_PREFIX}TIMEOUT"):
            config_dict["defaults"]["timeout"] = int(timeout)

        if fetch_timeout := os.environ.get(f"{ENV_PREFIX}FETCH_TIMEOUT"):
            config_dict["defaults"]["fetch_timeout"] = float(fetch_timeout)

        if cache_ttl := os.environ.get(f"{ENV_PREFIX}CACHE_TTL"):
            config_dict["defaults"]["cache_ttl"] = float(cache_ttl)

        instance = cls.model_validate(config_dict)

        if kubeconfig := os.environ.get(f"{ENV_PREFIX}KUBECONFIG"):
            for cluster_cfg in instance.clusters.values():
                cluster_cfg.kubeconfig = str(Path(kubeconfig).expanduser())

        return instance

    def get_active_context(self) -> str | None:
        """Get the active cluster context name.

        Returns the active_cluster if set, or the context from the first
        configured cluster, or None if no clusters are configured.
        """
        if self.active_cluster:
            if cluster := self.clusters.get(self.active_cluster):
                return cluster.context
            return self.active_cluster
        if self.clusters:
            first = next(iter(self.clusters.values()))
            return first.context
        return None

    def get_active_timeout(self) -> int:
        """Get the timeout for the active cluster."""
        if self.active_cluster and self.active_cluster in self.clusters:
            return self.clusters[self.active_cluster].timeout
        return self.defaults.timeout
