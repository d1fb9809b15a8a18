"""Unit tests for base model helpers."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from flux_inventory.integrations.kubernetes.models.base import (
    K8sEntityBase,
    as_dict,
    as_list,
    string_map,
)


def _timestamp(delta: timedelta) -> str:
    return (datetime.now(UTC) - delta).strftime("%Y-%m-%dT%H:%M:%SZ")


@pytest.mark.unit
@pytest.mark.kubernetes
class TestK8sEntityBase:
    """Tests for K8sEntityBase."""

    @pytest.mark.parametrize(
        ("delta", "expected"),
        [
            (timedelta(days=3, hours=2), "3d"),
            (timedelta(hours=5, minutes=1), "5h"),
            (timedelta(minutes=7, seconds=5), "7m"),
        ],
    )
    def test_age(self, delta: timedelta, expected: str) -> None:
        entity = K8sEntityBase(name="x", creation_timestamp=_timestamp(delta))
        assert entity.age == expected

    @pytest.mark.parametrize("timestamp", [None, "", "yesterday"])
    def test_age_unknown(self, timestamp: str | None) -> None:
        assert K8sEntityBase(name="x", creation_timestamp=timestamp).age == "Unknown"

    def test_strips_whitespace(self) -> None:
        assert K8sEntityBase(name="  apps ").name == "apps"


@pytest.mark.unit
@pytest.mark.kubernetes
class TestCoercionHelpers:
    """Tests for the tolerant dict/list accessors."""

    def test_as_dict(self) -> None:
        assert as_dict({"a": 1}) == {"a": 1}
        assert as_dict(["a"]) == {}
        assert as_dict(None) == {}

    def test_as_list(self) -> None:
        assert as_list([1]) == [1]
        assert as_list("abc") == []
        assert as_list(None) == []

    def test_string_map(self) -> None:
        assert string_map({"app": "web", "replicas": 3}) == {"app": "web", "replicas": "3"}
        assert string_map({}) is None
        assert string_map("app=web") is None
