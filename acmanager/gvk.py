"""Group, version and kind of Kubernetes objects."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


def _split_api_version(api_version: str) -> tuple[str, str] | None:
    if not api_version or api_version == "/":
        return "", ""
    parts = api_version.split("/")
    if len(parts) == 1:
        return "", api_version
    if len(parts) == 2:
        return parts[0], parts[1]
    return None


@dataclass(frozen=True)
class GroupVersionKind:
    group: str = ""
    version: str = ""
    kind: str = ""

    @classmethod
    def from_object(cls, obj: Mapping[str, Any]) -> GroupVersionKind:
        """Read the kind of an object; a malformed apiVersion yields an empty value."""
        api_version = obj.get("apiVersion", "")
        if not isinstance(api_version, str):
            api_version = ""
        split = _split_api_version(api_version)
        if split is None:
            return cls()
        kind = obj.get("kind", "")
        return cls(split[0], split[1], kind if isinstance(kind, str) else "")

    def api_version(self) -> str:
        if self.group:
            return f"{self.group}/{self.version}"
        return self.version

    def __str__(self) -> str:
        return f"{self.group}/{self.version}, Kind={self.kind}"


VIRTUAL_SERVICE = GroupVersionKind("networking.istio.io", "v1beta1", "VirtualService")
GATEWAY = GroupVersionKind("networking.istio.io", "v1beta1", "Gateway")
DEPENDENCIES = (VIRTUAL_SERVICE, GATEWAY)