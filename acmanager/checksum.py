"""Checksums that identify the type of a Kubernetes object."""

from __future__ import annotations

import base64
import hashlib
from typing import Any, Callable, Mapping

from acmanager.gvk import GroupVersionKind


class Calculator:
    """Hashes ``kind:group:version`` of an object with a fresh hasher each time."""

    def __init__(self, hasher_factory: Callable[[], Any]) -> None:
        self._hasher_factory = hasher_factory

    def calculate_sum(self, obj: Mapping[str, Any]) -> str:
        kind = obj.get("kind", "")
        if not isinstance(kind, str):
            kind = ""
        gvk = GroupVersionKind.from_object(obj)
        hasher = self._hasher_factory()
        hasher.update(f"{kind}:{gvk.group}:{gvk.version}".encode())
        return base64.urlsafe_b64encode(hasher.digest()).decode("ascii")


DEFAULT_CALCULATOR = Calculator(hashlib.sha256)


def calculate_sum(obj: Mapping[str, Any]) -> str:
    """Checksum of the object's type using SHA-256."""
    return DEFAULT_CALCULATOR.calculate_sum(obj)