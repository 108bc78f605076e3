"""Event filters deciding which object changes trigger a reconciliation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class ObjectEvent:
    """A create, delete or generic event carrying one object."""

    object: Mapping[str, Any] | None


@dataclass(frozen=True)
class UpdateEvent:
    """An update event carrying the previous and the current object."""

    object_old: Mapping[str, Any] | None
    object_new: Mapping[str, Any] | None


def _metadata(obj: Mapping[str, Any] | None) -> Mapping[str, Any]:
    if not isinstance(obj, Mapping):
        return {}
    meta = obj.get("metadata")
    return meta if isinstance(meta, Mapping) else {}


def _labels(obj: Mapping[str, Any] | None) -> dict[str, Any]:
    return dict(_metadata(obj).get("labels") or {})


def _annotations(obj: Mapping[str, Any] | None) -> dict[str, Any]:
    return dict(_metadata(obj).get("annotations") or {})


class Predicate:
    """Accepts every event; subclasses narrow that down."""

    def create(self, event: ObjectEvent) -> bool:
        return True

    def update(self, event: UpdateEvent) -> bool:
        return True

    def delete(self, event: ObjectEvent) -> bool:
        return True

    def generic(self, event: ObjectEvent) -> bool:
        return True


class ResourceVersionChangedPredicate(Predicate):
    """Passes updates only when the resource version moved."""

    def update(self, event: UpdateEvent) -> bool:
        if event.object_old is None or event.object_new is None:
            return False
        old_version = _metadata(event.object_old).get("resourceVersion", "")
        new_version = _metadata(event.object_new).get("resourceVersion", "")
        return old_version != new_version


class LabelSelectorPredicate(Predicate):
    """Passes events for objects carrying all of the given labels."""

    def __init__(self, match_labels: Mapping[str, str]) -> None:
        self.match_labels = dict(match_labels)

    def _matches(self, obj: Mapping[str, Any] | None) -> bool:
        labels = _labels(obj)
        return all(labels.get(key) == value for key, value in self.match_labels.items())

    def create(self, event: ObjectEvent) -> bool:
        return self._matches(event.object)

    def update(self, event: UpdateEvent) -> bool:
        return self._matches(event.object_new)

    def delete(self, event: ObjectEvent) -> bool:
        return self._matches(event.object)

    def generic(self, event: ObjectEvent) -> bool:
        return self._matches(event.object)


class AndPredicate(Predicate):
    """Passes an event only when every wrapped predicate passes it."""

    def __init__(self, *predicates: Predicate) -> None:
        self.predicates = predicates

    def create(self, event: ObjectEvent) -> bool:
        return all(p.create(event) for p in self.predicates)

    def update(self, event: UpdateEvent) -> bool:
        return all(p.update(event) for p in self.predicates)

    def delete(self, event: ObjectEvent) -> bool:
        return all(p.delete(event) for p in self.predicates)

    def generic(self, event: ObjectEvent) -> bool:
        return all(p.generic(event) for p in self.predicates)


class OrPredicate(Predicate):
    """Passes an event when any wrapped predicate passes it."""

    def __init__(self, *predicates: Predicate) -> None:
        self.predicates = predicates

    def create(self, event: ObjectEvent) -> bool:
        return any(p.create(event) for p in self.predicates)

    def update(self, event: UpdateEvent) -> bool:
        return any(p.update(event) for p in self.predicates)

    def delete(self, event: ObjectEvent) -> bool:
        return any(p.delete(event) for p in self.predicates)

    def generic(self, event: ObjectEvent) -> bool:
        return any(p.generic(event) for p in self.predicates)


class LabelChangedPredicate(Predicate):
    """Passes updates that change the labels."""

    def update(self, event: UpdateEvent) -> bool:
        if event.object_old is None or event.object_new is None:
            return False
        return _labels(event.object_old) != _labels(event.object_new)


class AnnotationChangedPredicate(Predicate):
    """Passes updates that change the annotations."""

    def update(self, event: UpdateEvent) -> bool:
        if event.object_old is None or event.object_new is None:
            return False
        return _annotations(event.object_old) != _annotations(event.object_new)


class GenerationChangedPredicate(Predicate):
    """Passes updates that change the generation."""

    def update(self, event: UpdateEvent) -> bool:
        if event.object_old is None or event.object_new is None:
            return False
        return _metadata(event.object_old).get("generation") != _metadata(
            event.object_new
        ).get("generation")


@dataclass(frozen=True)
class _Typed:
    metadata: Mapping[str, Any]
    spec: Any
    status: Any


def _convert(obj: Any) -> _Typed:
    if not isinstance(obj, Mapping):
        raise TypeError(f"expected a mapping, got {type(obj).__name__}")
    parts = {}
    for key in ("metadata", "spec", "status"):
        value = obj.get(key)
        if value is None:
            value = {}
        if not isinstance(value, Mapping):
            raise TypeError(f"field {key!r} is not an object")
        parts[key] = value
    return _Typed(parts["metadata"], dict(parts["spec"]), dict(parts["status"]))


class _SpecStatusPredicate(ResourceVersionChangedPredicate):
    """Passes updates that touch status, spec, labels, annotations or namespace."""

    description = "object"

    def __init__(self, log: logging.Logger | None = None) -> None:
        self.log = log or _LOG

    def update(self, event: UpdateEvent) -> bool:
        try:
            old = _convert(event.object_old)
        except TypeError as exc:
            self.log.warning("unable to convert old %s: %s", self.description, exc)
            return True
        try:
            new = _convert(event.object_new)
        except TypeError as exc:
            self.log.warning("unable to convert new %s: %s", self.description, exc)
            return True

        return (
            old.status != new.status
            or old.spec != new.spec
            or dict(old.metadata.get("labels") or {}) != dict(new.metadata.get("labels") or {})
            or dict(old.metadata.get("annotations") or {})
            != dict(new.metadata.get("annotations") or {})
            or old.metadata.get("namespace", "") != new.metadata.get("namespace", "")
        )


class DeploymentPredicate(_SpecStatusPredicate):
    description = "deployment"


class GatewayPredicate(_SpecStatusPredicate):
    description = "gateway"


class VirtualServicePredicate(_SpecStatusPredicate):
    description = "virtual service"


class HpaPredicate(ResourceVersionChangedPredicate):
    """Passes HPA updates whose conditions or current replica count changed."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self.log = log or _LOG

    def update(self, event: UpdateEvent) -> bool:
        if not super().update(event):
            return False
        try:
            old = _convert(event.object_old)
            new = _convert(event.object_new)
        except TypeError:
            return True

        conditions_equal = list(old.status.get("conditions") or []) == list(
            new.status.get("conditions") or []
        )
        replicas_equal = old.status.get("currentReplicas", 0) == new.status.get(
            "currentReplicas", 0
        )
        result = not conditions_equal or not replicas_equal
        if result:
            self.log.debug(
                "reconciliation triggered by HPA: %s/%s (conditionsEqual=%s, replicasEqual=%s)",
                old.metadata.get("namespace", ""),
                old.metadata.get("name", ""),
                conditions_equal,
                replicas_equal,
            )
        return result


class CompassRuntimeAgentSecretPredicate(ResourceVersionChangedPredicate):
    """Passes only creation and deletion of the runtime agent configuration secret."""

    def __init__(
        self,
        object_name: str = "compass-agent-configuration",
        namespace: str = "kyma-system",
        log: logging.Logger | None = None,
    ) -> None:
        self.object_name = object_name
        self.namespace = namespace
        self.log = log or _LOG

    def _is_target(self, obj: Mapping[str, Any] | None) -> bool:
        meta = _metadata(obj)
        return meta.get("namespace", "") == self.namespace and meta.get("name", "") == self.object_name

    def _ignore(self, kind: str, obj: Mapping[str, Any] | None) -> bool:
        meta = _metadata(obj)
        self.log.debug(
            "ignoring %s event for secret %s/%s",
            kind,
            meta.get("namespace", ""),
            meta.get("name", ""),
        )
        return False

    def update(self, event: UpdateEvent) -> bool:
        return self._ignore("update", event.object_new)

    def delete(self, event: ObjectEvent) -> bool:
        return self._is_target(event.object) and super().delete(event)

    def create(self, event: ObjectEvent) -> bool:
        return self._is_target(event.object) and super().create(event)

    def generic(self, event: ObjectEvent) -> bool:
        return self._ignore("generic", event.object)