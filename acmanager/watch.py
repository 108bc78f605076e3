"""Choosing watched object types and mapping their events to reconcile requests."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

from acmanager.api import ApplicationConnector
from acmanager.checksum import calculate_sum
from acmanager.gvk import GroupVersionKind
from acmanager.predicates import (
    AndPredicate,
    AnnotationChangedPredicate,
    DeploymentPredicate,
    GenerationChangedPredicate,
    HpaPredicate,
    LabelChangedPredicate,
    LabelSelectorPredicate,
    OrPredicate,
    Predicate,
    ResourceVersionChangedPredicate,
)

_LOG = logging.getLogger(__name__)

PART_OF_LABEL = "app.kubernetes.io/part-of"
PART_OF_VALUE = "application-connector-manager"

HPA_GVK = GroupVersionKind("autoscaling", "v2", "HorizontalPodAutoscaler")
DEPLOYMENT_GVK = GroupVersionKind("apps", "v1", "Deployment")


@dataclass(frozen=True)
class Request:
    """Identifies the ApplicationConnector instance to reconcile."""

    namespace: str
    name: str


def register_watch_distinct(
    objs: Iterable[Mapping[str, Any]],
    register_watch: Callable[[Mapping[str, Any]], None],
) -> None:
    """Call ``register_watch`` once for each distinct object type, in order."""
    visited: set[str] = set()
    for obj in objs:
        digest = calculate_sum(obj)
        if digest in visited:
            continue
        register_watch(obj)
        visited.add(digest)


def map_to_requests(connectors: Iterable[ApplicationConnector]) -> list[Request]:
    """Map a change to a request for the first instance, unless it is being deleted."""
    first = next(iter(connectors), None)
    if first is None or first.being_deleted:
        return []
    return [Request(namespace=first.namespace, name=first.name)]


def predicate_for(obj: Mapping[str, Any], log: logging.Logger | None = None) -> Predicate:
    """Build the event filter used when watching objects of this object's type."""
    log = log or _LOG
    gvk = GroupVersionKind.from_object(obj)
    object_predicate: Predicate
    if gvk == HPA_GVK:
        object_predicate = HpaPredicate(log)
    elif gvk == DEPLOYMENT_GVK:
        object_predicate = DeploymentPredicate(log)
    else:
        object_predicate = ResourceVersionChangedPredicate()
    log.info("adding watcher: gvk=%s", gvk)
    return AndPredicate(
        LabelSelectorPredicate({PART_OF_LABEL: PART_OF_VALUE}),
        object_predicate,
    )


def status_change_filter() -> Predicate:
    """Filter for the instance itself that ignores status-only changes."""
    return OrPredicate(
        LabelChangedPredicate(),
        AnnotationChangedPredicate(),
        GenerationChangedPredicate(),
    )