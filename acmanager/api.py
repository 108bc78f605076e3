"""Schema of the ApplicationConnector custom resource and its status helpers."""

from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Protocol, runtime_checkable

GROUP = "operator.kyma-project.io"
VERSION = "v1alpha1"
API_VERSION = f"{GROUP}/{VERSION}"
KIND = "ApplicationConnector"

SERVED_TRUE = "True"
SERVED_FALSE = "False"

FINALIZER = "application-connector-manager.kyma-project.io/deletion-hook"

ARG_LOG_LEVEL = "--logLevel"
ARG_CENTRAL_APP_GATEWAY_REQUEST_TIMEOUT = "--requestTimeout"
ARG_CENTRAL_APP_GATEWAY_PROXY_TIMEOUT = "--proxyTimeout"

ENV_RUNTIME_AGENT_CONTROLLER_SYNC_PERIOD = "APP_CONTROLLER_SYNC_PERIOD"
ENV_RUNTIME_AGENT_APP_RUNTIME_EVENTS_URL = "APP_RUNTIME_EVENTS_URL"
ENV_RUNTIME_AGENT_APP_RUNTIME_CONSOLE_URL = "APP_RUNTIME_CONSOLE_URL"
ENV_RUNTIME_AGENT_CERT_VALIDITY_RENEWAL_THRESHOLD = "APP_CERT_VALIDITY_RENEWAL_THRESHOLD"
ENV_RUNTIME_AGENT_MINIMAL_COMPASS_SYNC_TIME = "APP_MINIMAL_COMPASS_SYNC_TIME"

ENV_APP_CONN_VALIDATOR_LOG_FORMAT = "APP_LOG_FORMAT"
ENV_APP_CONN_VALIDATOR_LOG_LEVEL = "APP_LOG_LEVEL"

_TIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class State(str, Enum):
    """Lifecycle state reported in the resource status."""

    READY = "Ready"
    PROCESSING = "Processing"
    ERROR = "Error"
    DELETING = "Deleting"


class ConditionReason(str, Enum):
    VERIFICATION_ERR = "VerificationErr"
    VERIFIED = "Verified"
    APPLY_OBJ_ERROR = "ApplyObjError"
    VERIFICATION = "Verification"
    INITIALIZED = "Initialized"
    DELETION = "Deletion"
    DELETION_ERR = "DeletionErr"
    DELETED = "Deleted"


class ConditionType(str, Enum):
    INSTALLED = "Installed"
    DELETED = "Deleted"


class LogLevel(str, Enum):
    PANIC = "panic"
    FATAL = "fatal"
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"


class LogFormat(str, Enum):
    JSON = "json"
    TEXT = "text"


@runtime_checkable
class MatchStringer(Protocol):
    """Something that describes itself and recognises a command argument."""

    def __str__(self) -> str:
        """Return a human readable description."""

    def match(self, arg: str) -> bool:
        """Tell whether the argument is the one this object handles."""


@runtime_checkable
class ArgUpdater(Protocol):
    """Something that rewrites a command argument."""

    def update_arg(self, arg: str) -> str:
        """Return the updated argument."""


# --- durations -------------------------------------------------------------

_UNIT_NS = {
    "ns": Decimal(1),
    "us": Decimal(1_000),
    "µs": Decimal(1_000),
    "μs": Decimal(1_000),
    "ms": Decimal(1_000_000),
    "s": Decimal(1_000_000_000),
    "m": Decimal(60_000_000_000),
    "h": Decimal(3_600_000_000_000),
}
_COMPONENT = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")
_MAX_NS = 2**63 - 1


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as ``10s``, ``1m30s`` or ``-1.5h``."""
    rest = text
    sign = 1
    if rest and rest[0] in "+-":
        sign = -1 if rest[0] == "-" else 1
        rest = rest[1:]
    if rest == "0":
        return timedelta(0)
    if not rest:
        raise ValueError(f"time: invalid duration {text!r}")
    total = Decimal(0)
    pos = 0
    while pos < len(rest):
        match = _COMPONENT.match(rest, pos)
        if match is None:
            raise ValueError(f"time: invalid duration {text!r}")
        try:
            total += Decimal(match.group(1)) * _UNIT_NS[match.group(2)]
        except InvalidOperation as exc:
            raise ValueError(f"time: invalid duration {text!r}") from exc
        pos = match.end()
    nanoseconds = int(total)
    if nanoseconds > _MAX_NS:
        raise ValueError(f"time: invalid duration {text!r}")
    return timedelta(microseconds=sign * (nanoseconds // 1000))


def _fraction(value: int, digits: int) -> str:
    whole, frac = divmod(value, 10**digits)
    frac_text = str(frac).rjust(digits, "0").rstrip("0")
    return f"{whole}.{frac_text}" if frac_text else str(whole)


def _format_duration(delta: timedelta) -> str:
    nanoseconds = (delta // timedelta(microseconds=1)) * 1000
    if nanoseconds == 0:
        return "0s"
    prefix = "-" if nanoseconds < 0 else ""
    value = abs(nanoseconds)
    if value < 1_000_000_000:
        if value < 1_000:
            return f"{prefix}{value}ns"
        if value < 1_000_000:
            return f"{prefix}{_fraction(value, 3)}µs"
        return f"{prefix}{_fraction(value, 6)}ms"
    hours, value = divmod(value, 3_600_000_000_000)
    minutes, value = divmod(value, 60_000_000_000)
    text = f"{_fraction(value, 9)}s"
    if hours or minutes:
        text = f"{minutes}m{text}"
    if hours:
        text = f"{hours}h{text}"
    return prefix + text


# --- timestamps ------------------------------------------------------------

def _now() -> datetime:
    return datetime.now(timezone.utc)


def _format_time(moment: datetime) -> str:
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime(_TIME_FORMAT)


def _parse_time(text: str) -> datetime:
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    moment = datetime.fromisoformat(text)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def _text(value: Any) -> str:
    return value.value if isinstance(value, Enum) else str(value)


# --- status ----------------------------------------------------------------

@dataclass
class Condition:
    """One entry of the status conditions list."""

    type: str
    status: str
    reason: str
    message: str = ""
    last_transition_time: datetime | None = None
    observed_generation: int = 0


def _condition_to_dict(condition: Condition) -> dict[str, Any]:
    data: dict[str, Any] = {
        "type": condition.type,
        "status": condition.status,
        "lastTransitionTime": (
            _format_time(condition.last_transition_time)
            if condition.last_transition_time is not None
            else None
        ),
        "reason": condition.reason,
        "message": condition.message,
    }
    if condition.observed_generation:
        data["observedGeneration"] = condition.observed_generation
    return data


def _condition_from_dict(data: dict[str, Any]) -> Condition:
    stamp = data.get("lastTransitionTime")
    return Condition(
        type=data.get("type", ""),
        status=data.get("status", ""),
        reason=data.get("reason", ""),
        message=data.get("message", ""),
        last_transition_time=_parse_time(stamp) if stamp else None,
        observed_generation=int(data.get("observedGeneration", 0)),
    )


def set_status_condition(conditions: list[Condition], condition: Condition) -> bool:
    """Add or update the condition of the same type; return whether anything changed.

    The transition time of an existing condition moves only when its status changes.
    """
    existing = next((c for c in conditions if c.type == condition.type), None)
    if existing is None:
        added = dataclasses.replace(condition)
        if added.last_transition_time is None:
            added.last_transition_time = _now()
        conditions.append(added)
        return True

    changed = False
    if existing.status != condition.status:
        existing.status = condition.status
        existing.last_transition_time = condition.last_transition_time or _now()
        changed = True
    if existing.reason != condition.reason:
        existing.reason = condition.reason
        changed = True
    if existing.message != condition.message:
        existing.message = condition.message
        changed = True
    if existing.observed_generation != condition.observed_generation:
        existing.observed_generation = condition.observed_generation
        changed = True
    return changed


@dataclass
class Status:
    state: str = ""
    served: str = ""
    conditions: list[Condition] = field(default_factory=list)


# --- spec ------------------------------------------------------------------

_DEFAULT_TIMEOUT = "10s"


@dataclass
class AppGatewaySpec:
    proxy_timeout: timedelta = field(default_factory=lambda: parse_duration(_DEFAULT_TIMEOUT))
    request_timeout: timedelta = field(default_factory=lambda: parse_duration(_DEFAULT_TIMEOUT))
    log_level: LogLevel = LogLevel.INFO


@dataclass
class AppConnValidatorSpec:
    log_level: LogLevel = LogLevel.INFO
    log_format: LogFormat = LogFormat.JSON


@dataclass
class RuntimeAgentSpec:
    controller_sync_period: timedelta = field(default_factory=timedelta)
    min_config_sync_time: timedelta = field(default_factory=timedelta)
    cert_validity_renewal_threshold: str = ""


@dataclass
class ApplicationConnectorSpec:
    app_gateway: AppGatewaySpec = field(default_factory=AppGatewaySpec)
    app_conn_validator: AppConnValidatorSpec = field(default_factory=AppConnValidatorSpec)
    domain_name: str = ""


def _spec_from_dict(data: dict[str, Any]) -> ApplicationConnectorSpec:
    gateway = data.get("appGateway") or {}
    validator = data.get("appConnValidator") or {}
    return ApplicationConnectorSpec(
        app_gateway=AppGatewaySpec(
            proxy_timeout=parse_duration(gateway.get("proxyTimeout", _DEFAULT_TIMEOUT)),
            request_timeout=parse_duration(gateway.get("requestTimeout", _DEFAULT_TIMEOUT)),
            log_level=LogLevel(gateway.get("logLevel", LogLevel.INFO.value)),
        ),
        app_conn_validator=AppConnValidatorSpec(
            log_level=LogLevel(validator.get("logLevel", LogLevel.INFO.value)),
            log_format=LogFormat(validator.get("logFormat", LogFormat.JSON.value)),
        ),
        domain_name=data.get("domainName", ""),
    )


def _spec_to_dict(spec: ApplicationConnectorSpec) -> dict[str, Any]:
    data: dict[str, Any] = {
        "appGateway": {
            "proxyTimeout": _format_duration(spec.app_gateway.proxy_timeout),
            "requestTimeout": _format_duration(spec.app_gateway.request_timeout),
            "logLevel": _text(spec.app_gateway.log_level),
        },
        "appConnValidator": {
            "logLevel": _text(spec.app_conn_validator.log_level),
            "logFormat": _text(spec.app_conn_validator.log_format),
        },
    }
    if spec.domain_name:
        data["domainName"] = spec.domain_name
    return data


# --- resource --------------------------------------------------------------

@dataclass
class ApplicationConnector:
    """The ApplicationConnector custom resource."""

    name: str = ""
    namespace: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    finalizers: list[str] = field(default_factory=list)
    resource_version: str = ""
    generation: int = 0
    deletion_timestamp: datetime | None = None
    spec: ApplicationConnectorSpec = field(default_factory=ApplicationConnectorSpec)
    status: Status = field(default_factory=Status)

    @property
    def being_deleted(self) -> bool:
        return self.deletion_timestamp is not None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ApplicationConnector:
        meta = data.get("metadata") or {}
        status = data.get("status") or {}
        stamp = meta.get("deletionTimestamp")
        return cls(
            name=meta.get("name", ""),
            namespace=meta.get("namespace", ""),
            labels=dict(meta.get("labels") or {}),
            annotations=dict(meta.get("annotations") or {}),
            finalizers=list(meta.get("finalizers") or []),
            resource_version=meta.get("resourceVersion", ""),
            generation=int(meta.get("generation", 0)),
            deletion_timestamp=_parse_time(stamp) if stamp else None,
            spec=_spec_from_dict(data.get("spec") or {}),
            status=Status(
                state=status.get("state", ""),
                served=status.get("served", ""),
                conditions=[_condition_from_dict(c) for c in status.get("conditions") or []],
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        meta: dict[str, Any] = {"name": self.name}
        if self.namespace:
            meta["namespace"] = self.namespace
        if self.labels:
            meta["labels"] = dict(self.labels)
        if self.annotations:
            meta["annotations"] = dict(self.annotations)
        if self.finalizers:
            meta["finalizers"] = list(self.finalizers)
        if self.resource_version:
            meta["resourceVersion"] = self.resource_version
        if self.generation:
            meta["generation"] = self.generation
        if self.deletion_timestamp is not None:
            meta["deletionTimestamp"] = _format_time(self.deletion_timestamp)
        status: dict[str, Any] = {"state": self.status.state, "served": self.status.served}
        if self.status.conditions:
            status["conditions"] = [_condition_to_dict(c) for c in self.status.conditions]
        return {
            "apiVersion": API_VERSION,
            "kind": KIND,
            "metadata": meta,
            "spec": _spec_to_dict(self.spec),
            "status": status,
        }

    def _update(self, state: State, condition_type: Any, status: str, reason: Any, message: str) -> None:
        self.status.state = state.value
        condition = Condition(
            type=_text(condition_type),
            status=status,
            reason=_text(reason),
            message=message,
            last_transition_time=_now(),
        )
        set_status_condition(self.status.conditions, condition)

    def update_state_processing(self, condition_type: Any, reason: Any, message: str) -> None:
        self._update(State.PROCESSING, condition_type, "Unknown", reason, message)

    def update_state_from_err(self, condition_type: Any, reason: Any, error: BaseException) -> None:
        self._update(State.ERROR, condition_type, "False", reason, str(error))

    def update_state_ready(self, condition_type: Any, reason: Any, message: str) -> None:
        self._update(State.READY, condition_type, "True", reason, message)

    def update_state_deletion(self, condition_type: Any, reason: Any, message: str) -> None:
        self._update(State.DELETING, condition_type, "Unknown", reason, message)