# acmanager

Plain-Python building blocks for an operator that manages an application
connector module on Kubernetes. Kubernetes objects are handled as plain dicts.

## Modules

- **`acmanager.api`**: the `ApplicationConnector` resource model with its spec
  (`ApplicationConnectorSpec`, `AppGatewaySpec`, `AppConnValidatorSpec`,
  `RuntimeAgentSpec`), its `Status` and its `Condition` list.
  `ApplicationConnector.from_dict` and `to_dict` convert to and from the
  resource's dict form. `update_state_processing`, `update_state_ready`,
  `update_state_from_err` and `update_state_deletion` set the state to
  `Processing`, `Ready`, `Error` or `Deleting` and record a condition through
  `set_status_condition`, which adds a condition or updates the one of the same
  type and moves its transition time only when its status changes.
  `parse_duration` reads durations such as `"10s"`, `"1m30s"` or `"-1.5h"` into a
  `timedelta` and raises `ValueError` on malformed input. The enums `State`,
  `ConditionType`, `ConditionReason`, `LogLevel` and `LogFormat` hold the allowed
  values; `MatchStringer` and `ArgUpdater` are protocols for argument handlers.
- **`acmanager.gvk`**: `GroupVersionKind`, read from an object with
  `GroupVersionKind.from_object`, plus the `VIRTUAL_SERVICE`, `GATEWAY` and
  `DEPENDENCIES` constants.
- **`acmanager.checksum`**: a URL-safe base64 SHA-256 digest of an object's
  `kind:group:version` (`calculate_sum`, or `Calculator` with a hasher factory of
  your choice).
- **`acmanager.predicates`**: event filters (`Predicate` with `create`, `update`,
  `delete` and `generic`) taking `ObjectEvent` and `UpdateEvent` values. They
  include `ResourceVersionChangedPredicate`, `LabelSelectorPredicate`,
  `LabelChangedPredicate`, `AnnotationChangedPredicate`,
  `GenerationChangedPredicate`, the combinators `AndPredicate` and `OrPredicate`,
  and type-specific filters: `DeploymentPredicate`, `GatewayPredicate`,
  `VirtualServicePredicate`, `HpaPredicate` and
  `CompassRuntimeAgentSecretPredicate`, which passes only the creation and
  deletion of the `kyma-system/compass-agent-configuration` secret.
- **`acmanager.watch`**: `register_watch_distinct` calls a callback once per
  distinct object type. `predicate_for` builds the filter for watching an
  object's type. `map_to_requests` turns a list of instances into a `Request`
  for the first one, unless that one is being deleted. `status_change_filter`
  ignores changes that touch only the status.

## Installation

```
pip install .
```

The package has no runtime dependencies.

## Example

```python
from acmanager.api import ApplicationConnector, ConditionType, ConditionReason

connector = ApplicationConnector.from_dict({
    "metadata": {"name": "test", "namespace": "kyma-system"},
    "spec": {"appGateway": {"proxyTimeout": "10s", "requestTimeout": "10s", "logLevel": "info"}},
})
connector.update_state_ready(ConditionType.INSTALLED, ConditionReason.VERIFIED, "installed")
print(connector.to_dict()["status"]["state"])  # Ready
```

```python
from acmanager.checksum import calculate_sum

calculate_sum({})  # "cVRoVdYnnvcNIJCbKSxCwtywLNBr3gFIXaUtE-ME6_Q="
```

## What it does not do

This package does not talk to a Kubernetes cluster. It has no API client, no
controller loop, no reconciliation state machine, no manifest loading and no
command to run. It provides the model and the filtering and mapping decisions
that such a controller would use.

## Tests

```
pip install .[test]
pytest
```