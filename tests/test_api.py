from datetime import datetime, timedelta, timezone

import pytest

from acmanager.api import (
    ApplicationConnector,
    Condition,
    ConditionReason,
    ConditionType,
    LogLevel,
    State,
    parse_duration,
    set_status_condition,
)

FIXED = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def test_update_state_processing():
    ac = ApplicationConnector(name="test", namespace="kyma-system")
    ac.update_state_processing(ConditionType.INSTALLED, ConditionReason.VERIFICATION, "working")
    assert ac.status.state == "Processing"
    [cond] = ac.status.conditions
    assert cond.type == "Installed"
    assert cond.status == "Unknown"
    assert cond.reason == "Verification"
    assert cond.message == "working"
    assert cond.last_transition_time is not None


def test_update_state_from_err_uses_error_text():
    ac = ApplicationConnector()
    ac.update_state_from_err(ConditionType.INSTALLED, ConditionReason.APPLY_OBJ_ERROR, ValueError("boom"))
    assert ac.status.state == State.ERROR
    assert ac.status.conditions[0].status == "False"
    assert ac.status.conditions[0].message == "boom"


def test_update_state_ready_replaces_condition_of_same_type():
    ac = ApplicationConnector()
    ac.update_state_processing(ConditionType.INSTALLED, ConditionReason.VERIFICATION, "working")
    ac.update_state_ready(ConditionType.INSTALLED, ConditionReason.VERIFIED, "done")
    assert ac.status.state == "Ready"
    assert len(ac.status.conditions) == 1
    assert ac.status.conditions[0].status == "True"
    assert ac.status.conditions[0].reason == "Verified"


def test_update_state_deletion_adds_separate_condition():
    ac = ApplicationConnector()
    ac.update_state_ready(ConditionType.INSTALLED, ConditionReason.VERIFIED, "done")
    ac.update_state_deletion(ConditionType.DELETED, ConditionReason.DELETION, "removing")
    assert ac.status.state == "Deleting"
    assert [c.type for c in ac.status.conditions] == ["Installed", "Deleted"]
    assert ac.status.conditions[1].status == "Unknown"


def test_set_status_condition_keeps_time_when_status_unchanged():
    conditions = []
    assert set_status_condition(conditions, Condition("Installed", "True", "Verified", "a", FIXED))
    later = FIXED + timedelta(hours=1)
    changed = set_status_condition(conditions, Condition("Installed", "True", "Verified", "b", later))
    assert changed is True
    assert conditions[0].last_transition_time == FIXED
    assert conditions[0].message == "b"


def test_set_status_condition_moves_time_on_status_change():
    conditions = [Condition("Installed", "True", "Verified", "a", FIXED)]
    later = FIXED + timedelta(hours=1)
    set_status_condition(conditions, Condition("Installed", "False", "Verified", "a", later))
    assert conditions[0].status == "False"
    assert conditions[0].last_transition_time == later


def test_set_status_condition_reports_no_change():
    conditions = [Condition("Installed", "True", "Verified", "a", FIXED)]
    assert set_status_condition(conditions, Condition("Installed", "True", "Verified", "a")) is False
    assert len(conditions) == 1


def test_set_status_condition_does_not_alias_new_condition():
    conditions = []
    new = Condition("Installed", "True", "Verified", "a", FIXED)
    set_status_condition(conditions, new)
    set_status_condition(conditions, Condition("Installed", "True", "Verified", "b"))
    assert new.message == "a"


def test_parse_duration_equivalent_forms():
    assert parse_duration("1m30s") == parse_duration("90s")
    assert parse_duration("1.5h") == parse_duration("1h30m")
    assert parse_duration("-1.5h") == -parse_duration("90m")
    assert parse_duration("1000ms") == parse_duration("1s")
    assert parse_duration("0") == timedelta(0)


def test_parse_duration_default_timeout():
    assert parse_duration("10s").total_seconds() == 10


@pytest.mark.parametrize("text", ["", "10", "abc", "1x", "-", "s", "1s2"])
def test_parse_duration_invalid(text):
    with pytest.raises(ValueError):
        parse_duration(text)


def test_from_dict_applies_defaults():
    ac = ApplicationConnector.from_dict({"metadata": {"name": "test", "namespace": "kyma-system"}})
    assert ac.spec.app_gateway.proxy_timeout == parse_duration("10s")
    assert ac.spec.app_gateway.request_timeout == parse_duration("10s")
    assert ac.spec.app_gateway.log_level is LogLevel.INFO
    assert ac.spec.app_conn_validator.log_format.value == "json"
    assert ac.being_deleted is False


def test_to_dict_formats_durations():
    data = ApplicationConnector(name="test").to_dict()
    assert data["apiVersion"] == "operator.kyma-project.io/v1alpha1"
    assert data["spec"]["appGateway"]["proxyTimeout"] == "10s"
    assert "domainName" not in data["spec"]
    assert "conditions" not in data["status"]


@pytest.mark.parametrize("text", ["1m30s", "500ms", "2h5m0s", "1.5s"])
def test_duration_round_trip_through_dict(text):
    data = ApplicationConnector(name="test").to_dict()
    data["spec"]["appGateway"]["requestTimeout"] = text
    again = ApplicationConnector.from_dict(data).to_dict()
    assert again["spec"]["appGateway"]["requestTimeout"] == text


def test_whole_hour_is_formatted_with_minutes_and_seconds():
    data = ApplicationConnector.from_dict({"spec": {"appGateway": {"proxyTimeout": "1h"}}}).to_dict()
    assert data["spec"]["appGateway"]["proxyTimeout"] == "1h0m0s"


def test_dict_round_trip():
    ac = ApplicationConnector(
        name="test",
        namespace="kyma-system",
        labels={"operator.kyma-project.io/kyma-name": "test"},
        finalizers=["application-connector-manager.kyma-project.io/deletion-hook"],
        deletion_timestamp=FIXED,
    )
    ac.spec.domain_name = "testme"
    ac.spec.app_gateway.log_level = LogLevel.DEBUG
    ac.status.conditions.append(Condition("Installed", "True", "Verified", "ok", FIXED, 3))
    ac.status.state = "Ready"
    assert ApplicationConnector.from_dict(ac.to_dict()) == ac


def test_from_dict_rejects_unknown_log_level():
    with pytest.raises(ValueError):
        ApplicationConnector.from_dict({"spec": {"appGateway": {"logLevel": "loud"}}})