import pytest

from acmanager.gvk import DEPENDENCIES, GATEWAY, VIRTUAL_SERVICE, GroupVersionKind


def test_from_object_reads_group_version_kind():
    gvk = GroupVersionKind.from_object({"apiVersion": "networking.istio.io/v1beta1", "kind": "Gateway"})
    assert gvk == GATEWAY


def test_from_object_core_group():
    gvk = GroupVersionKind.from_object({"apiVersion": "v1", "kind": "Secret"})
    assert gvk.group == ""
    assert gvk.version == "v1"
    assert gvk.api_version() == "v1"


def test_from_object_malformed_api_version_is_empty():
    gvk = GroupVersionKind.from_object({"apiVersion": "a/b/c", "kind": "Gateway"})
    assert gvk == GroupVersionKind()


def test_from_empty_object():
    assert GroupVersionKind.from_object({}) == GroupVersionKind("", "", "")


@pytest.mark.parametrize("gvk", DEPENDENCIES)
def test_api_version_round_trip(gvk):
    obj = {"apiVersion": gvk.api_version(), "kind": gvk.kind}
    assert GroupVersionKind.from_object(obj) == gvk


def test_api_version_joins_group_and_version():
    assert VIRTUAL_SERVICE.api_version() == "networking.istio.io/v1beta1"


def test_string_form():
    gvk = GroupVersionKind.from_object({"apiVersion": "networking.istio.io/v1beta1", "kind": "Gateway"})
    assert str(gvk) == "networking.istio.io/v1beta1, Kind=Gateway"


def test_dependencies_are_distinct_kinds():
    kinds = {
        GroupVersionKind.from_object({"apiVersion": g.api_version(), "kind": g.kind}).kind
        for g in DEPENDENCIES
    }
    assert kinds == {"VirtualService", "Gateway"}