import pytest

from arctools.runnergroups import (
    VisibleRunnerGroups,
    new_runner_group_from_github,
    new_runner_group_from_properties,
)
from arctools.visibility import GITHUB_DOT_COM_URL, Simulator

ENTERPRISE_URL = "https://ghe.example.com/"


class FakeClient:
    def __init__(self, base_url, for_repo=None, groups=None, accesses=None, error=None):
        self.github_base_url = base_url
        self.for_repo = for_repo or []
        self.groups = groups or []
        self.accesses = accesses or {}
        self.error = error
        self.for_repo_calls = []
        self.groups_calls = []
        self.access_calls = []

    def list_organization_runner_groups_for_repository(self, org, repo):
        self.for_repo_calls.append((org, repo))
        if self.error:
            raise self.error
        return self.for_repo

    def list_organization_runner_groups(self, org):
        self.groups_calls.append(org)
        if self.error:
            raise self.error
        return self.groups

    def list_runner_group_repository_accesses(self, org, runner_group_id):
        self.access_calls.append((org, runner_group_id))
        return self.accesses.get(runner_group_id, [])


def _managed(*groups):
    v = VisibleRunnerGroups()
    for g in groups:
        v.add(g)
    return v


ORG_DEFAULT_RAW = {"id": 1, "name": "Default", "default": True, "inherited": False, "visibility": "all"}
ORG_CUSTOM_RAW = {"id": 2, "name": "grp", "default": False, "inherited": False, "visibility": "selected"}
ENT_CUSTOM_RAW = {"id": 3, "name": "entgrp", "default": False, "inherited": True, "visibility": "selected"}

ORG_DEFAULT = new_runner_group_from_properties("", "myorg", "")
ORG_CUSTOM = new_runner_group_from_properties("", "myorg", "grp")
ENT_CUSTOM = new_runner_group_from_properties("myent", "", "entgrp")


def test_empty_org_raises():
    sim = Simulator(FakeClient(GITHUB_DOT_COM_URL))
    with pytest.raises(ValueError, match="BUG"):
        sim.get_runner_groups_visible_to_repository("", "myrepo", _managed())


def test_github_dot_com_uses_repository_listing_and_filters_managed():
    client = FakeClient(GITHUB_DOT_COM_URL, for_repo=[ORG_CUSTOM_RAW, ORG_DEFAULT_RAW, ENT_CUSTOM_RAW])
    sim = Simulator(client)

    visible = sim.get_runner_groups_visible_to_repository(
        "myorg", "myrepo", _managed(ORG_DEFAULT, ORG_CUSTOM)
    )

    assert list(visible) == [ORG_DEFAULT, ORG_CUSTOM]
    assert client.for_repo_calls == [("myorg", "myrepo")]
    assert client.groups_calls == []
    assert client.access_calls == []


def test_enterprise_server_checks_access_for_non_all_visibility():
    client = FakeClient(
        ENTERPRISE_URL,
        groups=[ORG_DEFAULT_RAW, ORG_CUSTOM_RAW, ENT_CUSTOM_RAW],
        accesses={2: [{"full_name": "myrepo"}], 3: [{"full_name": "otherrepo"}]},
    )
    sim = Simulator(client)

    visible = sim.get_runner_groups_visible_to_repository(
        "myorg", "myrepo", _managed(ORG_DEFAULT, ORG_CUSTOM, ENT_CUSTOM)
    )

    assert list(visible) == [ORG_DEFAULT, ORG_CUSTOM]
    assert not visible.includes(ENT_CUSTOM)
    assert client.access_calls == [("myorg", 2), ("myorg", 3)]


def test_enterprise_server_skips_unmanaged_without_access_check():
    client = FakeClient(ENTERPRISE_URL, groups=[ORG_CUSTOM_RAW])
    sim = Simulator(client)

    visible = sim.get_runner_groups_visible_to_repository("myorg", "myrepo", _managed(ORG_DEFAULT))

    assert visible.is_empty()
    assert client.access_calls == []


def test_result_is_ordered_by_precedence():
    client = FakeClient(GITHUB_DOT_COM_URL, for_repo=[ENT_CUSTOM_RAW, ORG_CUSTOM_RAW, ORG_DEFAULT_RAW])
    sim = Simulator(client)
    managed = _managed(ORG_DEFAULT, ORG_CUSTOM, ENT_CUSTOM)

    visible = sim.get_runner_groups_visible_to_repository("myorg", "myrepo", managed)

    assert list(visible) == list(managed)
    assert list(visible)[0] == new_runner_group_from_github(ORG_DEFAULT_RAW)


@pytest.mark.parametrize("base_url", [GITHUB_DOT_COM_URL, ENTERPRISE_URL])
def test_client_errors_propagate(base_url):
    sim = Simulator(FakeClient(base_url, error=ConnectionError("down")))
    with pytest.raises(ConnectionError, match="down"):
        sim.get_runner_groups_visible_to_repository("myorg", "myrepo", _managed(ORG_DEFAULT))