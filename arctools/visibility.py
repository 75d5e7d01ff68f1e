"""Work out which runner groups a repository's jobs may land on."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from arctools.runnergroups import VisibleRunnerGroups, new_runner_group_from_github

__all__ = ["GITHUB_DOT_COM_URL", "RunnerGroupClient", "Simulator"]

GITHUB_DOT_COM_URL = "https://github.com/"


class RunnerGroupClient(Protocol):
    """The GitHub API calls the simulator needs."""

    github_base_url: str

    def list_organization_runner_groups_for_repository(
        self, org: str, repo: str
    ) -> Iterable[Mapping[str, Any]]: ...

    def list_organization_runner_groups(self, org: str) -> Iterable[Mapping[str, Any]]: ...

    def list_runner_group_repository_accesses(
        self, org: str, runner_group_id: int
    ) -> Iterable[Mapping[str, Any]]: ...


@dataclass
class Simulator:
    client: RunnerGroupClient

    def get_runner_groups_visible_to_repository(
        self, org: str, repo: str, managed: VisibleRunnerGroups
    ) -> VisibleRunnerGroups:
        """Return the managed runner groups that ``repo`` in ``org`` can use."""
        if not org:
            raise ValueError(f"BUG: owner should not be empty in this context. repo={repo}")

        visible = VisibleRunnerGroups()

        if self.client.github_base_url == GITHUB_DOT_COM_URL:
            for runner_group in self.client.list_organization_runner_groups_for_repository(org, repo):
                ref = new_runner_group_from_github(runner_group)
                if managed.includes(ref):
                    visible.add(ref)
            return visible

        for runner_group in self.client.list_organization_runner_groups(org):
            ref = new_runner_group_from_github(runner_group)
            if not managed.includes(ref):
                continue

            if runner_group.get("visibility") != "all" and not self._has_repo_access(
                org, runner_group.get("id", 0), repo
            ):
                continue

            visible.add(ref)

        return visible

    def _has_repo_access(self, org: str, runner_group_id: int, repo: str) -> bool:
        repos = self.client.list_runner_group_repository_accesses(org, runner_group_id)
        return any(r.get("full_name") == repo for r in repos)