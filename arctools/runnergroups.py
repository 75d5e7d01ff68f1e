"""Runner groups and their precedence as seen from a repository."""

from __future__ import annotations

import bisect
import enum
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

__all__ = [
    "RunnerGroupScope",
    "RunnerGroupKind",
    "RunnerGroup",
    "VisibleRunnerGroups",
    "new_runner_group_from_github",
    "new_runner_group_from_properties",
]


class RunnerGroupScope(enum.IntEnum):
    """Where a runner group is defined."""

    ORGANIZATION = 0
    ENTERPRISE = 1

    def __str__(self) -> str:
        return self.name.capitalize()


class RunnerGroupKind(enum.IntEnum):
    """Whether a runner group is the default one or a custom one."""

    DEFAULT = 0
    CUSTOM = 1

    def __str__(self) -> str:
        return self.name.capitalize()


@dataclass(frozen=True)
class RunnerGroup:
    scope: RunnerGroupScope
    kind: RunnerGroupKind
    name: str

    def __str__(self) -> str:
        return f"RunnerGroup{{Scope:{str(self.scope)}, Kind:{str(self.kind)}, Name:{self.name}}}"

    @property
    def precedence(self) -> tuple[int, int]:
        """Sort key: lower values take precedence."""
        return (int(self.kind), int(self.scope))


def _new_runner_group(scope: RunnerGroupScope, name: str) -> RunnerGroup:
    # An empty name denotes the default runner group.
    if not name:
        return RunnerGroup(scope, RunnerGroupKind.DEFAULT, "")
    return RunnerGroup(scope, RunnerGroupKind.CUSTOM, name)


def new_runner_group_from_github(group: Mapping[str, Any]) -> RunnerGroup:
    """Build a RunnerGroup from a runner group object of the GitHub API."""
    name = "" if group.get("default") else (group.get("name") or "")
    scope = RunnerGroupScope.ENTERPRISE if group.get("inherited") else RunnerGroupScope.ORGANIZATION
    return _new_runner_group(scope, name)


def new_runner_group_from_properties(enterprise: str, organization: str, group: str) -> RunnerGroup:
    """Build a RunnerGroup from the enterprise, organization and group names of a runner."""
    scope = RunnerGroupScope.ENTERPRISE if enterprise else RunnerGroupScope.ORGANIZATION
    return _new_runner_group(scope, group)


class VisibleRunnerGroups:
    """Runner groups visible to a repository, kept in order of precedence."""

    def __init__(self) -> None:
        self._groups: list[RunnerGroup] = []

    def __str__(self) -> str:
        return ", ".join(str(group) for group in self._groups)

    def __iter__(self) -> Iterator[RunnerGroup]:
        return iter(list(self._groups))

    def __len__(self) -> int:
        return len(self._groups)

    def is_empty(self) -> bool:
        return not self._groups

    def includes(self, ref: RunnerGroup) -> bool:
        return ref in self._groups

    def add(self, group: RunnerGroup) -> None:
        """Add a group after every group of equal or higher precedence."""
        index = bisect.bisect_right(
            self._groups, group.precedence, key=lambda g: g.precedence
        )
        self.insert(group, index)

    def insert(self, group: RunnerGroup, index: int) -> None:
        self._groups.insert(index, group)

    def traverse(self, visit: Callable[[RunnerGroup], bool]) -> None:
        """Call ``visit`` on each group by precedence until it returns True."""
        for group in list(self._groups):
            if visit(group):
                return