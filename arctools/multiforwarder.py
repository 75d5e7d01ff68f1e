"""Run one forwarder per configured rule."""

from __future__ import annotations

import json
import queue
import threading
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

import httpx

from arctools.checkpointer import Checkpointer, new_in_memory_checkpointer
from arctools.forwarder import Forwarder

__all__ = ["MultiForwarder", "Rule", "parse_rules"]


@dataclass(frozen=True)
class Rule:
    """Forward deliveries of ``repo``'s hook to ``target``, creating ``hook`` if needed."""

    repo: str
    target: str
    hook: dict[str, Any] = field(default_factory=dict)


def parse_rules(rules: Iterable[str]) -> list[Rule]:
    """Parse JSON rules of the form ``{"from": [...], "to": "...", "hook": {...}}``."""
    parsed: list[Rule] = []

    for raw in rules:
        try:
            config = json.loads(raw)
        except ValueError as err:
            raise ValueError(f"failed unmarshalling {raw}: {err}") from err

        if not isinstance(config, dict):
            raise ValueError(f"failed unmarshalling {raw}: a JSON object is expected")

        sources = config.get("from") or []
        target = config.get("to") or ""
        hook = config.get("hook") or {}

        if not isinstance(sources, list) or not all(isinstance(s, str) for s in sources):
            raise ValueError(f"failed unmarshalling {raw}: \"from\" must be a list of strings")
        if not isinstance(target, str):
            raise ValueError(f"failed unmarshalling {raw}: \"to\" must be a string")
        if not isinstance(hook, dict):
            raise ValueError(f"failed unmarshalling {raw}: \"hook\" must be an object")

        if not sources:
            raise ValueError(
                "there must be one or more sources configured via "
                f'`--repo "from=SOURCE1,SOURCE2,... to=DEST1,DEST2,...". got {raw!r}'
            )
        if not target:
            raise ValueError(
                "there must be one destination configured via "
                f'`--repo "from=SOURCE to=DEST1,DEST2,...". got {raw!r}'
            )

        parsed.extend(Rule(repo=repo, target=target, hook=dict(hook)) for repo in sources)

    return parsed


@dataclass
class MultiForwarder:
    client: httpx.Client
    rules: list[Rule] = field(default_factory=list)
    checkpointer: Checkpointer = field(default_factory=new_in_memory_checkpointer)

    def run(self, stop_event: threading.Event) -> None:
        """Run a forwarder for every rule; raise the first one to finish if it failed."""
        outcomes: queue.Queue[BaseException | None] = queue.Queue()

        def work(rule: Rule) -> None:
            try:
                self._forwarder(rule).run(stop_event)
            except Exception as err:
                outcomes.put(err)
            else:
                outcomes.put(None)

        threads = [threading.Thread(target=work, args=(rule,), daemon=True) for rule in self.rules]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        try:
            first = outcomes.get_nowait()
        except queue.Empty:
            return
        if first is not None:
            raise first

    def _forwarder(self, rule: Rule) -> Forwarder:
        return Forwarder(
            repo=rule.repo,
            target=rule.target,
            client=self.client,
            hook=dict(rule.hook),
            checkpointer=self.checkpointer,
        )