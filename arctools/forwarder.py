"""Poll a GitHub hook's deliveries and forward their payloads to a target URL."""

from __future__ import annotations

import os
import sys
import threading
import time
from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from typing import Any, Protocol

import httpx

from arctools.checkpointer import Checkpointer, State, new_in_memory_checkpointer
from arctools.github_api import HookDelivery, new_hook_deliveries_api, new_hooks_api

__all__ = ["DEFAULT_POLLING_DELAY", "Forwarder", "PersistentError"]

DEFAULT_POLLING_DELAY = 10.0
_PER_PAGE = 2


class PersistentError(Exception):
    """A failure that retrying will not fix."""


class _DeliveriesSource(Protocol):
    def list_hook_deliveries(
        self, cursor: str = "", per_page: int = 0
    ) -> tuple[list[HookDelivery], str]: ...

    def get_hook_delivery(self, delivery_id: int) -> HookDelivery: ...


def _logf(message: str) -> None:
    print(message, file=sys.stdout, flush=True)


def _errorf(message: str) -> None:
    print(message, file=sys.stderr, flush=True)


@dataclass
class Forwarder:
    """Forwards deliveries of the first hook of ``repo`` ("owner/repo" or "org") to ``target``."""

    repo: str
    target: str
    client: httpx.Client
    hook: dict[str, Any] = field(default_factory=dict)
    checkpointer: Checkpointer = field(default_factory=new_in_memory_checkpointer)
    polling_delay: float = 0.0
    retry_delay: float = 5.0
    page_delay: float = 1.0
    target_client: httpx.Client | None = None

    def run(self, stop_event: threading.Event) -> None:
        """Forward deliveries until ``stop_event`` is set."""
        polling_delay = self.polling_delay if self.polling_delay > 0 else DEFAULT_POLLING_DELAY

        owner, _, repo = self.repo.partition("/")
        repo = repo.split("/")[0]

        hooks_api = new_hooks_api(self.client, owner, repo)
        try:
            hooks = hooks_api.list_hooks()
        except Exception as err:
            _errorf(f"Failed listing hooks: {err}")
            raise

        hook = hooks[0] if hooks else self._create_hook(hooks_api)
        _logf(f"Using this hook for receiving deliveries to be forwarded: {hook}")

        hook_id = int(hook.get("id", 0))
        deliveries_api = new_hook_deliveries_api(self.client, owner, repo, hook_id)

        try:
            cur = self.checkpointer.get_or_create(hook_id)
        except Exception as err:
            _errorf(f"Failed to get or create log position: {err}")
            raise PersistentError(str(err)) from err

        while True:
            try:
                payloads, cur = self.get_unprocessed_deliveries(deliveries_api, cur)
            except Exception as err:
                _errorf(f"failed getting unprocessed deliveries: {err}")
                payloads = []
                if stop_event.is_set():
                    return

            if not self._forward_all(payloads):
                if stop_event.wait(self.retry_delay):
                    return
                continue

            try:
                self.checkpointer.update(hook_id, cur)
            except Exception as err:
                raise RuntimeError(f"failed updating checkpoint: {err}") from err

            if stop_event.wait(polling_delay):
                return

    def _create_hook(self, hooks_api: Any) -> dict[str, Any]:
        hook = dict(self.hook)
        if "url" not in (hook.get("config") or {}):
            raise PersistentError("config.url is missing in the hook config")

        config = dict(hook["config"])
        config.setdefault("content_type", "json")
        config.setdefault("insecure_ssl", 0)
        config.setdefault("secret", os.environ.get("GITHUB_HOOK_SECRET", ""))
        hook["config"] = config

        if not hook.get("events"):
            hook["events"] = ["check_run", "push"]
        if hook.get("active") is None:
            hook["active"] = True

        try:
            return hooks_api.create_hook(hook)
        except Exception as err:
            _errorf(f"Failed creating hook: {err}")
            raise PersistentError(str(err)) from err

    def _forward_all(self, payloads: list[bytes]) -> bool:
        post = self.target_client.post if self.target_client is not None else httpx.post
        for payload in payloads:
            try:
                post(self.target, content=payload, headers={"Content-Type": "application/json"})
            except httpx.HTTPError as err:
                _errorf(f"failed forwarding delivery: {err}")
                return False
            _logf(f"Successfully POSTed the payload to {self.target}")
        return True

    def _iter_deliveries(self, deliveries_api: _DeliveriesSource) -> Iterator[HookDelivery]:
        cursor = ""
        while True:
            page, cursor = deliveries_api.list_hook_deliveries(cursor, _PER_PAGE)
            for summary in page:
                yield deliveries_api.get_hook_delivery(summary.id)
            if not cursor:
                return
            time.sleep(self.page_delay)

    def get_unprocessed_deliveries(
        self, deliveries_api: _DeliveriesSource, pos: State
    ) -> tuple[list[bytes], State]:
        """Return payloads newer than ``pos``, oldest first, with the advanced position."""
        pos = replace(pos)
        deliveries: list[HookDelivery] = []

        for delivery in self._iter_deliveries(deliveries_api):
            payload = delivery.parse_request_payload()
            delivered_at = delivery.delivered_at

            if pos.delivered_at is not None and delivered_at < pos.delivered_at:
                _logf(
                    f"{delivered_at} is before {pos.delivered_at} "
                    "so skipping all the remaining deliveries"
                )
                break

            if pos.id != 0 and delivery.id <= pos.id:
                break

            deliveries.append(delivery)
            _logf(f"Received {type(payload).__name__} at {delivered_at}: {payload}")

            if pos.delivered_at is None or delivered_at > pos.delivered_at:
                pos.delivered_at = delivered_at
            if delivery.id > pos.id:
                pos.id = delivery.id

        deliveries.sort(key=lambda d: d.delivered_at)
        return [d.raw_payload for d in deliveries], pos