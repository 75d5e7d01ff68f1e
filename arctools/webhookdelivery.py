"""Forward deliveries of a repository's first webhook to a single target URL."""

from __future__ import annotations

import argparse
import os
import sys
import threading
import time
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any

import httpx

from arctools.checkpointer import State
from arctools.forwarder_cli import setup_signal_handler
from arctools.github_api import HookDelivery, make_client, new_hook_deliveries_api, new_hooks_api
from arctools.readyz import serve_readyz

__all__ = ["WebhookDeliveryForwarder", "main"]

_PER_PAGE = 2


def _logf(message: str) -> None:
    print(message, file=sys.stdout, flush=True)


def _errorf(message: str) -> None:
    print(message, file=sys.stderr, flush=True)


@dataclass
class WebhookDeliveryForwarder:
    """Polls the first hook of ``repo`` ("OWNER/REPO") and posts new payloads to ``target``."""

    client: httpx.Client
    target: str
    repo: str = ""
    polling_delay: float = 10.0
    page_delay: float = 1.0
    target_client: httpx.Client | None = None

    def run(self, stop_event: threading.Event) -> None:
        """Forward deliveries made from now on until ``stop_event`` is set."""
        segments = self.repo.split("/")
        if len(segments) != 2:
            raise ValueError(f"repository must be in a form of OWNER/REPO: got {self.repo!r}")
        owner, repo = segments

        try:
            hooks = new_hooks_api(self.client, owner, repo).list_hooks()
        except Exception as err:
            _errorf(f"Failed listing hooks: {err}")
            raise

        hook_id = int(hooks[0].get("id", 0)) if hooks else 0
        deliveries_api = new_hook_deliveries_api(self.client, owner, repo, hook_id)
        cur = State(delivered_at=datetime.now(timezone.utc))

        while True:
            try:
                payloads, cur = self.get_unprocessed_deliveries(deliveries_api, cur)
            except Exception as err:
                _errorf(f"failed getting unprocessed deliveries: {err}")
                payloads = []

            self._forward_all(payloads)

            if stop_event.wait(self.polling_delay):
                return

    def _forward_all(self, payloads: list[bytes]) -> None:
        post = self.target_client.post if self.target_client is not None else httpx.post
        for payload in payloads:
            try:
                post(self.target, content=payload, headers={"Content-Type": "application/json"})
            except httpx.HTTPError as err:
                _errorf(f"failed forwarding delivery: {err}")

    def _iter_deliveries(self, deliveries_api: Any) -> Iterator[HookDelivery]:
        cursor = ""
        while True:
            page, cursor = deliveries_api.list_hook_deliveries(cursor, _PER_PAGE)
            for summary in page:
                yield deliveries_api.get_hook_delivery(summary.id)
            if not cursor:
                return
            time.sleep(self.page_delay)

    def get_unprocessed_deliveries(
        self, deliveries_api: Any, pos: State
    ) -> tuple[list[bytes], State]:
        """Return payloads delivered after ``pos``, oldest first, with the advanced position."""
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


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="githubwebhookdeliveryforwarder")
    parser.add_argument(
        "--metrics-addr", default=":8000", help="The address the metric endpoint binds to."
    )
    parser.add_argument(
        "--repo",
        default="",
        help="The owner/name of the repository whose first hook is the source of deliveries.",
    )
    parser.add_argument(
        "--target",
        default="",
        help="The URL of the forwarding target that receives all the forwarded webhooks.",
    )
    parser.add_argument(
        "--github-token",
        default=os.environ.get("GITHUB_TOKEN", ""),
        help="The personal access token of GitHub.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    if not args.github_token:
        print(
            "Error: Client creation failed. no GitHub personal access token was given",
            file=sys.stderr,
        )
        return 1

    stop_event = setup_signal_handler()

    with make_client(args.github_token) as client:
        forwarder = WebhookDeliveryForwarder(client=client, target=args.target, repo=args.repo)

        def forward() -> None:
            try:
                forwarder.run(stop_event)
            except Exception as err:
                print(f"problem running forwarder: {err}", file=sys.stderr, flush=True)
            finally:
                stop_event.set()

        def serve() -> None:
            try:
                serve_readyz(args.metrics_addr, stop_event)
            finally:
                stop_event.set()

        threads = [
            threading.Thread(target=forward, daemon=True),
            threading.Thread(target=serve, daemon=True),
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            while thread.is_alive():
                thread.join(0.5)

    return 0


if __name__ == "__main__":
    sys.exit(main())