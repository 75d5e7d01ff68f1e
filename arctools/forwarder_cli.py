"""Command that forwards GitHub webhook deliveries according to configured rules."""

from __future__ import annotations

import argparse
import logging
import os
import signal
import sys
import threading
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from arctools.checkpointer import Checkpointer
from arctools.github_api import make_client
from arctools.multiforwarder import MultiForwarder, parse_rules
from arctools.readyz import serve_readyz

__all__ = ["Config", "build_parser", "main", "run", "setup_signal_handler"]

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

_signal_handler_installed = threading.Event()
_signal_lock = threading.Lock()


@dataclass
class Config:
    rules: list[str] = field(default_factory=list)
    metrics_addr: str = ":8000"
    github_token: str = ""
    log_level: str = "debug"
    checkpointer: Checkpointer | None = None


def build_parser(environ: Mapping[str, str] | None = None) -> argparse.ArgumentParser:
    """Build the command-line parser, taking defaults from ``GITHUB_*`` variables."""
    env = os.environ if environ is None else environ

    parser = argparse.ArgumentParser(prog="hookdeliveryforwarder")
    parser.add_argument(
        "--metrics-addr", default=":8000", help="The address the metric endpoint binds to."
    )
    parser.add_argument(
        "--rule",
        action="append",
        default=[],
        help=(
            "The rule denotes from where webhook deliveries forwarded and to where they are "
            'forwarded, as JSON: {"from": [REPO, ...], "to": TARGET, "hook": {...}}. REPO can be '
            'just the organization name for an organization hook or "owner/repo" for a repository hook.'
        ),
    )
    parser.add_argument(
        "--github-token",
        default=env.get("GITHUB_TOKEN", ""),
        help="The personal access token of GitHub.",
    )
    parser.add_argument(
        "--log-level",
        default="debug",
        help='The verbosity of the logging. Valid values are "debug", "info", "warn", "error".',
    )
    return parser


def setup_signal_handler() -> threading.Event:
    """Return an event set on SIGINT or SIGTERM; a second signal exits with status 1.

    May be called only once per process.
    """
    with _signal_lock:
        if _signal_handler_installed.is_set():
            raise RuntimeError("the signal handler is already set up")
        _signal_handler_installed.set()

    stop_event = threading.Event()

    def handle(signum: int, frame: object) -> None:
        if stop_event.is_set():
            os._exit(1)
        stop_event.set()

    for signum in (signal.SIGINT, signal.SIGTERM):
        signal.signal(signum, handle)

    return stop_event


def _join_all(threads: Sequence[threading.Thread]) -> None:
    for thread in threads:
        while thread.is_alive():
            thread.join(0.5)


def run(config: Config, stop_event: threading.Event) -> None:
    """Forward deliveries and serve readiness probes until ``stop_event`` is set."""
    if not config.github_token:
        raise ValueError("Client creation failed. no GitHub personal access token was given")

    try:
        rules = parse_rules(config.rules)
    except ValueError as err:
        raise ValueError(f"problem initializing forwarder: {err}") from err

    with make_client(config.github_token) as client:
        forwarder = MultiForwarder(client=client, rules=rules)
        if config.checkpointer is not None:
            forwarder.checkpointer = config.checkpointer

        def forward() -> None:
            try:
                forwarder.run(stop_event)
            except Exception as err:
                print(f"problem running forwarder: {err}", file=sys.stderr, flush=True)
            finally:
                stop_event.set()

        def serve() -> None:
            try:
                serve_readyz(config.metrics_addr, stop_event)
            finally:
                stop_event.set()

        threads = [
            threading.Thread(target=forward, daemon=True),
            threading.Thread(target=serve, daemon=True),
        ]
        for thread in threads:
            thread.start()
        _join_all(threads)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=_LOG_LEVELS.get(args.log_level, logging.DEBUG))

    config = Config(
        rules=list(args.rule),
        metrics_addr=args.metrics_addr,
        github_token=args.github_token,
        log_level=args.log_level,
    )

    stop_event = setup_signal_handler()
    try:
        run(config, stop_event)
    except ValueError as err:
        print(f"Error: {err}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())