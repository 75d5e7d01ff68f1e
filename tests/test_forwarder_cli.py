import signal
import threading

import pytest

from arctools.forwarder_cli import Config, build_parser, run, setup_signal_handler


def test_parser_defaults():
    args = build_parser({}).parse_args([])
    assert args.metrics_addr == ":8000"
    assert args.rule == []
    assert args.github_token == ""
    assert args.log_level == "debug"


def test_parser_token_from_environment():
    args = build_parser({"GITHUB_TOKEN": "token"}).parse_args([])
    assert args.github_token == "token"


def test_parser_flag_overrides_environment():
    args = build_parser({"GITHUB_TOKEN": "token"}).parse_args(["--github-token", "placeholder"])
    assert args.github_token == "placeholder"


def test_parser_collects_rules():
    args = build_parser({}).parse_args(["--rule", "a", "--rule", "b"])
    assert args.rule == ["a", "b"]


def test_run_requires_token():
    with pytest.raises(ValueError, match="Client creation failed"):
        run(Config(), threading.Event())


def test_run_rejects_invalid_rule():
    config = Config(rules=['{"to": "http://t.example.com"}'], github_token="token")
    with pytest.raises(ValueError, match="problem initializing forwarder"):
        run(config, threading.Event())


def test_run_without_rules_stops():
    stop = threading.Event()
    config = Config(metrics_addr="127.0.0.1:0", github_token="token")
    thread = threading.Thread(target=run, args=(config, stop), daemon=True)
    thread.start()
    thread.join(10)
    assert not thread.is_alive()
    assert stop.is_set()


def test_signal_handler_sets_event_once():
    previous = {s: signal.getsignal(s) for s in (signal.SIGINT, signal.SIGTERM)}
    try:
        stop = setup_signal_handler()
        assert not stop.is_set()
        signal.raise_signal(signal.SIGTERM)
        assert stop.is_set()
        with pytest.raises(RuntimeError):
            setup_signal_handler()
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)