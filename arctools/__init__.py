"""Actions label globbing, runner-group visibility and GitHub hook delivery forwarding."""

__version__ = "0.1.0"

__all__ = [
    "actionsglob",
    "runnergroups",
    "visibility",
    "github_api",
    "checkpointer",
    "forwarder",
    "readyz",
    "multiforwarder",
    "forwarder_cli",
    "webhookdelivery",
]