"""Where a forwarder remembers how far it has got through a hook's deliveries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol

__all__ = ["Checkpointer", "InMemoryCheckpointer", "State", "new_in_memory_checkpointer"]


@dataclass
class State:
    """Position in a hook's delivery log; ``None`` means no time is known."""

    delivered_at: datetime | None = None
    id: int = 0


class Checkpointer(Protocol):
    def get_or_create(self, hook_id: int) -> State: ...

    def update(self, hook_id: int, pos: State) -> None: ...


@dataclass
class InMemoryCheckpointer:
    """Keeps the last position in memory, shared by every hook."""

    delivered_at: datetime | None = None
    id: int = 0

    def get_or_create(self, hook_id: int) -> State:
        return State(delivered_at=self.delivered_at)

    def update(self, hook_id: int, pos: State) -> None:
        self.delivered_at = pos.delivered_at
        self.id = pos.id


def new_in_memory_checkpointer() -> InMemoryCheckpointer:
    """Create a checkpointer that starts at the current time."""
    return InMemoryCheckpointer(delivered_at=datetime.now(timezone.utc))