"""Event records describing engine state transitions.

Events are plain frozen dataclasses. The engine buffers the events of an
operation and only publishes them to the ``EventLog`` once the operation has
committed, so subscribers never observe a transition that was rolled back.
"""

from dataclasses import dataclass
from typing import Callable, List, Type, TypeVar


@dataclass(frozen=True)
class Event:
    """Base event; timestamp is the engine clock at emission."""
    timestamp: int

    @property
    def name(self) -> str:
        return type(self).__name__


@dataclass(frozen=True)
class Staked(Event):
    user: str
    amount: int
    total: int  # user's staked balance after the call
    data: bytes = b""


@dataclass(frozen=True)
class Unstaked(Event):
    user: str
    amount: int  # principal returned (after exit fee)
    total: int  # user's staked balance after the call
    data: bytes = b""


@dataclass(frozen=True)
class TokensClaimed(Event):
    user: str
    amount: int


@dataclass(frozen=True)
class TokensLocked(Event):
    amount: int
    duration_sec: int
    total: int  # total locked after the call


@dataclass(frozen=True)
class TokensUnlocked(Event):
    amount: int
    total: int  # total locked after the call


E = TypeVar("E", bound=Event)


class EventLog:
    """Append-only event history with synchronous subscribers."""

    def __init__(self):
        self.events: List[Event] = []
        self._subscribers: List[Callable[[Event], None]] = []

    def subscribe(self, callback: Callable[[Event], None]) -> None:
        """Register a callback invoked for every published event."""
        self._subscribers.append(callback)

    def publish(self, events: List[Event]) -> None:
        """Append committed events and notify subscribers in order."""
        self.events.extend(events)
        for event in events:
            for callback in self._subscribers:
                callback(event)

    def of_type(self, event_type: Type[E]) -> List[E]:
        """All recorded events of one type, oldest first."""
        return [e for e in self.events if isinstance(e, event_type)]

    def __len__(self) -> int:
        return len(self.events)
