"""Events emitted by the reward pool."""
from dataclasses import dataclass, asdict
from typing import Union


@dataclass(frozen=True)
class Staked:
    """A participant opened a position."""
    participant: str
    amount: int


@dataclass(frozen=True)
class Unstaked:
    """A participant withdrew stake; ``payout`` is principal plus reward."""
    participant: str
    payout: int


@dataclass(frozen=True)
class Distributed:
    """The administrator injected a reward."""
    amount: int


PoolEvent = Union[Staked, Unstaked, Distributed]

EVENT_TYPES = {cls.__name__: cls for cls in (Staked, Unstaked, Distributed)}


def event_to_dict(event: PoolEvent) -> dict:
    """Serialize an event with its type name."""
    return {"event": type(event).__name__, **asdict(event)}


def event_from_dict(data: dict) -> PoolEvent:
    """Rebuild an event serialized by ``event_to_dict``."""
    fields = dict(data)
    name = fields.pop("event", None)
    try:
        cls = EVENT_TYPES[name]
    except KeyError:
        raise ValueError(f"Unknown event type: {name}")
    try:
        return cls(**fields)
    except TypeError as e:
        raise ValueError(f"Malformed {name} event {data}: {e}") from e
