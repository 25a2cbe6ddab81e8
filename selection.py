"""Shared hover/pin selection driving the highlight in every view.

The state is a small immutable value. ``transition`` is the only writer; the
dashboard keeps the current value in a ``dcc.Store`` and every view reads
``active_code`` from the same value, so all views always agree on which
country is highlighted.

    Idle --Enter(c)--> Hovering(c) --Leave--> Idle
    any  --Click(c)--> Pinned(c)   --Click(c)--> Idle
    any  --Clear-----> Idle

While a pin is active, Enter and Leave are ignored.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Collection, Iterable, Mapping, Union


@dataclass(frozen=True)
class SelectionState:
    hovered: str | None = None
    pinned: str | None = None

    @property
    def active_code(self) -> str | None:
        return self.pinned if self.pinned is not None else self.hovered

    @property
    def is_idle(self) -> bool:
        return self.hovered is None and self.pinned is None

    def to_store(self) -> dict[str, str | None]:
        return {"hovered": self.hovered, "pinned": self.pinned}

    @classmethod
    def from_store(cls, data: Mapping[str, Any] | None) -> "SelectionState":
        if not data:
            return IDLE
        return cls(hovered=data.get("hovered") or None, pinned=data.get("pinned") or None)


IDLE = SelectionState()


# -----------------------------
# EVENTS
# -----------------------------
@dataclass(frozen=True)
class Enter:
    code: str


@dataclass(frozen=True)
class Leave:
    pass


@dataclass(frozen=True)
class Click:
    code: str


@dataclass(frozen=True)
class MetricChange:
    pass


@dataclass(frozen=True)
class Clear:
    pass


Event = Union[Enter, Leave, Click, MetricChange, Clear]

# Within one tick hovers settle first, then clicks, then an explicit clear.
_PRIORITY = {Enter: 0, Leave: 0, MetricChange: 0, Click: 1, Clear: 2}


def transition(state: SelectionState, event: Event,
               known_codes: Collection[str] | None = None) -> SelectionState:
    """Return the state after ``event``. Codes outside ``known_codes`` are ignored."""
    code = getattr(event, "code", None)
    if code is not None and known_codes is not None and code not in known_codes:
        return state

    if isinstance(event, Enter):
        if state.pinned is not None:
            return state
        return replace(state, hovered=event.code)
    if isinstance(event, Leave):
        if state.pinned is not None:
            return state
        return replace(state, hovered=None)
    if isinstance(event, Click):
        if state.pinned == event.code:
            return IDLE
        return SelectionState(hovered=event.code, pinned=event.code)
    if isinstance(event, Clear):
        return IDLE
    if isinstance(event, MetricChange):
        return state
    raise TypeError(f"Unknown selection event: {event!r}")


def apply_events(state: SelectionState, events: Iterable[Event],
                 known_codes: Collection[str] | None = None) -> SelectionState:
    """Fold events raised in the same tick; a click always beats a concurrent hover."""
    for event in sorted(events, key=lambda e: _PRIORITY[type(e)]):
        state = transition(state, event, known_codes)
    return state
