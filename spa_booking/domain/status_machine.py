from __future__ import annotations

from enum import Enum

from spa_booking.domain.entities.booking import BookingStatus, TERMINAL_STATUSES


class Transition(str, Enum):
    confirm = "confirm"
    start = "start"
    complete = "complete"
    cancel = "cancel"


_SOURCES: dict[Transition, frozenset[BookingStatus]] = {
    Transition.confirm: frozenset({BookingStatus.pending, BookingStatus.awaiting_confirmation}),
    Transition.start: frozenset(
        {BookingStatus.pending, BookingStatus.confirmed, BookingStatus.awaiting_confirmation}
    ),
    Transition.complete: frozenset({BookingStatus.confirmed, BookingStatus.in_progress}),
    Transition.cancel: frozenset(set(BookingStatus) - TERMINAL_STATUSES),
}

_TARGETS: dict[Transition, BookingStatus] = {
    Transition.confirm: BookingStatus.confirmed,
    Transition.start: BookingStatus.in_progress,
    Transition.complete: BookingStatus.completed,
    Transition.cancel: BookingStatus.cancelled,
}


def can_apply(transition: Transition, current: BookingStatus) -> bool:
    return current in _SOURCES[transition]


def target_of(transition: Transition) -> BookingStatus:
    return _TARGETS[transition]
