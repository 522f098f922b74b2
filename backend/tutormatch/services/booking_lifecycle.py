"""
TutorMatch Backend — Booking Lifecycle
========================================

What:  The booking status state machine and who may drive each transition.
Who:   BookingService.update_status().

State Machine:
    pending ──▶ confirmed ──▶ completed
       │            │
       └──▶ cancelled ◀──┘

    completed and cancelled are terminal.

Who may request what:
    the booking's student  →  cancelled
    the booking's tutor    →  confirmed, completed, cancelled
    anyone else            →  nothing

Check order matters for the error a client sees: party membership first
(401), then the role's allowed targets (401), then the state graph (409).
So a student asking to confirm gets the role message even when the booking
is already cancelled.
"""

from typing import FrozenSet, Mapping

from tutormatch.exceptions import ConflictError, UnauthorizedError
from tutormatch.models.booking import CANCELLED, COMPLETED, CONFIRMED, PENDING, Booking
from tutormatch.security import Principal

TRANSITIONS: Mapping[str, FrozenSet[str]] = {
    PENDING: frozenset({CONFIRMED, CANCELLED}),
    CONFIRMED: frozenset({COMPLETED, CANCELLED}),
    COMPLETED: frozenset(),
    CANCELLED: frozenset(),
}

TERMINAL_STATES = frozenset(state for state, targets in TRANSITIONS.items() if not targets)

STUDENT_TARGETS = frozenset({CANCELLED})
TUTOR_TARGETS = frozenset({CONFIRMED, COMPLETED, CANCELLED})


def can_transition(current: str, target: str) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


def authorize_transition(principal: Principal, booking: Booking, target: str) -> None:
    """
    Raise unless `principal` may move `booking` to `target`.

    Raises:
        UnauthorizedError: not a party to the booking, or target outside the
            party's allowed set
        ConflictError: booking is terminal, or target unreachable from the
            current status
    """
    if principal.is_student(booking.student_id):
        if target not in STUDENT_TARGETS:
            raise UnauthorizedError("Students can only cancel bookings")
    elif principal.is_tutor(booking.tutor_id):
        if target not in TUTOR_TARGETS:
            raise UnauthorizedError("Tutors can only confirm, complete or cancel bookings")
    else:
        raise UnauthorizedError("Not authorized")

    if booking.status in TERMINAL_STATES:
        raise ConflictError(f"Booking is already {booking.status}")
    if not can_transition(booking.status, target):
        raise ConflictError(f"Cannot change booking from {booking.status} to {target}")
