"""
TutorMatch Backend — Availability Model
=========================================

What:  Pure predicates over a tutor's recurring weekly availability.
Who:   BookingService (conflict check), AuthService and TutorService
       (validating availability on signup and profile updates).

Representation (as stored on Tutor.availability):
    [
        {"day": "Monday", "slots": [{"startTime": "09:00", "endTime": "10:00"},
                                    {"startTime": "14:00", "endTime": "15:30"}]},
        {"day": "Thursday", "slots": [...]},
    ]

    Times are zero-padded 24-hour "HH:MM" strings, so plain string
    comparison orders them correctly and no parsing is needed.

Slot lookup is an EXACT match on both bounds. A request for 09:00-09:30 does
not fit inside a declared 09:00-10:00 slot; the client must book the slot
as declared.
"""

from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional

from tutormatch.exceptions import ValidationError

# Index matches date.weekday(): Monday == 0. Fixed English names, never
# locale-formatted, so the lookup does not depend on the server's locale.
WEEKDAYS = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


def weekday_name(day: date) -> str:
    """Gregorian weekday of a calendar date, e.g. date(2024, 1, 15) -> "Monday"."""
    return WEEKDAYS[day.weekday()]


def find_day(
    availability: Iterable[Mapping[str, Any]], day: str
) -> Optional[Mapping[str, Any]]:
    """Return the availability entry for a weekday name, or None if the tutor is off."""
    for entry in availability:
        if entry.get("day") == day:
            return entry
    return None


def has_exact_slot(entry: Mapping[str, Any], start_time: str, end_time: str) -> bool:
    """True if the day entry declares a slot with exactly these bounds."""
    return any(
        slot.get("startTime") == start_time and slot.get("endTime") == end_time
        for slot in entry.get("slots", [])
    )


def validate_availability(days: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Validate a weekly availability and return it normalized.

    Rules:
        - at least one weekday entry
        - each weekday appears at most once
        - each entry declares at least one slot
        - every slot has startTime < endTime
        - slots on the same day do not overlap ([start, end) intervals,
          so 09:00-10:00 followed by 10:00-11:00 is fine)

    Normalization orders days Monday..Sunday and slots by start time, which
    keeps stored documents stable across profile edits.

    Args:
        days: [{"day": ..., "slots": [{"startTime": ..., "endTime": ...}]}]

    Raises:
        ValidationError: describing the first rule that fails
    """
    if not days:
        raise ValidationError(
            "At least one availability slot is required", field="availability"
        )

    seen = set()
    normalized = []
    for entry in days:
        day = entry.get("day")
        if day not in WEEKDAYS:
            raise ValidationError(f"Unknown weekday '{day}'", field="availability")
        if day in seen:
            raise ValidationError(
                f"{day} is listed more than once", field="availability"
            )
        seen.add(day)

        slots = sorted(
            (
                {"startTime": slot["startTime"], "endTime": slot["endTime"]}
                for slot in entry.get("slots", [])
            ),
            key=lambda slot: slot["startTime"],
        )
        if not slots:
            raise ValidationError(
                f"{day} must declare at least one time slot", field="availability"
            )

        previous_end = None
        for slot in slots:
            if slot["startTime"] >= slot["endTime"]:
                raise ValidationError(
                    f"Slot {slot['startTime']}-{slot['endTime']} on {day} "
                    "must start before it ends",
                    field="availability",
                )
            if previous_end is not None and slot["startTime"] < previous_end:
                raise ValidationError(
                    f"Slots on {day} overlap at {slot['startTime']}",
                    field="availability",
                )
            previous_end = slot["endTime"]

        normalized.append({"day": day, "slots": slots})

    normalized.sort(key=lambda entry: WEEKDAYS.index(entry["day"]))
    return normalized
