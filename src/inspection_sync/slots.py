"""
Normalization and visibility rules for calendar inspection slots.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel

NOT_ASSIGNED = "NOT ASSIGNED"
RATING_KEYS = ("evaluatorRating", "rating", "evaluator_rating", "ratingValue")


class SlotStatus(str, Enum):
    COMPLETED = "Completed"
    BOOKED = "Booked"
    UNASSIGNED = "Unassigned"


class CalendarSlot(BaseModel):
    """A booked or completed inspection slot as shown in the calendar."""

    id: str
    sell_car_id: str | None = None
    time: str = ""
    title: str = "Inspection"
    inspector_name: str | None = None
    status: SlotStatus = SlotStatus.UNASSIGNED
    rating: float | None = None
    date: str = ""


def normalize_name(value: Any) -> str:
    return " ".join(str(value or "").split()).upper()


def normalize_status(value: Any) -> str:
    return str(value or "").strip().upper()


def extract_start_time(time_range: Any) -> str:
    """'10:00 - 11:00' -> '10:00'."""
    if not isinstance(time_range, str) or not time_range:
        return ""
    return time_range.split("-", 1)[0].strip()


def _status_of(raw: Mapping[str, Any]) -> str:
    return normalize_status(raw.get("currentStatus") or raw.get("status"))


def _inspector_of(raw: Mapping[str, Any]) -> str:
    return str(raw.get("inspector") or "").strip()


def _rating(raw: Mapping[str, Any]) -> float | None:
    value = next((raw[k] for k in RATING_KEYS if raw.get(k) is not None), None)
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def normalize_slot(raw: Mapping[str, Any]) -> CalendarSlot:
    """Map one raw slot record onto ``CalendarSlot``."""
    vehicle = raw.get("vehicleDetails")
    vehicle = vehicle if isinstance(vehicle, Mapping) else {}
    title = " ".join(
        str(vehicle[k]) for k in ("brand", "model", "variant") if vehicle.get(k)
    )

    inspector = _inspector_of(raw)
    assigned = bool(inspector) and normalize_name(inspector) != NOT_ASSIGNED
    if "COMPLETED" in _status_of(raw):
        status = SlotStatus.COMPLETED
    elif assigned:
        status = SlotStatus.BOOKED
    else:
        status = SlotStatus.UNASSIGNED

    slot_id = raw.get("id") if raw.get("id") is not None else raw.get("sellCarId")
    sell_car_id = raw.get("sellCarId") if raw.get("sellCarId") is not None else raw.get("id")

    return CalendarSlot(
        id=str(slot_id if slot_id is not None else ""),
        sell_car_id=str(sell_car_id) if sell_car_id is not None else None,
        time=extract_start_time(raw.get("time")),
        title=title or "Inspection",
        inspector_name=inspector or None,
        status=status,
        rating=_rating(raw),
        date=str(raw.get("date") or ""),
    )


def is_visible(raw: Any, inspector_name: str | None, is_admin: bool) -> bool:
    """Whether a raw slot belongs in this operator's calendar.

    Only booked or completed slots are shown. Admins see all of them; an
    inspector sees unassigned bookings plus anything assigned to them.
    """
    if not isinstance(raw, Mapping) or not raw:
        return False
    status = _status_of(raw)
    completed = "COMPLETED" in status
    if status != "BOOKED" and not completed:
        return False
    if raw.get("status") is False:
        return False
    if is_admin:
        return True

    me = normalize_name(inspector_name) if inspector_name else None
    theirs = normalize_name(_inspector_of(raw))
    if completed:
        return me is not None and theirs == me
    if not theirs or theirs == NOT_ASSIGNED:
        return True
    return me is not None and theirs == me


def visible_slots(
    raw_slots: Iterable[Any],
    inspector_name: str | None = None,
    is_admin: bool = False,
) -> list[CalendarSlot]:
    return [
        normalize_slot(raw) for raw in raw_slots if is_visible(raw, inspector_name, is_admin)
    ]


def match_evaluator(full_name: str, evaluators: Iterable[Any]) -> str:
    """Canonical evaluator spelling for ``full_name``, or ``full_name`` itself."""
    wanted = normalize_name(full_name)
    for evaluator in evaluators:
        if isinstance(evaluator, Mapping) and normalize_name(evaluator.get("name")) == wanted:
            return str(evaluator.get("name") or full_name)
    return full_name
