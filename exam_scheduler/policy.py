"""Cancellation policy.

Only future, still-scheduled appointments may be cancelled. The instant to
compare against is always supplied by the caller.
"""
from __future__ import annotations
from datetime import datetime
from .models import Appointment, AppointmentStatus

def _comparable(a: datetime, b: datetime) -> tuple[datetime, datetime]:
    # the backend sends naive local wall-clock times; read them in the host's zone
    if (a.tzinfo is None) != (b.tzinfo is None):
        if a.tzinfo is None:
            a = a.astimezone()
        else:
            b = b.astimezone()
    return a, b

def can_cancel(appointment: Appointment, now: datetime) -> bool:
    """True iff the appointment is SCHEDULED and strictly after ``now``."""
    if appointment.status != AppointmentStatus.SCHEDULED:
        return False
    scheduled_at, now = _comparable(appointment.date_time, now)
    return scheduled_at > now
