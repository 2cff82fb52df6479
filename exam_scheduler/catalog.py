"""Reference-data lookups plus the demo catalogs served in offline mode.

Lookups take the catalog as an argument; nothing here reads module state except
the demo helpers, which only the HTTP shell uses.
"""
from __future__ import annotations
from datetime import date
from typing import Iterable, Sequence
from .models import Exam, Facility, TimeSlot

def find_exam(exams: Iterable[Exam], exam_id: int | str | None) -> Exam | None:
    """Return the exam with this id, or None. Misses and non-numeric ids are not errors."""
    if exam_id is None:
        return None
    try:
        wanted = int(exam_id)
    except (TypeError, ValueError):
        return None
    for exam in exams:
        if exam.id == wanted:
            return exam
    return None

def available_slots(slots: Iterable[TimeSlot]) -> list[TimeSlot]:
    return [slot for slot in slots if slot.available]

def is_slot_available(slots: Iterable[TimeSlot], date_time: str) -> bool:
    """True if date_time matches an offered slot that is still free."""
    return any(slot.date_time == date_time for slot in available_slots(slots))

# Demo data ------------------------------------------------------------------

DEMO_EXAMS: tuple[Exam, ...] = (
    Exam(id=1, name="Hemograma Completo", requires_preparation=False),
    Exam(id=2, name="Ultrassom Abdominal", requires_preparation=True,
         preparation_instructions="Jejum de 8 horas e bexiga cheia."),
    Exam(id=3, name="Ressonância Magnética", requires_preparation=True,
         preparation_instructions="Remover metais e jejum de 4 horas."),
)

DEMO_FACILITIES: tuple[Facility, ...] = (
    Facility(id=1, name="Unidade Central"),
    Facility(id=2, name="Unidade Zona Sul"),
)

DEMO_PATIENTS: dict[int, str] = {
    101: "João Silva",
    102: "Maria Souza",
}

# hour -> available; 10:00 is already booked
_DEMO_HOURS = ((8, True), (9, True), (10, False), (11, True))

def demo_slots(day: date) -> list[TimeSlot]:
    """Hourly morning slots for a facility on the given day."""
    return [
        TimeSlot(date_time=f"{day.isoformat()}T{hour:02d}:00:00", available=free)
        for hour, free in _DEMO_HOURS
    ]

def find_facility(facilities: Sequence[Facility], facility_id: int) -> Facility | None:
    return next((f for f in facilities if f.id == facility_id), None)
