from datetime import date
from exam_scheduler.catalog import DEMO_EXAMS, available_slots, demo_slots, find_exam, is_slot_available

def test_find_exam_accepts_int_and_numeric_string():
    assert find_exam(DEMO_EXAMS, 2).name == "Ultrassom Abdominal"
    assert find_exam(DEMO_EXAMS, "2") is find_exam(DEMO_EXAMS, 2)

def test_find_exam_miss_returns_none():
    assert find_exam(DEMO_EXAMS, 42) is None
    assert find_exam(DEMO_EXAMS, "abc") is None
    assert find_exam(DEMO_EXAMS, None) is None
    assert find_exam([], 1) is None

def test_demo_slots_mark_ten_oclock_taken():
    slots = demo_slots(date(2030, 1, 10))
    assert [s.date_time for s in slots][0] == "2030-01-10T08:00:00"
    assert len(available_slots(slots)) == 3
    assert is_slot_available(slots, "2030-01-10T09:00:00")
    assert not is_slot_available(slots, "2030-01-10T10:00:00")
    assert not is_slot_available(slots, "2030-01-10T15:00:00")
