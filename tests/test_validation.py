import pytest
from exam_scheduler.catalog import DEMO_EXAMS
from exam_scheduler.models import ExistingPatientRef, Exam, NewPatientDetails, RawSubmission
from exam_scheduler.validation import INVALID_EMAIL_MESSAGE, validate

FASTING = "Jejum de 8 horas e bexiga cheia."
EXAMS = [
    Exam(id=1, name="Hemograma", requires_preparation=False, preparation_instructions="ignored"),
    Exam(id=2, name="Ultrassom", requires_preparation=True, preparation_instructions=FASTING),
]
NEW_PATIENT = dict(
    is_new_patient=True,
    full_name="Ana Lima",
    tax_id="123.456.789-00",
    birth_date="1990-05-01",
    phone="(11) 98888-7777",
    email="ana.lima@gmail.com",
)

def submission(**overrides) -> RawSubmission:
    base = dict(existing_patient_id="101", exam_id="1", facility_id="1", date_time="2030-01-10T09:00:00")
    base.update(overrides)
    return RawSubmission(**base)

def test_existing_patient_success():
    result = validate(submission(), EXAMS)
    assert result.ok
    assert result.errors == {}
    assert result.request.patient_ref == ExistingPatientRef(existing_patient_id=101)
    assert result.request.exam_id == 1
    assert result.request.facility_id == 1

def test_missing_existing_patient_id():
    for value in (None, ""):
        result = validate(submission(existing_patient_id=value), EXAMS)
        assert result.request is None
        assert set(result.errors) == {"existing_patient_id"}

def test_new_patient_reports_every_missing_field():
    result = validate(submission(is_new_patient=True, full_name="Ana", email=""), EXAMS)
    assert result.request is None
    assert set(result.errors) == {"tax_id", "birth_date", "phone", "email"}
    assert result.errors["email"] != INVALID_EMAIL_MESSAGE

def test_new_patient_invalid_email():
    result = validate(submission(**{**NEW_PATIENT, "email": "ana.lima"}), EXAMS)
    assert result.errors == {"email": INVALID_EMAIL_MESSAGE}

def test_new_patient_ignores_existing_id_and_populates_details():
    result = validate(submission(existing_patient_id=None, **NEW_PATIENT), EXAMS)
    assert result.ok
    ref = result.request.patient_ref
    assert isinstance(ref, NewPatientDetails)
    assert ref.full_name == "Ana Lima"
    assert "pacienteId" not in result.request.to_payload()

def test_preparation_required_and_not_acknowledged():
    result = validate(submission(exam_id="2", **NEW_PATIENT), EXAMS)
    assert list(result.errors) == ["preparation_acknowledged"]
    assert FASTING in result.errors["preparation_acknowledged"]
    assert result.errors["preparation_acknowledged"] == f"Confirmation of preparation required: {FASTING}"

def test_preparation_acknowledged_succeeds():
    result = validate(submission(exam_id="2", preparation_acknowledged=True), EXAMS)
    assert result.ok
    assert result.request.preparation_acknowledged is True

@pytest.mark.parametrize("acknowledged", [True, False])
def test_no_preparation_flag_never_errors(acknowledged):
    result = validate(submission(exam_id="1", preparation_acknowledged=acknowledged), EXAMS)
    assert result.ok
    assert result.request.preparation_acknowledged is acknowledged

def test_unknown_exam_skips_preparation_check():
    result = validate(submission(exam_id="99"), EXAMS)
    assert result.ok
    assert result.request.exam_id == 99

def test_missing_exam_facility_and_time_collected_together():
    result = validate(submission(exam_id="", facility_id=None, date_time=""), EXAMS)
    assert set(result.errors) == {"exam_id", "facility_id", "date_time"}

def test_non_numeric_ids_are_field_errors():
    result = validate(submission(existing_patient_id="abc", exam_id="x1", facility_id="-3"), EXAMS)
    assert set(result.errors) == {"existing_patient_id", "exam_id", "facility_id"}

def test_validate_is_deterministic():
    raw = submission(exam_id="2", **NEW_PATIENT)
    assert validate(raw, EXAMS) == validate(raw, EXAMS)

def test_demo_catalog_works_as_input():
    result = validate(submission(exam_id="3"), DEMO_EXAMS)
    assert "Remover metais" in result.errors["preparation_acknowledged"]

def test_payload_uses_backend_keys():
    payload = validate(submission(), EXAMS).request.to_payload()
    assert payload == {
        "pacienteId": 101,
        "exameId": 1,
        "unidadeId": 1,
        "dataHorario": "2030-01-10T09:00:00",
        "confirmaPreparo": False,
    }

@pytest.mark.parametrize("email", ["Ana <ana.lima@gmail.com>", "<ana.lima@gmail.com>"])
def test_email_with_display_name_rejected(email):
    result = validate(submission(**{**NEW_PATIENT, "email": email}), EXAMS)
    assert result.errors == {"email": INVALID_EMAIL_MESSAGE}

@pytest.mark.parametrize("value", ["1_0_1", " +1 ", "١", "101 "])
def test_ids_must_be_plain_ascii_digits(value):
    result = validate(submission(existing_patient_id=value, exam_id=value, facility_id=value), EXAMS)
    assert result.request is None
    assert set(result.errors) == {"existing_patient_id", "exam_id", "facility_id"}
