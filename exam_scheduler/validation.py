"""Submission validator for the appointment form.

Each rule is a small function that inspects the raw submission and records
messages in a shared ``errors`` dict. ``validate`` runs every rule, so the
caller gets the whole set of problems in one pass instead of the first one.
No rule performs I/O; the exam catalog is passed in explicitly.
"""
from __future__ import annotations
from typing import Callable, Iterable
from pydantic import BaseModel, validate_email
from .catalog import find_exam
from .models import (
    AppointmentRequest,
    Exam,
    ExistingPatientRef,
    NewPatientDetails,
    RawSubmission,
    SubmissionField as F,
    ValidationErrors,
)

PREPARATION_MESSAGE = "Confirmation of preparation required: {instructions}"
INVALID_EMAIL_MESSAGE = "Invalid e-mail"
INVALID_ID_MESSAGE = "Must be a positive numeric identifier"

_NEW_PATIENT_REQUIRED = (
    (F.FULL_NAME, "Full name is required"),
    (F.TAX_ID, "Tax ID (CPF) is required"),
    (F.BIRTH_DATE, "Birth date is required"),
    (F.PHONE, "Phone is required"),
    (F.EMAIL, "E-mail is required"),
)

class ValidationResult(BaseModel):
    """Either a normalized request or the full field -> message mapping."""
    request: AppointmentRequest | None = None
    errors: ValidationErrors = {}

    @property
    def ok(self) -> bool:
        return not self.errors

def _blank(value: str | None) -> bool:
    return value is None or value == ""

def _parse_id(value: str | None) -> int | None:
    """Parse a positive integer id, or None when the text isn't one."""
    # plain ASCII digits only; int() would also take "1_0", " +1" and other scripts
    if value is None or not (value.isascii() and value.isdigit()):
        return None
    parsed = int(value)
    return parsed if parsed > 0 else None

def _is_email(value: str) -> bool:
    # validate_email also takes "Name <addr>"; only a bare address is accepted
    if "<" in value or ">" in value:
        return False
    try:
        validate_email(value)
    except ValueError:
        return False
    return True

def _check_id(raw: RawSubmission, field: F, missing_message: str, errors: ValidationErrors) -> None:
    value = getattr(raw, field.value)
    if _blank(value):
        errors[field.value] = missing_message
    elif _parse_id(value) is None:
        errors[field.value] = INVALID_ID_MESSAGE

# Rules ------------------------------------------------------------------------

Rule = Callable[[RawSubmission, list[Exam], ValidationErrors], None]

def check_patient(raw: RawSubmission, exams: list[Exam], errors: ValidationErrors) -> None:
    if not raw.is_new_patient:
        _check_id(raw, F.EXISTING_PATIENT_ID, "Select an existing patient", errors)
        return
    for field, message in _NEW_PATIENT_REQUIRED:
        if _blank(getattr(raw, field.value)):
            errors[field.value] = message
    if not _blank(raw.email) and not _is_email(raw.email):  # type: ignore[arg-type]
        errors[F.EMAIL.value] = INVALID_EMAIL_MESSAGE

def check_exam(raw: RawSubmission, exams: list[Exam], errors: ValidationErrors) -> None:
    _check_id(raw, F.EXAM_ID, "Select an exam", errors)
    if _blank(raw.exam_id):
        return
    # unknown ids fall through without the preparation gate
    exam = find_exam(exams, _parse_id(raw.exam_id))
    if exam is not None and exam.requires_preparation and not raw.preparation_acknowledged:
        errors[F.PREPARATION_ACKNOWLEDGED.value] = PREPARATION_MESSAGE.format(
            instructions=exam.preparation_instructions
        )

def check_facility(raw: RawSubmission, exams: list[Exam], errors: ValidationErrors) -> None:
    _check_id(raw, F.FACILITY_ID, "Select a facility", errors)

def check_schedule(raw: RawSubmission, exams: list[Exam], errors: ValidationErrors) -> None:
    # availability against the slot list is left to the caller; slots may be stale
    if _blank(raw.date_time):
        errors[F.DATE_TIME.value] = "Select a time slot"

RULES: tuple[Rule, ...] = (check_patient, check_exam, check_facility, check_schedule)

# Entry point -------------------------------------------------------------------

def _build_request(raw: RawSubmission) -> AppointmentRequest:
    if raw.is_new_patient:
        patient_ref: ExistingPatientRef | NewPatientDetails = NewPatientDetails(
            full_name=raw.full_name,
            tax_id=raw.tax_id,
            birth_date=raw.birth_date,
            phone=raw.phone,
            email=raw.email,
        )
    else:
        patient_ref = ExistingPatientRef(existing_patient_id=_parse_id(raw.existing_patient_id))
    return AppointmentRequest(
        patient_ref=patient_ref,
        exam_id=_parse_id(raw.exam_id),
        facility_id=_parse_id(raw.facility_id),
        date_time=raw.date_time,
        preparation_acknowledged=raw.preparation_acknowledged,
    )

def validate(raw: RawSubmission, exams: Iterable[Exam]) -> ValidationResult:
    """Run every rule against ``raw``; build the request only if none failed."""
    catalog = list(exams)
    errors: ValidationErrors = {}
    for rule in RULES:
        rule(raw, catalog, errors)
    if errors:
        return ValidationResult(errors=errors)
    return ValidationResult(request=_build_request(raw))
