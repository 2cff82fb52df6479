from __future__ import annotations
from datetime import datetime
from enum import Enum
from typing import Union
from pydantic import BaseModel, Field

class AppointmentStatus(str, Enum):
    SCHEDULED = "AGENDADO"
    CANCELLED = "CANCELADO"
    COMPLETED = "REALIZADO"

TERMINAL_STATUSES = frozenset({AppointmentStatus.CANCELLED, AppointmentStatus.COMPLETED})

class SubmissionField(str, Enum):
    """Closed set of keys a ValidationErrors mapping may use."""
    EXISTING_PATIENT_ID = "existing_patient_id"
    FULL_NAME = "full_name"
    TAX_ID = "tax_id"
    BIRTH_DATE = "birth_date"
    PHONE = "phone"
    EMAIL = "email"
    EXAM_ID = "exam_id"
    FACILITY_ID = "facility_id"
    DATE_TIME = "date_time"
    PREPARATION_ACKNOWLEDGED = "preparation_acknowledged"

ValidationErrors = dict[str, str]

class InvalidTransition(ValueError):
    """Raised when an appointment is asked to leave a terminal status."""

class Exam(BaseModel):
    id: int
    name: str = Field(alias="nome")
    requires_preparation: bool = Field(False, alias="exigePreparo")
    preparation_instructions: str = Field("", alias="requisitosPreparo")

    model_config = {"populate_by_name": True, "frozen": True}

class Facility(BaseModel):
    id: int
    name: str = Field(alias="nome")

    model_config = {"populate_by_name": True, "frozen": True}

class TimeSlot(BaseModel):
    date_time: str = Field(alias="dataHorario")  # ISO-8601 local dateTime
    available: bool = Field(alias="disponivel")

    model_config = {"populate_by_name": True, "frozen": True}

class PatientSummary(BaseModel):
    id: int
    full_name: str = Field(alias="nomeCompleto")

    model_config = {"populate_by_name": True}

class ExistingPatientRef(BaseModel):
    existing_patient_id: int

class NewPatientDetails(BaseModel):
    full_name: str
    tax_id: str  # CPF
    birth_date: str  # YYYY-MM-DD
    phone: str
    email: str

PatientRef = Union[ExistingPatientRef, NewPatientDetails]

class RawSubmission(BaseModel):
    """Form input as typed by the user, nothing parsed yet."""
    is_new_patient: bool = False
    existing_patient_id: str | None = None
    full_name: str | None = None
    tax_id: str | None = None
    birth_date: str | None = None
    phone: str | None = None
    email: str | None = None
    exam_id: str | None = None
    facility_id: str | None = None
    date_time: str | None = None
    preparation_acknowledged: bool = False

class AppointmentRequest(BaseModel):
    patient_ref: PatientRef
    exam_id: int
    facility_id: int
    date_time: str
    preparation_acknowledged: bool

    def to_payload(self) -> dict:
        """Serialize to the backend's creation DTO."""
        payload: dict = {
            "exameId": self.exam_id,
            "unidadeId": self.facility_id,
            "dataHorario": self.date_time,
            "confirmaPreparo": self.preparation_acknowledged,
        }
        ref = self.patient_ref
        if isinstance(ref, ExistingPatientRef):
            payload["pacienteId"] = ref.existing_patient_id
        else:
            payload.update(
                pacienteNome=ref.full_name,
                pacienteCpf=ref.tax_id,
                pacienteDataNascimento=ref.birth_date,
                pacienteTelefone=ref.phone,
                pacienteEmail=ref.email,
            )
        return payload

class Appointment(BaseModel):
    id: int
    patient: PatientSummary = Field(alias="paciente")
    exam: Exam = Field(alias="exame")
    facility: Facility = Field(alias="unidade")
    date_time: datetime = Field(alias="dataHorario")
    status: AppointmentStatus = AppointmentStatus.SCHEDULED

    model_config = {"populate_by_name": True}

    def mark_cancelled(self) -> Appointment:
        """Return a copy in CANCELLED status. Terminal statuses cannot move."""
        if self.status in TERMINAL_STATUSES:
            raise InvalidTransition(f"appointment {self.id} is already {self.status.name.lower()}")
        return self.model_copy(update={"status": AppointmentStatus.CANCELLED})
