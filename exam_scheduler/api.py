import logging
import os
from datetime import date, datetime
import httpx
from fastapi import FastAPI, HTTPException, Query
from .catalog import DEMO_EXAMS, DEMO_FACILITIES, DEMO_PATIENTS, demo_slots, find_exam, find_facility
from .client import BackendError, CancellationNotAllowed, cancel_if_allowed, create_appointment
from .models import (
    Appointment,
    AppointmentRequest,
    Exam,
    ExistingPatientRef,
    Facility,
    InvalidTransition,
    PatientSummary,
    RawSubmission,
    TimeSlot,
)
from .policy import can_cancel
from .validation import validate

logger = logging.getLogger(__name__)

app = FastAPI(title="Exam Scheduler Service")

BACKEND_UNREACHABLE = "Scheduling service unavailable, try again later."

def _offline() -> bool:
    return os.getenv("OFFLINE_MODE", "0") == "1"

def _demo_appointment(req: AppointmentRequest) -> Appointment:
    """Echo an accepted request back as a stored appointment (offline only)."""
    ref = req.patient_ref
    if isinstance(ref, ExistingPatientRef):
        patient = PatientSummary(id=ref.existing_patient_id,
                                 full_name=DEMO_PATIENTS.get(ref.existing_patient_id, ""))
    else:
        patient = PatientSummary(id=max(DEMO_PATIENTS) + 1, full_name=ref.full_name)
    exam = find_exam(DEMO_EXAMS, req.exam_id) or Exam(id=req.exam_id, name="")
    facility = find_facility(DEMO_FACILITIES, req.facility_id) or Facility(id=req.facility_id, name="")
    return Appointment(
        id=1,
        patient=patient,
        exam=exam,
        facility=facility,
        date_time=datetime.fromisoformat(req.date_time),
    )

# Catalog endpoints -------------------------------------------------------

@app.get("/exams", response_model=list[Exam])
async def list_exams():
    return list(DEMO_EXAMS)

@app.get("/facilities", response_model=list[Facility])
async def list_facilities():
    return list(DEMO_FACILITIES)

@app.get("/slots", response_model=list[TimeSlot])
async def list_slots(facility_id: int = Query(...)):
    """Return today's slots for a facility. In OFFLINE_MODE generate demo data."""
    if _offline():
        if find_facility(DEMO_FACILITIES, facility_id) is None:
            raise HTTPException(status_code=404, detail="Unknown facility")
        return demo_slots(date.today())
    raise HTTPException(status_code=501, detail="Live slot lookup not implemented")

# Appointment endpoints ---------------------------------------------------

@app.post("/appointments", response_model=Appointment, status_code=201)
async def create(raw: RawSubmission):
    result = validate(raw, DEMO_EXAMS)
    if not result.ok:
        raise HTTPException(status_code=422, detail={"errors": result.errors})
    if _offline():
        try:
            return _demo_appointment(result.request)
        except ValueError:
            raise HTTPException(status_code=422, detail={"errors": {"date_time": "Unrecognized date and time"}})
    try:
        return await create_appointment(result.request)
    except BackendError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    except httpx.HTTPError as exc:
        logger.warning("backend unreachable while creating appointment: %s", exc)
        raise HTTPException(status_code=502, detail=BACKEND_UNREACHABLE)

@app.post("/appointments/{appointment_id}/cancel")
async def cancel(appointment_id: int, appointment: Appointment):
    """Cancel the appointment shown to the user, if the policy still allows it."""
    if appointment.id != appointment_id:
        raise HTTPException(status_code=422, detail="Appointment id does not match path")
    # zone-aware local time; naive backend times are local wall-clock too
    now = datetime.now().astimezone()
    try:
        if _offline():
            if not can_cancel(appointment, now):
                raise CancellationNotAllowed(f"appointment {appointment_id} can no longer be cancelled")
            cancelled = appointment.mark_cancelled()
        else:
            cancelled = await cancel_if_allowed(appointment, now)
    except (CancellationNotAllowed, InvalidTransition) as exc:
        logger.info("refused cancellation: %s", exc)
        raise HTTPException(status_code=409, detail=str(exc))
    except BackendError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    except httpx.HTTPError as exc:
        logger.warning("backend unreachable while cancelling %s: %s", appointment_id, exc)
        raise HTTPException(status_code=502, detail=BACKEND_UNREACHABLE)
    return {"message": "cancelled", "appointment_id": cancelled.id, "status": cancelled.status.value}
