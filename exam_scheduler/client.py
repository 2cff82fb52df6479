"""Async client for the scheduling backend.
Thin wrappers over the two write endpoints; failures surface the body text.
"""
from __future__ import annotations
import logging
import os
from datetime import datetime
import httpx
from dotenv import load_dotenv
from .models import Appointment, AppointmentRequest
from .policy import can_cancel

load_dotenv()

logger = logging.getLogger(__name__)

_BASE_URL = os.getenv("SCHEDULER_API_URL", "http://localhost:8080/api")
_TIMEOUT = float(os.getenv("SCHEDULER_HTTP_TIMEOUT", "15"))

DEFAULT_CANCEL_ERROR = "Não foi possível cancelar o agendamento."

class BackendError(Exception):
    """Non-2xx answer from the backend; ``str(exc)`` is what the user sees."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code

class CancellationNotAllowed(Exception):
    """The appointment is past or no longer SCHEDULED."""

async def create_appointment(request: AppointmentRequest) -> Appointment:
    """Create an appointment and return it as stored by the backend."""
    async with httpx.AsyncClient(http2=True, timeout=_TIMEOUT) as client:
        resp = await client.post(f"{_BASE_URL}/agendamentos", json=request.to_payload())
    if not resp.is_success:
        logger.warning("create appointment failed: HTTP %s", resp.status_code)
        raise BackendError(resp.text, resp.status_code)
    appointment = Appointment.model_validate(resp.json())
    logger.info("created appointment %s", appointment.id)
    return appointment

async def cancel_appointment(appointment_id: int) -> None:
    """Ask the backend to cancel. No body is sent."""
    async with httpx.AsyncClient(http2=True, timeout=_TIMEOUT) as client:
        resp = await client.post(f"{_BASE_URL}/agendamentos/{appointment_id}/cancelar")
    if not resp.is_success:
        logger.warning("cancel appointment %s failed: HTTP %s", appointment_id, resp.status_code)
        raise BackendError(resp.text or DEFAULT_CANCEL_ERROR, resp.status_code)
    logger.info("cancelled appointment %s", appointment_id)

async def cancel_if_allowed(appointment: Appointment, now: datetime) -> Appointment:
    """Re-check the policy right before the call, then cancel."""
    if not can_cancel(appointment, now):
        raise CancellationNotAllowed(f"appointment {appointment.id} can no longer be cancelled")
    await cancel_appointment(appointment.id)
    return appointment.mark_cancelled()
