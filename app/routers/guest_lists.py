# app/routers/guest_lists.py
# =============================================================================
# 📋 Rutas del socio: lista diaria de invitados
# - Ver la lista de una fecha (con vencimiento perezoso, editable/enviable, cupo)
# - Agregar / quitar invitados, enviar y cancelar la lista
# Toda regla de negocio vive en AdmissionService; aquí solo se traduce HTTP.
# =============================================================================

from datetime import date

from fastapi import APIRouter, Depends, status

import app.schemas as schemas
from app.admission.service import AdmissionService
from app.core.deps import get_admission_service, unwrap

router = APIRouter(prefix="/api/members/{titular_id}/guest-lists", tags=["guest-lists"])


@router.get("/{list_date}", response_model=schemas.GuestListView)
def view_guest_list(titular_id: int, list_date: date,
                    service: AdmissionService = Depends(get_admission_service)):
    return unwrap(service.get_guest_list(titular_id, list_date))


@router.post(
    "/{list_date}/guests",
    response_model=schemas.DailyGuestList,
    status_code=status.HTTP_201_CREATED,
)
def add_guest(titular_id: int, list_date: date, payload: schemas.GuestCreate,
              service: AdmissionService = Depends(get_admission_service)):
    """Crea la lista (borrador) si todavía no existe."""
    return unwrap(service.add_guest(titular_id, list_date, payload))


@router.delete("/{list_date}/guests/{dni}", response_model=schemas.DailyGuestList)
def remove_guest(titular_id: int, list_date: date, dni: str,
                 service: AdmissionService = Depends(get_admission_service)):
    return unwrap(service.remove_guest(titular_id, list_date, dni))


@router.post("/{list_date}/send", response_model=schemas.DailyGuestList)
def send_guest_list(titular_id: int, list_date: date,
                    service: AdmissionService = Depends(get_admission_service)):
    return unwrap(service.send_guest_list(titular_id, list_date))


@router.post("/{list_date}/cancel", response_model=schemas.DailyGuestList)
def cancel_guest_list(titular_id: int, list_date: date,
                      service: AdmissionService = Depends(get_admission_service)):
    return unwrap(service.cancel_by_member(titular_id, list_date))
