# app/routers/access.py
# =============================================================================
# 🚪 Rutas de portería (control de acceso del día)
# - Protegidas con `require_staff` (x-staff-key o x-admin-key)
# - Buscar titular, ver elegibilidad del grupo, registrar ingreso de responsables
# - Ingreso de invitados: admitir / revertir / alternar, marca de cumpleaños
# - Cada ingreso exitoso suma en las estadísticas del día
# =============================================================================

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from loguru import logger
from sqlalchemy.orm import Session

import app.schemas as schemas
from app.admission.service import AdmissionService
from app.core.deps import get_admission_service, unwrap
from app.core.security import require_staff
from app.crud import entry_stats_crud, members_crud
from app.db import get_db

router = APIRouter(prefix="/api/access", tags=["access"], dependencies=[Depends(require_staff)])

# ------------------------------ Helpers locales -------------------------------

def _count_guest_entry(db: Session, service: AdmissionService, guest_list: schemas.DailyGuestList, dni: str) -> None:
    guest = guest_list.find_guest(dni)
    if guest is not None and guest.entered:
        entry_stats_crud.increment(db, service.today(), entry_stats_crud.entry_type_for_guest(guest))

# --------------------------------- Búsqueda -----------------------------------

@router.get("/search", response_model=List[schemas.TitularSearchResult])
def search_titular(q: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    """Por N° de socio, DNI o nombre (sin acentos, todas las palabras)."""
    return [
        schemas.TitularSearchResult(
            id=t.id,
            member_number=t.member_number,
            full_name=f"{t.first_name} {t.last_name}",
            dni=t.dni,
            status=t.status,
        )
        for t in members_crud.search(db, q)
    ]

@router.get("/members/{titular_id}/eligibility", response_model=schemas.GroupEligibility)
def group_eligibility(titular_id: int, service: AdmissionService = Depends(get_admission_service)):
    return unwrap(service.group_eligibility(titular_id))

@router.get("/members/{titular_id}/guest-list", response_model=schemas.GuestListView)
def todays_guest_list(titular_id: int, service: AdmissionService = Depends(get_admission_service)):
    return unwrap(service.get_guest_list(titular_id, service.today()))

@router.get("/members/{titular_id}/quota", response_model=schemas.QuotaSummary)
def birthday_quota(titular_id: int, list_date: Optional[date] = None,
                   service: AdmissionService = Depends(get_admission_service)):
    return unwrap(service.birthday_quota(titular_id, list_date or service.today()))

# ------------------------------ Responsables ----------------------------------

@router.post("/member-entries", response_model=schemas.MemberEntryResult)
def record_member_entry(payload: schemas.MemberEntryRequest,
                        service: AdmissionService = Depends(get_admission_service),
                        db: Session = Depends(get_db)):
    """Siempre permitido si el grupo está habilitado; abre la compuerta de invitados del día."""
    result = unwrap(service.record_member_entry(payload.titular_id, payload.dni))
    if result.first_entry:
        entry_stats_crud.increment(db, service.today(), entry_stats_crud.entry_type_for_member(result.role))
    return result

# -------------------------------- Invitados -----------------------------------

@router.post("/members/{titular_id}/guests/{dni}/admit", response_model=schemas.DailyGuestList)
def admit_guest(titular_id: int, dni: str, payload: schemas.AdmitGuestRequest,
                service: AdmissionService = Depends(get_admission_service),
                db: Session = Depends(get_db)):
    guest_list = unwrap(
        service.admit_guest(titular_id, service.today(), dni, payload.payment_method, payload.birthday_guest)
    )
    _count_guest_entry(db, service, guest_list, dni)
    return guest_list

@router.post("/members/{titular_id}/guests/{dni}/revoke", response_model=schemas.DailyGuestList)
def revoke_guest(titular_id: int, dni: str, service: AdmissionService = Depends(get_admission_service)):
    return unwrap(service.revoke_guest(titular_id, service.today(), dni))

@router.post("/members/{titular_id}/guests/{dni}/toggle", response_model=schemas.DailyGuestList)
def toggle_guest(titular_id: int, dni: str, payload: schemas.AdmitGuestRequest,
                 service: AdmissionService = Depends(get_admission_service),
                 db: Session = Depends(get_db)):
    """Botón clásico de portería: admite si está afuera, revierte si ya entró."""
    guest_list = unwrap(
        service.toggle_guest_entry(titular_id, service.today(), dni, payload.payment_method, payload.birthday_guest)
    )
    _count_guest_entry(db, service, guest_list, dni)
    logger.debug("Toggle de invitado en lista {} ({})", titular_id, guest_list.version)
    return guest_list

@router.put("/members/{titular_id}/guests/{dni}/birthday", response_model=schemas.DailyGuestList)
def set_birthday_flag(titular_id: int, dni: str, payload: schemas.BirthdayFlagRequest,
                      service: AdmissionService = Depends(get_admission_service)):
    return unwrap(service.set_birthday_flag(titular_id, service.today(), dni, payload.is_birthday_guest))
