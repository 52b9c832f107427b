# app/routers/admin.py
# =============================================================================
# 👑 Rutas de administración
# - Protegidas con API Key mediante dependencia `require_admin`
# - Importación en lote del padrón de socios (upsert por N° de socio / DNI)
# - Grupo familiar: familiares, adherentes y estados
# - Tablero de listas de invitados por fecha, cancelar / procesar
# - Revisiones médicas (historial + reemplazo del apto vigente)
# - Estadísticas diarias de ingreso
# =============================================================================

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import app.schemas as schemas
from app.admission import guest_list as gl_rules
from app.admission.service import AdmissionService
from app.core.deps import get_admission_service, unwrap
from app.core.security import require_admin
from app.crud import entry_stats_crud, guest_lists_crud, medical_reviews_crud, members_crud
from app.db import get_db

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])

# --------------------------------- Padrón -------------------------------------

@router.post("/import-members", response_model=schemas.ImportResult)
def import_members(payload: schemas.MemberImportPayload, db: Session = Depends(get_db)):
    """
    Importación en lote con upsert por N° de socio (o DNI si cambió el número).
    - Nunca aborta el lote por un error de fila: acumula en `errors`.
    """
    result = schemas.ImportResult()
    for idx, item in enumerate(payload.items, start=1):
        try:
            if members_crud.upsert_member(db, item):
                result.created += 1
            else:
                result.updated += 1
        except SQLAlchemyError as e:                               # Fila inválida para la BD (p. ej. DNI duplicado).
            db.rollback()
            result.skipped += 1
            result.errors.append(f"Row {idx}: {e.__class__.__name__}")
            logger.warning("Import fila {} saltada: {}", idx, e)
    return result

# ----------------------------- Grupo familiar ---------------------------------

def _titular_or_404(db: Session, titular_id: int):
    titular = members_crud.get_by_id(db, titular_id)
    if titular is None:
        raise HTTPException(status_code=404, detail="Socio no encontrado.")
    return titular

def _ensure_new_dni(titular, dni: str) -> None:
    if members_crud.dni_in_group(titular, dni):
        raise HTTPException(status_code=409, detail="El DNI ya pertenece al grupo del titular.")

@router.get("/members/{titular_id}", response_model=schemas.Titular)
def get_member(titular_id: int, db: Session = Depends(get_db)):
    return _titular_or_404(db, titular_id)

@router.put("/members/{titular_id}/status", response_model=schemas.Titular)
def set_member_status(titular_id: int, payload: schemas.MemberStatusUpdate, db: Session = Depends(get_db)):
    """Activa / desactiva al titular. Un titular inactivo bloquea a todo su grupo en portería."""
    return members_crud.set_titular_status(db, _titular_or_404(db, titular_id), payload.status)

@router.post("/members/{titular_id}/family-members", response_model=schemas.Titular,
             status_code=status.HTTP_201_CREATED)
def add_family_member(titular_id: int, payload: schemas.FamilyMemberCreate, db: Session = Depends(get_db)):
    titular = _titular_or_404(db, titular_id)
    _ensure_new_dni(titular, payload.dni)
    return members_crud.add_family_member(db, titular, payload)

@router.delete("/members/{titular_id}/family-members/{dni}", response_model=schemas.Titular)
def remove_family_member(titular_id: int, dni: str, db: Session = Depends(get_db)):
    titular = _titular_or_404(db, titular_id)
    if not members_crud.remove_family_member(db, titular, dni):
        raise HTTPException(status_code=404, detail="Familiar no encontrado.")
    return _titular_or_404(db, titular_id)

@router.post("/members/{titular_id}/adherents", response_model=schemas.Titular,
             status_code=status.HTTP_201_CREATED)
def add_adherent(titular_id: int, payload: schemas.AdherentCreate, db: Session = Depends(get_db)):
    titular = _titular_or_404(db, titular_id)
    _ensure_new_dni(titular, payload.dni)
    return members_crud.add_adherent(db, titular, payload)

@router.delete("/members/{titular_id}/adherents/{dni}", response_model=schemas.Titular)
def remove_adherent(titular_id: int, dni: str, db: Session = Depends(get_db)):
    titular = _titular_or_404(db, titular_id)
    if not members_crud.remove_adherent(db, titular, dni):
        raise HTTPException(status_code=404, detail="Adherente no encontrado.")
    return _titular_or_404(db, titular_id)

@router.put("/members/{titular_id}/adherents/{dni}/status", response_model=schemas.Titular)
def set_adherent_status(titular_id: int, dni: str, payload: schemas.AdherentStatusUpdate,
                        db: Session = Depends(get_db)):
    titular = _titular_or_404(db, titular_id)
    if not members_crud.set_adherent_status(db, titular, dni, payload.status):
        raise HTTPException(status_code=404, detail="Adherente no encontrado.")
    return _titular_or_404(db, titular_id)

# ----------------------------- Listas del día ---------------------------------

@router.get("/guest-lists", response_model=List[schemas.GuestListSummary])
def guest_lists_for_date(list_date: Optional[date] = None,
                         db: Session = Depends(get_db),
                         service: AdmissionService = Depends(get_admission_service)):
    today = service.today()
    day = list_date or today
    summaries = []
    for row, titular in guest_lists_crud.list_for_date(db, day):
        gl = guest_lists_crud.to_domain(row)
        summaries.append(
            schemas.GuestListSummary(
                id=gl.id,
                titular_id=gl.titular_id,
                member_number=titular.member_number,
                titular_name=f"{titular.first_name} {titular.last_name}",
                list_date=gl.list_date,
                state=gl.state,
                effective_state=gl_rules.effective_state(gl, today),
                guests_total=len(gl.guests),
                guests_entered=sum(1 for g in gl.guests if g.entered),
                responding_member_has_entered=gl.responding_member_has_entered,
            )
        )
    return summaries

@router.post("/guest-lists/{titular_id}/{list_date}/cancel", response_model=schemas.DailyGuestList)
def admin_cancel(titular_id: int, list_date: date, service: AdmissionService = Depends(get_admission_service)):
    return unwrap(service.cancel_by_admin(titular_id, list_date))

@router.post("/guest-lists/{titular_id}/{list_date}/process", response_model=schemas.DailyGuestList)
def admin_process(titular_id: int, list_date: date, service: AdmissionService = Depends(get_admission_service)):
    return unwrap(service.process_by_admin(titular_id, list_date))

# --------------------------- Revisiones médicas -------------------------------

@router.post("/medical-reviews", response_model=schemas.MedicalReviewOut, status_code=status.HTTP_201_CREATED)
def create_medical_review(payload: schemas.MedicalReviewCreate, db: Session = Depends(get_db)):
    review = medical_reviews_crud.record_review(db, payload)
    if review is None:
        raise HTTPException(status_code=404, detail="Persona no encontrada en el grupo del titular.")
    return review

@router.get("/medical-reviews/{titular_id}", response_model=List[schemas.MedicalReviewOut])
def medical_review_history(titular_id: int, dni: Optional[str] = None, db: Session = Depends(get_db)):
    return medical_reviews_crud.history(db, titular_id, dni)

# ------------------------------ Estadísticas ----------------------------------

@router.get("/entry-stats", response_model=List[schemas.EntryStatOut])
def entry_stats(start: Optional[date] = None, end: Optional[date] = None,
                db: Session = Depends(get_db),
                service: AdmissionService = Depends(get_admission_service)):
    start = start or service.today()
    return entry_stats_crud.for_range(db, start, end)
