# app/crud/medical_reviews_crud.py

# =================================================================================
# 🩺 Revisiones médicas
# - Cada revisión se agrega al historial (medical_reviews) y nunca se edita.
# - El apto vigente de la persona se REEMPLAZA por el que produce la revisión.
# - Personas: titular, familiar, adherente o invitado diario del titular.
# - Los invitados viven dentro de listas versionadas: su apto se escribe con
#   SqlGuestListStore (leer lista completa → reemplazar → escribir), igual que
#   cualquier otra transición de la lista.
# =================================================================================

from datetime import date
from typing import List, Optional, Tuple

from loguru import logger
from sqlalchemy.orm import Session

from app.admission.fitness import record_from_review
from app.crud import guest_lists_crud, members_crud
from app.crud.guest_lists_crud import SqlGuestListStore
from app.models import MedicalReview, PersonRoleEnum, ReviewResultEnum
from app.schemas import FitnessRecord, MedicalReviewCreate, mask_dni


def _find_person(db: Session, payload: MedicalReviewCreate) -> Optional[Tuple[PersonRoleEnum, list]]:
    """Devuelve (rol, destinos) para el DNI dentro del grupo del titular.

    Para socios los destinos son filas ORM; para un invitado, las fechas de
    las listas del titular (desde la fecha de revisión) que lo incluyen.
    """
    titular = members_crud.get_by_id(db, payload.titular_id)
    if titular is None:
        return None
    if titular.dni == payload.person_dni:
        return PersonRoleEnum.titular, [titular]
    for fm in titular.family_members:
        if fm.dni == payload.person_dni:
            return PersonRoleEnum.family, [fm]
    for ad in titular.adherents:
        if ad.dni == payload.person_dni:
            return PersonRoleEnum.adherent, [ad]
    dates = guest_lists_crud.list_dates_with_guest(db, titular.id, payload.person_dni, payload.review_date)
    if dates:
        return PersonRoleEnum.guest, dates
    return None


def _apply_to_guest_lists(db: Session, titular_id: int, dni: str, dates: List[date], record: FitnessRecord) -> None:
    # Cada escritura sube la versión; un put concurrente levanta PersistenceFailure.
    store = SqlGuestListStore(db)
    for list_date in dates:
        current = store.get(titular_id, list_date)
        if current is None or current.find_guest(dni) is None:
            continue                                              # Lo quitaron entre la consulta y la lectura.
        updated = current.model_copy(deep=True)
        updated.find_guest(dni).fitness = record
        store.put(updated)


def record_review(db: Session, payload: MedicalReviewCreate) -> Optional[MedicalReview]:
    """Registra la revisión y reemplaza el apto vigente; None si la persona no existe."""
    found = _find_person(db, payload)
    if found is None:
        return None
    role, targets = found

    record = record_from_review(payload.review_date, payload.fit, payload.notes)
    if role == PersonRoleEnum.guest:
        _apply_to_guest_lists(db, payload.titular_id, payload.person_dni, targets, record)
    else:
        for row in targets:
            row.apply_fitness(record)
            db.add(row)

    review = MedicalReview(
        titular_id=payload.titular_id,
        person_role=role,
        person_dni=payload.person_dni,
        review_date=payload.review_date,
        result=ReviewResultEnum.fit if payload.fit else ReviewResultEnum.unfit,
        expires_at=record.expires_at,
        notes=payload.notes,
        doctor=payload.doctor,
    )
    db.add(review)
    db.commit()
    db.refresh(review)
    logger.info(
        "Revisión médica {} para {} {} (vence {})",
        review.result.value, role.value, mask_dni(payload.person_dni), record.expires_at,
    )
    return review


def history(db: Session, titular_id: int, person_dni: Optional[str] = None) -> List[MedicalReview]:
    q = db.query(MedicalReview).filter(MedicalReview.titular_id == titular_id)
    if person_dni:
        q = q.filter(MedicalReview.person_dni == person_dni)
    return q.order_by(MedicalReview.review_date.desc(), MedicalReview.id.desc()).all()
