# app/admission/fitness.py
# =================================================================================
# 🩺 ESTADO DEL APTO MÉDICO
# ---------------------------------------------------------------------------------
# Deriva el estado visible del apto (Válido / Vencido / Inválido / Pendiente) a
# partir del registro vigente y del día de evaluación. Es informativo: portería
# muestra el aviso pero nunca deniega un ingreso por el apto.
# =================================================================================

from datetime import date, datetime, timedelta
from typing import Optional, Union

from app.schemas import FitnessRecord, FitnessStatus

NEAR_EXPIRY_DAYS = 7                                   # Aviso "por vencer".
REVIEW_VALIDITY_DAYS = 15                              # Un apto nuevo vale 15 días (incluye el de la revisión).
UNFIT_REASON = "No Apto según última revisión"
MIN_AGE_FOR_REVIEW = 3


def _as_day(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


def _fmt(day: date) -> str:
    return day.strftime("%d/%m/%Y")


def age_on(birth_date: Optional[date], today: date) -> Optional[int]:
    """Edad cumplida a 'today'; None si no hay fecha de nacimiento."""
    if birth_date is None:
        return None
    had_birthday = (today.month, today.day) >= (birth_date.month, birth_date.day)
    return today.year - birth_date.year - (0 if had_birthday else 1)


def evaluate_fitness(
    record: Optional[FitnessRecord],
    now: Union[date, datetime],
    birth_date: Optional[date] = None,
) -> FitnessStatus:
    today = _as_day(now)

    age = age_on(birth_date, today)
    if age is not None and age < MIN_AGE_FOR_REVIEW:
        return FitnessStatus(status="not_applicable", message="Menor de 3 años (revisión no requerida)")

    if record is None:
        return FitnessStatus(status="pending", message="Sin datos de apto médico")

    if not record.valid:
        if record.invalidity_reason:
            return FitnessStatus(status="invalid", message=f"Inválido ({record.invalidity_reason})")
        return FitnessStatus(status="invalid", message="No Apto (Razón no especificada)")

    if record.expires_at is None:
        return FitnessStatus(status="valid", message="Válido (Sin fecha de vencimiento especificada)")

    # El día de vencimiento cuenta completo: válido mientras today <= expires_at.
    if today <= record.expires_at:
        days_remaining = (record.expires_at - today).days
        return FitnessStatus(
            status="valid",
            message=f"Válido hasta: {_fmt(record.expires_at)}",
            days_remaining=days_remaining,
            near_expiry=days_remaining <= NEAR_EXPIRY_DAYS,
        )
    return FitnessStatus(status="expired", message=f"Vencido (Venció el {_fmt(record.expires_at)})")


def record_from_review(review_date: date, fit: bool, notes: Optional[str] = None) -> FitnessRecord:
    """Registro nuevo que produce una revisión médica (reemplaza al vigente, no lo edita)."""
    if fit:
        return FitnessRecord(
            valid=True,
            issued_at=review_date,
            expires_at=review_date + timedelta(days=REVIEW_VALIDITY_DAYS - 1),
        )
    return FitnessRecord(
        valid=False,
        issued_at=review_date,
        invalidity_reason=(notes or "").strip() or UNFIT_REASON,
    )
