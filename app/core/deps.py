# app/core/deps.py
# =================================================================================
# 🔗 DEPENDENCIAS DE FastAPI PARA EL MOTOR DE ADMISIÓN
# ---------------------------------------------------------------------------------
# - Arma AdmissionService por petición con los adaptadores SQLAlchemy.
# - get_clock / get_restricted_dates se pueden sobreescribir en tests
#   (app.dependency_overrides) para fijar "hoy".
# - unwrap(): traduce un Failure del motor a HTTPException.
# =================================================================================

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.admission.ports import Clock, ConfiguredRestrictedDates, RestrictedDatesPolicy, SystemClock
from app.admission.results import FailureCode, Outcome
from app.admission.service import AdmissionService
from app.crud.guest_lists_crud import SqlGuestListStore
from app.crud.members_crud import SqlMemberDirectory
from app.db import get_db

_HTTP_BY_CODE = {
    FailureCode.validation_error: status.HTTP_422_UNPROCESSABLE_ENTITY,
    FailureCode.payment_method_required: status.HTTP_422_UNPROCESSABLE_ENTITY,
    FailureCode.gate_closed: status.HTTP_409_CONFLICT,
    FailureCode.quota_exceeded: status.HTTP_409_CONFLICT,
    FailureCode.restricted_date: status.HTTP_409_CONFLICT,
    FailureCode.not_editable: status.HTTP_409_CONFLICT,
    FailureCode.not_sendable: status.HTTP_409_CONFLICT,
    FailureCode.already_entered: status.HTTP_409_CONFLICT,
    FailureCode.not_entered: status.HTTP_409_CONFLICT,
    FailureCode.list_not_found: status.HTTP_404_NOT_FOUND,
    FailureCode.guest_not_found: status.HTTP_404_NOT_FOUND,
    FailureCode.member_not_found: status.HTTP_404_NOT_FOUND,
    FailureCode.entry_denied: status.HTTP_403_FORBIDDEN,
}


def get_clock() -> Clock:
    return SystemClock()


def get_restricted_dates() -> RestrictedDatesPolicy:
    return ConfiguredRestrictedDates()


def get_admission_service(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    restricted: RestrictedDatesPolicy = Depends(get_restricted_dates),
) -> AdmissionService:
    return AdmissionService(SqlGuestListStore(db), SqlMemberDirectory(db), clock, restricted)


def unwrap(outcome: Outcome):
    """Devuelve el valor o levanta HTTPException con {code, message} como detalle."""
    if outcome.ok:
        return outcome.value
    failure = outcome.failure
    raise HTTPException(
        status_code=_HTTP_BY_CODE.get(failure.code, status.HTTP_400_BAD_REQUEST),
        detail={"code": failure.code.value, "message": failure.message},
    )
