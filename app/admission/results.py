# app/admission/results.py
# =================================================================================
# 🧾 RESULTADOS TIPADOS DEL MOTOR DE ADMISIÓN
# ---------------------------------------------------------------------------------
# Los rechazos de negocio (compuerta cerrada, cupo agotado, etc.) NO son excepciones:
# cada operación devuelve un Outcome con el valor o con un Failure(code, message).
# Solo los fallos del almacén (BD caída, conflicto de versión) viajan como
# PersistenceFailure, y el motor los deja pasar sin reintentar.
# =================================================================================

import enum
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class FailureCode(str, enum.Enum):
    validation_error = "validation_error"
    gate_closed = "gate_closed"
    quota_exceeded = "quota_exceeded"
    restricted_date = "restricted_date"
    payment_method_required = "payment_method_required"
    not_editable = "not_editable"
    not_sendable = "not_sendable"
    list_not_found = "list_not_found"
    guest_not_found = "guest_not_found"
    member_not_found = "member_not_found"
    entry_denied = "entry_denied"
    already_entered = "already_entered"
    not_entered = "not_entered"


@dataclass(frozen=True)
class Failure:
    code: FailureCode
    message: str


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Valor de éxito o Failure; nunca ambos."""

    value: Optional[T] = None
    failure: Optional[Failure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


def success(value: T) -> Outcome[T]:
    return Outcome(value=value)


def fail(code: FailureCode, message: str) -> Outcome:
    return Outcome(failure=Failure(code=code, message=message))


class PersistenceFailure(Exception):
    """El almacén no pudo leer/escribir la lista (o la versión leída ya no es la vigente)."""
