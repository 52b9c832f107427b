# app/admission/guest_list.py
# =================================================================================
# 📋 CICLO DE VIDA DE LA LISTA DIARIA DE INVITADOS
# ---------------------------------------------------------------------------------
#   draft ──send──▶ sent ──send──▶ sent (enmiendas)
#   sent ──admin_process──▶ processed
#   (no terminal) ──member_cancel / admin_cancel──▶ cancelled_by_*
#   draft/sent con fecha pasada ──(al leer)──▶ expired
#
# Todas las transiciones son puras: reciben la lista y devuelven una copia nueva
# dentro de un Outcome. La persistencia la hace app/admission/service.py.
# =================================================================================

from datetime import date, timedelta
from typing import Optional

from app.admission.results import FailureCode, Outcome, fail, success
from app.models import GuestListStateEnum as S
from app.schemas import DailyGuestList, Guest

TERMINAL_STATES = frozenset({S.cancelled_by_member, S.cancelled_by_admin, S.expired})
SEND_WINDOW_DAYS = 5                                   # Se puede enviar hasta 5 días antes.

_STATE_LABELS = {
    S.draft: "borrador",
    S.sent: "enviada",
    S.processed: "procesada",
    S.cancelled_by_member: "cancelada por el socio",
    S.cancelled_by_admin: "cancelada por administración",
    S.expired: "vencida",
}


def new_list(titular_id: int, list_date: date) -> DailyGuestList:
    return DailyGuestList(titular_id=titular_id, list_date=list_date, state=S.draft)


def effective_state(guest_list: Optional[DailyGuestList], today: date) -> Optional[S]:
    """Estado visible hoy: draft/sent con fecha pasada se informan como expired (no se guarda)."""
    if guest_list is None:
        return None
    if guest_list.list_date < today and guest_list.state in (S.draft, S.sent):
        return S.expired
    return guest_list.state


def is_editable(guest_list: Optional[DailyGuestList], list_date: date, today: date) -> bool:
    if list_date < today:
        return False
    state = effective_state(guest_list, today)
    return state not in TERMINAL_STATES


def is_sendable(guest_list: Optional[DailyGuestList], list_date: date, today: date) -> bool:
    if not is_editable(guest_list, list_date, today):
        return False
    if not (today <= list_date <= today + timedelta(days=SEND_WINDOW_DAYS)):
        return False
    return effective_state(guest_list, today) in (None, S.draft, S.sent)


def _not_editable(guest_list: DailyGuestList, today: date) -> Outcome:
    state = effective_state(guest_list, today)
    return fail(
        FailureCode.not_editable,
        f"La lista del {guest_list.list_date.isoformat()} no se puede modificar (estado: {_STATE_LABELS[state]}).",
    )


# ---------------------------------------------------------------------------------
# ✏️ Edición por el socio
# ---------------------------------------------------------------------------------
def add_guest(guest_list: DailyGuestList, guest: Guest, today: date) -> Outcome[DailyGuestList]:
    if not is_editable(guest_list, guest_list.list_date, today):
        return _not_editable(guest_list, today)
    if not guest.is_complete:
        return fail(FailureCode.validation_error, "El invitado necesita nombre, apellido y DNI.")
    if guest_list.find_guest(guest.dni):
        return fail(FailureCode.validation_error, f"El DNI {guest.dni} ya está en la lista.")

    updated = guest_list.model_copy(deep=True)
    updated.guests.append(guest.model_copy(deep=True))
    return success(updated)


def remove_guest(guest_list: DailyGuestList, dni: str, today: date) -> Outcome[DailyGuestList]:
    if not is_editable(guest_list, guest_list.list_date, today):
        return _not_editable(guest_list, today)
    guest = guest_list.find_guest(dni)
    if guest is None:
        return fail(FailureCode.guest_not_found, f"No hay invitado con DNI {dni} en la lista.")
    if guest.entered:
        return fail(FailureCode.already_entered, "No se puede quitar un invitado que ya ingresó.")

    updated = guest_list.model_copy(deep=True)
    updated.guests = [g for g in updated.guests if g.dni != dni]
    return success(updated)


# ---------------------------------------------------------------------------------
# 🔁 Transiciones de estado
# ---------------------------------------------------------------------------------
def send(guest_list: DailyGuestList, today: date) -> Outcome[DailyGuestList]:
    if not is_sendable(guest_list, guest_list.list_date, today):
        if not is_editable(guest_list, guest_list.list_date, today):
            return _not_editable(guest_list, today)
        return fail(
            FailureCode.not_sendable,
            f"La lista solo se puede enviar entre hoy y {SEND_WINDOW_DAYS} días antes de la fecha.",
        )
    if not any(g.is_complete for g in guest_list.guests):
        return fail(FailureCode.validation_error, "La lista está vacía: agregá al menos un invitado completo.")

    return success(guest_list.model_copy(deep=True, update={"state": S.sent}))


def member_cancel(guest_list: DailyGuestList, today: date) -> Outcome[DailyGuestList]:
    if effective_state(guest_list, today) in TERMINAL_STATES:
        return _not_editable(guest_list, today)
    return success(guest_list.model_copy(deep=True, update={"state": S.cancelled_by_member}))


def admin_cancel(guest_list: DailyGuestList, today: date) -> Outcome[DailyGuestList]:
    if effective_state(guest_list, today) in TERMINAL_STATES:
        return _not_editable(guest_list, today)
    return success(guest_list.model_copy(deep=True, update={"state": S.cancelled_by_admin}))


def admin_process(guest_list: DailyGuestList, today: date) -> Outcome[DailyGuestList]:
    if effective_state(guest_list, today) != S.sent:
        return fail(FailureCode.not_editable, "Solo se procesan listas enviadas.")
    return success(guest_list.model_copy(deep=True, update={"state": S.processed}))


# ---------------------------------------------------------------------------------
# 🚪 Compuerta de responsables
# ---------------------------------------------------------------------------------
def record_entry(guest_list: DailyGuestList, person_dni: str) -> DailyGuestList:
    """Marca que ingresó un responsable; la compuerta nunca vuelve a cerrarse en el día."""
    updated = guest_list.model_copy(deep=True, update={"responding_member_has_entered": True})
    if person_dni not in updated.member_entries:
        updated.member_entries.append(person_dni)
    return updated


def gate_open(guest_list: DailyGuestList) -> bool:
    return guest_list.responding_member_has_entered
