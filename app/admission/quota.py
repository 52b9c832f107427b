# app/admission/quota.py
# =================================================================================
# 🎂 CUPO DE INVITADOS DE CUMPLEAÑOS
# ---------------------------------------------------------------------------------
# Cada cumpleañero del grupo (titular o familiar) habilita 15 invitados sin cargo
# ese día. El consumo se recalcula SIEMPRE desde las marcas de la lista; no hay
# contador guardado que pueda desincronizarse.
# =================================================================================

from datetime import date
from typing import Iterable, Optional

from app.admission.results import FailureCode, Outcome, fail, success
from app.schemas import DailyGuestList, Guest, QuotaSummary, Titular

GUESTS_PER_BIRTHDAY_MEMBER = 15


def is_birthday(birth_date: Optional[date], day: date) -> bool:
    # Coincidencia exacta de mes/día (un 29/02 solo cumple en años bisiestos).
    return birth_date is not None and (birth_date.month, birth_date.day) == (day.month, day.day)


def birthday_members(titular: Titular, day: date) -> int:
    """Titular + familiares que cumplen años ese día (los adherentes no habilitan cupo)."""
    people = [titular.birth_date] + [fm.birth_date for fm in titular.family_members]
    return sum(1 for bd in people if is_birthday(bd, day))


def counts_as_used(guest: Guest) -> bool:
    if guest.is_birthday_guest is not None:
        return guest.is_birthday_guest
    return guest.entered and guest.entered_as_birthday


def compute_quota(
    titular: Titular,
    guests: Iterable[Guest],
    day: date,
    restricted: bool,
    exclude_dni: Optional[str] = None,
) -> QuotaSummary:
    """Cupo total/usado/restante; exclude_dni deja afuera al invitado que se está evaluando."""
    members = birthday_members(titular, day)
    total = 0 if restricted else members * GUESTS_PER_BIRTHDAY_MEMBER
    used = sum(1 for g in guests if g.dni != exclude_dni and counts_as_used(g))
    return QuotaSummary(
        total_quota=total,
        used=used,
        remaining=max(0, total - used),
        birthday_members=members,
        restricted=restricted,
    )


def check_birthday_slot(quota: QuotaSummary) -> Optional[Outcome]:
    """Chequeo previo a marcar un invitado como de cumpleaños; None si hay lugar."""
    if quota.restricted:
        return fail(FailureCode.restricted_date, "La fecha no admite invitados de cumpleaños.")
    if quota.used >= quota.total_quota:
        return fail(
            FailureCode.quota_exceeded,
            f"Cupo de cumpleaños agotado ({quota.used}/{quota.total_quota}).",
        )
    return None


def set_birthday_flag(
    guest_list: DailyGuestList,
    titular: Titular,
    dni: str,
    flag: bool,
    restricted: bool,
) -> Outcome[DailyGuestList]:
    guest = guest_list.find_guest(dni)
    if guest is None:
        return fail(FailureCode.guest_not_found, f"No hay invitado con DNI {dni} en la lista.")
    if guest.entered:                                                   # El cupo ya se resolvió al ingresar.
        return fail(
            FailureCode.already_entered,
            "El invitado ya ingresó: revertí el ingreso y volvé a admitirlo para cambiar la marca de cumpleaños.",
        )

    if flag:
        quota = compute_quota(titular, guest_list.guests, guest_list.list_date, restricted, exclude_dni=dni)
        rejected = check_birthday_slot(quota)
        if rejected:
            return rejected

    updated = guest_list.model_copy(deep=True)
    updated.find_guest(dni).is_birthday_guest = flag
    return success(updated)
