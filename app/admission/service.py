# app/admission/service.py
# =================================================================================
# 🎛️ ORQUESTADOR DE ADMISIÓN
# ---------------------------------------------------------------------------------
# Cada escritura sigue el mismo patrón: leer la lista completa del almacén,
# aplicar una transición pura y escribir la lista completa. El control de
# concurrencia (versión optimista) lo garantiza el almacén; aquí no se reintenta
# y los PersistenceFailure se propagan tal cual al llamador.
# =================================================================================

from datetime import date, datetime
from typing import Optional

from loguru import logger

from app.admission import guest_list as gl_rules
from app.admission.eligibility import find_person, group_eligibility, resolve_entry
from app.admission.fitness import age_on
from app.admission.ports import Clock, GuestListStore, MemberDirectory, RestrictedDatesPolicy
from app.admission.quota import check_birthday_slot, compute_quota, set_birthday_flag
from app.admission.results import FailureCode, Outcome, fail, success
from app.models import PaymentMethodEnum
from app.schemas import (
    DailyGuestList,
    GroupEligibility,
    GuestCreate,
    GuestListView,
    MemberEntryResult,
    QuotaSummary,
    Titular,
    mask_dni,
)

FREE_ENTRY_AGE = 3                                     # Menores de 3 años entran sin cargo ni cupo.


# ---------------------------------------------------------------------------------
# 🧮 Transiciones puras de ingreso de invitados
# ---------------------------------------------------------------------------------
def admit(
    guest_list: DailyGuestList,
    titular: Titular,
    dni: str,
    payment_method: Optional[PaymentMethodEnum],
    birthday_guest: bool,
    today: date,
    restricted: bool,
    at: datetime,
) -> Outcome[DailyGuestList]:
    # 1) Compuerta: sin responsable adentro no entra nadie (ni siquiera un menor de 3).
    if not gl_rules.gate_open(guest_list):
        return fail(FailureCode.gate_closed, "Todavía no ingresó ningún socio responsable de la lista.")

    if guest_list.list_date != today or gl_rules.effective_state(guest_list, today) in gl_rules.TERMINAL_STATES:
        return fail(FailureCode.not_editable, "La lista no admite ingresos hoy.")

    guest = guest_list.find_guest(dni)
    if guest is None:
        return fail(FailureCode.guest_not_found, f"No hay invitado con DNI {dni} en la lista.")
    if guest.entered:
        return fail(FailureCode.already_entered, "El invitado ya ingresó.")

    updated = guest_list.model_copy(deep=True)
    target = updated.find_guest(dni)
    target.entered = True
    target.entered_at = at

    # 2) Menores de 3: sin pago, sin cupo.
    age = age_on(guest.birth_date, today)
    if age is not None and age < FREE_ENTRY_AGE:
        target.payment_method = None
        target.is_birthday_guest = False
        target.entered_as_birthday = False
        return success(updated)

    # 3) Invitado de cumpleaños: fecha habilitada y cupo disponible.
    if birthday_guest:
        quota = compute_quota(titular, guest_list.guests, today, restricted, exclude_dni=dni)
        rejected = check_birthday_slot(quota)
        if rejected:
            return rejected
        target.payment_method = None
        target.is_birthday_guest = True
        target.entered_as_birthday = True
        return success(updated)

    # 4) Invitado pago: el medio de pago es obligatorio.
    if payment_method is None:
        return fail(FailureCode.payment_method_required, "Indicá el medio de pago (efectivo, transferencia o caja).")
    target.payment_method = PaymentMethodEnum(payment_method)
    target.is_birthday_guest = False
    target.entered_as_birthday = False
    return success(updated)


def revoke(guest_list: DailyGuestList, dni: str, today: date) -> Outcome[DailyGuestList]:
    """Deshace el ingreso: el invitado vuelve a 'sin ingresar' y libera su lugar de cupo."""
    if gl_rules.effective_state(guest_list, today) in gl_rules.TERMINAL_STATES:
        return fail(FailureCode.not_editable, "La lista no admite cambios de ingreso.")
    guest = guest_list.find_guest(dni)
    if guest is None:
        return fail(FailureCode.guest_not_found, f"No hay invitado con DNI {dni} en la lista.")
    if not guest.entered:
        return fail(FailureCode.not_entered, "El invitado no había ingresado.")

    updated = guest_list.model_copy(deep=True)
    target = updated.find_guest(dni)
    target.entered = False
    target.entered_at = None
    target.payment_method = None
    target.is_birthday_guest = None
    target.entered_as_birthday = False
    return success(updated)


# =================================================================================
# 🏛️ Servicio (puertos inyectados)
# =================================================================================
class AdmissionService:
    def __init__(
        self,
        store: GuestListStore,
        directory: MemberDirectory,
        clock: Clock,
        restricted_dates: RestrictedDatesPolicy,
    ):
        self.store = store
        self.directory = directory
        self.clock = clock
        self.restricted_dates = restricted_dates

    # --- helpers ---
    def today(self) -> date:
        return self.clock.now().date()

    def _titular(self, titular_id: int) -> Optional[Titular]:
        return self.directory.get_titular(titular_id)

    def _save(self, outcome: Outcome[DailyGuestList], action: str) -> Outcome[DailyGuestList]:
        if not outcome.ok:
            logger.info("Rechazo en {}: {} ({})", action, outcome.failure.code.value, outcome.failure.message)
            return outcome
        saved = self.store.put(outcome.value)
        logger.info(
            "{} OK | titular={} fecha={} estado={} v{}",
            action, saved.titular_id, saved.list_date, saved.state.value, saved.version,
        )
        return success(saved)

    def _existing(self, titular_id: int, list_date: date) -> Outcome[DailyGuestList]:
        found = self.store.get(titular_id, list_date)
        if found is None:
            return fail(FailureCode.list_not_found, f"No hay lista para el {list_date.isoformat()}.")
        return success(found)

    # --- lectura ---
    def quota_for(self, titular: Titular, guest_list: Optional[DailyGuestList], list_date: date) -> QuotaSummary:
        guests = guest_list.guests if guest_list else []
        return compute_quota(titular, guests, list_date, self.restricted_dates.is_restricted(list_date))

    def get_guest_list(self, titular_id: int, list_date: date) -> Outcome[GuestListView]:
        titular = self._titular(titular_id)
        if titular is None:
            return fail(FailureCode.member_not_found, f"No existe el socio {titular_id}.")
        today = self.today()
        current = self.store.get(titular_id, list_date)
        return success(
            GuestListView(
                guest_list=current,
                titular_id=titular_id,
                list_date=list_date,
                effective_state=gl_rules.effective_state(current, today),
                editable=gl_rules.is_editable(current, list_date, today),
                sendable=gl_rules.is_sendable(current, list_date, today),
                quota=self.quota_for(titular, current, list_date),
            )
        )

    def birthday_quota(self, titular_id: int, list_date: date) -> Outcome[QuotaSummary]:
        titular = self._titular(titular_id)
        if titular is None:
            return fail(FailureCode.member_not_found, f"No existe el socio {titular_id}.")
        return success(self.quota_for(titular, self.store.get(titular_id, list_date), list_date))

    def group_eligibility(self, titular_id: int) -> Outcome[GroupEligibility]:
        titular = self._titular(titular_id)
        if titular is None:
            return fail(FailureCode.member_not_found, f"No existe el socio {titular_id}.")
        today = self.today()
        todays_list = self.store.get(titular_id, today)
        entered = todays_list.member_entries if todays_list else []
        return success(group_eligibility(titular, today, entered))

    # --- socio: armado de la lista ---
    def add_guest(self, titular_id: int, list_date: date, guest: GuestCreate) -> Outcome[DailyGuestList]:
        if self._titular(titular_id) is None:
            return fail(FailureCode.member_not_found, f"No existe el socio {titular_id}.")
        current = self.store.get(titular_id, list_date) or gl_rules.new_list(titular_id, list_date)
        logger.debug("Alta de invitado {} en lista {}/{}", mask_dni(guest.dni), titular_id, list_date)
        return self._save(gl_rules.add_guest(current, guest.to_guest(), self.today()), "add_guest")

    def remove_guest(self, titular_id: int, list_date: date, dni: str) -> Outcome[DailyGuestList]:
        found = self._existing(titular_id, list_date)
        if not found.ok:
            return found
        return self._save(gl_rules.remove_guest(found.value, dni, self.today()), "remove_guest")

    def send_guest_list(self, titular_id: int, list_date: date) -> Outcome[DailyGuestList]:
        today = self.today()
        current = self.store.get(titular_id, list_date)
        if current is None:
            # Sin lista todavía: se evalúa como borrador vacío y el rechazo no se guarda.
            return gl_rules.send(gl_rules.new_list(titular_id, list_date), today)
        return self._save(gl_rules.send(current, today), "send")

    def cancel_by_member(self, titular_id: int, list_date: date) -> Outcome[DailyGuestList]:
        found = self._existing(titular_id, list_date)
        if not found.ok:
            return found
        return self._save(gl_rules.member_cancel(found.value, self.today()), "member_cancel")

    # --- administración ---
    def cancel_by_admin(self, titular_id: int, list_date: date) -> Outcome[DailyGuestList]:
        found = self._existing(titular_id, list_date)
        if not found.ok:
            return found
        return self._save(gl_rules.admin_cancel(found.value, self.today()), "admin_cancel")

    def process_by_admin(self, titular_id: int, list_date: date) -> Outcome[DailyGuestList]:
        found = self._existing(titular_id, list_date)
        if not found.ok:
            return found
        return self._save(gl_rules.admin_process(found.value, self.today()), "admin_process")

    # --- portería ---
    def record_member_entry(self, titular_id: int, person_dni: str) -> Outcome[MemberEntryResult]:
        titular = self._titular(titular_id)
        if titular is None:
            return fail(FailureCode.member_not_found, f"No existe el socio {titular_id}.")
        ref = find_person(titular, person_dni)
        if ref is None:
            return fail(FailureCode.member_not_found, "La persona no pertenece al grupo familiar.")

        today = self.today()
        decision = resolve_entry(titular, ref, today)
        if not decision.permitted:
            logger.info("Ingreso denegado a {} ({})", mask_dni(person_dni), decision.denial_code)
            return fail(FailureCode.entry_denied, decision.reason)

        current = self.store.get(titular_id, today) or gl_rules.new_list(titular_id, today)
        first_entry = person_dni not in current.member_entries
        saved = self._save(success(gl_rules.record_entry(current, person_dni)), "member_entry")
        logger.info("Ingreso de {} {} registrado", ref.role.value, mask_dni(person_dni))
        return success(
            MemberEntryResult(guest_list=saved.value, role=ref.role, decision=decision, first_entry=first_entry)
        )

    def admit_guest(
        self,
        titular_id: int,
        list_date: date,
        dni: str,
        payment_method: Optional[PaymentMethodEnum] = None,
        birthday_guest: bool = False,
    ) -> Outcome[DailyGuestList]:
        titular = self._titular(titular_id)
        if titular is None:
            return fail(FailureCode.member_not_found, f"No existe el socio {titular_id}.")
        found = self._existing(titular_id, list_date)
        if not found.ok:
            return found
        outcome = admit(
            found.value,
            titular,
            dni,
            payment_method,
            birthday_guest,
            self.today(),
            self.restricted_dates.is_restricted(list_date),
            self.clock.now().replace(tzinfo=None),
        )
        return self._save(outcome, "admit_guest")

    def revoke_guest(self, titular_id: int, list_date: date, dni: str) -> Outcome[DailyGuestList]:
        found = self._existing(titular_id, list_date)
        if not found.ok:
            return found
        return self._save(revoke(found.value, dni, self.today()), "revoke_guest")

    def toggle_guest_entry(
        self,
        titular_id: int,
        list_date: date,
        dni: str,
        payment_method: Optional[PaymentMethodEnum] = None,
        birthday_guest: bool = False,
    ) -> Outcome[DailyGuestList]:
        """Comportamiento clásico del botón de portería: si ya entró lo revierte, si no lo admite."""
        found = self._existing(titular_id, list_date)
        if not found.ok:
            return found
        guest = found.value.find_guest(dni)
        if guest is not None and guest.entered:
            return self.revoke_guest(titular_id, list_date, dni)
        return self.admit_guest(titular_id, list_date, dni, payment_method, birthday_guest)

    def set_birthday_flag(self, titular_id: int, list_date: date, dni: str, flag: bool) -> Outcome[DailyGuestList]:
        titular = self._titular(titular_id)
        if titular is None:
            return fail(FailureCode.member_not_found, f"No existe el socio {titular_id}.")
        found = self._existing(titular_id, list_date)
        if not found.ok:
            return found
        if gl_rules.effective_state(found.value, self.today()) in gl_rules.TERMINAL_STATES:
            return fail(FailureCode.not_editable, "La lista no admite cambios.")
        outcome = set_birthday_flag(found.value, titular, dni, flag, self.restricted_dates.is_restricted(list_date))
        return self._save(outcome, "birthday_flag")
