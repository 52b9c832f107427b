# app/crud/guest_lists_crud.py

# =================================================================================
# 🧩 ALMACÉN SQLAlchemy DE LISTAS DIARIAS (implementa GuestListStore)
# - get(titular_id, fecha) → DailyGuestList (copia de dominio, no la fila ORM)
# - put(lista) → escribe la lista completa en una transacción
# - Concurrencia optimista: la fila guest_lists tiene version_id_col; si la
#   versión leída ya no es la vigente se levanta PersistenceFailure.
# =================================================================================

from datetime import date, datetime
from typing import Dict, List, Optional, Tuple

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.admission.results import PersistenceFailure
from app.models import DailyGuest, GuestList, MemberEntry, Titular
from app.schemas import DailyGuestList, Guest

# ---------------------------------------------------------------------------------
# 🔁 Conversión ORM ⇄ dominio
# ---------------------------------------------------------------------------------

def to_domain(row: GuestList) -> DailyGuestList:
    return DailyGuestList.model_validate(row)


def _apply_guest(row: DailyGuest, guest: Guest) -> None:
    row.first_name = guest.first_name
    row.last_name = guest.last_name
    row.birth_date = guest.birth_date
    row.entered = guest.entered
    row.entered_at = guest.entered_at
    row.is_birthday_guest = guest.is_birthday_guest
    row.entered_as_birthday = guest.entered_as_birthday
    row.payment_method = guest.payment_method
    if guest.fitness is not None:
        row.apply_fitness(guest.fitness)


# ---------------------------------------------------------------------------------
# 🗄️ Adaptador
# ---------------------------------------------------------------------------------

class SqlGuestListStore:
    def __init__(self, db: Session):
        self.db = db

    def _row(self, titular_id: int, list_date: date) -> Optional[GuestList]:
        return (
            self.db.query(GuestList)
            .filter(GuestList.titular_id == titular_id, GuestList.list_date == list_date)
            .populate_existing()                                  # Relee la versión real (no la del identity map).
            .first()
        )

    def get(self, titular_id: int, list_date: date) -> Optional[DailyGuestList]:
        try:
            row = self._row(titular_id, list_date)
        except SQLAlchemyError as e:
            logger.error("Error leyendo lista {}/{}: {}", titular_id, list_date, e)
            raise PersistenceFailure("No se pudo leer la lista de invitados.") from e
        return to_domain(row) if row else None

    def put(self, guest_list: DailyGuestList) -> DailyGuestList:
        key: Tuple[int, date] = (guest_list.titular_id, guest_list.list_date)
        try:
            row = self._row(*key)
            if row is None:
                if guest_list.version is not None:
                    raise PersistenceFailure(f"La lista {key} ya no existe.")
                row = GuestList(titular_id=guest_list.titular_id, list_date=guest_list.list_date)
                self.db.add(row)
            elif row.version != guest_list.version:
                raise PersistenceFailure(f"La lista {key} fue modificada por otra operación.")

            row.state = guest_list.state
            row.responding_member_has_entered = guest_list.responding_member_has_entered
            row.updated_at = datetime.utcnow()                    # Siempre hay UPDATE: la versión avanza.
            self._sync_guests(row, guest_list.guests)
            self._sync_entries(row, guest_list.member_entries)

            self.db.commit()
            self.db.refresh(row)
        except PersistenceFailure:
            self.db.rollback()
            logger.warning("Conflicto de versión al guardar lista {}", key)
            raise
        except SQLAlchemyError as e:                              # Incluye StaleDataError e IntegrityError.
            self.db.rollback()
            logger.error("Error guardando lista {}: {}", key, e)
            raise PersistenceFailure("No se pudo guardar la lista de invitados.") from e

        return to_domain(row)

    @staticmethod
    def _sync_guests(row: GuestList, guests: List[Guest]) -> None:
        existing: Dict[str, DailyGuest] = {g.dni: g for g in row.guests}
        wanted = {g.dni for g in guests}
        for g_row in list(row.guests):
            if g_row.dni not in wanted:
                row.guests.remove(g_row)                          # delete-orphan borra la fila.
        for guest in guests:
            g_row = existing.get(guest.dni)
            if g_row is None:
                g_row = DailyGuest(dni=guest.dni)
                row.guests.append(g_row)
            _apply_guest(g_row, guest)

    @staticmethod
    def _sync_entries(row: GuestList, dnis: List[str]) -> None:
        # Los ingresos de responsables solo se agregan.
        present = {e.dni for e in row.member_entries}
        for dni in dnis:
            if dni not in present:
                row.member_entries.append(MemberEntry(dni=dni))
                present.add(dni)


# ---------------------------------------------------------------------------------
# 🔎 Consultas de administración
# ---------------------------------------------------------------------------------

def list_for_date(db: Session, list_date: date) -> List[Tuple[GuestList, Titular]]:
    """Todas las listas del día con su titular (tablero de administración)."""
    return (
        db.query(GuestList, Titular)
        .join(Titular, Titular.id == GuestList.titular_id)
        .filter(GuestList.list_date == list_date)
        .order_by(Titular.last_name, Titular.first_name)
        .all()
    )


def list_dates_with_guest(db: Session, titular_id: int, dni: str, since: date) -> List[date]:
    """Fechas de las listas del titular que incluyen al invitado (por DNI) desde una fecha."""
    rows = (
        db.query(GuestList.list_date)
        .join(DailyGuest, DailyGuest.guest_list_id == GuestList.id)
        .filter(GuestList.titular_id == titular_id, DailyGuest.dni == dni, GuestList.list_date >= since)
        .order_by(GuestList.list_date)
        .all()
    )
    return [r.list_date for r in rows]
