# app/admission/ports.py
# =================================================================================
# 🔌 PUERTOS DEL MOTOR (colaboradores externos)
# ---------------------------------------------------------------------------------
# El motor solo conoce estas cuatro interfaces. Implementaciones:
# - SQLAlchemy: app/crud/guest_lists_crud.py y app/crud/members_crud.py
# - En memoria: app/admission/memory.py (tests y smoke)
# - Reloj y calendario de fechas bloqueadas: aquí mismo.
# =================================================================================

from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Protocol

from loguru import logger

from app.core import config
from app.schemas import DailyGuestList, Titular


class GuestListStore(Protocol):
    def get(self, titular_id: int, list_date: date) -> Optional[DailyGuestList]: ...

    def put(self, guest_list: DailyGuestList) -> DailyGuestList: ...


class MemberDirectory(Protocol):
    def get_titular(self, titular_id: int) -> Optional[Titular]: ...


class Clock(Protocol):
    def now(self) -> datetime: ...


class RestrictedDatesPolicy(Protocol):
    def is_restricted(self, day: date) -> bool: ...


# ---------------------------------------------------------------------------------
# ⏰ Relojes
# ---------------------------------------------------------------------------------
class SystemClock:
    """Hora actual en la zona horaria del club ("hoy" es el día de portería)."""

    def __init__(self, tz=None):
        self.tz = tz or config.CLUB_TZ

    def now(self) -> datetime:
        return datetime.now(self.tz)


class FixedClock:
    def __init__(self, moment: datetime):
        self.moment = moment

    def now(self) -> datetime:
        return self.moment

    def advance(self, **delta) -> None:                    # FixedClock.advance(days=1)
        self.moment = self.moment + timedelta(**delta)


# ---------------------------------------------------------------------------------
# 📅 Fechas bloqueadas para cupo de cumpleaños
# ---------------------------------------------------------------------------------
class ConfiguredRestrictedDates:
    """Acepta 'MM-DD' (se repite cada año) o 'YYYY-MM-DD' (una sola fecha)."""

    def __init__(self, entries: Optional[Iterable[str]] = None):
        self.yearly = set()
        self.exact = set()
        for raw in (config.RESTRICTED_BIRTHDAY_DATES if entries is None else entries):
            raw = raw.strip()
            try:
                if len(raw) == 5:
                    month, day = (int(p) for p in raw.split("-"))
                    date(2000, month, day)                 # Valida (2000 es bisiesto: admite 02-29).
                    self.yearly.add((month, day))
                else:
                    self.exact.add(date.fromisoformat(raw))
            except ValueError:
                logger.warning("Fecha bloqueada inválida ignorada: {}", raw)

    def is_restricted(self, day: date) -> bool:
        return day in self.exact or (day.month, day.day) in self.yearly
