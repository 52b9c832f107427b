# app/admission/memory.py
# =================================================================================
# 🧪 ADAPTADORES EN MEMORIA (tests, smoke_test y demos sin BD)
# ---------------------------------------------------------------------------------
# Mismo contrato que los adaptadores SQLAlchemy, incluida la versión optimista:
# put() falla con PersistenceFailure si la versión leída ya no es la vigente.
# =================================================================================

from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from loguru import logger

from app.admission.results import PersistenceFailure
from app.schemas import DailyGuestList, Titular


class InMemoryGuestListStore:
    def __init__(self):
        self._store: Dict[Tuple[int, date], DailyGuestList] = {}
        self._next_id = 1

    def get(self, titular_id: int, list_date: date) -> Optional[DailyGuestList]:
        stored = self._store.get((titular_id, list_date))
        return stored.model_copy(deep=True) if stored else None

    def put(self, guest_list: DailyGuestList) -> DailyGuestList:
        key = (guest_list.titular_id, guest_list.list_date)
        current = self._store.get(key)
        current_version = current.version if current else None
        if guest_list.version != current_version:
            logger.warning("Conflicto de versión en lista {}: leída={} vigente={}", key, guest_list.version, current_version)
            raise PersistenceFailure(f"La lista {key} fue modificada por otra operación.")

        list_id = current.id if current else self._next_id
        if current is None:
            self._next_id += 1
        saved = guest_list.model_copy(deep=True, update={"id": list_id, "version": (current_version or 0) + 1})
        self._store[key] = saved
        return saved.model_copy(deep=True)

    def for_date(self, list_date: date) -> List[DailyGuestList]:
        return [gl.model_copy(deep=True) for (_, d), gl in sorted(self._store.items()) if d == list_date]


class InMemoryMemberDirectory:
    def __init__(self, titulars: Iterable[Titular] = ()):
        self._titulars: Dict[int, Titular] = {t.id: t for t in titulars}

    def add(self, titular: Titular) -> None:
        self._titulars[titular.id] = titular

    def get_titular(self, titular_id: int) -> Optional[Titular]:
        return self._titulars.get(titular_id)
