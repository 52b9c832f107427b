# conftest.py
# -------------------------------------------------------------------------------------
# Archivo: conftest.py (raíz del proyecto)
# Propósito: Configurar pytest para la API del club.
#            - Fija el entorno ANTES de importar app.* (SQLite en memoria, claves de API).
#            - Fixtures de dominio: reloj fijo, fábricas de titulares e invitados,
#              servicio de admisión con adaptadores en memoria.
#            - Fixtures de integración: sesión SQLAlchemy limpia y TestClient de FastAPI
#              con el reloj sobreescrito.
# -------------------------------------------------------------------------------------

from __future__ import annotations
import os
from datetime import date, datetime, timedelta
from typing import Optional

# =========================
# Entorno de pruebas
# =========================
os.environ["FORCE_DB"] = "sqlite"                       # Permite SQLite (en prod se exige Postgres).
os.environ["DATABASE_URL"] = "sqlite://"                # En memoria + StaticPool (app/db.py).
os.environ["ADMIN_API_KEY"] = "test-admin-key"
os.environ["STAFF_API_KEY"] = "test-staff-key"
os.environ["RESTRICTED_BIRTHDAY_DATES"] = "12-25,01-01"
os.environ["MAINTENANCE_MODE"] = "0"
os.environ["LOG_DIR"] = ""

import pytest

from app.admission.memory import InMemoryGuestListStore, InMemoryMemberDirectory
from app.admission.ports import ConfiguredRestrictedDates, FixedClock
from app.admission.service import AdmissionService
from app.models import AdherentStatusEnum, MemberStatusEnum
from app.schemas import Adherent, FamilyMember, FitnessRecord, Guest, Titular

TODAY = date(2025, 6, 10)                               # Martes cualquiera, sin feriados bloqueados.
ADMIN_HEADERS = {"x-admin-key": "test-admin-key"}
STAFF_HEADERS = {"x-staff-key": "test-staff-key"}


# =========================
# Fábricas de dominio
# =========================
def make_titular(
    titular_id: int = 1,
    status: MemberStatusEnum = MemberStatusEnum.active,
    birth_date: Optional[date] = date(1980, 1, 15),
    family_birthdays=(),
    adherent_status: AdherentStatusEnum = AdherentStatusEnum.active,
) -> Titular:
    """Titular con un adherente y un familiar por cada fecha de family_birthdays."""
    family = [
        FamilyMember(id=10 + i, first_name="Fam", last_name=str(i), dni=f"3000000{i}", birth_date=bd)
        for i, bd in enumerate(family_birthdays)
    ]
    return Titular(
        id=titular_id,
        member_number=f"S{titular_id:04d}",
        first_name="Marta",
        last_name="Gómez",
        dni="20111222",
        birth_date=birth_date,
        status=status,
        fitness=FitnessRecord(valid=True, issued_at=TODAY - timedelta(days=3), expires_at=TODAY + timedelta(days=11)),
        family_members=family,
        adherents=[Adherent(id=90, first_name="Rosa", last_name="Pérez", dni="14111222", status=adherent_status)],
    )


def make_guest(dni: str = "12345678", birth_date: Optional[date] = date(1990, 4, 2), **kwargs) -> Guest:
    return Guest(first_name=kwargs.pop("first_name", "Ana"), last_name=kwargs.pop("last_name", "Ruiz"),
                 dni=dni, birth_date=birth_date, **kwargs)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def titular_factory():
    return make_titular


@pytest.fixture
def guest_factory():
    return make_guest


@pytest.fixture
def admin_headers():
    return dict(ADMIN_HEADERS)


@pytest.fixture
def staff_headers():
    return dict(STAFF_HEADERS)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2025, 6, 10, 15, 30))


@pytest.fixture
def store() -> InMemoryGuestListStore:
    return InMemoryGuestListStore()


@pytest.fixture
def directory() -> InMemoryMemberDirectory:
    return InMemoryMemberDirectory([make_titular()])


@pytest.fixture
def service(store, directory, clock) -> AdmissionService:
    return AdmissionService(store, directory, clock, ConfiguredRestrictedDates(["12-25", "01-01"]))


# =========================
# Integración (SQLAlchemy + FastAPI)
# =========================
@pytest.fixture
def db_session():
    from app.db import Base, SessionLocal, engine
    from app import models  # noqa: F401  Registra las tablas.

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session, clock):
    from fastapi.testclient import TestClient
    from app.core.deps import get_clock
    from app.main import app

    app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def seeded_titular(db_session):
    """Titular activo en BD con un familiar (hijo) y un adherente activo."""
    from app import models

    titular = models.Titular(
        member_number="S0001",
        first_name="Marta",
        last_name="Gómez",
        dni="20111222",
        birth_date=date(1980, 1, 15),
        status=models.MemberStatusEnum.active,
    )
    titular.family_members.append(
        models.FamilyMember(first_name="Lucas", last_name="Gómez", dni="45111222",
                            birth_date=date(2012, 9, 3), relationship="Hijo/a")
    )
    titular.adherents.append(
        models.Adherent(first_name="Rosa", last_name="Pérez", dni="14111222",
                        status=models.AdherentStatusEnum.active)
    )
    db_session.add(titular)
    db_session.commit()
    db_session.refresh(titular)
    return titular
