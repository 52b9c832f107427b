# app/crud/entry_stats_crud.py

# =================================================================================
# 📊 Estadísticas de ingresos por día y tipo
# Se suma 1 por cada ingreso registrado (responsable o invitado). Una reversión
# de ingreso no descuenta: la estadística cuenta pasadas por portería.
# =================================================================================

from datetime import date
from typing import List, Optional

from loguru import logger
from sqlalchemy.orm import Session

from app.models import EntryStat, EntryTypeEnum, PersonRoleEnum
from app.schemas import Guest

_ROLE_TO_TYPE = {
    PersonRoleEnum.titular: EntryTypeEnum.titular,
    PersonRoleEnum.family: EntryTypeEnum.familiar,
    PersonRoleEnum.adherent: EntryTypeEnum.adherente,
}


def entry_type_for_member(role: PersonRoleEnum) -> EntryTypeEnum:
    return _ROLE_TO_TYPE[role]


def entry_type_for_guest(guest: Guest) -> EntryTypeEnum:
    return EntryTypeEnum.invitado_cumpleanos if guest.entered_as_birthday else EntryTypeEnum.invitado_diario


def increment(db: Session, stat_date: date, entry_type: EntryTypeEnum) -> EntryStat:
    row = (
        db.query(EntryStat)
        .filter(EntryStat.stat_date == stat_date, EntryStat.entry_type == entry_type)
        .first()
    )
    if row is None:
        row = EntryStat(stat_date=stat_date, entry_type=entry_type, total=0)
        db.add(row)
    row.total = (row.total or 0) + 1
    db.commit()
    db.refresh(row)
    logger.debug("Stats {} {} → {}", stat_date, entry_type.value, row.total)
    return row


def for_range(db: Session, start: date, end: Optional[date] = None) -> List[EntryStat]:
    end = end or start
    return (
        db.query(EntryStat)
        .filter(EntryStat.stat_date >= start, EntryStat.stat_date <= end)
        .order_by(EntryStat.stat_date, EntryStat.entry_type)
        .all()
    )
