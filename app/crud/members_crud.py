# app/crud/members_crud.py                                                      # Ruta del archivo dentro del proyecto.

# =================================================================================
# 🧩 CRUD de Socios (titulares con familiares y adherentes)
# - SqlMemberDirectory: implementa MemberDirectory para el motor (solo lectura).
# - Búsqueda de portería por N° de socio, DNI o nombre.
# - Upsert usado por la importación masiva del padrón.
# - Altas y bajas de familiares y adherentes; estados de titular y adherente.
# =================================================================================

import re
import unicodedata
from typing import List, Optional

from loguru import logger
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.models import Adherent, AdherentStatusEnum, FamilyMember, MemberStatusEnum, Titular
from app.schemas import AdherentCreate, FamilyMemberCreate, MemberImportRow, Titular as TitularSchema, mask_dni

# ---------------------------------------------------------------------------------
# 🛡️ Helpers de normalización y logs
# ---------------------------------------------------------------------------------

def _norm_name(s: str) -> str:
    """Quita acentos, colapsa espacios y aplica casefold."""
    txt = unicodedata.normalize("NFKD", (s or "").strip())
    txt = "".join(ch for ch in txt if not unicodedata.combining(ch))
    return re.sub(r"\s+", " ", txt).casefold()

# ---------------------------------------------------------------------------------
# 📇 Adaptador MemberDirectory
# ---------------------------------------------------------------------------------

class SqlMemberDirectory:
    def __init__(self, db: Session):
        self.db = db

    def get_titular(self, titular_id: int) -> Optional[TitularSchema]:
        row = get_by_id(self.db, titular_id)
        return TitularSchema.model_validate(row) if row else None

# ---------------------------------------------------------------------------------
# 🔎 Helpers de búsqueda
# ---------------------------------------------------------------------------------

def get_by_id(db: Session, titular_id: int) -> Optional[Titular]:
    return db.query(Titular).filter(Titular.id == titular_id).first()

def get_by_member_number(db: Session, member_number: str) -> Optional[Titular]:
    if not member_number:
        return None
    return db.query(Titular).filter(Titular.member_number == member_number.strip()).first()

def get_by_dni(db: Session, dni: str) -> Optional[Titular]:
    if not dni:
        return None
    return db.query(Titular).filter(Titular.dni == dni.strip()).first()

def search(db: Session, query: str, limit: int = 20) -> List[Titular]:
    """Portería: coincidencia exacta por N° de socio o DNI; si no, por palabras del nombre."""
    q = (query or "").strip()
    if not q:
        return []

    exact = (
        db.query(Titular)
        .filter(or_(Titular.member_number == q, Titular.dni == q))
        .all()
    )
    if exact:
        return exact

    # Los acentos no se pueden ignorar en SQL de forma portable: se compara en Python.
    tokens = _norm_name(q).split()
    candidates = db.query(Titular).order_by(Titular.last_name, Titular.first_name).all()
    matches = [
        t for t in candidates
        if set(tokens).issubset(set(_norm_name(f"{t.first_name} {t.last_name}").split()))
    ]
    logger.debug("CRUD/search → q_tokens={} candidatos={} matches={}", len(tokens), len(candidates), len(matches))
    return matches[:limit]

# ---------------------------------------------------------------------------------
# 📥 Upsert del padrón
# ---------------------------------------------------------------------------------

def upsert_member(db: Session, item: MemberImportRow) -> bool:
    """Crea o actualiza un titular por N° de socio (o DNI). Devuelve True si lo creó."""
    existing = get_by_member_number(db, item.member_number) or get_by_dni(db, item.dni)

    if existing:
        existing.member_number = item.member_number
        existing.first_name = item.first_name
        existing.last_name = item.last_name
        existing.dni = item.dni
        existing.status = item.status
        if item.email is not None:                                # No pisa opcionales con None.
            existing.email = str(item.email).lower()
        if item.birth_date is not None:
            existing.birth_date = item.birth_date
        db.add(existing)
        db.commit()
        logger.info("CRUD/upsert_member → actualizado {} ({})", item.member_number, mask_dni(item.dni))
        return False

    obj = Titular(
        member_number=item.member_number,
        first_name=item.first_name,
        last_name=item.last_name,
        dni=item.dni,
        email=str(item.email).lower() if item.email else None,
        birth_date=item.birth_date,
        status=item.status,
    )
    db.add(obj)
    db.commit()
    logger.info("CRUD/upsert_member → creado {} ({})", item.member_number, mask_dni(item.dni))
    return True

# ---------------------------------------------------------------------------------
# 👪 Grupo familiar: altas, bajas y estados
# - Todas reciben la fila del titular ya resuelta (el router decide el 404).
# - Las bajas devuelven False si el DNI no está en el grupo.
# ---------------------------------------------------------------------------------

def dni_in_group(titular: Titular, dni: str) -> bool:
    """True si el DNI ya es del titular, de un familiar o de un adherente."""
    return dni == titular.dni or any(p.dni == dni for p in (*titular.family_members, *titular.adherents))

def add_family_member(db: Session, titular: Titular, item: FamilyMemberCreate) -> Titular:
    titular.family_members.append(
        FamilyMember(
            first_name=item.first_name,
            last_name=item.last_name,
            dni=item.dni,
            birth_date=item.birth_date,
            relationship=item.relationship,
        )
    )
    db.commit()
    db.refresh(titular)
    logger.info("CRUD/add_family_member → {} suma familiar {}", titular.member_number, mask_dni(item.dni))
    return titular

def remove_family_member(db: Session, titular: Titular, dni: str) -> bool:
    fm = next((f for f in titular.family_members if f.dni == dni), None)
    if fm is None:
        return False
    titular.family_members.remove(fm)                              # delete-orphan borra la fila.
    db.commit()
    logger.info("CRUD/remove_family_member → {} quita familiar {}", titular.member_number, mask_dni(dni))
    return True

def add_adherent(db: Session, titular: Titular, item: AdherentCreate) -> Titular:
    titular.adherents.append(
        Adherent(
            first_name=item.first_name,
            last_name=item.last_name,
            dni=item.dni,
            birth_date=item.birth_date,
            status=item.status,
        )
    )
    db.commit()
    db.refresh(titular)
    logger.info("CRUD/add_adherent → {} suma adherente {}", titular.member_number, mask_dni(item.dni))
    return titular

def remove_adherent(db: Session, titular: Titular, dni: str) -> bool:
    ad = next((a for a in titular.adherents if a.dni == dni), None)
    if ad is None:
        return False
    titular.adherents.remove(ad)
    db.commit()
    logger.info("CRUD/remove_adherent → {} quita adherente {}", titular.member_number, mask_dni(dni))
    return True

def set_adherent_status(db: Session, titular: Titular, dni: str, new_status: AdherentStatusEnum) -> bool:
    ad = next((a for a in titular.adherents if a.dni == dni), None)
    if ad is None:
        return False
    ad.status = new_status
    db.commit()
    logger.info("CRUD/set_adherent_status → {} {} = {}", titular.member_number, mask_dni(dni), new_status.value)
    return True

def set_titular_status(db: Session, titular: Titular, new_status: MemberStatusEnum) -> Titular:
    titular.status = new_status
    db.commit()
    db.refresh(titular)
    logger.info("CRUD/set_titular_status → {} = {}", titular.member_number, new_status.value)
    return titular
