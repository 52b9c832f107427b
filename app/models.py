# app/models.py  # Modelos ORM del club (socios, grupo familiar, listas de invitados).

# =================================================================================
# 🏛️ DEFINICIÓN DE LOS MODELOS DE LA BASE DE DATOS (ORM)
# ---------------------------------------------------------------------------------
# Este archivo define la estructura de las tablas usando SQLAlchemy ORM.
# Implementa:
# - Enums para consistencia (estados de socio, de lista, medios de pago, roles).
# - Socio titular con composición de familiares y adherentes (se borran con él).
# - Lista diaria de invitados única por (titular, fecha) con versión optimista.
# - Historial de revisiones médicas (solo se agrega, nunca se edita).
# - Estadísticas de ingresos por día y tipo.
# =================================================================================

from datetime import datetime  # Sellos de tiempo de auditoría.
import enum  # Enumeraciones tipadas.

from sqlalchemy import (
    Column,  # Declaración de columnas.
    Integer,  # IDs, versiones y contadores.
    String,  # Nombres, DNI y códigos.
    Boolean,  # Flags (apto, ingresado, cumpleaños).
    Date,  # Fechas de calendario (sin hora).
    DateTime,  # Fecha/hora de auditoría e ingreso.
    ForeignKey,  # Relaciones entre tablas.
    func,  # Funciones SQL (now()).
    Enum as SQLAlchemyEnum,  # Mapea enums de Python.
    UniqueConstraint,  # Unicidad compuesta.
)
from sqlalchemy.orm import relationship as orm_relationship  # Relaciones ORM.

from app.db import Base  # Base declarativa del proyecto.

# 🗂️ ENUMS PARA CONSISTENCIA DE DATOS
# ---------------------------------------------------------------------------------
class MemberStatusEnum(str, enum.Enum):  # Estado del socio titular.
    active = "active"  # Activo: puede ingresar.
    inactive = "inactive"  # Inactivo (baja, deuda, suspensión).
    pending_validation = "pending_validation"  # Alta todavía sin validar.

class AdherentStatusEnum(str, enum.Enum):  # Estado propio del adherente.
    active = "active"
    inactive = "inactive"

class GuestListStateEnum(str, enum.Enum):  # Ciclo de vida de la lista diaria.
    draft = "draft"  # Borrador (creada al agregar el primer invitado).
    sent = "sent"  # Enviada por el socio (admite enmiendas).
    processed = "processed"  # Procesada por administración.
    cancelled_by_member = "cancelled_by_member"  # Terminal.
    cancelled_by_admin = "cancelled_by_admin"  # Terminal.
    expired = "expired"  # Terminal (derivado en lectura si la fecha ya pasó).

class PaymentMethodEnum(str, enum.Enum):  # Medio de pago del invitado (solo se registra).
    cash = "cash"  # Efectivo.
    transfer = "transfer"  # Transferencia.
    till = "till"  # Caja.

class PersonRoleEnum(str, enum.Enum):  # Rol de la persona frente a la portería.
    titular = "titular"
    family = "family"
    adherent = "adherent"
    guest = "guest"

class ReviewResultEnum(str, enum.Enum):  # Resultado de una revisión médica.
    fit = "fit"  # Apto.
    unfit = "unfit"  # No apto.

class EntryTypeEnum(str, enum.Enum):  # Desglose de estadísticas de ingreso.
    titular = "titular"
    familiar = "familiar"
    adherente = "adherente"
    invitado_diario = "invitado_diario"
    invitado_cumpleanos = "invitado_cumpleanos"

# 🩺 COLUMNAS DE APTO MÉDICO (compartidas por titular, familiar, adherente e invitado)
# ---------------------------------------------------------------------------------
class FitnessColumnsMixin:
    fitness_valid = Column(Boolean, nullable=True)  # None = sin registro (Pendiente).
    fitness_issued_at = Column(Date, nullable=True)  # Fecha de emisión.
    fitness_expires_at = Column(Date, nullable=True)  # Último día válido (inclusive).
    fitness_invalidity_reason = Column(String(255), nullable=True)  # Motivo si no es apto.

    @property
    def fitness(self):  # Vista del registro actual para los schemas (from_attributes).
        if self.fitness_valid is None:
            return None
        return {
            "valid": self.fitness_valid,
            "issued_at": self.fitness_issued_at,
            "expires_at": self.fitness_expires_at,
            "invalidity_reason": self.fitness_invalidity_reason,
        }

    def apply_fitness(self, record) -> None:  # Reemplaza el registro actual (el historial queda en medical_reviews).
        self.fitness_valid = record.valid
        self.fitness_issued_at = record.issued_at
        self.fitness_expires_at = record.expires_at
        self.fitness_invalidity_reason = record.invalidity_reason

# 🧑 SOCIO TITULAR (TABLA 'members')
# ---------------------------------------------------------------------------------
class Titular(FitnessColumnsMixin, Base):
    __tablename__ = "members"

    id = Column(Integer, primary_key=True, index=True)
    member_number = Column(String(32), unique=True, index=True, nullable=False)  # N° de socio.
    first_name = Column(String(120), nullable=False)
    last_name = Column(String(120), index=True, nullable=False)
    dni = Column(String(16), unique=True, index=True, nullable=False)
    email = Column(String(254), nullable=True)
    birth_date = Column(Date, nullable=True)
    status = Column(SQLAlchemyEnum(MemberStatusEnum), nullable=False, default=MemberStatusEnum.pending_validation)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # --- Composición: familiares y adherentes se eliminan con el titular ---
    family_members = orm_relationship(
        "FamilyMember",
        cascade="all, delete-orphan",
        back_populates="titular",
        lazy="selectin",
        order_by="FamilyMember.id",
    )
    adherents = orm_relationship(
        "Adherent",
        cascade="all, delete-orphan",
        back_populates="titular",
        lazy="selectin",
        order_by="Adherent.id",
    )

# 👪 FAMILIARES (TABLA 'family_members')
# ---------------------------------------------------------------------------------
class FamilyMember(FitnessColumnsMixin, Base):
    __tablename__ = "family_members"

    id = Column(Integer, primary_key=True, index=True)
    titular_id = Column(Integer, ForeignKey("members.id", ondelete="CASCADE"), index=True, nullable=False)
    first_name = Column(String(120), nullable=False)
    last_name = Column(String(120), nullable=False)
    dni = Column(String(16), index=True, nullable=False)
    birth_date = Column(Date, nullable=True)
    relationship = Column(String(40), nullable=True)  # Cónyuge, Hijo/a, Padre/Madre.

    titular = orm_relationship("Titular", back_populates="family_members")

# 🤝 ADHERENTES (TABLA 'adherents')
# ---------------------------------------------------------------------------------
class Adherent(FitnessColumnsMixin, Base):
    __tablename__ = "adherents"

    id = Column(Integer, primary_key=True, index=True)
    titular_id = Column(Integer, ForeignKey("members.id", ondelete="CASCADE"), index=True, nullable=False)
    first_name = Column(String(120), nullable=False)
    last_name = Column(String(120), nullable=False)
    dni = Column(String(16), index=True, nullable=False)
    birth_date = Column(Date, nullable=True)
    status = Column(SQLAlchemyEnum(AdherentStatusEnum), nullable=False, default=AdherentStatusEnum.inactive)

    titular = orm_relationship("Titular", back_populates="adherents")

# 📋 LISTA DIARIA DE INVITADOS (TABLA 'guest_lists')
# ---------------------------------------------------------------------------------
class GuestList(Base):
    __tablename__ = "guest_lists"
    __table_args__ = (
        UniqueConstraint("titular_id", "list_date", name="uq_guest_lists_titular_date"),  # Una lista por (titular, día).
    )

    id = Column(Integer, primary_key=True, index=True)
    titular_id = Column(Integer, ForeignKey("members.id", ondelete="CASCADE"), index=True, nullable=False)
    list_date = Column(Date, index=True, nullable=False)
    state = Column(SQLAlchemyEnum(GuestListStateEnum), nullable=False, default=GuestListStateEnum.draft)
    responding_member_has_entered = Column(Boolean, nullable=False, default=False)  # Compuerta "ingresó un responsable".
    version = Column(Integer, nullable=False)  # Control de concurrencia optimista.

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    guests = orm_relationship(
        "DailyGuest",
        cascade="all, delete-orphan",
        back_populates="guest_list",
        lazy="selectin",
        order_by="DailyGuest.id",
    )
    member_entries = orm_relationship(
        "MemberEntry",
        cascade="all, delete-orphan",
        back_populates="guest_list",
        lazy="selectin",
        order_by="MemberEntry.id",
    )

    __mapper_args__ = {"version_id_col": version}  # UPDATE ... WHERE version = :leída.

# 🎟️ INVITADO DIARIO (TABLA 'daily_guests')
# ---------------------------------------------------------------------------------
class DailyGuest(FitnessColumnsMixin, Base):
    __tablename__ = "daily_guests"
    __table_args__ = (
        UniqueConstraint("guest_list_id", "dni", name="uq_daily_guests_list_dni"),
    )

    id = Column(Integer, primary_key=True, index=True)
    guest_list_id = Column(Integer, ForeignKey("guest_lists.id", ondelete="CASCADE"), index=True, nullable=False)
    first_name = Column(String(120), nullable=False, default="")
    last_name = Column(String(120), nullable=False, default="")
    dni = Column(String(16), nullable=False)
    birth_date = Column(Date, nullable=True)
    entered = Column(Boolean, nullable=False, default=False)
    entered_at = Column(DateTime, nullable=True)
    is_birthday_guest = Column(Boolean, nullable=True)  # None = sin decidir todavía.
    entered_as_birthday = Column(Boolean, nullable=False, default=False)  # Ingresó consumiendo cupo.
    payment_method = Column(SQLAlchemyEnum(PaymentMethodEnum), nullable=True)

    guest_list = orm_relationship("GuestList", back_populates="guests")

# 🚪 INGRESOS DE RESPONSABLES (TABLA 'member_entries')
# ---------------------------------------------------------------------------------
class MemberEntry(Base):
    __tablename__ = "member_entries"
    __table_args__ = (
        UniqueConstraint("guest_list_id", "dni", name="uq_member_entries_list_dni"),
    )

    id = Column(Integer, primary_key=True, index=True)
    guest_list_id = Column(Integer, ForeignKey("guest_lists.id", ondelete="CASCADE"), index=True, nullable=False)
    dni = Column(String(16), nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    guest_list = orm_relationship("GuestList", back_populates="member_entries")

# 🩺 HISTORIAL DE REVISIONES MÉDICAS (TABLA 'medical_reviews')
# ---------------------------------------------------------------------------------
class MedicalReview(Base):
    __tablename__ = "medical_reviews"

    id = Column(Integer, primary_key=True, index=True)
    titular_id = Column(Integer, ForeignKey("members.id", ondelete="CASCADE"), index=True, nullable=False)
    person_role = Column(SQLAlchemyEnum(PersonRoleEnum), nullable=False)
    person_dni = Column(String(16), index=True, nullable=False)
    review_date = Column(Date, nullable=False)
    result = Column(SQLAlchemyEnum(ReviewResultEnum), nullable=False)
    expires_at = Column(Date, nullable=True)
    notes = Column(String(500), nullable=True)
    doctor = Column(String(120), nullable=True)
    created_at = Column(DateTime, server_default=func.now())

# 📊 ESTADÍSTICAS DE INGRESOS (TABLA 'entry_stats')
# ---------------------------------------------------------------------------------
class EntryStat(Base):
    __tablename__ = "entry_stats"
    __table_args__ = (
        UniqueConstraint("stat_date", "entry_type", name="uq_entry_stats_date_type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    stat_date = Column(Date, index=True, nullable=False)
    entry_type = Column(SQLAlchemyEnum(EntryTypeEnum), nullable=False)
    total = Column(Integer, nullable=False, default=0)
