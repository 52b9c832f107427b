# app/schemas.py  # Esquemas Pydantic: valores del motor de admisión y formas de la API.

# =================================================================================
# 📦 Schemas (MODELOS DE DATOS Pydantic)
# ---------------------------------------------------------------------------------
# Este archivo define los modelos de datos usados por el motor y por la API.
# - Son los valores inmutables que circulan por app/admission (se copian, no se mutan).
# - Validan la entrada de la API (DNI de 7/8 dígitos, nombres no vacíos).
# - Se construyen desde objetos ORM (from_attributes=True).
# =================================================================================

from datetime import date, datetime                                     # Fechas de calendario y sellos de ingreso.
from typing import Optional, List                                       # Tipos opcionales y listas.
import re                                                               # Validación de DNI.

from pydantic import (
    BaseModel,                                                          # Clase base de los modelos.
    EmailStr,                                                           # Email con validación de formato.
    field_validator,                                                    # Validación por campo.
    model_validator,                                                    # Validación por modelo.
    ConfigDict,                                                         # Configuración (from_attributes, etc.).
    Field,                                                              # Defaults y restricciones.
)

from app.models import (
    MemberStatusEnum,
    AdherentStatusEnum,
    GuestListStateEnum,
    PaymentMethodEnum,
    PersonRoleEnum,
    ReviewResultEnum,
    EntryTypeEnum,
)

_DNI_RE = re.compile(r"^\d{7,8}$")                                      # DNI argentino: 7 u 8 dígitos.

# =================================================================================
# 🧰 Utilidades de normalización
# =================================================================================
def _normalize_dni(raw: Optional[str]) -> str:
    """Quita puntos, espacios y guiones del DNI ('12.345.678' → '12345678')."""
    return re.sub(r"[\s.\-]", "", raw or "")

def _strip_required(v: Optional[str], label: str) -> str:
    v = (v or "").strip()                                               # Limpia espacios alrededor.
    if not v:                                                           # Si quedó vacío...
        raise ValueError(f"{label} es obligatorio.")                    # ...error entendible.
    return v

def _checked_dni(raw: Optional[str]) -> str:
    v = _normalize_dni(raw)
    if not _DNI_RE.match(v):                                            # 7 u 8 dígitos exactos.
        raise ValueError("El DNI debe tener 7 u 8 dígitos numéricos.")
    return v

def mask_dni(dni: Optional[str]) -> str:
    """Enmascara un DNI para no exponer PII en logs: '12345678' → '****5678'."""
    if not dni:
        return "<empty>"
    return f"{'*' * max(len(dni) - 4, 0)}{dni[-4:]}"

# =================================================================================
# 🩺 Apto médico
# =================================================================================
class FitnessRecord(BaseModel):                                         # Registro vigente de apto médico de una persona.
    valid: bool                                                         # Apto (True) o No Apto (False).
    issued_at: Optional[date] = None                                    # Fecha de emisión.
    expires_at: Optional[date] = None                                   # Último día válido (inclusive).
    invalidity_reason: Optional[str] = None                             # Motivo cuando valid=False.

    model_config = ConfigDict(from_attributes=True, frozen=True)

class FitnessStatus(BaseModel):                                         # Resultado derivado para mostrar en portería.
    status: str                                                         # valid | expired | invalid | pending | not_applicable.
    message: str                                                        # Texto listo para el operador.
    days_remaining: Optional[int] = None                                # Días hasta el vencimiento (si aplica).
    near_expiry: bool = False                                           # Aviso visual (<= 7 días), no bloquea.

# =================================================================================
# 👪 Grupo familiar (solo lectura para el motor)
# =================================================================================
class FamilyMember(BaseModel):
    id: Optional[int] = None
    first_name: str = ""
    last_name: str = ""
    dni: str
    birth_date: Optional[date] = None
    relationship: Optional[str] = None                                  # Cónyuge, Hijo/a...
    fitness: Optional[FitnessRecord] = None

    model_config = ConfigDict(from_attributes=True)

class Adherent(BaseModel):
    id: Optional[int] = None
    first_name: str = ""
    last_name: str = ""
    dni: str
    birth_date: Optional[date] = None
    status: AdherentStatusEnum = AdherentStatusEnum.inactive            # Estado propio del adherente.
    fitness: Optional[FitnessRecord] = None

    model_config = ConfigDict(from_attributes=True)

class Titular(BaseModel):                                               # Socio titular con su grupo embebido.
    id: int
    member_number: str = ""
    first_name: str = ""
    last_name: str = ""
    dni: str = ""
    email: Optional[str] = None                                         # Sin validar: puede venir de padrones viejos.
    birth_date: Optional[date] = None
    status: MemberStatusEnum = MemberStatusEnum.pending_validation
    fitness: Optional[FitnessRecord] = None
    family_members: List[FamilyMember] = Field(default_factory=list)
    adherents: List[Adherent] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)

# =================================================================================
# 🎟️ Invitados diarios y su lista
# =================================================================================
class Guest(BaseModel):
    id: Optional[int] = None
    first_name: str = ""
    last_name: str = ""
    dni: str
    birth_date: Optional[date] = None
    entered: bool = False
    entered_at: Optional[datetime] = None
    is_birthday_guest: Optional[bool] = None                            # None = todavía sin decidir.
    entered_as_birthday: bool = False                                   # Entró consumiendo cupo de cumpleaños.
    payment_method: Optional[PaymentMethodEnum] = None
    fitness: Optional[FitnessRecord] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_complete(self) -> bool:                                      # Nombre, apellido y DNI cargados.
        return bool(self.first_name.strip() and self.last_name.strip() and self.dni.strip())

class DailyGuestList(BaseModel):                                        # Lista diaria: una por (titular, fecha).
    id: Optional[int] = None
    titular_id: int
    list_date: date
    state: GuestListStateEnum = GuestListStateEnum.draft
    guests: List[Guest] = Field(default_factory=list)
    responding_member_has_entered: bool = False                         # Compuerta monótona del día.
    member_entries: List[str] = Field(default_factory=list)             # DNIs de responsables que ingresaron.
    version: Optional[int] = None                                       # None = nunca persistida.

    model_config = ConfigDict(from_attributes=True)

    @field_validator("member_entries", mode="before")
    @classmethod
    def _entries_as_dni(cls, v):                                        # Acepta filas ORM (MemberEntry) o strings.
        return [getattr(item, "dni", item) for item in (v or [])]

    def find_guest(self, dni: str) -> Optional[Guest]:
        return next((g for g in self.guests if g.dni == dni), None)

# =================================================================================
# 🧮 Cupo de cumpleaños
# =================================================================================
class QuotaSummary(BaseModel):
    total_quota: int                                                    # 15 por cada cumpleañero del día.
    used: int
    remaining: int
    birthday_members: int = 0
    restricted: bool = False                                            # Fecha bloqueada para cumpleaños.

# =================================================================================
# 🚪 Elegibilidad de ingreso
# =================================================================================
class EntryDecision(BaseModel):
    permitted: bool
    reason: str                                                         # Motivo de denegación o aviso de apto.
    denial_code: Optional[str] = None                                   # titular_inactive | adherent_inactive.
    fitness: Optional[FitnessStatus] = None

class PersonEligibility(BaseModel):                                     # Una fila de la pantalla de portería.
    role: PersonRoleEnum
    dni: str
    full_name: str
    decision: EntryDecision
    entered_today: bool = False

class GroupEligibility(BaseModel):
    titular_id: int
    member_number: str
    status: MemberStatusEnum
    people: List[PersonEligibility]

# =================================================================================
# 📋 Requests de la API
# =================================================================================
class GuestCreate(BaseModel):                                           # Alta de invitado por el socio.
    first_name: str = Field(..., max_length=120)
    last_name: str = Field(..., max_length=120)
    dni: str
    birth_date: Optional[date] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def _non_empty(cls, v: str, info) -> str:
        label = "El nombre" if info.field_name == "first_name" else "El apellido"
        return _strip_required(v, label)

    @field_validator("dni")
    @classmethod
    def _valid_dni(cls, v: str) -> str:
        return _checked_dni(v)

    def to_guest(self) -> Guest:
        return Guest(first_name=self.first_name, last_name=self.last_name, dni=self.dni, birth_date=self.birth_date)

class AdmitGuestRequest(BaseModel):                                     # Datos que elige el portero al dar ingreso.
    payment_method: Optional[PaymentMethodEnum] = None
    birthday_guest: bool = False

class BirthdayFlagRequest(BaseModel):
    is_birthday_guest: bool

class MemberEntryRequest(BaseModel):
    titular_id: int
    dni: str

    @field_validator("dni")
    @classmethod
    def _clean_dni(cls, v: str) -> str:
        return _strip_required(_normalize_dni(v), "El DNI")

class MedicalReviewCreate(BaseModel):                                   # Carga de una revisión médica (panel médico).
    titular_id: int
    person_dni: str
    review_date: date
    fit: bool
    notes: Optional[str] = Field(default=None, max_length=500)
    doctor: Optional[str] = Field(default=None, max_length=120)

    @model_validator(mode="after")
    def _sanitize(self):
        self.person_dni = _normalize_dni(self.person_dni)
        self.notes = ((self.notes or "").strip() or None)
        self.doctor = ((self.doctor or "").strip() or None)
        return self

# =================================================================================
# 🧾 Respuestas de la API
# =================================================================================
class GuestListView(BaseModel):                                         # Lista + estado derivado a "hoy".
    guest_list: Optional[DailyGuestList] = None                         # None si todavía no existe.
    titular_id: int
    list_date: date
    effective_state: Optional[GuestListStateEnum] = None                # Con vencimiento perezoso aplicado.
    editable: bool
    sendable: bool
    quota: QuotaSummary

class GuestListSummary(BaseModel):                                      # Fila del listado de administración.
    id: int
    titular_id: int
    member_number: str
    titular_name: str
    list_date: date
    state: GuestListStateEnum
    effective_state: GuestListStateEnum
    guests_total: int
    guests_entered: int
    responding_member_has_entered: bool

class MedicalReviewOut(BaseModel):
    id: int
    titular_id: int
    person_role: PersonRoleEnum
    person_dni: str
    review_date: date
    result: ReviewResultEnum
    expires_at: Optional[date] = None
    notes: Optional[str] = None
    doctor: Optional[str] = None

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

class EntryStatOut(BaseModel):
    stat_date: date
    entry_type: EntryTypeEnum
    total: int

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

class TitularSearchResult(BaseModel):
    id: int
    member_number: str
    full_name: str
    dni: str
    status: MemberStatusEnum

# =================================================================================
# 📥 Importación masiva de socios
# =================================================================================
class MemberImportRow(BaseModel):                                       # Una fila del padrón (CSV/Excel).
    member_number: str
    first_name: str
    last_name: str
    dni: str
    email: Optional[EmailStr] = None
    birth_date: Optional[date] = None
    status: MemberStatusEnum = MemberStatusEnum.active

    @field_validator("member_number", "first_name", "last_name")
    @classmethod
    def _required(cls, v: str, info) -> str:
        return _strip_required(v, info.field_name)

    @field_validator("dni")
    @classmethod
    def _dni(cls, v: str) -> str:
        return _strip_required(_normalize_dni(v), "dni")

class MemberImportPayload(BaseModel):                                    # Lote de filas ya validadas.
    items: List[MemberImportRow] = Field(default_factory=list)

class ImportResult(BaseModel):
    created: int = 0
    updated: int = 0
    skipped: int = 0
    errors: List[str] = Field(default_factory=list)

# =================================================================================
# 👪 Grupo familiar (altas, bajas y estados desde administración)
# =================================================================================
class _PersonCreate(BaseModel):
    first_name: str = Field(..., max_length=120)
    last_name: str = Field(..., max_length=120)
    dni: str
    birth_date: Optional[date] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def _required(cls, v: str, info) -> str:
        return _strip_required(v, info.field_name)

    @field_validator("dni")
    @classmethod
    def _dni(cls, v: str) -> str:
        return _checked_dni(v)

class FamilyMemberCreate(_PersonCreate):
    relationship: Optional[str] = Field(default=None, max_length=40)    # Cónyuge, Hijo/a, Padre/Madre.

class AdherentCreate(_PersonCreate):
    status: AdherentStatusEnum = AdherentStatusEnum.active

class MemberStatusUpdate(BaseModel):
    status: MemberStatusEnum

class AdherentStatusUpdate(BaseModel):
    status: AdherentStatusEnum

class MemberEntryResult(BaseModel):                                     # Resultado de registrar el ingreso de un responsable.
    guest_list: DailyGuestList
    role: PersonRoleEnum
    decision: EntryDecision
    first_entry: bool                                                   # False si ya había ingresado hoy.
