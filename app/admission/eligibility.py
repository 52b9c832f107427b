# app/admission/eligibility.py
# =================================================================================
# 🚪 ELEGIBILIDAD DE INGRESO (titular / familiar / adherente)
# ---------------------------------------------------------------------------------
# - Titular y familiares: entran si el titular está activo.
# - Adherentes: titular activo Y adherente activo.
# - El apto médico se adjunta como aviso; nunca deniega.
# - Si fallan ambas condiciones, el motivo es el del titular.
# =================================================================================

from datetime import date
from typing import Iterable, NamedTuple, Optional, Union

from app.admission.fitness import evaluate_fitness
from app.models import AdherentStatusEnum, MemberStatusEnum, PersonRoleEnum
from app.schemas import (
    Adherent,
    EntryDecision,
    FamilyMember,
    GroupEligibility,
    PersonEligibility,
    Titular,
)

TITULAR_INACTIVE = "titular_inactive"
ADHERENT_INACTIVE = "adherent_inactive"


class PersonRef(NamedTuple):                        # Persona del grupo etiquetada por rol.
    role: PersonRoleEnum
    person: Union[Titular, FamilyMember, Adherent]


def resolve_entry(titular: Titular, ref: PersonRef, today: date) -> EntryDecision:
    fitness = evaluate_fitness(ref.person.fitness, today, ref.person.birth_date)

    if titular.status != MemberStatusEnum.active:
        return EntryDecision(
            permitted=False,
            reason="Titular inactivo: el grupo no puede ingresar.",
            denial_code=TITULAR_INACTIVE,
            fitness=fitness,
        )
    if ref.role == PersonRoleEnum.adherent and ref.person.status != AdherentStatusEnum.active:
        return EntryDecision(
            permitted=False,
            reason="Adherente inactivo.",
            denial_code=ADHERENT_INACTIVE,
            fitness=fitness,
        )
    return EntryDecision(permitted=True, reason=f"Apto médico: {fitness.message}", fitness=fitness)


def group_members(titular: Titular) -> Iterable[PersonRef]:
    yield PersonRef(PersonRoleEnum.titular, titular)
    for fm in titular.family_members:
        yield PersonRef(PersonRoleEnum.family, fm)
    for ad in titular.adherents:
        yield PersonRef(PersonRoleEnum.adherent, ad)


def find_person(titular: Titular, dni: str) -> Optional[PersonRef]:
    return next((ref for ref in group_members(titular) if ref.person.dni == dni), None)


def group_eligibility(titular: Titular, today: date, entered_dnis: Iterable[str] = ()) -> GroupEligibility:
    """Pantalla de portería: una fila por persona del grupo familiar."""
    entered = set(entered_dnis)
    people = [
        PersonEligibility(
            role=ref.role,
            dni=ref.person.dni,
            full_name=f"{ref.person.first_name} {ref.person.last_name}".strip(),
            decision=resolve_entry(titular, ref, today),
            entered_today=ref.person.dni in entered,
        )
        for ref in group_members(titular)
    ]
    return GroupEligibility(
        titular_id=titular.id,
        member_number=titular.member_number,
        status=titular.status,
        people=people,
    )
