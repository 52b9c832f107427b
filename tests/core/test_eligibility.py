# tests/core/test_eligibility.py
# Elegibilidad del grupo familiar en portería.

from datetime import date, timedelta

import pytest

from app.admission.eligibility import (
    ADHERENT_INACTIVE,
    TITULAR_INACTIVE,
    PersonRef,
    find_person,
    group_eligibility,
    resolve_entry,
)
from app.models import AdherentStatusEnum, MemberStatusEnum, PersonRoleEnum
from app.schemas import FitnessRecord


def test_active_titular_and_family_enter(titular_factory, today):
    titular = titular_factory(family_birthdays=[date(2012, 9, 3)])
    for dni, role in ((titular.dni, PersonRoleEnum.titular), ("30000000", PersonRoleEnum.family)):
        ref = find_person(titular, dni)
        assert ref.role == role
        decision = resolve_entry(titular, ref, today)
        assert decision.permitted is True
        assert decision.denial_code is None


def test_inactive_titular_blocks_whole_group(titular_factory, today):
    titular = titular_factory(status=MemberStatusEnum.inactive, family_birthdays=[date(2012, 9, 3)])
    result = group_eligibility(titular, today)
    assert all(not p.decision.permitted for p in result.people)
    assert {p.decision.denial_code for p in result.people} == {TITULAR_INACTIVE}


def test_pending_validation_titular_is_not_active(titular_factory, today):
    titular = titular_factory(status=MemberStatusEnum.pending_validation)
    decision = resolve_entry(titular, PersonRef(PersonRoleEnum.titular, titular), today)
    assert decision.permitted is False
    assert decision.denial_code == TITULAR_INACTIVE


def test_inactive_adherent_is_denied_alone(titular_factory, today):
    titular = titular_factory(adherent_status=AdherentStatusEnum.inactive)
    adherent = find_person(titular, "14111222")
    assert adherent.role == PersonRoleEnum.adherent
    decision = resolve_entry(titular, adherent, today)
    assert decision.permitted is False
    assert decision.denial_code == ADHERENT_INACTIVE
    assert resolve_entry(titular, find_person(titular, titular.dni), today).permitted is True


def test_titular_reason_wins_when_both_fail(titular_factory, today):
    titular = titular_factory(status=MemberStatusEnum.inactive, adherent_status=AdherentStatusEnum.inactive)
    decision = resolve_entry(titular, find_person(titular, "14111222"), today)
    assert decision.denial_code == TITULAR_INACTIVE


def test_expired_fitness_only_warns(titular_factory, today):
    titular = titular_factory()
    titular.fitness = FitnessRecord(valid=True, expires_at=today - timedelta(days=1))
    decision = resolve_entry(titular, find_person(titular, titular.dni), today)
    assert decision.permitted is True
    assert decision.fitness.status == "expired"
    assert decision.reason.startswith("Apto médico: Vencido")


def test_group_rows_mark_who_entered(titular_factory, today):
    titular = titular_factory(family_birthdays=[date(2012, 9, 3)])
    result = group_eligibility(titular, today, entered_dnis=[titular.dni])
    roles = [p.role for p in result.people]
    assert roles == [PersonRoleEnum.titular, PersonRoleEnum.family, PersonRoleEnum.adherent]
    assert [p.entered_today for p in result.people] == [True, False, False]
    assert result.people[0].full_name == "Marta Gómez"


def test_unknown_person_is_not_in_group(titular_factory):
    assert find_person(titular_factory(), "00000001") is None


@pytest.mark.parametrize("titular_status, adherent_status, permitted", [
    (MemberStatusEnum.active, AdherentStatusEnum.active, True),
    (MemberStatusEnum.active, AdherentStatusEnum.inactive, False),
    (MemberStatusEnum.inactive, AdherentStatusEnum.active, False),
    (MemberStatusEnum.inactive, AdherentStatusEnum.inactive, False),
])
def test_adherent_truth_table(titular_factory, today, titular_status, adherent_status, permitted):
    titular = titular_factory(status=titular_status, adherent_status=adherent_status)
    assert resolve_entry(titular, find_person(titular, "14111222"), today).permitted is permitted
