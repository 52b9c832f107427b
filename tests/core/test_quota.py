# tests/core/test_quota.py
# Cupo de cumpleaños: 15 por cumpleañero, fechas bloqueadas y consumo derivado de las marcas.

from datetime import date

from app.admission.guest_list import new_list
from app.admission.quota import (
    birthday_members,
    compute_quota,
    counts_as_used,
    is_birthday,
    set_birthday_flag,
)
from app.admission.results import FailureCode


def _birthday_titular(titular_factory, today, family=()):
    return titular_factory(birth_date=date(1980, today.month, today.day), family_birthdays=family)


def test_no_birthday_means_no_quota(titular_factory, today):
    quota = compute_quota(titular_factory(), [], today, restricted=False)
    assert quota.total_quota == 0
    assert quota.remaining == 0
    assert quota.birthday_members == 0


def test_fifteen_guests_per_birthday_member(titular_factory, today):
    titular = _birthday_titular(titular_factory, today, family=[date(2010, today.month, today.day), date(2011, 1, 1)])
    quota = compute_quota(titular, [], today, restricted=False)
    assert quota.birthday_members == 2
    assert quota.total_quota == 30


def test_adherents_do_not_unlock_quota(titular_factory, today):
    titular = titular_factory()
    titular.adherents[0].birth_date = date(1970, today.month, today.day)
    assert birthday_members(titular, today) == 0


def test_restricted_date_has_zero_quota(titular_factory):
    christmas = date(2025, 12, 25)
    titular = titular_factory(birth_date=date(1980, 12, 25))
    quota = compute_quota(titular, [], christmas, restricted=True)
    assert quota.total_quota == 0
    assert quota.restricted is True
    assert quota.birthday_members == 1


def test_leap_day_birthday_only_in_leap_years():
    assert is_birthday(date(2000, 2, 29), date(2024, 2, 29))
    assert not is_birthday(date(2000, 2, 29), date(2025, 2, 28))
    assert not is_birthday(date(2000, 2, 29), date(2025, 3, 1))


def test_used_counts_flags_and_birthday_entries(guest_factory):
    assert counts_as_used(guest_factory(is_birthday_guest=True))
    assert not counts_as_used(guest_factory(is_birthday_guest=False))
    assert not counts_as_used(guest_factory())
    assert counts_as_used(guest_factory(entered=True, entered_as_birthday=True))


def test_exclude_dni_leaves_current_guest_out(titular_factory, guest_factory, today):
    titular = _birthday_titular(titular_factory, today)
    guests = [guest_factory(dni="11111111", is_birthday_guest=True), guest_factory(dni="22222222", is_birthday_guest=True)]
    assert compute_quota(titular, guests, today, False).used == 2
    assert compute_quota(titular, guests, today, False, exclude_dni="11111111").used == 1


def test_set_flag_respects_quota(titular_factory, guest_factory, today):
    titular = _birthday_titular(titular_factory, today)
    gl = new_list(titular.id, today)
    gl.guests = [guest_factory(dni=f"{10000000 + i}", is_birthday_guest=True) for i in range(15)]
    gl.guests.append(guest_factory(dni="99999999"))

    outcome = set_birthday_flag(gl, titular, "99999999", True, restricted=False)
    assert not outcome.ok
    assert outcome.failure.code == FailureCode.quota_exceeded

    # Desmarcar siempre se puede y libera lugar.
    freed = set_birthday_flag(gl, titular, "10000000", False, restricted=False)
    assert freed.ok
    retry = set_birthday_flag(freed.value, titular, "99999999", True, restricted=False)
    assert retry.ok
    assert retry.value.find_guest("99999999").is_birthday_guest is True


def test_set_flag_on_restricted_date(titular_factory, guest_factory, today):
    titular = _birthday_titular(titular_factory, today)
    gl = new_list(titular.id, today)
    gl.guests = [guest_factory()]
    outcome = set_birthday_flag(gl, titular, gl.guests[0].dni, True, restricted=True)
    assert outcome.failure.code == FailureCode.restricted_date


def test_set_flag_does_not_mutate_input(titular_factory, guest_factory, today):
    titular = _birthday_titular(titular_factory, today)
    gl = new_list(titular.id, today)
    gl.guests = [guest_factory()]
    outcome = set_birthday_flag(gl, titular, gl.guests[0].dni, True, restricted=False)
    assert outcome.ok
    assert gl.guests[0].is_birthday_guest is None


def test_set_flag_unknown_guest(titular_factory, today):
    outcome = set_birthday_flag(new_list(1, today), titular_factory(), "00000000", True, restricted=False)
    assert outcome.failure.code == FailureCode.guest_not_found


def test_entered_guest_flag_is_locked(titular_factory, guest_factory, today):
    titular = _birthday_titular(titular_factory, today)
    gl = new_list(titular.id, today)
    gl.guests = [
        guest_factory(dni="11111111", entered=True, is_birthday_guest=True, entered_as_birthday=True),
        guest_factory(dni="22222222", entered=True, is_birthday_guest=False),
    ]
    for dni, flag in (("11111111", False), ("22222222", True)):
        outcome = set_birthday_flag(gl, titular, dni, flag, restricted=False)
        assert outcome.failure.code == FailureCode.already_entered
    assert compute_quota(titular, gl.guests, today, False).used == 1
