# tests/api/test_guest_lists_api.py
# Rutas del socio: ver, armar, enviar y cancelar la lista diaria.

from datetime import timedelta


def _base(titular_id, day):
    return f"/api/members/{titular_id}/guest-lists/{day.isoformat()}"


GUEST = {"first_name": "Ana", "last_name": "Ruiz", "dni": "12.345.678"}


def test_view_before_any_guest(client, seeded_titular, today):
    r = client.get(_base(seeded_titular.id, today))
    assert r.status_code == 200
    body = r.json()
    assert body["guest_list"] is None
    assert body["editable"] is True
    assert body["sendable"] is True
    assert body["quota"]["total_quota"] == 0


def test_add_send_and_cancel(client, seeded_titular, today):
    base = _base(seeded_titular.id, today)

    r = client.post(f"{base}/guests", json=GUEST)
    assert r.status_code == 201
    assert r.json()["guests"][0]["dni"] == "12345678"
    assert r.json()["state"] == "draft"

    r = client.post(f"{base}/send")
    assert r.status_code == 200
    assert r.json()["state"] == "sent"

    r = client.post(f"{base}/cancel")
    assert r.json()["state"] == "cancelled_by_member"

    r = client.post(f"{base}/guests", json={**GUEST, "dni": "87654321"})
    assert r.status_code == 409
    assert r.json()["detail"]["code"] == "not_editable"


def test_duplicate_and_invalid_guest(client, seeded_titular, today):
    base = _base(seeded_titular.id, today)
    client.post(f"{base}/guests", json=GUEST)

    r = client.post(f"{base}/guests", json=GUEST)
    assert r.status_code == 422
    assert r.json()["detail"]["code"] == "validation_error"

    r = client.post(f"{base}/guests", json={**GUEST, "dni": "12AB"})
    assert r.status_code == 422                                    # Validación Pydantic del request.


def test_send_outside_window(client, seeded_titular, today):
    base = _base(seeded_titular.id, today + timedelta(days=6))
    client.post(f"{base}/guests", json=GUEST)
    r = client.post(f"{base}/send")
    assert r.status_code == 409
    assert r.json()["detail"]["code"] == "not_sendable"


def test_send_without_guests(client, seeded_titular, today):
    r = client.post(f"{_base(seeded_titular.id, today)}/send")
    assert r.status_code == 422
    assert r.json()["detail"]["code"] == "validation_error"


def test_remove_guest(client, seeded_titular, today):
    base = _base(seeded_titular.id, today)
    client.post(f"{base}/guests", json=GUEST)
    r = client.delete(f"{base}/guests/12345678")
    assert r.status_code == 200
    assert r.json()["guests"] == []
    assert client.delete(f"{base}/guests/12345678").status_code == 404


def test_unknown_member(client, db_session, today):
    r = client.get(_base(999, today))
    assert r.status_code == 404
    assert r.json()["detail"]["code"] == "member_not_found"


def test_past_list_reads_as_expired(client, seeded_titular, today, clock):
    base = _base(seeded_titular.id, today)
    client.post(f"{base}/guests", json=GUEST)
    clock.advance(days=1)
    body = client.get(base).json()
    assert body["effective_state"] == "expired"
    assert body["guest_list"]["state"] == "draft"
    assert body["editable"] is False
