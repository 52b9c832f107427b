# tests/api/test_admin_api.py
# Administración: padrón y grupo familiar, tablero de listas, revisiones médicas y estadísticas.


def _add_and_send(client, titular_id, day):
    base = f"/api/members/{titular_id}/guest-lists/{day.isoformat()}"
    client.post(f"{base}/guests", json={"first_name": "Ana", "last_name": "Ruiz", "dni": "12345678"})
    return client.post(f"{base}/send")


def test_requires_admin_key(client, staff_headers):
    assert client.get("/api/admin/guest-lists").status_code == 401
    assert client.get("/api/admin/guest-lists", headers=staff_headers).status_code == 401


def test_import_members_upserts(client, db_session, admin_headers):
    items = [
        {"member_number": "A1", "first_name": "Juan", "last_name": "Paz", "dni": "30111222"},
        {"member_number": "A2", "first_name": "Lía", "last_name": "Sosa", "dni": "30111333",
         "email": "lia@example.com", "birth_date": "1990-02-01", "status": "pending_validation"},
    ]
    r = client.post("/api/admin/import-members", json={"items": items}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json() == {"created": 2, "updated": 0, "skipped": 0, "errors": []}

    items[0]["status"] = "inactive"
    r = client.post("/api/admin/import-members", json={"items": items[:1]}, headers=admin_headers)
    assert r.json()["updated"] == 1


def test_import_skips_conflicting_row(client, seeded_titular, admin_headers):
    # La segunda fila reasigna a B1 el DNI de otro socio: la BD la rechaza y el lote sigue.
    items = [
        {"member_number": "B1", "first_name": "Otro", "last_name": "Socio", "dni": "30999888"},
        {"member_number": "B1", "first_name": "Choque", "last_name": "DNI", "dni": "20111222"},
    ]
    r = client.post("/api/admin/import-members", json={"items": items}, headers=admin_headers)
    body = r.json()
    assert body["created"] == 1
    assert body["skipped"] == 1
    assert body["errors"] == ["Row 2: IntegrityError"]


def test_guest_list_dashboard_and_transitions(client, seeded_titular, admin_headers, today):
    assert _add_and_send(client, seeded_titular.id, today).status_code == 200

    r = client.get("/api/admin/guest-lists", params={"list_date": today.isoformat()}, headers=admin_headers)
    assert r.status_code == 200
    row = r.json()[0]
    assert row["member_number"] == "S0001"
    assert row["state"] == "sent"
    assert (row["guests_total"], row["guests_entered"]) == (1, 0)

    path = f"/api/admin/guest-lists/{seeded_titular.id}/{today.isoformat()}"
    r = client.post(f"{path}/process", headers=admin_headers)
    assert r.json()["state"] == "processed"
    assert client.post(f"{path}/process", headers=admin_headers).status_code == 409

    r = client.post(f"{path}/cancel", headers=admin_headers)
    assert r.json()["state"] == "cancelled_by_admin"
    assert client.post(f"{path}/cancel", headers=admin_headers).status_code == 409


def test_cancel_missing_list(client, seeded_titular, admin_headers, today):
    r = client.post(f"/api/admin/guest-lists/{seeded_titular.id}/{today.isoformat()}/cancel", headers=admin_headers)
    assert r.status_code == 404
    assert r.json()["detail"]["code"] == "list_not_found"


def test_medical_review_flow(client, seeded_titular, admin_headers, staff_headers):
    body = {"titular_id": seeded_titular.id, "person_dni": "20111222", "review_date": "2025-06-08",
            "fit": True, "doctor": "Dra. Sosa"}
    r = client.post("/api/admin/medical-reviews", json=body, headers=admin_headers)
    assert r.status_code == 201
    assert r.json()["result"] == "fit"
    assert r.json()["expires_at"] == "2025-06-22"
    assert r.json()["person_role"] == "titular"

    eligibility = client.get(f"/api/access/members/{seeded_titular.id}/eligibility", headers=staff_headers).json()
    titular_row = next(p for p in eligibility["people"] if p["role"] == "titular")
    assert titular_row["decision"]["fitness"]["message"] == "Válido hasta: 22/06/2025"

    history = client.get(f"/api/admin/medical-reviews/{seeded_titular.id}", headers=admin_headers).json()
    assert len(history) == 1


def test_medical_review_for_guest(client, seeded_titular, admin_headers, today):
    _add_and_send(client, seeded_titular.id, today)
    body = {"titular_id": seeded_titular.id, "person_dni": "12345678", "review_date": today.isoformat(), "fit": False}
    r = client.post("/api/admin/medical-reviews", json=body, headers=admin_headers)
    assert r.status_code == 201
    assert r.json()["person_role"] == "guest"

    view = client.get(f"/api/members/{seeded_titular.id}/guest-lists/{today.isoformat()}").json()
    assert view["guest_list"]["guests"][0]["fitness"]["valid"] is False


def test_medical_review_unknown_person(client, seeded_titular, admin_headers):
    body = {"titular_id": seeded_titular.id, "person_dni": "99999999", "review_date": "2025-06-08", "fit": True}
    assert client.post("/api/admin/medical-reviews", json=body, headers=admin_headers).status_code == 404


def test_entry_stats_by_range(client, seeded_titular, admin_headers, staff_headers):
    client.post("/api/access/member-entries", json={"titular_id": seeded_titular.id, "dni": "20111222"},
                headers=staff_headers)
    client.post("/api/access/member-entries", json={"titular_id": seeded_titular.id, "dni": "14111222"},
                headers=staff_headers)

    r = client.get("/api/admin/entry-stats", headers=admin_headers)
    assert r.status_code == 200
    totals = {row["entry_type"]: row["total"] for row in r.json()}
    assert totals == {"titular": 1, "adherente": 1}

    r = client.get("/api/admin/entry-stats", params={"start": "2025-01-01", "end": "2025-01-31"},
                   headers=admin_headers)
    assert r.json() == []


def test_family_member_add_and_remove(client, seeded_titular, admin_headers, staff_headers):
    base = f"/api/admin/members/{seeded_titular.id}/family-members"
    body = {"first_name": "Sofía", "last_name": "Gómez", "dni": "46.222.333",
            "birth_date": "2015-03-01", "relationship": "Hijo/a"}
    r = client.post(base, json=body, headers=admin_headers)
    assert r.status_code == 201
    assert [f["dni"] for f in r.json()["family_members"]] == ["45111222", "46222333"]

    # La nueva familiar ya puede abrir la compuerta en portería.
    entry = {"titular_id": seeded_titular.id, "dni": "46222333"}
    assert client.post("/api/access/member-entries", json=entry, headers=staff_headers).status_code == 200

    assert client.post(base, json=body, headers=admin_headers).status_code == 409
    r = client.delete(f"{base}/46222333", headers=admin_headers)
    assert r.status_code == 200
    assert [f["dni"] for f in r.json()["family_members"]] == ["45111222"]
    assert client.delete(f"{base}/46222333", headers=admin_headers).status_code == 404


def test_family_member_needs_valid_dni(client, seeded_titular, admin_headers):
    body = {"first_name": "Sofía", "last_name": "Gómez", "dni": "12"}
    r = client.post(f"/api/admin/members/{seeded_titular.id}/family-members", json=body, headers=admin_headers)
    assert r.status_code == 422


def test_dni_already_in_group_is_rejected(client, seeded_titular, admin_headers):
    body = {"first_name": "Rosa", "last_name": "Pérez", "dni": "14111222"}
    r = client.post(f"/api/admin/members/{seeded_titular.id}/family-members", json=body, headers=admin_headers)
    assert r.status_code == 409


def test_adherent_lifecycle_drives_eligibility(client, seeded_titular, admin_headers, staff_headers):
    base = f"/api/admin/members/{seeded_titular.id}/adherents"
    r = client.post(base, json={"first_name": "Hugo", "last_name": "Luna", "dni": "17333444"}, headers=admin_headers)
    assert r.status_code == 201
    assert r.json()["adherents"][-1]["status"] == "active"

    r = client.put(f"{base}/17333444/status", json={"status": "inactive"}, headers=admin_headers)
    assert r.status_code == 200
    entry = {"titular_id": seeded_titular.id, "dni": "17333444"}
    r = client.post("/api/access/member-entries", json=entry, headers=staff_headers)
    assert r.status_code == 403

    client.put(f"{base}/17333444/status", json={"status": "active"}, headers=admin_headers)
    assert client.post("/api/access/member-entries", json=entry, headers=staff_headers).status_code == 200

    assert client.delete(f"{base}/17333444", headers=admin_headers).status_code == 200
    assert client.put(f"{base}/17333444/status", json={"status": "active"},
                      headers=admin_headers).status_code == 404


def test_titular_status_blocks_whole_group(client, seeded_titular, admin_headers, staff_headers):
    r = client.put(f"/api/admin/members/{seeded_titular.id}/status", json={"status": "inactive"},
                   headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["status"] == "inactive"

    r = client.get(f"/api/access/members/{seeded_titular.id}/eligibility", headers=staff_headers)
    assert all(not p["decision"]["permitted"] for p in r.json()["people"])


def test_member_routes_unknown_titular(client, admin_headers):
    assert client.get("/api/admin/members/999", headers=admin_headers).status_code == 404
    r = client.put("/api/admin/members/999/status", json={"status": "active"}, headers=admin_headers)
    assert r.status_code == 404
