from builders import T0, add_event


def create_company(client, rut, name):
    return client.post("/api/companies", json={"rut": rut, "name": name})


def test_create_and_duplicate_rut(client):
    created = create_company(client, "76123456-k", "Cementos del Sur")

    assert created.status_code == 201
    assert created.json()["rut"] == "76123456-K"
    assert created.json()["active"] is True

    duplicate = create_company(client, "76123456-K", "Another name")
    assert duplicate.status_code == 409


def test_list_search_and_deactivate(client):
    a = create_company(client, "11111111-1", "Transportes Andes").json()
    create_company(client, "22222222-2", "Aridos Norte")

    names = [c["name"] for c in client.get("/api/companies").json()]
    assert names == ["Aridos Norte", "Transportes Andes"]

    found = client.get("/api/companies/search", params={"q": "andes"}).json()
    assert [c["id"] for c in found] == [a["id"]]
    assert client.get("/api/companies/search", params={"q": "11111111"}).json()[0]["id"] == a["id"]

    deactivated = client.delete(f"/api/companies/{a['id']}")
    assert deactivated.json()["active"] is False
    assert [c["name"] for c in client.get("/api/companies").json()] == ["Aridos Norte"]
    assert client.get("/api/companies/search", params={"q": "andes"}).json() == []


def test_update_rechecks_rut(client):
    a = create_company(client, "11111111-1", "Transportes Andes").json()
    create_company(client, "22222222-2", "Aridos Norte")

    renamed = client.put(f"/api/companies/{a['id']}", json={"name": "Transportes Andes SpA"})
    assert renamed.json()["name"] == "Transportes Andes SpA"
    assert renamed.json()["rut"] == "11111111-1"

    clash = client.put(f"/api/companies/{a['id']}", json={"rut": "22222222-2"})
    assert clash.status_code == 409

    assert client.put("/api/companies/missing", json={"name": "Nobody"}).status_code == 404


def test_detail_and_stats(client, db, company, receptionist):
    event = add_event(db, "ABCD12", T0)
    client.post(
        f"/api/metadata/events/{event.id}/metadata",
        json={
            "company_id": company.id,
            "guide_number": "GD-1",
            "guide_date": T0.isoformat(),
            "cargo_description": "Gravel, 30 tonnes",
            "work_order": "OT-1",
            "receptionist_id": receptionist.id,
        },
    )
    create_company(client, "22222222-2", "Aridos Norte")

    detail = client.get(f"/api/companies/{company.id}").json()
    assert [e["id"] for e in detail["recent_events"]] == [event.id]

    stats = client.get("/api/companies/stats").json()
    assert stats["total_companies"] == 2
    assert stats["active_companies"] == 2
    assert stats["companies_with_events"] == 1
    assert stats["top_companies_by_events"][0]["events_count"] == 1
    assert stats["top_companies_by_events"][1]["events_count"] == 0


def test_users_and_receptionists(client):
    created = client.post(
        "/api/users",
        json={"email": "Luis.Perez@Example.com", "first_name": "Luis", "last_name": "Perez"},
    )
    assert created.status_code == 201
    assert created.json()["email"] == "luis.perez@example.com"
    assert created.json()["role"] == "OPERATOR"

    client.post("/api/users", json={"email": "ana@example.com", "first_name": "Ana", "last_name": "Alvarez"})

    duplicate = client.post(
        "/api/users",
        json={"email": "luis.perez@example.com", "first_name": "Luis", "last_name": "Perez"},
    )
    assert duplicate.status_code == 409

    bad_role = client.post(
        "/api/users",
        json={"email": "x@example.com", "first_name": "Xi", "last_name": "Li", "role": "ROOT"},
    )
    assert bad_role.status_code == 422

    names = [u["last_name"] for u in client.get("/api/users/receptionists").json()]
    assert names == ["Alvarez", "Perez"]


def test_search_wildcards_match_literally(client):
    create_company(client, "11111111-1", "Transportes Andes")

    assert client.get("/api/companies/search", params={"q": "_"}).json() == []
    assert client.get("/api/companies/search", params={"q": "%"}).json() == []
    assert len(client.get("/api/companies/search", params={"q": "111-1"}).json()) == 1
