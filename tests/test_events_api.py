from datetime import timedelta

from builders import T0, add_event

from src.backend.utils_backend import utcnow


def metadata_payload(company, receptionist, **overrides):
    payload = {
        "company_id": company.id,
        "guide_number": "GD-100234",
        "guide_date": "2025-03-01T00:00:00Z",
        "cargo_description": "12 pallets of cement bags",
        "work_order": "OT-5521",
        "receptionist_id": receptionist.id,
    }
    payload.update(overrides)
    return payload


def test_create_event_normalises_plate(client):
    response = client.post(
        "/api/events",
        json={
            "license_plate": " abcd12 ",
            "event_datetime": "2025-03-01T11:00:00-03:00",
            "camera_name": "CAM-GATE-IN",
            "video_filename": "gate.mp4",
        },
    )

    assert response.status_code == 201
    body = response.json()
    assert body["license_plate"] == "ABCD12"
    assert body["event_datetime"].startswith("2025-03-01T14:00:00")
    assert body["confidence"] == 95.0
    assert body["has_metadata"] is False


def test_search_sort_and_paging(client, db):
    add_event(db, "BBBB22", T0)
    add_event(db, "AAAA11", T0 + timedelta(hours=1), camera="CAM-SCALE")
    add_event(db, "CCCC33", T0 + timedelta(hours=2))

    newest = client.get("/api/events").json()
    assert [e["license_plate"] for e in newest["events"]] == ["CCCC33", "AAAA11", "BBBB22"]

    by_plate = client.get("/api/events", params={"sort_by": "license_plate", "sort_order": "asc"}).json()
    assert [e["license_plate"] for e in by_plate["events"]] == ["AAAA11", "BBBB22", "CCCC33"]

    by_camera = client.get("/api/events", params={"camera_name": "scale"}).json()
    assert by_camera["total_count"] == 1

    paged = client.get("/api/events", params={"limit": 2, "page": 2}).json()
    assert paged["current_page"] == 2
    assert paged["has_next_page"] is False
    assert len(paged["events"]) == 1

    assert client.get("/api/events", params={"limit": 101}).status_code == 422


def test_recent_and_plate_search(client, db):
    add_event(db, "ABCD12", T0)
    add_event(db, "ABCD12", T0 + timedelta(hours=1))
    add_event(db, "ZZZZ99", T0 + timedelta(hours=2))

    recent = client.get("/api/events/recent", params={"limit": 2}).json()
    assert [e["license_plate"] for e in recent] == ["ZZZZ99", "ABCD12"]

    by_plate = client.get("/api/events/search/license-plate/abcd").json()
    assert by_plate["total_count"] == 2


def test_stats_and_days(client, db):
    now = utcnow()
    add_event(db, "ABCD12", now, camera="CAM-A", confidence=90.0)
    add_event(db, "ABCD12", now, camera="CAM-A", confidence=95.0)
    add_event(db, "ZZZZ99", T0, camera="CAM-B", confidence=99.0)

    stats = client.get("/api/events/stats").json()
    assert stats["total_events"] == 3
    assert stats["events_today"] == 2
    assert stats["average_confidence"] == 94.7
    assert stats["top_cameras"][0] == {"name": "CAM-A", "count": 2}

    days = client.get(
        "/api/events/days",
        params={"start_date": "2025-03-01T00:00:00", "end_date": "2025-03-31T23:59:59"},
    ).json()
    assert days == {"days": [{"date": "2025-03-01", "count": 1}]}


def test_document_then_filter(client, db, company, receptionist):
    documented = add_event(db, "ABCD12", T0)
    add_event(db, "ZZZZ99", T0)

    created = client.post(
        f"/api/metadata/events/{documented.id}/metadata",
        json=metadata_payload(company, receptionist),
    )
    assert created.status_code == 201
    assert created.json()["receptionist"]["first_name"] == "Ana"

    undocumented = client.get("/api/events/undocumented").json()
    assert [e["license_plate"] for e in undocumented["events"]] == ["ZZZZ99"]

    by_company = client.get("/api/events", params={"company_id": company.id}).json()
    assert [e["id"] for e in by_company["events"]] == [documented.id]

    detail = client.get(f"/api/events/{documented.id}").json()
    assert detail["has_metadata"] is True
    assert detail["metadata"]["company"]["rut"] == "76123456-7"


def test_metadata_lifecycle(client, db, company, receptionist):
    event = add_event(db, "ABCD12", T0)
    url = f"/api/metadata/events/{event.id}/metadata"

    assert client.get(url).status_code == 404
    assert client.post(url, json=metadata_payload(company, receptionist, cargo_description="short")).status_code == 422
    assert client.post(url, json=metadata_payload(company, receptionist)).status_code == 201
    assert client.post(url, json=metadata_payload(company, receptionist)).status_code == 409

    updated = client.put(url, json={"guide_number": "GD-2"})
    assert updated.json()["guide_number"] == "GD-2"

    stats = client.get("/api/metadata/stats").json()
    assert stats["total_metadata"] == 1
    assert stats["top_receptionists"][0]["name"] == "Ana Rojas"

    assert client.delete(url).json() == {"event_id": event.id, "deleted": True}
    assert client.get(f"/api/events/{event.id}").json()["has_metadata"] is False


def test_video_info(client, db):
    event = add_event(db, "ABCD12", T0, video="gate/clip.mp4")
    escaping = add_event(db, "ABCD12", T0, video="../../etc/passwd")

    video = client.get(f"/api/events/{event.id}/video").json()
    assert video["video_filename"] == "gate/clip.mp4"
    assert video["video_path"].endswith("clip.mp4")

    assert client.get(f"/api/events/{escaping.id}/video").status_code == 400


def test_grouped_and_related_vehicle_event(client, db):
    first = add_event(db, "ABCD12", T0)
    add_event(db, "ABCD12", T0 + timedelta(hours=1), camera="CAM-SCALE")
    lonely = add_event(db, "ZZZZ99", T0 + timedelta(minutes=30))

    grouped = client.get(
        "/api/events/grouped",
        params={"start_date": "2025-03-01T00:00:00", "end_date": "2025-03-02T00:00:00"},
    ).json()
    assert [ve["id"] for ve in grouped] == [lonely.id, f"vehicle-ABCD12-{first.id}"]
    assert len(grouped[1]["detections"]) == 2

    related = client.get(f"/api/events/{first.id}/vehicle-event").json()
    assert related["id"] == f"vehicle-ABCD12-{first.id}"

    assert client.get(f"/api/events/{lonely.id}/vehicle-event").json() is None
    assert client.get("/api/events/missing/vehicle-event").status_code == 404


def test_days_rejects_bad_ranges(client):
    inverted = client.get(
        "/api/events/days",
        params={"start_date": "2025-03-05T00:00:00", "end_date": "2025-03-01T00:00:00"},
    )
    assert inverted.status_code == 400

    too_wide = client.get(
        "/api/events/days",
        params={"start_date": "2024-01-01T00:00:00", "end_date": "2025-03-01T00:00:00"},
    )
    assert too_wide.status_code == 400
    assert "90 days" in too_wide.json()["detail"]

    ninety = client.get(
        "/api/events/days",
        params={"start_date": "2025-01-01T00:00:00", "end_date": "2025-04-01T00:00:00"},
    )
    assert ninety.status_code == 200


def test_search_wildcards_match_literally(client, db):
    add_event(db, "ABCD12", T0, camera="CAM-GATE-IN")

    assert client.get("/api/events", params={"camera_name": "%"}).json()["total_count"] == 0
    assert client.get("/api/events", params={"camera_name": "cam_gate"}).json()["total_count"] == 0
    assert client.get("/api/events", params={"camera_name": "gate-in"}).json()["total_count"] == 1
    assert client.get("/api/events", params={"license_plate": "A_CD"}).json()["total_count"] == 0


def test_recent_limit_and_unknown_company(client, db, company, receptionist):
    event = add_event(db, "ABCD12", T0)

    assert client.get("/api/events/recent", params={"limit": 50}).status_code == 200
    assert client.get("/api/events/recent", params={"limit": 51}).status_code == 422

    response = client.post(
        f"/api/metadata/events/{event.id}/metadata",
        json=metadata_payload(company, receptionist, company_id="missing"),
    )
    assert response.status_code == 400
    assert response.json() == {"detail": "Company missing not found"}
