from uuid import uuid4

API = "/api/v1"


def register_body(name="Jane", contact="555-1", symptoms=(), pulse=80, temperature=98.6):
    return {
        "name": name,
        "age": 41,
        "contact": contact,
        "complaint": "Walk-in",
        "symptoms": list(symptoms),
        "vitals": {"blood_pressure": "120/80", "pulse": pulse, "temperature": temperature},
    }


def post_patient(client, **kwargs):
    return client.post(f"{API}/patients/", json=register_body(**kwargs))


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_register_patient(client):
    response = post_patient(client, symptoms=["chestPain"])

    assert response.status_code == 201
    body = response.json()
    assert body["queue_position"] == 0
    patient = body["patient"]
    assert patient["priority"] == "critical"
    assert patient["token_number"] == 301
    assert patient["status"] == "waiting"
    assert patient["appointment_start_time"] == "09:00:00"
    assert patient["wait_time"] == "0 mins"


def test_register_duplicate_returns_existing(client):
    first = post_patient(client).json()["patient"]

    response = post_patient(client)

    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["kind"] == "DUPLICATE_PATIENT"
    assert detail["existing_patient"]["id"] == first["id"]


def test_register_validation(client):
    assert post_patient(client, name=" ").json()["detail"]["kind"] == "VALIDATION"
    assert post_patient(client, name=" ").status_code == 422
    assert post_patient(client, pulse=900).status_code == 422
    assert post_patient(client, symptoms=["sneezing"]).status_code == 422


def test_queue_get_update_and_search(client):
    calm = post_patient(client, name="Calm", contact="1").json()["patient"]
    post_patient(client, name="Hot", contact="2", symptoms=["fever"])

    queue = client.get(f"{API}/patients/queue").json()
    assert [p["name"] for p in queue] == ["Hot", "Calm"]

    urgent = client.get(f"{API}/patients/queue", params={"priority": "urgent"}).json()
    assert [p["name"] for p in urgent] == ["Hot"]

    fetched = client.get(f"{API}/patients/{calm['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["token_number"] == 101

    updated = client.patch(f"{API}/patients/{calm['id']}", json={"notes": "Needs wheelchair"})
    assert updated.status_code == 200
    assert updated.json()["notes"] == "Needs wheelchair"

    found = client.get(f"{API}/patients/search", params={"q": "cal"}).json()
    assert [p["id"] for p in found] == [calm["id"]]

    assert client.get(f"{API}/patients/{uuid4()}").status_code == 404


def test_room_assignment_flow(client, rooms):
    room_id = str(rooms["R1"])
    a = post_patient(client, name="A", contact="1").json()["patient"]
    b = post_patient(client, name="B", contact="2").json()["patient"]

    assigned = client.post(
        f"{API}/rooms/{room_id}/assign", json={"patient_id": a["id"]}, headers={"X-Actor": "Nurse Kim"}
    )
    assert assigned.status_code == 200
    assert assigned.json()["status"] == "occupied"
    assert assigned.json()["assigned_patient_name"] == "A"

    taken = client.post(f"{API}/rooms/{room_id}/assign", json={"patient_id": b["id"]})
    assert taken.status_code == 409
    assert taken.json()["detail"]["kind"] == "ROOM_UNAVAILABLE"

    available = [r["room_number"] for r in client.get(f"{API}/rooms/available").json()]
    assert available == ["R2", "R3"]

    assert client.delete(f"{API}/patients/{a['id']}").status_code == 204
    assert client.get(f"{API}/patients/{a['id']}").status_code == 404

    again = client.post(f"{API}/rooms/{room_id}/assign", json={"patient_id": b["id"]})
    assert again.status_code == 200

    logs = client.get(f"{API}/audit-logs/").json()
    assert {"Nurse Kim", "System"} <= {entry["performed_by"] for entry in logs}


def test_assign_unknown_room(client, rooms):
    patient = post_patient(client).json()["patient"]

    response = client.post(f"{API}/rooms/{uuid4()}/assign", json={"patient_id": patient["id"]})

    assert response.status_code == 404
    assert response.json()["detail"]["kind"] == "ROOM_NOT_FOUND"


def test_add_room(client, rooms):
    created = client.post(f"{API}/rooms/", json={"room_number": "R4"})
    assert created.status_code == 201

    duplicate = client.post(f"{API}/rooms/", json={"room_number": "R4"})
    assert duplicate.status_code == 422

    numbers = [r["room_number"] for r in client.get(f"{API}/rooms/").json()]
    assert numbers == ["R1", "R2", "R3", "R4"]


def test_bulk_discharge(client):
    a = post_patient(client, name="A", contact="1").json()["patient"]
    missing = str(uuid4())

    response = client.post(f"{API}/patients/bulk-discharge", json={"patient_ids": [a["id"], missing]})

    assert response.status_code == 200
    body = response.json()
    assert body["discharged"] == 1
    outcomes = {r["patient_id"]: r for r in body["results"]}
    assert outcomes[a["id"]]["success"] is True
    assert outcomes[missing]["success"] is False


def test_dashboard(client, rooms):
    post_patient(client, name="A", contact="1", symptoms=["bleeding"])
    post_patient(client, name="B", contact="2")

    stats = client.get(f"{API}/dashboard/statistics").json()
    assert stats["total_waiting"] == 2
    assert stats["critical_count"] == 1
    assert stats["rooms_available"] == 3

    detailed = client.get(f"{API}/dashboard/statistics/detailed").json()
    assert detailed["rooms"]["occupancy_rate"] == 0
    assert detailed["non_urgent"]["count"] == 1

    alerts = client.get(f"{API}/dashboard/wait-alerts", params={"threshold_minutes": 0})
    assert alerts.status_code == 200
