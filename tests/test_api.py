from backend.services.patient_store import utc_today

CSV_HEADER = "AADHAR_NO,NAME,AGE,GENDER,ADDRESS,PHONE,DEPARTMENT_VISITED\n"


def _visit(identifier="123456789012", name="Asha", department="ENT", **extra):
    return {"identifier": identifier, "name": name, "department": department, **extra}


def test_health_sets_request_id(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    assert resp.headers["X-Request-ID"]


def test_add_visit_creates_then_updates(client):
    created = client.post("/api/addVisit", json=_visit(age="34", phone="9876543210"))
    assert created.status_code == 201
    body = created.json()
    assert body["isNew"] is True
    assert body["data"]["age"] == 34
    assert body["data"]["departments_visited"] == ["ENT"]

    updated = client.post("/api/addVisit", json=_visit(department="Cardiology"))
    assert updated.status_code == 200
    body = updated.json()
    assert body["isNew"] is False
    assert body["data"]["departments_visited"] == ["ENT", "Cardiology"]
    assert body["data"]["visit_count"] == 2


def test_add_visit_accepts_upload_column_names(client):
    resp = client.post(
        "/api/addVisit",
        json={"AADHAR_NO": "1234 5678 9012", "NAME": "Ravi", "DEPARTMENT_VISITED": "Eye"},
    )
    assert resp.status_code == 201
    assert resp.json()["data"]["identifier"] == "123456789012"


def test_add_visit_missing_name_is_rejected(client):
    resp = client.post("/api/addVisit", json=_visit(name=""))

    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert any("name" in error.lower() for error in body["errors"])
    assert client.get("/api/stats").json()["stats"]["totalPatients"] == 0


def test_add_bulk_visits_reports_invalid_rows(client):
    resp = client.post(
        "/api/addBulkVisits",
        json={
            "patients": [
                _visit(identifier="100000000000"),
                _visit(identifier=""),
                _visit(identifier="200000000000", department="Eye"),
            ]
        },
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["summary"]["totalReceived"] == 3
    assert body["summary"]["validRecords"] == 2
    assert body["summary"]["newPatients"] == 2
    assert len(body["validationErrors"]) == 1
    assert body["validationErrors"][0]["index"] == 1
    assert "processingErrors" not in body


def test_add_bulk_visits_rejects_bad_payloads(client):
    assert client.post("/api/addBulkVisits", json={"patients": []}).status_code == 400
    assert client.post("/api/addBulkVisits", json={"patients": "nope"}).status_code == 400
    assert client.post("/api/addBulkVisits", json={}).status_code == 400

    all_invalid = client.post("/api/addBulkVisits", json={"patients": [_visit(name="")]})
    assert all_invalid.status_code == 400
    assert all_invalid.json()["errors"][0]["index"] == 0


def test_upload_csv(client):
    content = (
        CSV_HEADER
        + "100000000000,Asha,30,Female,Pune,9876543210,ENT\n"
        + "100000000000,Asha,30,Female,Pune,9876543210,Cardiology\n"
        + "12345,Broken,,,,,ENT\n"
        + "200000000000,Ravi,41,Male,,,Eye\n"
    ).encode("utf-8")

    resp = client.post("/api/uploadFile", files={"file": ("visits.csv", content, "text/csv")})

    assert resp.status_code == 200
    body = resp.json()
    assert body["summary"] == {
        "totalRecords": 4,
        "validRecords": 3,
        "invalidRecords": 1,
        "newPatients": 2,
        "updatedPatients": 1,
        "processingErrors": 0,
    }
    assert body["errors"][0]["line"] == 4

    patient = client.get("/api/patient/100000000000").json()["data"]
    assert patient["departments_visited"] == ["ENT", "Cardiology"]


def test_upload_with_out_of_range_age(client):
    content = (
        CSV_HEADER
        + "100000000000,A,99999999999999999999,M,,,ENT\n"
        + "200000000000,B,30,F,,,Eye\n"
    ).encode("utf-8")

    resp = client.post("/api/uploadFile", files={"file": ("visits.csv", content, "text/csv")})

    assert resp.status_code == 200
    assert resp.json()["summary"]["newPatients"] == 2
    assert client.get("/api/patient/100000000000").json()["data"]["age"] is None
    assert client.get("/api/patient/200000000000").json()["data"]["age"] == 30


def test_upload_text_file(client):
    content = b"100000000000|Asha|30|Female|Pune|9876543210|ENT\n"
    resp = client.post("/api/uploadFile", files={"file": ("daily.txt", content, "text/plain")})
    assert resp.status_code == 200
    assert resp.json()["summary"]["newPatients"] == 1


def test_upload_rejects_missing_or_unsupported_file(client):
    missing = client.post("/api/uploadFile", files={"other": ("visits.csv", b"x", "text/csv")})
    assert missing.status_code == 400
    assert missing.json()["message"] == "No file uploaded"

    unsupported = client.post("/api/uploadFile", files={"file": ("visits.pdf", b"%PDF", "application/pdf")})
    assert unsupported.status_code == 400

    no_columns = client.post("/api/uploadFile", files={"file": ("visits.csv", b"A,B\n1,2\n", "text/csv")})
    assert no_columns.status_code == 400


def test_get_patient(client):
    client.post("/api/addVisit", json=_visit())

    found = client.get("/api/patient/1234-5678-9012")
    assert found.status_code == 200
    assert found.json()["data"]["name"] == "Asha"

    assert client.get("/api/patient/12345").status_code == 400
    assert client.get("/api/patient/999999999999").status_code == 404


def test_listings(client):
    client.post("/api/addVisit", json=_visit(identifier="200000000000"))
    client.post("/api/addVisit", json=_visit(identifier="100000000000"))
    client.post("/api/addVisit", json=_visit(identifier="200000000000", department="Eye"))

    all_patients = client.get("/api/allPatients").json()
    assert all_patients["count"] == 2
    assert [p["identifier"] for p in all_patients["data"]] == ["100000000000", "200000000000"]

    by_visits = client.get("/api/patients/sort/by-visits").json()
    assert [p["identifier"] for p in by_visits["data"]] == ["200000000000", "100000000000"]

    today = client.get("/api/patients/today").json()
    assert today["count"] == 2

    assert client.get("/api/stats").json() == {"success": True, "stats": {"totalPatients": 2}}


def test_date_range(client):
    client.post("/api/addVisit", json=_visit())
    today = utc_today().isoformat()

    found = client.get("/api/patients/date-range", params={"startDate": today, "endDate": today})
    assert found.status_code == 200
    assert found.json()["count"] == 1

    empty = client.get("/api/patients/date-range", params={"startDate": "2001-01-01", "endDate": "2001-01-01"})
    assert empty.status_code == 200
    assert empty.json() == {"success": True, "count": 0, "data": []}

    assert client.get("/api/patients/date-range", params={"startDate": today}).status_code == 400
    assert (
        client.get("/api/patients/date-range", params={"startDate": "05/01/2026", "endDate": today}).status_code
        == 400
    )
    reversed_range = client.get(
        "/api/patients/date-range", params={"startDate": "2026-02-02", "endDate": "2026-02-01"}
    )
    assert reversed_range.status_code == 400


def test_export_csv(client):
    client.post("/api/addVisit", json=_visit(phone="9876543210"))
    client.post("/api/addVisit", json=_visit(department="Eye"))

    resp = client.get("/api/patients/export", params={"view": "visits"})

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert "attachment" in resp.headers["content-disposition"]
    lines = resp.text.strip().splitlines()
    assert lines[0].startswith("AADHAR_NO,NAME,AGE")
    assert lines[1].startswith("123456789012,Asha,,,,9876543210,")
    assert '"ENT, Eye",2' in lines[1]

    assert client.get("/api/patients/export", params={"view": "bogus"}).status_code == 400
