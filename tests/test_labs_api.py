import json

from clinic_api.context import SessionContext
from clinic_api.forms import LAB_RESULT_FORM, validate_form
from clinic_api.models.lab_marker import LabMarker


def _lab(**overrides):
    payload = {
        "patient_id": "patient-1",
        "lab_marker": "Glucose",
        "result_date": "2024-05-01",
        "result_value": 80,
        "unit": "mg/dL",
        "conventional_range_low": 65,
        "conventional_range_high": 99,
        "functional_range_low": 75,
        "functional_range_high": 86,
    }
    payload.update(overrides)
    return payload


def _seed_glucose(db_session):
    marker = LabMarker(
        marker_name="Glucose",
        category="Metabolic Panel",
        unit="mg/dL",
        aliases=json.dumps(["FASTING GLUCOSE", "GLU"]),
        conventional_low=65,
        conventional_high=99,
        functional_low=75,
        functional_high=86,
    )
    db_session.add(marker)
    db_session.commit()
    return marker


def _seed_tsh(db_session):
    marker = LabMarker(
        marker_name="TSH",
        category="Thyroid",
        unit="uIU/mL",
        aliases=json.dumps(["THYROID STIMULATING HORMONE"]),
        conventional_low=0.45,
        conventional_high=4.5,
        functional_low=1.0,
        functional_high=2.0,
    )
    db_session.add(marker)
    db_session.commit()
    return marker


def _send_raw(client, method, url, body, headers):
    # json.dumps writes NaN and Infinity as bare tokens, which strict encoders refuse.
    return client.request(method, url, content=json.dumps(body), headers={**headers, "Content-Type": "application/json"})


def test_create_classifies_result(client, headers):
    response = client.post("/api/labs", json=_lab(result_value=92), headers=headers)
    assert response.status_code == 201
    body = response.json()
    assert body["zone"] == "functional_deviation"
    assert body["clinic_id"] == "clinic-1"
    assert body["created_by"] == "user-1"
    assert body["source"] == "Manual Entry"


def test_create_ignores_client_supplied_zone(client, headers):
    body = client.post("/api/labs", json=_lab(result_value=120, zone="optimal"), headers=headers).json()
    assert body["zone"] == "abnormal"


def test_create_fills_ranges_from_catalog(client, db_session, headers):
    marker = _seed_glucose(db_session)
    payload = {"patient_id": "patient-1", "lab_marker": "fasting glucose", "result_date": "2024-05-01", "result_value": 80}

    body = client.post("/api/labs", json=payload, headers=headers).json()

    assert body["marker_id"] == marker.id
    assert body["lab_marker"] == "Glucose"
    assert body["unit"] == "mg/dL"
    assert body["functional_range_low"] == 75
    assert body["zone"] == "optimal"


def test_unmatched_marker_is_kept_as_typed(client, db_session, headers):
    _seed_glucose(db_session)
    payload = {"patient_id": "patient-1", "lab_marker": "Zonulin", "result_date": "2024-05-01", "result_value": 40}

    body = client.post("/api/labs", json=payload, headers=headers).json()
    assert body["marker_id"] is None
    assert body["lab_marker"] == "Zonulin"
    assert body["zone"] is None

    unmatched = client.get("/api/markers/unmatched", headers=headers).json()
    assert unmatched == [{"lab_marker": "Zonulin", "count": 1}]


def test_update_recomputes_zone(client, headers):
    created = client.post("/api/labs", json=_lab(), headers=headers).json()
    assert created["zone"] == "optimal"

    response = client.put(f"/api/labs/{created['id']}", json={"result_value": 130, "note": "recheck"}, headers=headers)
    assert response.status_code == 200
    body = response.json()
    assert body["zone"] == "abnormal"
    assert body["note"] == "recheck"
    assert body["updated_at"] is not None


def test_list_filters(client, db_session, headers):
    _seed_glucose(db_session)
    client.post("/api/labs", json=_lab(result_date="2024-01-10"), headers=headers)
    client.post("/api/labs", json=_lab(result_date="2024-04-10"), headers=headers)
    client.post("/api/labs", json=_lab(lab_marker="Ferritin", result_date="2024-04-11"), headers=headers)
    client.post("/api/labs", json=_lab(patient_id="patient-2"), headers=headers)

    rows = client.get("/api/labs", params={"patient_id": "patient-1"}, headers=headers).json()
    assert len(rows) == 3
    assert rows[0]["result_date"] == "2024-04-11"

    rows = client.get("/api/labs", params={"lab_marker": "Glucose", "start_date": "2024-02-01"}, headers=headers).json()
    assert [r["result_date"] for r in rows] == ["2024-04-10"]

    rows = client.get("/api/labs", params={"category": "Metabolic Panel"}, headers=headers).json()
    assert {r["lab_marker"] for r in rows} == {"Glucose"}


def test_results_are_scoped_to_clinic(client, headers):
    created = client.post("/api/labs", json=_lab(), headers=headers).json()
    other = SessionContext(user_id="user-9", clinic_id="clinic-9", patient_id="patient-1").headers()

    assert client.get("/api/labs", headers=other).json() == []
    assert client.delete(f"/api/labs/{created['id']}", headers=other).status_code == 404


def test_delete(client, headers):
    created = client.post("/api/labs", json=_lab(), headers=headers).json()
    assert client.delete(f"/api/labs/{created['id']}", headers=headers).status_code == 204
    response = client.put(f"/api/labs/{created['id']}", json={"result_value": 1}, headers=headers)
    assert response.status_code == 404
    assert response.json()["error"] == "NotFound"


def test_marker_catalog_endpoints(client, db_session):
    _seed_glucose(db_session)
    markers = client.get("/api/markers").json()
    assert markers[0]["marker_name"] == "Glucose"
    assert client.get("/api/markers/categories").json() == [
        {"category": "Metabolic Panel", "total": 1, "markers": ["Glucose"]}
    ]


def test_renaming_marker_takes_new_catalog_ranges(client, db_session, headers):
    _seed_glucose(db_session)
    tsh = _seed_tsh(db_session)
    created = client.post("/api/labs", json=_lab(result_value=1.5), headers=headers).json()
    assert created["zone"] == "abnormal"

    body = client.put(f"/api/labs/{created['id']}", json={"lab_marker": "TSH"}, headers=headers).json()

    assert body["marker_id"] == tsh.id
    assert body["lab_marker"] == "TSH"
    assert body["unit"] == "uIU/mL"
    assert body["conventional_range_low"] == 0.45
    assert body["functional_range_high"] == 2.0
    assert body["zone"] == "optimal"


def test_renaming_marker_keeps_ranges_sent_with_it(client, db_session, headers):
    _seed_tsh(db_session)
    created = client.post("/api/labs", json=_lab(result_value=1.5), headers=headers).json()

    body = client.put(
        f"/api/labs/{created['id']}",
        json={"lab_marker": "TSH", "functional_range_low": 1.6, "functional_range_high": 2.5},
        headers=headers,
    ).json()
    assert body["conventional_range_high"] == 4.5
    assert body["functional_range_low"] == 1.6
    assert body["zone"] == "functional_deviation"


def test_renaming_to_unknown_marker_drops_old_ranges(client, db_session, headers):
    _seed_glucose(db_session)
    created = client.post("/api/labs", json=_lab(), headers=headers).json()

    body = client.put(f"/api/labs/{created['id']}", json={"lab_marker": "Zonulin"}, headers=headers).json()
    assert body["marker_id"] is None
    assert body["unit"] is None
    assert body["conventional_range_low"] is None
    assert body["zone"] is None


def test_non_finite_values_are_rejected(client, headers):
    response = _send_raw(client, "POST", "/api/labs", _lab(result_value=float("nan")), headers)
    assert response.status_code == 422
    payload = response.json()
    assert payload["error"] == "ValidationError"
    assert payload["details"]["errors"][0]["loc"] == ["body", "result_value"]

    response = _send_raw(client, "POST", "/api/labs", _lab(functional_range_high=float("inf")), headers)
    assert response.status_code == 422

    created = client.post("/api/labs", json=_lab(), headers=headers).json()
    response = _send_raw(client, "PUT", f"/api/labs/{created['id']}", {"result_value": float("-inf")}, headers)
    assert response.status_code == 422
    assert client.get("/api/labs", headers=headers).json()[0]["result_value"] == 80


def test_edit_form_resubmits_a_recorded_result(client, headers):
    created = client.post("/api/labs", json=_lab(source="Quest", note="fasting"), headers=headers).json()

    # The edit form is prefilled from the row and posts every cleaned field back.
    cleaned, errors = validate_form(LAB_RESULT_FORM, {**created, "result_value": "130"})
    assert errors == {}
    cleaned["result_date"] = cleaned["result_date"].isoformat()

    body = client.put(f"/api/labs/{created['id']}", json=cleaned, headers=headers).json()
    assert body["result_value"] == 130
    assert body["functional_range_low"] == 75
    assert body["source"] == "Quest"
    assert body["zone"] == "abnormal"
