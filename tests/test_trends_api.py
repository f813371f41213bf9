from datetime import date, timedelta

from clinic_api.context import SessionContext


def _post(client, headers, marker, day, value):
    payload = {
        "patient_id": "patient-1",
        "lab_marker": marker,
        "result_date": day,
        "result_value": value,
        "conventional_range_low": 50,
        "conventional_range_high": 150,
        "functional_range_low": 90,
        "functional_range_high": 110,
    }
    response = client.post("/api/labs", json=payload, headers=headers)
    assert response.status_code == 201


def test_overview_reports_latest_step(client, headers):
    _post(client, headers, "Glucose", "2024-01-01", 80)
    _post(client, headers, "Glucose", "2024-02-01", 100)
    _post(client, headers, "Glucose", "2024-03-01", 106)
    _post(client, headers, "Ferritin", "2024-01-01", 100)
    _post(client, headers, "Ferritin", "2024-02-01", 105)
    _post(client, headers, "Zinc", "2024-01-01", 0)
    _post(client, headers, "Zinc", "2024-02-01", 5)
    _post(client, headers, "Iron", "2024-01-01", 100)

    response = client.get("/api/trends/overview", headers=headers)
    assert response.status_code == 200
    rows = response.json()

    assert [r["lab_marker"] for r in rows] == ["Glucose", "Ferritin"]
    glucose, ferritin = rows
    assert glucose["direction"] == "up"
    assert glucose["delta_percent"] == 6.0
    assert glucose["previous"] == 100
    assert glucose["latest_zone"] == "optimal"
    assert glucose["category"] == "Other"
    assert ferritin["direction"] == "stable"


def test_overview_requires_patient(client):
    headers = SessionContext(user_id="user-1", clinic_id="clinic-1").headers()
    response = client.get("/api/trends/overview", headers=headers)
    assert response.status_code == 400
    assert response.json()["message"] == "patient_id is required"


def test_marker_chart(client, headers):
    _post(client, headers, "Glucose", "2024-03-01", 120)
    _post(client, headers, "Glucose", "2024-01-01", 100)

    response = client.get("/api/trends/Glucose", params={"width": 400, "height": 200}, headers=headers)
    assert response.status_code == 200
    chart = response.json()

    assert [p["date"] for p in chart["points"]] == ["2024-01-01", "2024-03-01"]
    assert chart["points"][0]["x"] == 0
    assert chart["points"][1]["x"] == 400
    assert 0 <= chart["points"][1]["y"] < chart["points"][0]["y"] <= 200
    assert [p["zone"] for p in chart["points"]] == ["optimal", "functional_deviation"]
    assert chart["endpoint_trend"]["direction"] == "up"
    assert chart["bands"]


def test_marker_chart_window(client, headers):
    today = date.today()
    _post(client, headers, "Glucose", (today - timedelta(days=400)).isoformat(), 100)
    _post(client, headers, "Glucose", (today - timedelta(days=10)).isoformat(), 104)

    chart = client.get("/api/trends/Glucose", params={"window": "1y"}, headers=headers).json()
    assert len(chart["points"]) == 1
    assert chart["points"][0]["x"] == 0

    everything = client.get("/api/trends/Glucose", params={"window": "all"}, headers=headers).json()
    assert len(everything["points"]) == 2


def test_marker_chart_rejects_unknown_window(client, headers):
    response = client.get("/api/trends/Glucose", params={"window": "5y"}, headers=headers)
    assert response.status_code == 400
    assert "Unknown window" in response.json()["message"]


def test_marker_chart_without_results(client, headers):
    chart = client.get("/api/trends/Glucose", headers=headers).json()
    assert chart["points"] == []
    assert chart["endpoint_trend"] == {"direction": "stable", "percentage_change": 0.0}


def test_marker_chart_date_range(client, headers):
    _post(client, headers, "Glucose", "2024-01-01", 100)
    _post(client, headers, "Glucose", "2024-02-15", 102)
    _post(client, headers, "Glucose", "2024-04-01", 108)

    chart = client.get(
        "/api/trends/Glucose",
        params={"start_date": "2024-02-01", "end_date": "2024-04-01"},
        headers=headers,
    ).json()
    assert [p["date"] for p in chart["points"]] == ["2024-02-15", "2024-04-01"]
