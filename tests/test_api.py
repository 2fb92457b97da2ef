from __future__ import annotations

from fastapi.testclient import TestClient

from index import MAX_DAYS, app

client = TestClient(app)

CAIRO = {"lat": 30.0, "lng": 31.2, "country": "Egypt", "timezoneOffset": -120}


def test_root() -> None:
    response = client.get("/")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "online"
    assert "/api/timesForGPS" in body["endpoints"]


def test_times_for_gps_single_day() -> None:
    response = client.get("/api/timesForGPS", params={**CAIRO, "date": "2024-03-21"})
    assert response.status_code == 200
    times = response.json()["times"]
    assert list(times) == ["2024-03-21"]
    day = times["2024-03-21"]
    assert len(day) == 6
    assert day[2] == "12:04"


def test_times_for_gps_several_days() -> None:
    response = client.get(
        "/api/timesForGPS", params={**CAIRO, "date": "2024-02-27", "days": 4}
    )
    assert response.status_code == 200
    assert list(response.json()["times"]) == [
        "2024-02-27",
        "2024-02-28",
        "2024-02-29",
        "2024-03-01",
    ]


def test_timezone_offset_shifts_device_countries() -> None:
    params = {"lat": 30.0, "lng": 31.2, "country": "Egypt", "date": "2024-03-21"}
    winter = client.get("/api/timesForGPS", params={**params, "timezoneOffset": -120}).json()
    summer = client.get("/api/timesForGPS", params={**params, "timezoneOffset": -180}).json()
    assert winter["times"]["2024-03-21"][2] == "12:04"
    assert summer["times"]["2024-03-21"][2] == "13:04"


def test_hanafi_asr() -> None:
    params = {**CAIRO, "date": "2024-03-21"}
    standard = client.get("/api/timesForGPS", params=params).json()["times"]["2024-03-21"]
    hanafi = client.get("/api/timesForGPS", params={**params, "asrFactor": 2}).json()["times"]["2024-03-21"]
    assert hanafi[3] > standard[3]
    assert hanafi[:3] == standard[:3]


def test_polar_times_are_marked_unavailable() -> None:
    response = client.get(
        "/api/timesForGPS",
        params={"lat": 80.0, "lng": 15.0, "date": "2024-06-21", "timezoneOffset": -120},
    )
    assert response.status_code == 200
    day = response.json()["times"]["2024-06-21"]
    assert day[0] == "--:--"
    assert day[2] != "--:--"


def test_bad_date_is_rejected() -> None:
    response = client.get("/api/timesForGPS", params={**CAIRO, "date": "21-03-2024"})
    assert response.status_code == 400


def test_out_of_range_parameters_are_rejected() -> None:
    for extra in ({"lat": 91}, {"lng": -181}, {"days": MAX_DAYS + 1}, {"days": 0}, {"asrFactor": 3}):
        response = client.get("/api/timesForGPS", params={**CAIRO, "date": "2024-03-21", **extra})
        assert response.status_code == 422, extra


def test_methods_listing() -> None:
    body = client.get("/api/methods").json()
    assert body["default"] == 5
    by_id = {m["id"]: m for m in body["methods"]}
    assert by_id[5]["fajrAngle"] == 19.5
    assert by_id[4]["ishaAngle"] is None
    assert by_id[4]["ishaMinutes"] == 90.0


def test_countries_listing() -> None:
    countries = client.get("/api/countries").json()["countries"]
    assert countries["Egypt"] == "device"
    assert countries["Saudi Arabia"] == 3.0
