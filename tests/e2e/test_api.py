"""
E2E tests for the calculator, data and state routes.
"""
import pytest
from fastapi.testclient import TestClient
from workhours.dependencies import get_store
from workhours.main import app
from workhours.storage import MemoryStore


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/healthz", headers={"X-Request-ID": "req-1"})
    assert response.status_code == 200
    assert response.headers["X-Request-ID"] == "req-1"
    body = response.json()
    assert body["ok"] is True
    assert body["requestId"] == "req-1"


def test_readyz(client):
    body = client.get("/readyz").json()
    assert body["data"]["ready"] is True
    assert body["data"]["checks"]["calculator"] == "ready"


def test_time_parse(client):
    body = client.post("/time/parse", json={"text": "3 hrs 20 mins"}).json()
    assert body["ok"] is True
    assert body["data"] == {"minutes": 200, "formatted": "3 hrs 20 mins"}


def test_time_parse_strict_and_lenient(client):
    strict = client.post("/time/parse", json={"text": "1 hrs 75 mins"}).json()
    assert strict["ok"] is False
    assert strict["error"]["code"] == "format_error"

    lenient = client.post("/time/parse", json={"text": "1 hrs 75 mins", "strict": False}).json()
    assert lenient["data"]["minutes"] == 135
    assert lenient["data"]["formatted"] == "2 hrs 15 mins"


def test_time_format_and_sum(client):
    formatted = client.post("/time/format", json={"minutes": -200}).json()
    assert formatted["data"]["text"] == "-3 hrs 20 mins"

    summed = client.post("/time/sum", json={"text": "3 hrs 0 mins\ngarbage\n1 hrs 30 mins"}).json()
    assert summed["data"] == {"minutes": 270, "formatted": "4 hrs 30 mins"}


def test_allocation(client):
    """Test a closed Jan 1-7 period with weekends skipped."""
    body = client.post(
        "/allocation",
        json={
            "total": "100 hrs 0 mins",
            "completed": "0 hrs 0 mins",
            "billingStart": "2025-01-01",
            "billingEnd": "2025-01-07",
            "skipSunday": True,
            "skipSaturday": True,
            "hourlyRate": 2900,
            "today": "2025-03-01",
        },
    ).json()

    assert body["ok"] is True
    data = body["data"]
    assert data["remainingMinutes"] == 6000
    assert data["remainingDayCount"] == 7
    assert data["workdayCount"] == 5
    assert data["perWorkdayMinutes"] == 1200
    assert data["excludedDays"] == ["Sat Jan 04 2025 (Saturday)", "Sun Jan 05 2025 (Sunday)"]
    assert data["schedule"][0] == {"date": "2025-01-01", "isWorkday": True}
    assert data["formatted"]["perWorkday"] == "20 hrs 0 mins"
    assert data["formatted"]["totalEarnings"] == "Rs 290000.00"


def test_allocation_errors(client):
    bad_time = client.post(
        "/allocation",
        json={"total": "lots", "billingStart": "2025-01-01", "billingEnd": "2025-01-07"},
    ).json()
    assert bad_time["ok"] is False
    assert bad_time["error"]["code"] == "format_error"

    bad_date = client.post(
        "/allocation",
        json={"total": "1 hrs", "billingStart": "2025-01-01", "billingEnd": "whenever"},
    ).json()
    assert bad_date["error"]["code"] == "validation_error"


def test_charts(client):
    body = client.post(
        "/charts",
        json={
            "total": "10 hrs",
            "completed": "2 hrs",
            "billingStart": "2025-01-01",
            "billingEnd": "2025-01-03",
            "today": "2025-03-01",
            "actualsByDate": {"2025-01-01": 120},
            "rows": [{"Category": "Dev", "HRS": "2", "MINS": "0"}],
        },
    ).json()
    data = body["data"]
    assert data["progress"] == {"completedHours": 2, "remainingHours": 8}
    assert len(data["dailyPlan"]) == 3
    assert data["categories"] == {"Dev": 2.0}
    assert data["earningsProgress"] is None


def test_csv_import_and_export(client):
    imported = client.post(
        "/csv/import",
        json={"text": "Date,Task,Category,HRS,MINS\n2025-01-01,a,Dev,1,30\n2025-01-01,b,Dev,0,15\n"},
    ).json()
    assert imported["data"]["actualsByDate"] == {"2025-01-01": 105}
    assert imported["data"]["grouped"][0]["minutes"] == 105

    exported = client.post(
        "/csv/export", json={"dailyHours": {"2025-01-01": 1.5}, "projectName": "alpha"}
    ).json()
    assert exported["data"]["csv"].splitlines()[1] == "2025-01-01,WakaTime - alpha,Development,1,30"


def test_external_aggregate_records(client):
    body = client.post(
        "/external/aggregate",
        json={
            "records": [
                {"date": "2025-01-01", "totalSeconds": 3600, "languages": [{"name": "Go", "seconds": 3600}]},
                {"date": "2025-01-02", "totalSeconds": 0},
            ]
        },
    ).json()
    stats = body["data"]["stats"]
    assert stats["totalSeconds"] == 3600
    assert stats["daysWithDataCount"] == 1
    assert stats["mostProductiveDay"] == {"date": "2025-01-01", "seconds": 3600}
    assert stats["languages"][0]["percentOfTotal"] == 100
    assert body["data"]["daily"] == {"2025-01-01": 1.0, "2025-01-02": 0.0}


def test_external_aggregate_summary(client):
    body = client.post(
        "/external/aggregate",
        json={
            "projectName": "alpha",
            "summary": {
                "data": [{"grand_total": {"total_seconds": 5400}, "range": {"date": "2025-01-01"}}]
            },
        },
    ).json()
    assert body["data"]["project"]["digitalTime"] == "1h 30m"
    assert body["data"]["daily"] == {"2025-01-01": 1.5}


def test_external_aggregate_requires_input(client):
    body = client.post("/external/aggregate", json={}).json()
    assert body["ok"] is False
    assert body["error"]["code"] == "validation_error"

    broken = client.post("/external/aggregate", json={"summary": {"data": "nope"}}).json()
    assert broken["error"]["code"] == "validation_error"


def test_merge(client):
    body = client.post(
        "/merge",
        json={
            "externalHoursByDate": {"2025-01-01": 2.5},
            "manualMinutesByDate": {"2025-01-01": 90, "2025-01-02": 30},
        },
    ).json()
    data = body["data"]
    assert list(data) == ["2025-01-01", "2025-01-02"]
    assert data["2025-01-01"]["status"] == "over"
    assert data["2025-01-01"]["differenceHours"] == 1.0
    assert data["2025-01-02"]["status"] == "under"
    assert data["2025-01-02"]["externalHours"] == 0


def test_state_roundtrip(client, store):
    """Test defaults, partial save, reload and clear."""
    initial = client.get("/state").json()["data"]
    assert initial["saved"] is False
    assert initial["state"]["whTotal"] == "100 hrs 0 mins"

    client.put("/state", json={"whTotal": "80 hrs 0 mins"})
    client.put("/state", json={"wh_sat": True})

    saved = client.get("/state").json()["data"]
    assert saved["saved"] is True
    assert saved["state"]["whTotal"] == "80 hrs 0 mins"
    assert saved["state"]["whSat"] is True

    cleared = client.delete("/state").json()
    assert cleared["data"] == {"cleared": True}
    assert client.get("/state").json()["data"]["saved"] is False


def test_time_format_non_finite(client):
    """Test NaN minutes come back in the error envelope instead of a 500."""
    response = client.post(
        "/time/format",
        content='{"minutes": NaN}',
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is False
    assert body["error"]["code"] == "validation_error"


def test_csv_import_with_required_hours(client):
    body = client.post(
        "/csv/import",
        json={
            "text": "Date,Task,Category,HRS,MINS\n2025-01-01,a,Dev,2,0\n2025-01-04,b,Dev,1,0\n",
            "required": "10",
            "today": "2025-01-02",
        },
    ).json()
    assert body["ok"] is True
    allocation = body["data"]["allocation"]
    assert allocation["completedMinutes"] == 180
    assert allocation["remainingMinutes"] == 420
    assert allocation["billingStart"] == "2025-01-01"
    assert allocation["billingEnd"] == "2025-01-04"
    assert allocation["workdayCount"] == 4
    assert body["data"]["actualsByDate"] == {"2025-01-01": 120, "2025-01-04": 60}


def test_csv_import_required_errors(client):
    empty = client.post("/csv/import", json={"text": "", "required": "160"}).json()
    assert empty["ok"] is False
    assert empty["error"]["code"] == "validation_error"

    bad = client.post(
        "/csv/import",
        json={"text": "Date,HRS\n2025-01-01,1\n", "required": "soon"},
    ).json()
    assert bad["error"]["code"] == "format_error"


def test_state_accepts_numeric_rate(client):
    body = client.put("/state", json={"hourlyRate": 3000}).json()
    assert body["ok"] is True
    assert body["data"]["state"]["hourlyRate"] == "3000"
