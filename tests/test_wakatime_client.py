"""
Tests for WakaTime client.
"""
import base64
import pytest
import respx
import httpx
from workhours.integrations.wakatime_client import WakaTimeAPIError, WakaTimeClient

BASE = "https://wakatime.test/api/v1"

SUMMARY = {
    "start": "2025-01-01T00:00:00Z",
    "end": "2025-01-02T23:59:59Z",
    "data": [
        {
            "grand_total": {"total_seconds": 5400},
            "range": {"date": "2025-01-01"},
            "languages": [{"name": "Python", "total_seconds": 5400}],
        },
        {"grand_total": {"total_seconds": 1800}, "range": {"date": "2025-01-02"}},
    ],
}


@pytest.fixture
def wakatime_client():
    """Create a test WakaTime client."""
    return WakaTimeClient(
        api_key="waka_test",
        base_url=BASE,
        timeout=5.0,
        max_retries=2,
    )


def test_requires_api_key(monkeypatch):
    from workhours.config import settings

    monkeypatch.setattr(settings, "WAKATIME_API_KEY", None)
    with pytest.raises(ValueError):
        WakaTimeClient(api_key="")


@pytest.mark.asyncio
@respx.mock
async def test_get_current_user(wakatime_client):
    """Test basic auth header and user parsing."""
    route = respx.get(f"{BASE}/users/current").mock(
        return_value=httpx.Response(200, json={"data": {"id": "u1", "username": "dev"}})
    )

    user = await wakatime_client.get_current_user()
    assert user.id == "u1"
    assert user.username == "dev"

    expected = "Basic " + base64.b64encode(b"waka_test:").decode()
    assert route.calls.last.request.headers["Authorization"] == expected


@pytest.mark.asyncio
@respx.mock
async def test_validate_api_key(wakatime_client):
    respx.get(f"{BASE}/users/current").mock(
        side_effect=[
            httpx.Response(200, json={"data": {"id": "u1"}}),
            httpx.Response(401, json={"error": "Unauthorized"}),
        ]
    )

    assert await wakatime_client.validate_api_key() is True
    assert await wakatime_client.validate_api_key() is False


@pytest.mark.asyncio
@respx.mock
async def test_list_projects(wakatime_client):
    respx.get(f"{BASE}/users/current/projects").mock(
        return_value=httpx.Response(
            200, json={"data": [{"id": "p1", "name": "alpha"}, {"id": "p2", "name": "beta"}]}
        )
    )

    assert await wakatime_client.list_projects() == ["alpha", "beta"]


@pytest.mark.asyncio
@respx.mock
async def test_get_project_data(wakatime_client):
    """Test summaries query params and the summarized result."""
    route = respx.get(f"{BASE}/users/current/summaries").mock(
        return_value=httpx.Response(200, json=SUMMARY)
    )

    result, daily = await wakatime_client.get_project_data("alpha", "2025-01-01", "2025-01-02T00:00:00Z")

    params = route.calls.last.request.url.params
    assert params["project"] == "alpha"
    assert params["start"] == "2025-01-01"
    assert params["end"] == "2025-01-02"

    assert result.total_seconds == 7200
    assert result.digital_time == "2h 0m"
    assert result.stats.languages[0].name == "Python"
    assert daily == {"2025-01-01": 1.5, "2025-01-02": 0.5}


@pytest.mark.asyncio
@respx.mock
async def test_unauthorized_error(wakatime_client):
    """Test 401 unauthorized error mapping."""
    respx.get(f"{BASE}/users/current/projects").mock(
        return_value=httpx.Response(401, json={"error": "Unauthorized"})
    )

    with pytest.raises(WakaTimeAPIError) as exc_info:
        await wakatime_client.list_projects()

    assert exc_info.value.code == "unauthorized"
    assert exc_info.value.status_code == 401
    assert "Invalid API key" in exc_info.value.message


@pytest.mark.asyncio
@respx.mock
async def test_project_not_found(wakatime_client):
    respx.get(f"{BASE}/users/current/summaries").mock(
        return_value=httpx.Response(404, json={"error": "Not found"})
    )

    with pytest.raises(WakaTimeAPIError) as exc_info:
        await wakatime_client.fetch_summary("ghost", "2025-01-01", "2025-01-02")

    assert exc_info.value.code == "not_found"
    assert exc_info.value.message == 'Project "ghost" not found.'


@pytest.mark.asyncio
@respx.mock
async def test_rate_limit_retry(wakatime_client):
    """Test rate limit retry logic."""
    respx.get(f"{BASE}/users/current/projects").mock(
        side_effect=[
            httpx.Response(429, json={"error": "Rate limit"}),
            httpx.Response(200, json={"data": [{"name": "alpha"}]}),
        ]
    )

    # Should succeed after retry
    assert await wakatime_client.list_projects() == ["alpha"]


@pytest.mark.asyncio
@respx.mock
async def test_rate_limit_exhausted(wakatime_client):
    respx.get(f"{BASE}/users/current/projects").mock(
        return_value=httpx.Response(429, json={"error": "Rate limit"})
    )

    with pytest.raises(WakaTimeAPIError) as exc_info:
        await wakatime_client.list_projects()

    assert exc_info.value.code == "rate_limited"
    assert exc_info.value.status_code == 429


@pytest.mark.asyncio
@respx.mock
async def test_server_error_then_timeout(wakatime_client):
    """Test 5xx and transport failures are retried, then surface as upstream_error."""
    respx.get(f"{BASE}/users/current/projects").mock(
        side_effect=[
            httpx.Response(503),
            httpx.ConnectTimeout("timed out"),
        ]
    )

    with pytest.raises(WakaTimeAPIError) as exc_info:
        await wakatime_client.list_projects()

    assert exc_info.value.code == "upstream_error"
    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
@respx.mock
async def test_bad_request_maps_to_validation_error(wakatime_client):
    respx.get(f"{BASE}/users/current/summaries").mock(
        return_value=httpx.Response(400, json={"error": "bad range"})
    )

    with pytest.raises(WakaTimeAPIError) as exc_info:
        await wakatime_client.fetch_summary("alpha", "2025-01-02", "2025-01-01")

    assert exc_info.value.code == "validation_error"
    assert exc_info.value.status_code == 400
