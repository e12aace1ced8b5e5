"""
HTTP client factory for outbound calls.
"""
from __future__ import annotations
import base64
import httpx

USER_AGENT = "workhours/0.1"


def basic_auth_header(api_key: str) -> str:
    """WakaTime style Basic auth: the key is the username, password is empty."""
    token = base64.b64encode(f"{api_key}:".encode()).decode()
    return f"Basic {token}"


def create_http_client(
    timeout: float = 20.0,
    user_agent: str = USER_AGENT,
    **kwargs
) -> httpx.AsyncClient:
    """
    Create an async client with a bounded connect timeout and our user-agent.
    Retries are handled by the caller, so the transport never retries.
    """
    headers = kwargs.pop("headers", {})
    headers.setdefault("User-Agent", user_agent)

    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout, connect=10.0),
        headers=headers,
        transport=httpx.AsyncHTTPTransport(retries=0),
        **kwargs
    )
