"""Tests for middleware — response headers, request IDs.

Learn: Both apps share RequestIdMiddleware; only the inventory API adds
the data-only response headers, so that is what these tests exercise.
"""

import pytest

from boxoffice.middleware.request_id import resolve_request_id


@pytest.mark.asyncio
async def test_api_headers_on_health(client):
    """Health endpoint returns the data-only headers."""
    r = await client.get("/api/v1/health")
    assert r.status_code == 200
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "DENY"
    assert r.headers["Referrer-Policy"] == "no-referrer"
    assert r.headers["Content-Security-Policy"] == "default-src 'none'; frame-ancestors 'none'"
    assert r.headers["Cache-Control"] == "no-store"


@pytest.mark.asyncio
async def test_headers_on_error_response(client):
    r = await client.post("/api/v1/tickets/purchase", json={"ticket_id": 999, "quantity": 1})
    assert r.status_code == 404
    assert r.headers["X-Frame-Options"] == "DENY"
    assert r.headers["Cache-Control"] == "no-store"
    assert "X-Request-ID" in r.headers


@pytest.mark.asyncio
async def test_docs_can_load_scripts(client):
    """Interactive docs keep the other headers but not the blanket CSP."""
    r = await client.get("/docs")
    assert r.status_code == 200
    assert "Content-Security-Policy" not in r.headers
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert "Cache-Control" not in r.headers


@pytest.mark.asyncio
async def test_request_id_generated(client):
    """Each request gets a unique X-Request-ID header."""
    r1 = await client.get("/api/v1/health")
    r2 = await client.get("/api/v1/health")
    assert "X-Request-ID" in r1.headers
    assert "X-Request-ID" in r2.headers
    assert r1.headers["X-Request-ID"] != r2.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_request_id_propagated(client):
    """Incoming X-Request-ID is propagated through the response."""
    custom_id = "test-trace-12345"
    r = await client.get("/api/v1/health", headers={"X-Request-ID": custom_id})
    assert r.headers["X-Request-ID"] == custom_id


@pytest.mark.asyncio
async def test_malformed_request_id_is_replaced(client):
    r = await client.get("/api/v1/health", headers={"X-Request-ID": "a" * 200})
    assert r.headers["X-Request-ID"] != "a" * 200
    assert len(r.headers["X-Request-ID"]) == 32


@pytest.mark.parametrize(
    "incoming",
    [None, "", "has space", "line\tbreak", "x" * 129],
)
def test_resolve_request_id_mints_when_untrusted(incoming):
    minted = resolve_request_id(incoming)
    assert minted != incoming
    assert len(minted) == 32


def test_resolve_request_id_keeps_well_formed():
    assert resolve_request_id("trace-1.abc:9_Z") == "trace-1.abc:9_Z"


@pytest.mark.asyncio
async def test_no_hsts_on_http(client):
    """HSTS header is NOT set on HTTP connections (only HTTPS)."""
    r = await client.get("/api/v1/health")
    assert "Strict-Transport-Security" not in r.headers
