"""
tests.test_errors

Error rendering for failures no handler anticipated.
"""

from __future__ import annotations

import httpx


async def test_unhandled_error_renders_server_error(app) -> None:
    async def explode() -> None:
        raise RuntimeError("database on fire")

    app.add_api_route("/v1/explode", explode)

    # Starlette re-raises after sending the 500; keep it from failing the client.
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        r = await client.get("/v1/explode")

    assert r.status_code == 500
    assert r.json() == {"message": "Server Error", "error": "Error_Server"}
