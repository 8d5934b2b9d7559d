"""
Gemini Proxy Server

Mounts the ProxyHandler at /api/gemini so the browser-facing app can ask
for advice without ever holding the API key.

Run with:
    uvicorn app.proxy_server:app --port 8000
"""

from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, Response

from src.audit import get_logger
from src.services.llm import ProxyHandler


logger = get_logger(__name__)

app = FastAPI(title="Budget Tracker Gemini Proxy")

_handler: Optional[ProxyHandler] = None


def get_proxy_handler() -> ProxyHandler:
    """Shared handler instance (override in tests via dependency_overrides)."""
    global _handler
    if _handler is None:
        _handler = ProxyHandler()
    return _handler


async def _read_payload(request: Request):
    if request.method != "POST":
        return None
    try:
        return await request.json()
    except ValueError:
        # Malformed JSON is treated like a missing prompt
        return None


@app.api_route(
    "/api/gemini",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"],
)
async def gemini_proxy(
    request: Request,
    handler: ProxyHandler = Depends(get_proxy_handler),
):
    payload = await _read_payload(request)
    result = await handler.handle(request.method, payload)

    logger.info("proxy_request", method=request.method, status_code=result.status_code)

    if result.body is None:
        return Response(status_code=result.status_code, headers=result.headers)
    return JSONResponse(
        content=result.body,
        status_code=result.status_code,
        headers=result.headers,
    )
