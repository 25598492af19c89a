"""
Woop Webhook Receiver

FastAPI router exposing the single relay route.
No device logic. Pure transport: read request → dispatcher → status.
"""

import logging

from fastapi import APIRouter, Request, Response

from .dispatcher import get_dispatcher

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Woop Relay"])

RELAY_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@router.api_route("/", methods=RELAY_METHODS)
async def woop(request: Request) -> Response:
    """
    Relay a request to the woop machine.

    Examples:
        GET  /?woop=3&secret=xyz&strobe=off&buzzer=on
        POST /?v=3&woop=3&secret=xyz   {"red": {"freq": 500, "duty": 0.5}}
        POST /                          {"incident": {"summary": "...", "state": "open"}}

    Returns:
        Empty response carrying only the status code
    """
    body = await request.body()
    status_code = await get_dispatcher().dispatch(request.query_params, body)
    logger.debug(f"{request.method} {request.url.path} -> {status_code}")
    return Response(status_code=status_code)
