"""API handlers for the Google code exchange endpoint."""

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse

from src.accounts.exceptions import ExchangeError, MissingInput
from src.accounts.features.exchange.dependencies import get_exchange_service
from src.accounts.features.exchange.schemas import (
    ErrorResponse,
    ExchangeRequest,
    ExchangeResponse,
)
from src.accounts.features.exchange.service import ExchangeService
from src.accounts.services import PostHogService
from src.accounts.services.rate_limiter import exchange_rate_limit

logger = logging.getLogger(__name__)

router = APIRouter(tags=["exchange"])

T = TypeVar("T")

# How often the inbound connection is polled while upstream calls are in flight
DISCONNECT_POLL_SECONDS = 0.25


class ClientDisconnected(Exception):
    """Raised when the caller went away before the exchange finished."""


@router.options("/exchange", status_code=status.HTTP_204_NO_CONTENT)
async def exchange_preflight() -> Response:
    """CORS preflight. Headers are added by the CORS middleware."""
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/exchange",
    response_model=ExchangeResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}, 504: {"model": ErrorResponse}},
)
@exchange_rate_limit
async def exchange_code(
    request: Request,
    payload: ExchangeRequest | None = None,
    service: ExchangeService = Depends(get_exchange_service),
) -> Response:
    """
    Exchange a Google authorization code for a Shopify customer.

    Verifies the Google identity, finds or creates the matching customer and
    attaches profile metafields.

    Args:
        payload: code, optional redirectUri and optional extra profile fields

    Returns:
        ok, email, customerId, firstName, lastName, exists, nextUrl

    Raises:
        Nothing: every failure becomes a JSON error body

    Example Response:
        {
            "ok": true,
            "email": "jane@example.com",
            "customerId": "gid://shopify/Customer/7391727321",
            "firstName": "Jane",
            "lastName": "Doe",
            "exists": false,
            "nextUrl": "/account"
        }
    """
    try:
        if payload is None or not payload.code or not payload.code.strip():
            raise MissingInput()

        result = await _cancel_on_disconnect(
            request,
            service.exchange(payload.code.strip(), payload.redirect_uri, payload.extra),
        )
        return JSONResponse(content=result.model_dump(by_alias=True))

    except ExchangeError as e:
        if e.status_code >= 500:
            logger.error(f"Exchange failed: {e.error}", extra={"error_type": type(e).__name__})
        else:
            logger.warning(f"Exchange rejected: {e.error}", extra={"error_type": type(e).__name__})
        PostHogService().capture(
            distinct_id="anonymous",
            event="google_exchange_failed",
            properties={"error": type(e).__name__, "status": e.status_code},
        )
        return JSONResponse(status_code=e.status_code, content=e.to_body())

    except ClientDisconnected:
        logger.info("Client disconnected, outbound calls cancelled")
        return Response(status_code=499)

    except Exception as e:
        logger.error(f"Unexpected error during exchange: {e}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(e) or "Server error"},
        )


async def _cancel_on_disconnect(request: Request, work: Awaitable[T]) -> T:
    """Await `work`, cancelling it if the inbound request is aborted."""
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
            if done:
                return task.result()
            if await request.is_disconnected():
                task.cancel()
                raise ClientDisconnected()
    finally:
        if not task.done():
            task.cancel()
