"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.accounts.auth import GoogleOAuthClient, JWKSCache, JWTValidator
from src.accounts.config import Settings, settings
from src.accounts.features.exchange import router as exchange_router
from src.accounts.features.exchange.dependencies import set_exchange_service
from src.accounts.features.exchange.service import ExchangeService
from src.accounts.middleware import FixedOriginCORSMiddleware
from src.accounts.services import PostHogService
from src.accounts.services.rate_limiter import limiter
from src.accounts.services.shopify import CustomerDirectory, ShopifyAdminClient

logger = logging.getLogger(__name__)


def build_exchange_service(config: Settings, http_client: httpx.AsyncClient) -> ExchangeService:
    """Wire the Google and Shopify clients from configuration."""
    jwks_cache = JWKSCache(
        jwks_url=config.google_jwks_url,
        cache_ttl=config.jwks_cache_ttl_seconds,
        http_client=http_client,
    )
    validator = JWTValidator(
        jwks_cache=jwks_cache,
        issuer=config.issuers,
        audience=config.google_client_id,
        leeway=config.jwt_leeway_seconds,
    )
    identity = GoogleOAuthClient(
        http_client=http_client,
        validator=validator,
        client_id=config.google_client_id,
        client_secret=config.google_client_secret,
        token_url=config.google_token_url,
        default_redirect_uri=config.google_default_redirect_uri,
    )
    directory = CustomerDirectory(
        ShopifyAdminClient(
            http_client=http_client,
            graphql_url=config.shopify_graphql_url,
            access_token=config.shopify_admin_access_token,
        )
    )
    return ExchangeService(
        identity=identity,
        directory=directory,
        metafield_namespace=config.metafield_namespace,
        signup_source=config.signup_source,
        next_url=config.next_url,
        analytics=PostHogService(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle (startup and shutdown)."""
    http_client = httpx.AsyncClient(timeout=httpx.Timeout(settings.upstream_timeout_seconds))

    service = build_exchange_service(settings, http_client)
    set_exchange_service(service)
    logger.info(
        "Exchange service initialized",
        extra={
            "shop": settings.shopify_shop,
            "jwks_url": settings.google_jwks_url,
            "cors_origin": settings.cors_origin,
        },
    )

    yield

    set_exchange_service(None)
    try:
        await http_client.aclose()
        logger.info("Outbound HTTP client closed")
    except Exception as e:
        logger.error(f"Error during HTTP client cleanup: {e}", exc_info=True)


app = FastAPI(
    title="Google Sign-In Customer Bridge",
    description="Exchanges Google authorization codes for Shopify customers",
    version="0.1.0",
    debug=settings.debug,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(FixedOriginCORSMiddleware, allow_origin=settings.cors_origin)


@app.exception_handler(RequestValidationError)
async def invalid_body_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("Rejected malformed request body", extra={"errors": exc.errors()})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request body"},
    )


app.include_router(exchange_router)


class HealthCheckResponse(BaseModel):
    """Health check response."""

    status: str


@app.get("/health", response_model=HealthCheckResponse)
async def health_check() -> HealthCheckResponse:
    """Health check endpoint."""
    return HealthCheckResponse(status="healthy")
