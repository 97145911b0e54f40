"""Application configuration using Pydantic Settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # System Configuration
    debug: bool = False
    cors_origin: str = "https://stickerkiko.com"
    rate_limit_enabled: bool = True
    upstream_timeout_seconds: float = 10.0

    # Google OAuth Configuration
    google_client_id: str = "test-client-id.apps.googleusercontent.com"
    google_client_secret: str = "test-client-secret"
    google_token_url: str = "https://oauth2.googleapis.com/token"
    google_default_redirect_uri: str = "postmessage"  # Popup code flow sentinel

    # ID Token Verification Configuration
    google_jwks_url: str = "https://www.googleapis.com/oauth2/v3/certs"
    google_issuers: str = "https://accounts.google.com,accounts.google.com"
    jwks_cache_ttl_seconds: int = 3600  # 1 hour
    jwt_leeway_seconds: int = 10  # Clock skew tolerance

    # Shopify Admin API Configuration
    shopify_shop: str = "test-shop.myshopify.com"
    shopify_admin_access_token: str = "test-admin-token"
    shopify_api_version: str = "2025-07"

    # Customer Sync
    metafield_namespace: str = "profile"
    signup_source: str = "google"
    next_url: str = "/account"

    # PostHog Configuration
    posthog_api_key: str | None = None
    posthog_host: str = "https://app.posthog.com"

    @property
    def issuers(self) -> list[str]:
        """Accepted `iss` values for Google ID tokens."""
        return [issuer.strip() for issuer in self.google_issuers.split(",") if issuer.strip()]

    @property
    def shopify_graphql_url(self) -> str:
        return f"https://{self.shopify_shop}/admin/api/{self.shopify_api_version}/graphql.json"


settings = Settings()
