"""Google sign-in to Shopify customer orchestration."""

import logging

from src.accounts.auth.google import GoogleOAuthClient
from src.accounts.auth.models import IdentityClaims
from src.accounts.exceptions import UpstreamTimeout
from src.accounts.features.exchange.schemas import ExchangeResponse, ExtraProfile
from src.accounts.services import PostHogService
from src.accounts.services.shopify.customers import CustomerDirectory
from src.accounts.services.shopify.exceptions import DirectoryError, DirectoryValidationError
from src.accounts.services.shopify.models import CustomerRecord

logger = logging.getLogger(__name__)


class ExchangeService:
    """
    Resolves a Google authorization code to a Shopify customer.

    Flow:
    1. Exchange the code and verify the id_token (one call to Google)
    2. Find the customer by email, create it if absent
    3. Attach google_sub, signup_source and profile extras as metafields

    Step 3 is advisory: identity is already resolved by then, so a failure
    is logged and reported to analytics but never changes the response.
    """

    def __init__(
        self,
        identity: GoogleOAuthClient,
        directory: CustomerDirectory,
        metafield_namespace: str = "profile",
        signup_source: str = "google",
        next_url: str | None = "/account",
        analytics: PostHogService | None = None,
    ) -> None:
        self.identity = identity
        self.directory = directory
        self.metafield_namespace = metafield_namespace
        self.signup_source = signup_source
        self.next_url = next_url
        self.analytics = analytics or PostHogService()

    async def exchange(
        self,
        code: str,
        redirect_uri: str | None = None,
        extra: ExtraProfile | None = None,
    ) -> ExchangeResponse:
        """
        Run the full sign-in flow for one authorization code.

        Raises:
            IdentityError: If Google rejects the code or the id_token is unusable
            DirectoryError: If Shopify lookup or creation fails
            UpstreamTimeout: If either upstream does not answer in time
        """
        claims = await self.identity.identify(code, redirect_uri)
        customer, exists = await self.find_or_create(claims)
        await self.attach_metafields(customer.id, claims, extra)

        self.analytics.capture(
            distinct_id=customer.id,
            event="customer_signed_in",
            properties={"exists": exists, "signup_source": self.signup_source},
        )

        return ExchangeResponse(
            email=claims.email,
            customer_id=customer.id,
            first_name=claims.given_name or None,
            last_name=claims.family_name or None,
            exists=exists,
            next_url=self.next_url,
        )

    async def find_or_create(self, claims: IdentityClaims) -> tuple[CustomerRecord, bool]:
        """
        Return the customer for the claimed email and whether it already existed.

        Lookup and creation are not atomic. If a concurrent request created
        the same email in between, Shopify rejects our create with
        "Email has already been taken" and the customer is looked up again.
        """
        existing = await self.directory.find_by_email(claims.email)
        if existing is not None:
            return existing, True

        try:
            customer = await self.directory.create(
                claims.email, claims.given_name, claims.family_name
            )
        except DirectoryValidationError as e:
            if not _is_duplicate_email_error(e):
                raise
            logger.info(
                "Customer created concurrently, looking it up again",
                extra={"error_type": "duplicate_customer_create"},
            )
            existing = await self.directory.find_by_email(claims.email)
            if existing is None:
                raise
            return existing, True

        self.analytics.capture(
            distinct_id=customer.id,
            event="customer_created",
            properties={"signup_source": self.signup_source},
        )
        return customer, False

    async def attach_metafields(
        self, customer_id: str, claims: IdentityClaims, extra: ExtraProfile | None = None
    ) -> bool:
        """
        Set profile metafields on the customer. Returns False when Shopify rejected them.
        """
        values = {
            "google_sub": claims.subject,
            "signup_source": self.signup_source,
        }
        if extra is not None:
            values.update(extra.model_dump(exclude_none=True))

        try:
            await self.directory.set_metafields(customer_id, values, self.metafield_namespace)
        except (DirectoryError, UpstreamTimeout) as e:
            logger.warning(
                f"Failed to set metafields for customer {customer_id}: {e}",
                extra={"error_type": "metafields_set_failed", "customer_id": customer_id},
            )
            self.analytics.capture(
                distinct_id=customer_id,
                event="customer_metafields_failed",
                properties={"error": str(e)},
            )
            return False

        return True


def _is_duplicate_email_error(error: DirectoryValidationError) -> bool:
    message = error.error.lower()
    return "taken" in message or "already exists" in message
