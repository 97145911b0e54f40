"""FastAPI dependency providing the wired exchange service."""

from src.accounts.features.exchange.service import ExchangeService

# Global exchange service instance (initialized in main.py lifespan)
_exchange_service: ExchangeService | None = None


def set_exchange_service(service: ExchangeService | None) -> None:
    """
    Set the global exchange service instance.

    Called once during application startup, after settings are loaded.
    """
    global _exchange_service
    _exchange_service = service


def get_exchange_service() -> ExchangeService:
    """
    Get the global exchange service instance.

    Raises:
        RuntimeError: If the service was not initialized
    """
    if _exchange_service is None:
        raise RuntimeError(
            "Exchange service not initialized. "
            "Ensure application lifespan calls set_exchange_service()."
        )
    return _exchange_service
