"""Google code exchange feature."""

from src.accounts.features.exchange.handlers import router

__all__ = ["router"]
