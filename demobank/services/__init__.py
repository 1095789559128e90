"""Service layer for the Demo Bank service."""
from demobank.services.banking import BankingService
from demobank.services.identity import IdentityProvider

__all__ = ["BankingService", "IdentityProvider"]
