"""HTTP API for the Demo Bank service."""
from demobank.api.routes import router

__all__ = ["router"]
