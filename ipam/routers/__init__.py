from .networks import router as networks_router
from .addresses import router as addresses_router

__all__ = ["networks_router", "addresses_router"]
