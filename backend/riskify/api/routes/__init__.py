"""API routers."""

from riskify.api.routes.documents import router as documents_router
from riskify.api.routes.risk import router as risk_router

__all__ = ["documents_router", "risk_router"]
