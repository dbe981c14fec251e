from fastapi import APIRouter

from riskify.api.routes import documents_router, risk_router

router = APIRouter()
router.include_router(documents_router)
router.include_router(risk_router)

__all__ = ["router"]
