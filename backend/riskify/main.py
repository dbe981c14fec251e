from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from riskify import __version__
from riskify.api import router
from riskify.core import get_logger, settings
from riskify.core.exceptions import AllRenderersFailed, MalformedSection
from riskify.schemas import RenderErrorResponse, TierErrorDetail

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting Riskify SWMS backend [{settings.app_env}]")
    if not settings.external_renderer_url:
        logger.warning("EXTERNAL_RENDERER_URL not set: external tier will always fall through")
    yield
    logger.info("Stopping Riskify SWMS backend")


app = FastAPI(
    title="Riskify SWMS Backend",
    version=__version__,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Render-Backend", "X-Document-Id"],
)


@app.exception_handler(MalformedSection)
async def malformed_section_handler(request: Request, exc: MalformedSection):
    logger.warning(f"Rejected request: {exc}")
    body = RenderErrorResponse(message=exc.message, section=exc.section, expected=exc.expected)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=body.model_dump(exclude={"errors"}),
    )


@app.exception_handler(AllRenderersFailed)
async def all_renderers_failed_handler(request: Request, exc: AllRenderersFailed):
    body = RenderErrorResponse(
        message=exc.message,
        errors=[TierErrorDetail(backend=f.backend, kind=f.kind, error=f.error) for f in exc.failures],
    )
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content=body.model_dump(exclude={"section", "expected"}),
    )


# Exception handler global
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {type(exc).__name__}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# Routes
app.include_router(router, prefix="/api", tags=["SWMS"])


@app.get("/health")
async def health_check():
    return {"status": "ok", "env": settings.app_env}
