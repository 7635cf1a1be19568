import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from rootpilot.api.endpoints import action_items, analysis, auth, incidents, projects, users
from rootpilot.config import settings
from rootpilot.exceptions import AuthenticationError, RootPilotError
from rootpilot.infrastructure.database import Storage
from rootpilot.rate_limiter import limiter
from rootpilot.services.analysis_engine import AnalysisEngine, build_analysis_engine

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(levelname)s - [%(name)s] - %(message)s",
        force=True,
    )


def _error_response(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RootPilotError)
    async def rootpilot_error_handler(request: Request, exc: RootPilotError):
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
        return _error_response(exc.status_code, exc.message, headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.info("Rejected payload on %s %s: %s", request.method, request.url.path, exc.errors())
        return _error_response(400, "Invalid input data")

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
        return _error_response(429, f"Rate limit exceeded: {exc.detail}")

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error_response(500, "Internal server error")


def create_app(
    storage: Optional[Storage] = None,
    analysis_engine: Optional[AnalysisEngine] = None,
) -> FastAPI:
    """Build the application; the storage lifecycle follows the app lifespan."""
    storage = storage or Storage(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
    analysis_engine = analysis_engine or build_analysis_engine(
        settings.ANALYSIS_ENGINE, seed=settings.ANALYSIS_SEED
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await storage.init()
        yield
        await storage.dispose()

    app = FastAPI(title="RootPilot", version="1.0.0", lifespan=lifespan)
    app.state.storage = storage
    app.state.analysis_engine = analysis_engine
    app.state.limiter = limiter

    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_allowed_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_router = APIRouter()
    api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
    api_router.include_router(users.router, prefix="/user", tags=["user"])
    api_router.include_router(projects.router, prefix="/projects", tags=["projects"])
    api_router.include_router(analysis.router, tags=["analysis"])
    api_router.include_router(incidents.router, prefix="/incidents", tags=["incidents"])
    api_router.include_router(action_items.router, prefix="/action-items", tags=["action-items"])

    @api_router.get("/health", tags=["health"])
    async def health():
        return {"status": "ok"}

    app.include_router(api_router, prefix="/api")
    return app


configure_logging(settings.LOG_LEVEL)
app = create_app()
