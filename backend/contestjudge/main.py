from __future__ import annotations
import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contestjudge.config import settings
from contestjudge.errors import DomainError
from contestjudge.logging_setup import configure_logging
from contestjudge.routes.system import router as system_router
from contestjudge.routes.contests import router as contests_router
from contestjudge.routes.participations import router as participations_router
from contestjudge.routes.submissions import router as submissions_router
from contestjudge.routes.scores import router as scores_router
from contestjudge.routes.results import router as results_router
from contestjudge.routes.livestock import router as livestock_router
import structlog

configure_logging()
log = structlog.get_logger()

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    log.info("startup", env=settings.environment, version=settings.app_version, git_sha=settings.git_sha,
             completion_quorum=settings.completion_quorum)
    yield
    # Shutdown
    log.info("shutdown")

app = FastAPI(
    title=f"{settings.app_display_name} API",
    version=settings.app_version,
    lifespan=lifespan,
    description=f"{settings.app_display_name} API for contest judging and results",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.environment == "dev" else settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(system_router)
app.include_router(contests_router)
app.include_router(participations_router)
app.include_router(submissions_router)
app.include_router(scores_router)
app.include_router(results_router)
app.include_router(livestock_router)

@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    log.info("request_rejected", path=request.url.path, error=exc.code, detail=exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.code, "detail": exc.detail})

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ())[1:]) or "body"
    detail = f"{field}: {first.get('msg', 'invalid value')}"
    return JSONResponse(status_code=422, content={"error": "ValidationError", "detail": detail})

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    log.exception("unhandled_error", path=request.url.path)
    return JSONResponse(status_code=500, content={"error": "InternalError", "detail": "Internal server error"})

@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = rid
    structlog.contextvars.bind_contextvars(request_id=rid)
    response: Response = await call_next(request)
    response.headers["X-Request-ID"] = rid
    structlog.contextvars.clear_contextvars()
    return response
