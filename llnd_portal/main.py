import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi_cache import FastAPICache
from fastapi_cache.backends.inmemory import InMemoryBackend
from pydantic import ValidationError

from llnd_portal.api.routes import api_router
from llnd_portal.core.config import settings
from llnd_portal.core.errors import FieldValidationError, InvalidTransition, PortalApiError
from llnd_portal.core.logging import configure_logging, set_request_id
from llnd_portal.db.base import Base
from llnd_portal.db.session import engine
from llnd_portal.db import models  # noqa: F401  registers FlowDraft on Base

logger = configure_logging(settings.LOG_LEVEL)

# Create the draft table (no migrations yet)
Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    FastAPICache.init(InMemoryBackend(), prefix="llnd-portal")
    logger.info("Portal started against %s", settings.API_BASE_URL)
    yield


app = FastAPI(title=settings.PROJECT_NAME, version="1.0.0", lifespan=lifespan)


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    set_request_id(request_id)
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(FieldValidationError)
async def field_validation_handler(request: Request, exc: FieldValidationError):
    return JSONResponse(status_code=422, content={"detail": str(exc), "errors": exc.errors})


@app.exception_handler(ValidationError)
async def model_validation_handler(request: Request, exc: ValidationError):
    errors = {".".join(str(part) for part in error["loc"]): error["msg"] for error in exc.errors()}
    return JSONResponse(status_code=422, content={"detail": "Validation failed", "errors": errors})


@app.exception_handler(InvalidTransition)
async def invalid_transition_handler(request: Request, exc: InvalidTransition):
    logger.info("Rejected %s in step %s", exc.event, exc.step)
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(PortalApiError)
async def portal_api_error_handler(request: Request, exc: PortalApiError):
    # Client errors from the enrollment API pass through; anything else is a bad gateway
    status_code = exc.status_code if exc.status_code and 400 <= exc.status_code < 500 else 502
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


app.include_router(api_router)


@app.get("/")
def root():
    return {"message": f"Welcome to the {settings.PROJECT_NAME}"}
