"""
Librarian API application.
"""

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .schemas import ErrorResponse, HealthResponse, ValidationFieldError
from ..core.catalog import count_books
from ..core.config import VERSION, CHAT_API_ENABLED, debug_enabled, init_on_startup_enabled, validate_config
from ..core.db import health_check, init_db
from util.logging import logger, sanitize_payload


async def _initialize_in_background(service):
    try:
        await service.initialize()
    except Exception as e:
        logger.error(f"Failed to initialize vector database: {type(e).__name__}: {e}")
        logger.error("Chatbot will not work until embeddings are generated successfully")


@asynccontextmanager
async def lifespan(app: FastAPI):
    for issue in validate_config():
        logger.warning(f"Config: {issue}")

    init_db()

    init_task = None
    if CHAT_API_ENABLED and init_on_startup_enabled():
        from .chat import get_retrieval_service
        service = app.dependency_overrides.get(get_retrieval_service, get_retrieval_service)()
        init_task = asyncio.create_task(_initialize_in_background(service))

    yield

    if init_task is not None and not init_task.done():
        init_task.cancel()


# Initialize the FastAPI application
app = FastAPI(
    title="Library AI Librarian API",
    version=VERSION,
    description="Book recommendation retrieval over the library catalog",
    docs_url="/docs" if debug_enabled() else None,
    redoc_url="/redoc" if debug_enabled() else None,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        errors.append(ValidationFieldError(field=field or "body", message=error.get("msg", "Invalid value")))

    logger.log_operation("api.validation", "rejected", sanitize_payload({
        "path": request.url.path,
        "errors": [e.model_dump() for e in errors]
    }))

    body = ErrorResponse(message="Validation error", errors=errors)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump(mode="json", exclude_none=True))


@app.get("/health", response_model=HealthResponse)
def health_check_endpoint():
    """Check system health."""
    db_health = health_check()

    return HealthResponse(
        status="healthy" if db_health else "unhealthy",
        version=VERSION,
        db_health=db_health,
        book_count=count_books() if db_health else 0
    )


if CHAT_API_ENABLED:
    from .chat import router as chat_router
    app.include_router(chat_router, prefix="/api/chatbot", tags=["chatbot"])
