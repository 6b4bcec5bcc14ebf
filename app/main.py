"""
AI Aggregate: FastAPI Application Entry Point

This module initializes the FastAPI application and defines the endpoints
the presentation layer uses:
- /health: Health check endpoint
- /config: Non-sensitive configuration values
- /providers: Provider registry and which providers are configured
- /settings/draft, /settings/commit: Two-phase credential editing
- /chat: Send one prompt to every configured provider
- /conversations: Per-provider transcripts and dispatch states

All handlers are async so that they run on the same event loop as the
dispatch tasks; the conversation store is never touched from another
thread.
"""

from contextlib import asynccontextmanager
import logging
import time

from fastapi import FastAPI, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError

from app import __version__
from app.config import Settings, get_settings, configure_logging
from app.dispatcher import close_http_client, get_coordinator, RejectionReason
from app.registry import ProviderId, get_provider_registry
from app.state import get_conversation_store, get_credential_store
from app.schemas.chat import (
    ChatRequest,
    ChatAccepted,
    CommitResponse,
    ComponentHealth,
    ConversationResponse,
    ConversationsResponse,
    CredentialDraftResponse,
    CredentialDraftUpdate,
    CredentialFieldInfo,
    ErrorCodes,
    ErrorDetail,
    ErrorResponse,
    HealthResponse,
    ProvidersResponse,
    build_conversation_response,
    build_provider_info,
)

logger = logging.getLogger(__name__)

_start_time: float = 0.0


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler for startup/shutdown events.

    On startup:
    - Loads configuration from environment
    - Configures logging
    - Seeds the committed credentials from the environment

    On shutdown:
    - Closes the shared provider HTTP client
    """
    settings = get_settings()
    configure_logging(settings)

    logger.info("=" * 60)
    logger.info("AI Aggregate starting up...")
    logger.info("=" * 60)

    timeout = settings.provider_timeout_seconds
    logger.info(f"Provider timeout: {f'{timeout}s' if timeout else 'none'}")
    logger.info(f"Debug mode: {'enabled' if settings.debug else 'disabled'}")

    credentials = get_credential_store()
    for provider in get_provider_registry().list_providers():
        state = (
            "configured"
            if credentials.is_configured(provider.provider_id)
            else "not configured"
        )
        logger.info(f"{provider.credential_label}: {state}")

    global _start_time
    _start_time = time.time()

    logger.info("=" * 60)
    logger.info("AI Aggregate ready to accept requests")

    yield  # Application runs here

    logger.info("AI Aggregate shutting down...")
    await close_http_client()


app = FastAPI(
    title="AI Aggregate",
    description="Send one prompt to several AI providers and compare the answers",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=ErrorDetail(code=code, message=message)).model_dump(),
    )


def _draft_response() -> CredentialDraftResponse:
    credentials = get_credential_store()
    return CredentialDraftResponse(
        fields=[
            CredentialFieldInfo(
                provider_id=provider.provider_id,
                credential_label=provider.credential_label,
                placeholder_hint=provider.placeholder_hint,
                credential_help_reference=provider.credential_help_reference,
                has_value=credentials.draft_has_value(provider.provider_id),
            )
            for provider in get_provider_registry().list_providers()
        ]
    )


@app.get("/")
async def root():
    """
    Root endpoint with API information.
    """
    return {
        "name": "AI Aggregate",
        "description": "Compare responses from different AI sources",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
        "config": "/config",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check system health and component status.",
)
async def health_check():
    """
    Health check endpoint for monitoring and orchestration.

    The service is "degraded" while no provider has a key, since no
    prompt can be dispatched until one is configured.
    """
    components = []
    overall_status = "healthy"

    registry = get_provider_registry()
    components.append(
        ComponentHealth(
            name="registry",
            status="healthy",
            message=f"{len(registry.list_providers())} providers registered",
        )
    )

    configured = get_credential_store().configured_providers()
    if configured:
        components.append(
            ComponentHealth(
                name="credentials",
                status="healthy",
                message=f"{len(configured)} provider(s) configured",
            )
        )
    else:
        components.append(
            ComponentHealth(
                name="credentials",
                status="degraded",
                message="No provider API keys configured",
            )
        )
        overall_status = "degraded"

    uptime = time.time() - _start_time if _start_time > 0 else 0.0

    return HealthResponse(
        status=overall_status,
        version=__version__,
        components=components,
        uptime_seconds=uptime,
    )


@app.get("/config")
async def show_config(settings: Settings = Depends(get_settings)):
    """
    Returns non-sensitive configuration values.

    API keys are never exposed; only whether each provider currently has
    a committed key.
    """
    credentials = get_credential_store()
    return {
        "dispatch": {
            "provider_timeout_seconds": settings.provider_timeout_seconds,
            "replicate_prompt_to_all_providers": settings.replicate_prompt_to_all_providers,
        },
        "server": {
            "host": settings.host,
            "port": settings.port,
            "debug": settings.debug,
        },
        "logging": {"level": settings.log_level},
        "api_keys_configured": {
            pid.value: credentials.is_configured(pid)
            for pid in get_provider_registry().get_provider_ids()
        },
    }


@app.get("/providers", response_model=ProvidersResponse)
async def list_providers():
    """
    List all registered providers with their display and credential metadata.

    `visible` holds the configured providers, in registry order; the
    presentation layer only shows tabs for those.
    """
    credentials = get_credential_store()
    return ProvidersResponse(
        providers=[
            build_provider_info(p, credentials.is_configured(p.provider_id))
            for p in get_provider_registry().list_providers()
        ],
        visible=credentials.configured_providers(),
    )


@app.get("/settings/draft", response_model=CredentialDraftResponse)
async def show_draft():
    """Show which providers have a key in the draft (values are never returned)."""
    return _draft_response()


@app.post("/settings/draft", response_model=CredentialDraftResponse)
async def open_draft():
    """Start editing credentials: the draft becomes a copy of the committed set."""
    get_credential_store().open_draft()
    return _draft_response()


@app.patch("/settings/draft", response_model=CredentialDraftResponse)
async def edit_draft(update: CredentialDraftUpdate):
    """Replace one or more provider keys in the draft."""
    credentials = get_credential_store()
    for provider_id, value in update.credentials.items():
        credentials.edit_draft(provider_id, value)
    return _draft_response()


@app.delete("/settings/draft", response_model=CredentialDraftResponse)
async def discard_draft():
    """Abandon draft edits."""
    get_credential_store().discard_draft()
    return _draft_response()


@app.post("/settings/commit", response_model=CommitResponse)
async def commit_draft():
    """
    Apply the draft as the committed credential set.

    Calls already in flight keep the key they were dispatched with; the
    new keys take effect from the next prompt.
    """
    configured = get_credential_store().commit()
    return CommitResponse(configured=configured)


@app.post(
    "/chat",
    response_model=ChatAccepted,
    status_code=status.HTTP_202_ACCEPTED,
    responses={
        400: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
    summary="Send a prompt",
    description="Send one prompt to every configured provider concurrently.",
)
async def send_prompt(request: ChatRequest):
    """
    Dispatch a prompt to every provider with a committed key.

    Returns as soon as the prompt is dispatched; poll /conversations for
    each provider's answer or error.
    """
    coordinator = get_coordinator()

    match coordinator.rejection_reason(request.prompt):
        case RejectionReason.BUSY:
            return _error(
                status.HTTP_409_CONFLICT,
                ErrorCodes.BUSY,
                "A previous prompt is still being answered",
            )
        case RejectionReason.NO_CREDENTIALS:
            return _error(
                status.HTTP_400_BAD_REQUEST,
                ErrorCodes.NO_CREDENTIALS,
                "Start by setting up your API key(s) in settings first",
            )
        case RejectionReason.EMPTY_PROMPT:
            return _error(
                422,
                ErrorCodes.PROMPT_EMPTY,
                "Prompt cannot be empty or whitespace only",
            )

    coordinator.submit(request.prompt)
    return ChatAccepted(dispatched=coordinator.dispatched_providers())


@app.get("/conversations", response_model=ConversationsResponse)
async def list_conversations():
    """Return every provider's transcript and dispatch state, in registry order."""
    registry = get_provider_registry()
    credentials = get_credential_store()
    store = get_conversation_store()

    return ConversationsResponse(
        busy=store.any_in_flight(),
        conversations=[
            build_conversation_response(
                view,
                registry.get_provider(view.provider_id),
                credentials.is_configured(view.provider_id),
            )
            for view in store.snapshot()
        ],
    )


@app.get(
    "/conversations/{provider_id}",
    response_model=ConversationResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_conversation(provider_id: str):
    """Return one provider's transcript and dispatch state."""
    provider = get_provider_registry().get_provider(provider_id)
    if provider is None:
        raise HTTPException(
            status_code=404,
            detail={
                "code": ErrorCodes.UNKNOWN_PROVIDER,
                "message": f"Unknown provider: {provider_id}",
            },
        )

    pid = ProviderId(provider_id)
    return build_conversation_response(
        get_conversation_store().view(pid),
        provider,
        get_credential_store().is_configured(pid),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Returns a consistent error response format with the first validation
    error's details for client-side error handling.
    """
    errors = exc.errors()
    first_error = errors[0] if errors else {}

    return JSONResponse(
        status_code=422,
        content={
            "error": {
                "code": ErrorCodes.VALIDATION_ERROR,
                "message": first_error.get("msg", "Validation failed"),
                "field": ".".join(str(loc) for loc in first_error.get("loc", [])),
            }
        },
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(
    request: Request, exc: HTTPException
) -> JSONResponse:
    """
    Handle HTTP exceptions with consistent format.
    """
    detail = exc.detail
    if isinstance(detail, dict):
        return JSONResponse(status_code=exc.status_code, content={"error": detail})
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": "HTTP_ERROR", "message": str(detail)}},
    )


@app.exception_handler(Exception)
async def general_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Logs the full exception for debugging and returns a generic error
    response to avoid leaking implementation details.
    """
    logger.exception("Unhandled exception")
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": ErrorCodes.INTERNAL_ERROR,
                "message": "An unexpected error occurred",
            }
        },
    )


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)
