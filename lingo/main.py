"""
Lingo Wallet FastAPI application.

Entry point for the API server. Every external client is built once in the
lifespan and hung on app.state; routes get them through lingo.deps.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from lingo import db
from lingo.config import settings
from lingo.errors import LingoError
from lingo.middleware.rate_limit import rate_limiter
from lingo.repos import ClaimRepo, PhoneLinkRepo, TransactionRepo
from lingo.routes import balance as balance_routes
from lingo.routes import claims as claim_routes
from lingo.routes import commands as command_routes
from lingo.routes import plans as plan_routes
from lingo.routes import recipients as recipient_routes
from lingo.routes import swaps as swap_routes
from lingo.routes import transactions as transaction_routes
from lingo.services.claim_manager import ClaimManager
from lingo.services.executor import StatusReconciler, TransactionExecutor
from lingo.services.history import TransactionHistory
from lingo.services.pipeline import CommandPipeline, PendingPlanBook
from lingo.services.planner import TransactionPlanner
from lingo.services.quote_client import QuoteClient
from lingo.services.recipient_resolver import RecipientResolver
from lingo.services.sms_service import SmsService, build_twilio_client
from lingo.services.translator import Translator
from lingo.services.wallet_session import ChainReader, LocalAccountSession

logger = logging.getLogger(__name__)

_CLEANUP_INTERVAL_SECONDS = 60


async def cleanup_task():
    """Drop stale rate limit entries every minute."""
    while True:
        try:
            rate_limiter.cleanup_old_entries(max_age_hours=2)
        except Exception:
            logger.exception("Error in cleanup task")
        await asyncio.sleep(_CLEANUP_INTERVAL_SECONDS)


def build_services(app: FastAPI, http: httpx.AsyncClient) -> None:
    """Construct the service graph and attach it to app.state."""
    quotes = QuoteClient(http)
    resolver = RecipientResolver(PhoneLinkRepo())
    claims = ClaimManager(ClaimRepo())
    planner = TransactionPlanner(quotes)
    history = TransactionHistory(TransactionRepo())
    translator = Translator(http)
    chain_reader = ChainReader()

    signer = LocalAccountSession(settings.SIGNER_PRIVATE_KEY) if settings.SIGNER_PRIVATE_KEY else None

    app.state.resolver = resolver
    app.state.claims = claims
    app.state.planner = planner
    app.state.history = history
    app.state.translator = translator
    app.state.chain_reader = chain_reader
    app.state.signer = signer
    app.state.reconciler = StatusReconciler(history, chain_reader, bridge_status=quotes)
    app.state.pipeline = CommandPipeline(
        translator=translator,
        resolver=resolver,
        claims=claims,
        planner=planner,
        executor=TransactionExecutor(),
        history=history,
        sms=SmsService(build_twilio_client()),
        plans=PendingPlanBook(max_plans=settings.MAX_PENDING_PLANS),
        public_url=settings.PUBLIC_URL,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup and shutdown.

    - Initialize database pool
    - Build HTTP client and services
    - Start background cleanup task
    - Tear everything down in reverse on shutdown
    """
    await db.init_pool()
    logger.info("Database pool initialized")

    http = httpx.AsyncClient(timeout=settings.QUOTE_TIMEOUT_SECONDS)
    build_services(app, http)
    if app.state.signer is None:
        logger.info("No SIGNER_PRIVATE_KEY; server-side signing disabled")

    cleanup_task_handle = asyncio.create_task(cleanup_task())

    yield

    cleanup_task_handle.cancel()
    try:
        await cleanup_task_handle
    except asyncio.CancelledError:
        logger.info("Background cleanup task stopped")

    await http.aclose()
    await db.close_pool()
    logger.info("Database pool closed")


app = FastAPI(
    title="Lingo Wallet",
    docs_url=None,
    redoc_url=None,
    lifespan=lifespan,
)

app.include_router(command_routes.router)
app.include_router(recipient_routes.router)
app.include_router(claim_routes.router)
app.include_router(swap_routes.router)
app.include_router(plan_routes.router)
app.include_router(transaction_routes.router)
app.include_router(balance_routes.router)


@app.exception_handler(LingoError)
async def lingo_error_handler(request: Request, exc: LingoError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message, "code": exc.code},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "error": f"{field}: {message}" if field else message, "code": "invalid_request"},
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "Something went wrong. Please try again."},
    )


@app.get("/health")
async def health():
    """Health check endpoint for uptime monitoring."""
    return {"status": "ok"}
