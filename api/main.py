"""
FastAPI application for the lending-library email service.

Endpoints:
    POST /email/reservation-created
    POST /email/waitlist-created
    POST /email/status-updated
    GET  /health

Responses are deliberately terse: {"ok": true}, {"skipped": true},
{"error": "Missing required fields"} (400) or {"error": "Failed to send email"}
(500). Failure details are logged, never returned.

Run with:
    uvicorn api.main:app --port 4000
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from notifications.config import build_dispatcher, get_settings
from notifications.dispatcher import NotificationDispatcher
from notifications.errors import ValidationError
from notifications.models import ReservationCreated, StatusUpdated, WaitlistCreated

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(name)-24s | %(levelname)-5s | %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger("notification_api")

MISSING_FIELDS_MESSAGE = "Missing required fields"
SEND_FAILED_MESSAGE = "Failed to send email"


# Application lifespan
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    if settings.email_backend == "resend" and not settings.resend_api_key:
        logger.warning("RESEND_API_KEY is not set; every send will fail")
    if not settings.admin_email:
        logger.info("ADMIN_EMAIL is not set; admin copies are disabled")
    logger.info("📧 Email service started")
    yield
    logger.info("Shutting down")


app = FastAPI(
    title="Lending Library Email Service",
    description="Sends transactional emails for toy reservations, waitlists and loan status changes.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


# Module-level dispatcher, built lazily from settings and replaceable in tests
_dispatcher: Optional[NotificationDispatcher] = None


def get_dispatcher() -> NotificationDispatcher:
    """Get the notification dispatcher instance."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = build_dispatcher(settings)
    return _dispatcher


def reset_api_state(dispatcher: Optional[NotificationDispatcher] = None) -> None:
    """Reset API state (for testing)."""
    global _dispatcher
    _dispatcher = dispatcher


def _missing_fields() -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": MISSING_FIELDS_MESSAGE})


def _send_failed() -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": SEND_FAILED_MESSAGE})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """A body that is not a JSON object of strings counts as missing fields."""
    logger.info(f"Rejecting malformed body on {request.url.path}: {exc.errors()}")
    return _missing_fields()


# =============================================================================
# Health Check
# =============================================================================

@app.get("/health", tags=["Health"])
def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "lending-library-email"}


# =============================================================================
# Email Endpoints
# =============================================================================

@app.post("/email/reservation-created", tags=["Email"])
def reservation_created(
    event: ReservationCreated,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Confirm a new reservation to the parent (and the admin mailbox)."""
    try:
        return dispatcher.handle_reservation_created(event).to_response()
    except ValidationError:
        return _missing_fields()
    except Exception:
        logger.exception("Reservation email error")
        return _send_failed()


@app.post("/email/waitlist-created", tags=["Email"])
def waitlist_created(
    event: WaitlistCreated,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Confirm a new waitlist entry to the parent (and the admin mailbox)."""
    try:
        return dispatcher.handle_waitlist_created(event).to_response()
    except ValidationError:
        return _missing_fields()
    except Exception:
        logger.exception("Waitlist email error")
        return _send_failed()


@app.post("/email/status-updated", tags=["Email"])
def status_updated(
    event: StatusUpdated,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """
    Email the parent about a loan status change.

    "On Loan" is never emailed and answers {"skipped": true}.
    """
    try:
        return dispatcher.handle_status_updated(event).to_response()
    except ValidationError:
        return _missing_fields()
    except Exception:
        logger.exception("Status email error")
        return _send_failed()
