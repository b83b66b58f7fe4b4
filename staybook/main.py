import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from .config import settings
from .db import init_db
from .errors import StayBookError
from .limiter import limiter
from .routers import bookings, host, hotels, notifications, reviews, users, wishlists

# --- Logging configuration ---
_level = logging.DEBUG if getattr(settings, "DEBUG", False) else logging.INFO
logging.basicConfig(
    level=_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
# Align uvicorn loggers with our level (useful under Docker Compose)
for _name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
    logging.getLogger(_name).setLevel(_level)
logger = logging.getLogger("staybook.startup")
logger.info("Starting %s (DEBUG=%s)", settings.APP_NAME, getattr(settings, "DEBUG", False))

app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    description=(
        f"{settings.APP_NAME}: hotel search, booking lifecycle and host dashboard.\n\n"
        "All endpoints live under /api/v1 and authenticate with a signed "
        "principal token (Bearer header or session cookie)."
    ),
)


@app.on_event("startup")
def startup_event():
    logger.info("Running startup tasks...")
    if settings.AUTO_CREATE_SCHEMA:
        init_db()
    logger.info("Startup tasks complete.")


@app.exception_handler(StayBookError)
def staybook_error_handler(request: Request, exc: StayBookError):
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    else:
        logger.info("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Add the limiter to the app state
app.state.limiter = limiter
# Add the exception handler for rate limit exceeded errors
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
# Apply the default limits to every route that is not exempt
app.add_middleware(SlowAPIMiddleware)

app.include_router(users.router)
app.include_router(hotels.router)
app.include_router(bookings.router)
app.include_router(reviews.router)
app.include_router(wishlists.router)
app.include_router(notifications.router)
app.include_router(host.router)


@app.get("/healthz")
@limiter.exempt
def healthz():
    return {"status": "ok"}
