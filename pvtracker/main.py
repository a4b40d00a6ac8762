# pvtracker/main.py

import os
import sys
import logging
import time
from dotenv import load_dotenv

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

# Load .env into os.environ
load_dotenv()

# --- Logging: stdout + log file, configured before the routers import ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("LOG_FILE", "pvtracker.log")


def configure_logging(level_name: str, log_file: str) -> logging.Logger:
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s:%(levelname)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stdout), logging.FileHandler(log_file, mode="a")],
    )
    # uvicorn and fastapi log through their own loggers
    for name in ("pvtracker", "uvicorn.error", "uvicorn.access", "fastapi"):
        logging.getLogger(name).setLevel(level)
    return logging.getLogger("pvtracker")


logger = configure_logging(LOG_LEVEL, LOG_FILE)
logger.info(f"Logging configured at {LOG_LEVEL} level, writing to {LOG_FILE}")

# --- Routers ---
from pvtracker.api.settings        import router as settings_router
from pvtracker.api.sessions        import router as sessions_router
from pvtracker.api.weekly_plan     import router as plan_router
from pvtracker.api.stats           import router as stats_router
from pvtracker.api.attempt_videos  import router as videos_router

from pvtracker.core.database import SessionLocal, create_tables
from pvtracker.services.store import initialize_store

# --- Create FastAPI app ---
app = FastAPI(
    title       = "PoleVault Tracker API",
    version     = "1.0.0",
    description = "Practice and meet log for pole vaulters"
)

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()

    logger.info(f"📥 Incoming request: {request.method} {request.url.path}")

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(f"Headers: {dict(request.headers)}")

    response = await call_next(request)

    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = f"{process_time:.3f}"
    logger.info(f"✅ Request completed in {process_time:.3f}s with status {response.status_code}")

    return response

# --- Validation-error handler (logs raw body + errors) ---
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    raw_body = await request.body()
    logger.error(
        f"\n❗️ Validation error for {request.url.path}\n"
        f"Raw JSON was:\n{raw_body.decode('utf-8', errors='replace') if raw_body else 'No body'}\n"
        f"Errors:\n{exc.errors()!r}"
    )
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors())},
    )

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins     = ["*"],
    allow_credentials = True,
    allow_methods     = ["*"],
    allow_headers     = ["*"],
)

# --- Include all routers ---
app.include_router(settings_router)
app.include_router(sessions_router)
app.include_router(plan_router)
app.include_router(stats_router)
app.include_router(videos_router)

# --- Startup: tables, then load (and migrate) the store before serving ---
@app.on_event("startup")
async def startup_event():
    logger.info("🚀 Starting PoleVault Tracker API")

    env_ok = {
        "DATABASE_URL":      bool(os.getenv("DATABASE_URL")),
        "SENDGRID_API_KEY":  bool(os.getenv("SENDGRID_API_KEY")),
    }
    logger.info(f"📋 Env configuration: {env_ok}")

    try:
        create_tables()
    except Exception as e:
        logger.error(f"❌ Could not create tables: {e}")

    app.state.store = await initialize_store(SessionLocal)

    if not os.getenv("SENDGRID_API_KEY"):
        logger.warning("⚠️  SENDGRID_API_KEY not set → email sharing will fail")

    logger.info("🎉 Application startup complete!")


@app.get("/")
async def root():
    return {"message": "PoleVault Tracker API is running"}


@app.get("/health")
async def health_check():
    store = getattr(app.state, "store", None)
    return {
        "status": "healthy" if store is not None else "starting",
        "timestamp": time.time(),
        "sessions": len(store.sessions) if store is not None else 0,
    }
