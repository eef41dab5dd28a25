from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
import uuid
from contextlib import asynccontextmanager
from database import database
from routes import features, companies, i18n
from services.locale_state import LocaleState, JsonFilePreferenceStore
from services.translation import message_catalog_service

import os
import logging
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
ROOT_DIR = Path(__file__).parent
load_dotenv(ROOT_DIR / '.env')

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_locale_state() -> LocaleState:
    """Locale cell for this process, persisted to LOCALE_PREFERENCE_PATH."""
    store = JsonFilePreferenceStore(
        os.environ.get('LOCALE_PREFERENCE_PATH', str(ROOT_DIR / 'data' / 'preferences.json'))
    )
    state = LocaleState(
        store,
        environment_language=lambda: os.environ.get('APP_LANGUAGE') or os.environ.get('LANG'),
    )

    def _warm_catalog(locale):
        # Load the new catalog now so the next render does not pay for it
        message_catalog_service.load_locale(locale)
        logger.info(f"Locale switched to {locale.value}; catalog ready")

    state.subscribe(_warm_catalog)
    return state


# Lifespan context manager for startup/shutdown
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting ESG Dashboard API")
    locale = app.state.locale_state.init_locale()
    message_catalog_service.load_locale(locale)
    logger.info(f"Initial locale: {locale.value}")

    if os.environ.get("PYTEST_RUNNING"):
        logger.info("PYTEST_RUNNING set; skipping MongoDB connection")
    else:
        await database.connect()

    yield

    # Shutdown
    logger.info("Shutting down ESG Dashboard API")
    await database.close()

# Create FastAPI app
app = FastAPI(
    title="ESG Dashboard API",
    description="Entitlements, trial lifecycle and plan-aware messaging for the ESG dashboard",
    version="1.0.0",
    lifespan=lifespan
)
app.state.locale_state = create_locale_state()

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_credentials=True,
    allow_origins=os.environ.get('CORS_ORIGINS', '*').split(','),
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(features.router)
app.include_router(companies.router)
app.include_router(i18n.router)

# Root endpoint
@app.get("/api")
async def root():
    return {
        "service": "ESG Dashboard API",
        "version": "1.0.0",
        "status": "operational"
    }

# Health check
@app.get("/api/health")
async def health_check():
    return {
        "status": "healthy",
        "environment": os.getenv("ENVIRONMENT", "development")
    }

# Validation error handler: log request_id + full errors (loc path)
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    request_id = str(uuid.uuid4())
    errors = exc.errors()
    logger.warning(
        "Validation failed request_id=%s path=%s errors=%s",
        request_id,
        request.url.path,
        [(e.get("loc"), e.get("msg"), e.get("type")) for e in errors],
    )
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_errors(errors), "request_id": request_id},
    )


def jsonable_errors(errors):
    return [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
        for e in errors
    ]


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "server:app",
        host="0.0.0.0",
        port=8001,
        reload=os.getenv("ENVIRONMENT") == "development"
    )
