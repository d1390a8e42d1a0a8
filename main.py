from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from app.core.config import settings
from app.api.api import api_router
from app.db.redis_client import CacheService, create_redis_client
from app.db.supabase_client import create_supabase_client
from app.services.ai_service import ImageAnalysisService
from app.services.geocoding_service import GeocodingService
from app.services.image_service import ImageStorageService
from app.services.notification_service import NotificationService
from app.services.report_service import ReportService

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
for noisy in ("httpx", "httpcore", "urllib3"):
    logging.getLogger(noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def build_services(app: FastAPI) -> None:
    """Construct the third-party clients and services once and attach them to app.state"""
    supabase = create_supabase_client(settings)
    cache = CacheService(create_redis_client(settings), ttl=settings.CACHE_TTL_REPORT)

    image_service = ImageStorageService(
        client=supabase,
        bucket_name=settings.SUPABASE_STORAGE_BUCKET,
        max_size=settings.MAX_IMAGE_SIZE,
        allowed_types=settings.ALLOWED_IMAGE_TYPES
    )

    app.state.cache = cache
    app.state.report_service = ReportService(
        client=supabase,
        image_service=image_service,
        cache=cache,
        table_name=settings.SUPABASE_REPORTS_TABLE
    )
    app.state.image_analysis_service = ImageAnalysisService(
        api_key=settings.GEMINI_API_KEY,
        model_name=settings.GEMINI_MODEL
    )
    app.state.geocoding_service = GeocodingService(
        user_agent=settings.GEOCODING_USER_AGENT,
        timeout=settings.GEOCODING_TIMEOUT
    )
    app.state.notification_service = NotificationService(
        api_key=settings.RESEND_API_KEY,
        sender=settings.RESEND_FROM,
        api_url=settings.RESEND_API_URL,
        timeout=settings.RESEND_TIMEOUT
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    logger.info("Starting ReportNow API...")
    build_services(app)

    try:
        yield
    finally:
        # Shutdown
        logger.info("Shutting down ReportNow API...")
        app.state.notification_service.session.close()
        await app.state.cache.close()


# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description=settings.DESCRIPTION,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are reported as 400 with the common error shape"""
    errors = exc.errors()
    message = "Invalid request body"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = str(first.get("msg", "")).removeprefix("Value error, ")
        message = f"{field}: {detail}" if field else detail
    logger.warning(f"Rejected request to {request.url.path}: {message}")
    content = {"error": message}
    if request.url.path == f"{settings.API_PREFIX}/reports/create":
        content = {"success": False, **content}
    return JSONResponse(status_code=400, content=content)


# Include API routes
app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/")
def read_root():
    """Root endpoint"""
    return {
        "message": "ReportNow API",
        "version": settings.VERSION,
        "status": "running"
    }


@app.get("/health")
def health_check(request: Request):
    """Health check endpoint"""
    state = request.app.state
    return {
        "status": "healthy",
        "version": settings.VERSION,
        "integrations": {
            "image_analysis": getattr(state, "image_analysis_service", None) is not None
            and state.image_analysis_service.configured,
            "report_storage": getattr(state, "report_service", None) is not None
            and state.report_service.client is not None,
            "email": bool(settings.RESEND_API_KEY),
            "cache": getattr(state, "cache", None) is not None and state.cache.enabled,
        }
    }
