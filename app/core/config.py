from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # API Configuration
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "ReportNow API"
    VERSION: str = "1.0.0"
    DESCRIPTION: str = "ReportNow backend for submitting and tracking incident reports"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list = ["*"]

    # Gemini (image analysis)
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-2.0-flash-lite"

    # Resend (status update emails)
    RESEND_API_KEY: Optional[str] = None
    RESEND_API_URL: str = "https://api.resend.com/emails"
    RESEND_FROM: str = "ReportNow <onboarding@resend.dev>"
    RESEND_TIMEOUT: int = 10  # seconds

    # Nominatim (reverse geocoding)
    GEOCODING_USER_AGENT: str = "reportnow-server"
    GEOCODING_TIMEOUT: int = 10  # seconds

    # Supabase Configuration
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""
    SUPABASE_REPORTS_TABLE: str = "reports"
    SUPABASE_STORAGE_BUCKET: str = "report_images"

    # Redis Configuration
    REDIS_URL: Optional[str] = None
    REDIS_DB: int = 0

    # Cache TTL (seconds)
    CACHE_TTL_REPORT: int = 300  # 5 minutes

    # Image Upload Configuration
    MAX_IMAGE_SIZE: int = 10 * 1024 * 1024  # 10MB
    ALLOWED_IMAGE_TYPES: list = ["image/jpeg", "image/png", "image/webp"]

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
