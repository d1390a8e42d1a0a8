from supabase.client import create_client, Client
from app.core.config import Settings
from typing import Optional
import logging

logger = logging.getLogger(__name__)


def supabase_configured(settings: Settings) -> bool:
    """Check if we have a usable Supabase URL and key"""
    return bool(
        settings.SUPABASE_URL.startswith("https://")
        and settings.SUPABASE_KEY
    )


def create_supabase_client(settings: Settings) -> Optional[Client]:
    """Create the Supabase client used for the reports table and image storage"""
    if not supabase_configured(settings):
        logger.warning("Supabase configuration incomplete - report storage unavailable")
        return None

    try:
        client = create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
        logger.info("Supabase client initialized successfully")
        return client
    except Exception as e:
        logger.error(f"Failed to initialize Supabase client: {e}")
        return None
