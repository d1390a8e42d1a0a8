from .supabase_client import create_supabase_client, supabase_configured
from .redis_client import create_redis_client, CacheService

__all__ = [
    "create_supabase_client",
    "supabase_configured",
    "create_redis_client",
    "CacheService"
]
