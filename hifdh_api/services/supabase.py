import logging
from typing import Optional

from supabase import Client, create_client

from hifdh_api import config
from hifdh_api.errors import ConfigurationError

logger = logging.getLogger(__name__)


def create_supabase(access_token: Optional[str] = None, service: bool = False) -> Client:
    """
    Supabase client for one request. With an access token, table reads and writes
    run as that user so row level security applies.
    """
    supabase_url = config.supabase_url()
    supabase_key = config.supabase_service_key() if service else config.supabase_key()

    if not supabase_url or not supabase_key:
        logger.error("Supabase URL or Key not found in environment variables")
        raise ConfigurationError()

    supabase = create_client(supabase_url, supabase_key)
    if access_token:
        supabase.postgrest.auth(access_token)
    return supabase
