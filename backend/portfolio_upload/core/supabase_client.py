"""
Supabase client initialization and configuration.

This module provides a singleton Supabase client instance for storage
operations. The service-role key is used because uploads write to a
private bucket.
"""

from typing import Optional

from supabase import Client, ClientOptions, create_client

from portfolio_upload.core.config import settings
from portfolio_upload.core.errors import StorageNotConfigured
from portfolio_upload.core.logger import logger


class SupabaseClient:
    """Singleton wrapper for Supabase client."""

    _instance: Optional[Client] = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the Supabase client instance.

        Returns:
            Supabase client instance

        Raises:
            StorageNotConfigured: If required environment variables are missing
        """
        if cls._instance is None:
            if not settings.SUPABASE_URL:
                raise StorageNotConfigured("Missing SUPABASE_URL environment variable")
            if not settings.SUPABASE_SERVICE_ROLE_KEY:
                raise StorageNotConfigured("Missing SUPABASE_SERVICE_ROLE_KEY environment variable")

            cls._instance = create_client(
                settings.SUPABASE_URL,
                settings.SUPABASE_SERVICE_ROLE_KEY,
                options=ClientOptions(auto_refresh_token=False, persist_session=False),
            )
            logger.info("Supabase client initialized successfully")

        return cls._instance

    @classmethod
    def reset(cls):
        """Reset the client instance (useful for testing)."""
        cls._instance = None


def get_supabase() -> Client:
    """Get the Supabase client instance."""
    return SupabaseClient.get_client()
