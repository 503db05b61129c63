from supabase import create_client, Client, ClientOptions
from subbill.config import settings
import logging

logger = logging.getLogger(__name__)


class SupabaseClient:
    _client: Client = None
    _service_client: Client = None

    @classmethod
    def get_client(cls) -> Client:
        if cls._client is None:
            cls._client = create_client(settings.supabase_url, settings.supabase_key)
        return cls._client

    @classmethod
    def get_service_client(cls) -> Client:
        """Client with service_role key; bypasses RLS. Use in seed scripts."""
        if cls._service_client is None and settings.supabase_service_role_key:
            cls._service_client = create_client(
                settings.supabase_url, settings.supabase_service_role_key
            )
        return cls._service_client or cls.get_client()

    @classmethod
    def get_user_client(cls, access_token: str) -> Client:
        """
        Short-lived client that sends the user's JWT, so row-level security and
        auth.uid() inside rpc functions see the signed-in user.
        Not cached: one per request.
        """
        options = ClientOptions(headers={"Authorization": f"Bearer {access_token}"})
        return create_client(settings.supabase_url, settings.supabase_key, options=options)

    @staticmethod
    def close_client(client: Client):
        """Close the HTTP sessions a per-request client opened (database and storage)"""
        for name in ("_postgrest", "_storage"):
            sub_client = getattr(client, name, None)
            if sub_client is None:
                continue
            session = getattr(sub_client, "session", None) or getattr(sub_client, "_client", None)
            if session is None:
                continue
            try:
                session.close()
            except Exception as e:
                logger.warning(f"Failed to close {name} session: {e}")

    @classmethod
    def reset_client(cls):
        cls._client = None
        cls._service_client = None


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def get_auth_supabase() -> Client:
    """Fresh client for sign-in/sign-up; the shared client never holds a user session."""
    return create_client(settings.supabase_url, settings.supabase_key)
