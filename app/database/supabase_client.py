from supabase import create_client, Client
from app.config import settings


class ServiceRoleNotConfigured(RuntimeError):
    """Raised when an admin client is requested without SUPABASE_SERVICE_ROLE_KEY."""


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
        """Client with service_role key; bypasses RLS and unlocks auth.admin.

        Never falls back to the anon client: admin actions must fail loudly
        when the key is missing.
        """
        if cls._service_client is None:
            if not settings.supabase_service_role_key:
                raise ServiceRoleNotConfigured(
                    "Service role key not configured. Cannot perform admin operations."
                )
            cls._service_client = create_client(
                settings.supabase_url, settings.supabase_service_role_key
            )
        return cls._service_client

    @classmethod
    def reset_client(cls):
        cls._client = None
        cls._service_client = None


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def get_supabase_admin() -> Client:
    return SupabaseClient.get_service_client()
