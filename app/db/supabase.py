"""Supabase client factories.

Three ways into the backend:

- ``get_supabase()``: process-wide anon client for public reads.
- ``get_supabase_admin()``: process-wide service-role client.  It bypasses
  row-level security and is only used for the ``add_points`` RPC.
- ``user_client(token)``: a request-scoped anon client carrying the caller's
  JWT, so inserts and updates run under the caller's row-level security.
  Its PostgREST session is closed when the ``with`` block exits.
"""

from collections.abc import Iterator
from contextlib import contextmanager

from supabase import Client, create_client

from app.core.config import settings
from app.core.exceptions import ConfigurationError

_client: Client | None = None
_admin_client: Client | None = None


def get_supabase() -> Client:
    """Return the singleton anon Supabase client, creating it on first call."""
    global _client
    if _client is None:
        _client = create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
    return _client


def get_supabase_admin() -> Client:
    """Return the singleton service-role client.

    Raises ``ConfigurationError`` when ``SUPABASE_SERVICE_ROLE_KEY`` is unset.
    """
    global _admin_client
    if _admin_client is None:
        if not settings.SUPABASE_SERVICE_ROLE_KEY:
            raise ConfigurationError("SUPABASE_SERVICE_ROLE_KEY is not configured")
        _admin_client = create_client(
            settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY
        )
    return _admin_client


@contextmanager
def user_client(access_token: str) -> Iterator[Client]:
    """Yield an anon client whose PostgREST calls carry *access_token*."""
    client = create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
    client.postgrest.auth(access_token)
    try:
        yield client
    finally:
        client.postgrest.session.close()
