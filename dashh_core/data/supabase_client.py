# =============================================================================
# dashh_core/data/supabase_client.py
# Supabase Client Configuration for Dashh
# Handles client creation, auth and document-style table operations
# =============================================================================

from __future__ import annotations
from typing import Any, Dict, List, Optional

import httpx
from supabase import Client, ClientOptions, create_client
from supabase_auth.errors import AuthRetryableError

from dashh_core.config import AppSettings
from dashh_core.data.models import AuthUser
from dashh_core.errors import AuthenticationError, BackendUnavailableError
from dashh_core.logging import get_logger

logger = get_logger(__name__)

# Auth failures that mean the service, not the credentials, is at fault
AUTH_UNAVAILABLE_ERRORS = (httpx.HTTPError, AuthRetryableError)


def get_supabase_client(settings: AppSettings) -> Client:
    """
    Create a Supabase client from settings.

    The auth session lives on the client object, so each browser session
    needs its own client; do not cache this across sessions.

    Raises:
        ConfigurationError: if url/key are missing
    """
    settings.require_supabase()
    options = ClientOptions(postgrest_client_timeout=settings.request_timeout)
    client = create_client(settings.supabase_url, settings.supabase_key, options=options)
    logger.debug("Supabase client created")
    return client


class SupabaseCollection:
    """
    A Supabase table addressed like a document collection.

    `filters` are equality filters ({"id": ..., "owner_id": ...}). Any client
    exception is raised as BackendUnavailableError.
    """

    def __init__(self, client: Client, table_name: str):
        """
        Args:
            client: Supabase client
            table_name: Name of the Supabase table
        """
        self.client = client
        self.table_name = table_name

    def _unavailable(self, operation: str, error: Exception) -> BackendUnavailableError:
        logger.warning(f"Supabase {operation} on '{self.table_name}' failed: {error}")
        return BackendUnavailableError(
            f"Could not {operation} {self.table_name}: {error}",
            operation=operation,
            collection=self.table_name,
        )

    @staticmethod
    def _apply_filters(query, filters: Dict[str, Any]):
        for col, val in filters.items():
            query = query.eq(col, val)
        return query

    def find(
        self,
        filters: Dict[str, Any],
        order_by: Optional[str] = None,
        ascending: bool = True,
        columns: str = "*",
    ) -> List[Dict[str, Any]]:
        """Fetch all matching documents; `columns` is a PostgREST select list."""
        try:
            query = self._apply_filters(self.client.table(self.table_name).select(columns), filters)
            if order_by:
                query = query.order(order_by, desc=not ascending)
            response = query.execute()
        except Exception as e:
            raise self._unavailable("read", e) from e
        return list(response.data or [])

    def find_one(self, filters: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Fetch the first matching document, or None."""
        try:
            query = self._apply_filters(self.client.table(self.table_name).select("*"), filters)
            response = query.limit(1).execute()
        except Exception as e:
            raise self._unavailable("read", e) from e
        rows = response.data or []
        return rows[0] if rows else None

    def insert_one(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a document and return the stored row."""
        try:
            response = self.client.table(self.table_name).insert(document).execute()
        except Exception as e:
            raise self._unavailable("insert into", e) from e
        rows = response.data or []
        return rows[0] if rows else document

    def update_one(self, filters: Dict[str, Any], changes: Dict[str, Any]) -> int:
        """Apply `changes` to matching documents; returns the number updated."""
        try:
            query = self._apply_filters(self.client.table(self.table_name).update(changes), filters)
            response = query.execute()
        except Exception as e:
            raise self._unavailable("update", e) from e
        return len(response.data or [])

    def delete_one(self, filters: Dict[str, Any]) -> int:
        """Delete matching documents; returns the number deleted."""
        try:
            query = self._apply_filters(self.client.table(self.table_name).delete(), filters)
            response = query.execute()
        except Exception as e:
            raise self._unavailable("delete from", e) from e
        return len(response.data or [])


class SupabaseAuthGateway:
    """Email/password authentication through Supabase Auth."""

    def __init__(self, client: Client):
        self.client = client

    @staticmethod
    def _to_user(response, email: str) -> AuthUser:
        user = getattr(response, "user", None)
        if user is None:
            raise AuthenticationError("Invalid login credentials", email=email)
        return AuthUser(id=str(user.id), email=getattr(user, "email", None) or email)

    def sign_in(self, email: str, password: str) -> AuthUser:
        try:
            response = self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AUTH_UNAVAILABLE_ERRORS as e:
            raise BackendUnavailableError(f"Authentication service unreachable: {e}",
                                          operation="sign_in") from e
        except Exception as e:
            raise AuthenticationError(str(e) or "Invalid login credentials", email=email) from e
        return self._to_user(response, email)

    def sign_up(self, email: str, password: str, name: Optional[str] = None) -> None:
        options = {"data": {"name": name}} if name else {}
        try:
            self.client.auth.sign_up(
                {"email": email, "password": password, "options": options}
            )
        except AUTH_UNAVAILABLE_ERRORS as e:
            raise BackendUnavailableError(f"Authentication service unreachable: {e}",
                                          operation="sign_up") from e
        except Exception as e:
            raise AuthenticationError(str(e) or "Registration failed", email=email) from e

    def sign_out(self) -> None:
        try:
            self.client.auth.sign_out()
        except AUTH_UNAVAILABLE_ERRORS as e:
            raise BackendUnavailableError(f"Authentication service unreachable: {e}",
                                          operation="sign_out") from e


class SupabaseDocumentStore:
    """One Supabase client exposed as auth + named collections."""

    def __init__(self, client: Client):
        self.client = client
        self.auth = SupabaseAuthGateway(client)
        self._collections: Dict[str, SupabaseCollection] = {}

    @classmethod
    def from_settings(cls, settings: AppSettings) -> SupabaseDocumentStore:
        return cls(get_supabase_client(settings))

    def collection(self, name: str) -> SupabaseCollection:
        if name not in self._collections:
            self._collections[name] = SupabaseCollection(self.client, name)
        return self._collections[name]
