# =============================================================================
# tests/unit/test_supabase_client.py
# Unit Tests for the Supabase boundary (collections and auth)
# =============================================================================

from types import SimpleNamespace
from unittest.mock import MagicMock, call

import httpx
import pytest
from supabase_auth.errors import AuthRetryableError

from dashh_core.config import AppSettings
from dashh_core.data.supabase_client import (
    SupabaseAuthGateway,
    SupabaseCollection,
    SupabaseDocumentStore,
    get_supabase_client,
)
from dashh_core.errors import AuthenticationError, BackendUnavailableError, ConfigurationError


class TestSupabaseCollection:
    """Document operations over a table"""

    def test_find_applies_filters_and_order(self, mock_supabase):
        """Equality filters become .eq() calls; order_by maps to .order()"""
        mock_supabase.query.execute.return_value = SimpleNamespace(data=[{"id": "1"}, {"id": "2"}])
        files = SupabaseCollection(mock_supabase, "files")

        rows = files.find({"owner_id": "u1"}, order_by="uploaded_at")

        assert rows == [{"id": "1"}, {"id": "2"}]
        mock_supabase.table.assert_called_with("files")
        mock_supabase.query.select.assert_called_with("*")
        mock_supabase.query.eq.assert_called_with("owner_id", "u1")
        mock_supabase.query.order.assert_called_with("uploaded_at", desc=False)

    def test_find_selects_requested_columns(self, mock_supabase):
        """A column list narrows the select"""
        SupabaseCollection(mock_supabase, "files").find({"owner_id": "u1"}, columns="id,size_bytes")
        mock_supabase.query.select.assert_called_with("id,size_bytes")

    def test_find_one_limits_to_one(self, mock_supabase):
        """find_one returns the first row or None"""
        files = SupabaseCollection(mock_supabase, "files")
        assert files.find_one({"id": "x"}) is None

        mock_supabase.query.execute.return_value = SimpleNamespace(data=[{"id": "x"}])
        assert files.find_one({"id": "x", "owner_id": "u1"}) == {"id": "x"}
        mock_supabase.query.limit.assert_called_with(1)
        mock_supabase.query.eq.assert_has_calls([call("id", "x"), call("owner_id", "u1")])

    def test_insert_returns_stored_row(self, mock_supabase):
        """Inserted rows are echoed back"""
        mock_supabase.query.execute.return_value = SimpleNamespace(data=[{"id": "new", "name": "a"}])
        users = SupabaseCollection(mock_supabase, "users")

        assert users.insert_one({"id": "new", "name": "a"}) == {"id": "new", "name": "a"}
        mock_supabase.query.insert.assert_called_with({"id": "new", "name": "a"})

    def test_update_and_delete_return_counts(self, mock_supabase):
        """Affected row counts come from the response data"""
        mock_supabase.query.execute.return_value = SimpleNamespace(data=[{"id": "u1"}])
        users = SupabaseCollection(mock_supabase, "users")

        assert users.update_one({"id": "u1"}, {"total_files": 2}) == 1
        mock_supabase.query.update.assert_called_with({"total_files": 2})

        mock_supabase.query.execute.return_value = SimpleNamespace(data=[])
        assert users.delete_one({"id": "missing"}) == 0

    def test_client_errors_become_backend_unavailable(self, mock_supabase):
        """Any client exception is a backend failure"""
        mock_supabase.query.execute.side_effect = RuntimeError("connection reset")
        files = SupabaseCollection(mock_supabase, "files")

        with pytest.raises(BackendUnavailableError) as exc_info:
            files.find({"owner_id": "u1"})
        assert exc_info.value.details["collection"] == "files"


class TestSupabaseAuthGateway:
    """Supabase Auth wrapper"""

    def test_sign_in_returns_auth_user(self):
        """The session user becomes an AuthUser"""
        client = MagicMock()
        client.auth.sign_in_with_password.return_value = SimpleNamespace(
            user=SimpleNamespace(id="uuid-1", email="a@example.com")
        )

        user = SupabaseAuthGateway(client).sign_in("a@example.com", "pw")

        assert (user.id, user.email) == ("uuid-1", "a@example.com")
        client.auth.sign_in_with_password.assert_called_with(
            {"email": "a@example.com", "password": "pw"}
        )

    def test_rejected_credentials(self):
        """API errors are authentication failures"""
        client = MagicMock()
        client.auth.sign_in_with_password.side_effect = Exception("Invalid login credentials")

        with pytest.raises(AuthenticationError):
            SupabaseAuthGateway(client).sign_in("a@example.com", "wrong")

    def test_missing_user_is_rejected(self):
        """A response without a user is not a login"""
        client = MagicMock()
        client.auth.sign_in_with_password.return_value = SimpleNamespace(user=None)

        with pytest.raises(AuthenticationError):
            SupabaseAuthGateway(client).sign_in("a@example.com", "pw")

    def test_transport_errors_are_backend_failures(self):
        """Network errors are not credential problems"""
        client = MagicMock()
        client.auth.sign_in_with_password.side_effect = httpx.ConnectError("no route to host")

        with pytest.raises(BackendUnavailableError):
            SupabaseAuthGateway(client).sign_in("a@example.com", "pw")

    def test_retryable_auth_errors_are_backend_failures(self):
        """Gateway errors from Supabase Auth (502/503/504) are outages, not bad credentials"""
        client = MagicMock()
        client.auth.sign_in_with_password.side_effect = AuthRetryableError("Service Unavailable", 503)
        client.auth.sign_up.side_effect = AuthRetryableError("Bad Gateway", 502)
        gateway = SupabaseAuthGateway(client)

        with pytest.raises(BackendUnavailableError):
            gateway.sign_in("a@example.com", "pw")
        with pytest.raises(BackendUnavailableError):
            gateway.sign_up("a@example.com", "pw1234")

    def test_sign_up_passes_name_metadata(self):
        """The registration name is sent as user metadata"""
        client = MagicMock()
        SupabaseAuthGateway(client).sign_up("a@example.com", "pw1234", name="Ada")

        client.auth.sign_up.assert_called_with({
            "email": "a@example.com",
            "password": "pw1234",
            "options": {"data": {"name": "Ada"}},
        })


class TestDocumentStore:
    """Client wiring"""

    def test_collections_are_cached(self, mock_supabase):
        """The same collection object is returned per name"""
        store = SupabaseDocumentStore(mock_supabase)
        assert store.collection("files") is store.collection("files")
        assert store.collection("files").table_name == "files"

    def test_unconfigured_client_raises(self):
        """Creating a client without credentials is a configuration error"""
        with pytest.raises(ConfigurationError):
            get_supabase_client(AppSettings())
