"""Test doubles for the hosted backend (document collections and auth)."""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Optional, Tuple

from dashh_core.data.models import AuthUser, FilePayload
from dashh_core.errors import AuthenticationError, BackendUnavailableError
from dashh_core.services.encoding import encode_data_uri

ALICE = ("alice@example.com", "secret-alice")
BOB = ("bob@example.com", "secret-bob")

COLLECTION_OPERATIONS = ("find", "find_one", "insert_one", "update_one", "delete_one")


def _matches(row: Dict[str, Any], filters: Dict[str, Any]) -> bool:
    return all(row.get(key) == value for key, value in filters.items())


class InMemoryCollection:
    """Collection emulation with per-operation failure injection."""

    def __init__(self, table_name: str) -> None:
        self.table_name = table_name
        self.rows: List[Dict[str, Any]] = []
        self.calls: List[str] = []
        self._failing: set = set()
        # operations that succeed but touch no rows (row-level security)
        self.blocked: set = set()
        self.last_columns: Optional[str] = None

    def fail(self, *operations: str) -> None:
        """Make the given operations (default: all) raise BackendUnavailableError."""
        self._failing.update(operations or COLLECTION_OPERATIONS)

    def recover(self) -> None:
        self._failing.clear()

    def _call(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self._failing:
            raise BackendUnavailableError(
                f"Could not {operation} {self.table_name}: simulated outage",
                operation=operation,
                collection=self.table_name,
            )

    def find(
        self,
        filters: Dict[str, Any],
        order_by: Optional[str] = None,
        ascending: bool = True,
        columns: str = "*",
    ) -> List[Dict[str, Any]]:
        self._call("find")
        self.last_columns = columns
        rows = [copy.deepcopy(r) for r in self.rows if _matches(r, filters)]
        if order_by:
            rows.sort(key=lambda r: (r.get(order_by) is None, r.get(order_by) or ""),
                      reverse=not ascending)
        if columns != "*":
            selected = [c.strip() for c in columns.split(",")]
            rows = [{c: r.get(c) for c in selected} for r in rows]
        return rows

    def find_one(self, filters: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        self._call("find_one")
        for row in self.rows:
            if _matches(row, filters):
                return copy.deepcopy(row)
        return None

    def insert_one(self, document: Dict[str, Any]) -> Dict[str, Any]:
        self._call("insert_one")
        stored = copy.deepcopy(document)
        self.rows.append(stored)
        return copy.deepcopy(stored)

    def update_one(self, filters: Dict[str, Any], changes: Dict[str, Any]) -> int:
        self._call("update_one")
        if "update_one" in self.blocked:
            return 0
        updated = 0
        for row in self.rows:
            if _matches(row, filters):
                row.update(copy.deepcopy(changes))
                updated += 1
        return updated

    def delete_one(self, filters: Dict[str, Any]) -> int:
        self._call("delete_one")
        before = len(self.rows)
        self.rows = [r for r in self.rows if not _matches(r, filters)]
        return before - len(self.rows)


class FakeAuthGateway:
    """Email/password accounts held in memory."""

    def __init__(self) -> None:
        self.accounts: Dict[str, Tuple[str, str]] = {}
        self.metadata: Dict[str, Dict[str, Any]] = {}
        self.unavailable = False
        self.signed_out = 0
        self._counter = 0

    def add_user(self, email: str, password: str) -> AuthUser:
        self._counter += 1
        user_id = f"user-{self._counter:04d}"
        self.accounts[email] = (user_id, password)
        return AuthUser(id=user_id, email=email)

    def _check_available(self, operation: str) -> None:
        if self.unavailable:
            raise BackendUnavailableError("Authentication service unreachable",
                                          operation=operation)

    def sign_in(self, email: str, password: str) -> AuthUser:
        self._check_available("sign_in")
        account = self.accounts.get(email)
        if account is None or account[1] != password:
            raise AuthenticationError("Invalid login credentials", email=email)
        return AuthUser(id=account[0], email=email)

    def sign_up(self, email: str, password: str, name: Optional[str] = None) -> None:
        self._check_available("sign_up")
        if email in self.accounts:
            raise AuthenticationError("User already registered", email=email)
        user = self.add_user(email, password)
        self.metadata[user.id] = {"name": name} if name else {}

    def sign_out(self) -> None:
        self._check_available("sign_out")
        self.signed_out += 1


class FakeDocumentStore:
    """Stands in for SupabaseDocumentStore."""

    def __init__(self) -> None:
        self.auth = FakeAuthGateway()
        self._collections: Dict[str, InMemoryCollection] = {}

    def collection(self, name: str) -> InMemoryCollection:
        if name not in self._collections:
            self._collections[name] = InMemoryCollection(name)
        return self._collections[name]

    @property
    def users(self) -> InMemoryCollection:
        return self.collection("users")

    @property
    def files(self) -> InMemoryCollection:
        return self.collection("files")

    def fail_all(self) -> None:
        for collection in (self.users, self.files):
            collection.fail()

    def recover_all(self) -> None:
        for collection in (self.users, self.files):
            collection.recover()


def make_payload(name="notes.txt", data=b"hello dashh", mime_type="text/plain", **kwargs):
    """Build a FilePayload with real data-URI content."""
    return FilePayload(
        name=name,
        size_bytes=len(data),
        mime_type=mime_type,
        content=encode_data_uri(data, mime_type),
        **kwargs,
    )
