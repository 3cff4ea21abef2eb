# =============================================================================
# dashh_core/offline/__init__.py
# Remote-first persistence with local fallback
# =============================================================================
"""
Offline fallback module.

┌──────────────────────────────────────────┐
│            PersistenceFacade             │
│     (Single API - pages use this only)   │
└──────────────────────────────────────────┘
          │                     │
          ▼                     ▼
┌──────────────────┐  ┌──────────────────┐
│ RemoteDataService│  │ LocalDataService │
│   (Supabase)     │  │  (SQLite k/v)    │
└──────────────────┘  └──────────────────┘
          ▲
          │
┌──────────────────┐
│ ConnectionManager│
│ (remote/local)   │
└──────────────────┘
"""

from dashh_core.offline.connection_manager import (
    ConnectionManager,
    ConnectionState,
    ConnectionStatus,
)

from dashh_core.offline.local_database import LocalDatabase

from dashh_core.offline.local_store import LocalPersistenceStore

from dashh_core.offline.local_service import LocalDataService

from dashh_core.offline.persistence_facade import PersistenceFacade

__all__ = [
    # Connection Management
    "ConnectionManager",
    "ConnectionState",
    "ConnectionStatus",
    # Local Storage
    "LocalDatabase",
    "LocalPersistenceStore",
    "LocalDataService",
    # Facade (Main API)
    "PersistenceFacade",
]
