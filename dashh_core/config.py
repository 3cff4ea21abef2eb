# =============================================================================
# dashh_core/config.py
# Application Settings for Dashh
# Loads Supabase credentials and storage options from Streamlit secrets / env
# =============================================================================
"""
Settings are resolved in this order: Streamlit secrets, environment
variables, defaults.

Expected secrets.toml format:

    [supabase]
    url = "https://your-project.supabase.co"
    key = "your-anon-key"

    [dashh]
    local_db_path = "local_data/dashh.db"
    storage_prefix = "dashh_"
    fallback_threshold = 1
    request_timeout = 30
    local_quota_bytes = 5242880
    max_upload_mb = 10
"""

from __future__ import annotations
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional

import streamlit as st

from dashh_core.errors import ConfigurationError
from dashh_core.logging import get_logger

logger = get_logger(__name__)


DEFAULT_LOCAL_DB_PATH = Path("local_data") / "dashh.db"

# secrets key -> environment variable
ENV_VARS = {
    "supabase_url": "SUPABASE_URL",
    "supabase_key": "SUPABASE_KEY",
    "local_db_path": "DASHH_LOCAL_DB",
    "storage_prefix": "DASHH_STORAGE_PREFIX",
    "fallback_threshold": "DASHH_FALLBACK_THRESHOLD",
    "request_timeout": "DASHH_REQUEST_TIMEOUT",
    "local_quota_bytes": "DASHH_LOCAL_QUOTA_BYTES",
    "max_upload_mb": "DASHH_MAX_UPLOAD_MB",
}


@dataclass
class AppSettings:
    """Resolved runtime configuration."""
    supabase_url: str = ""
    supabase_key: str = ""
    users_table: str = "users"
    files_table: str = "files"
    local_db_path: Path = field(default_factory=lambda: DEFAULT_LOCAL_DB_PATH)
    storage_prefix: str = "dashh_"
    fallback_threshold: int = 1
    request_timeout: float = 30.0
    local_quota_bytes: Optional[int] = None
    max_upload_mb: float = 10.0

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    def require_supabase(self) -> None:
        """Raise ConfigurationError when the hosted backend is not configured."""
        if not self.supabase_url:
            raise ConfigurationError(
                "Supabase URL is not configured. Set [supabase] url in "
                ".streamlit/secrets.toml or SUPABASE_URL.",
                config_key="supabase.url",
            )
        if not self.supabase_key:
            raise ConfigurationError(
                "Supabase key is not configured. Set [supabase] key in "
                ".streamlit/secrets.toml or SUPABASE_KEY.",
                config_key="supabase.key",
            )


def _read_secrets() -> Dict[str, Any]:
    """Flatten the [supabase] and [dashh] secrets sections."""
    values: Dict[str, Any] = {}
    try:
        if "supabase" in st.secrets:
            supabase_secrets = st.secrets["supabase"]
            values["supabase_url"] = supabase_secrets.get("url", "")
            values["supabase_key"] = supabase_secrets.get("key", "")
        if "dashh" in st.secrets:
            values.update(dict(st.secrets["dashh"]))
    except Exception as e:
        # No secrets.toml at all is a normal local setup
        logger.debug(f"Streamlit secrets not available: {e}")
    return values


def _read_environment() -> Dict[str, Any]:
    return {
        key: os.environ[env_name]
        for key, env_name in ENV_VARS.items()
        if os.environ.get(env_name)
    }


def _coerce(settings: AppSettings, raw: Dict[str, Any]) -> AppSettings:
    """Apply raw string/number overrides onto settings with type conversion."""
    overrides: Dict[str, Any] = {}
    for key, value in raw.items():
        if value is None or value == "":
            continue
        try:
            if key == "local_db_path":
                overrides[key] = Path(value)
            elif key == "fallback_threshold":
                overrides[key] = max(1, int(value))
            elif key == "local_quota_bytes":
                overrides[key] = int(value)
            elif key in ("request_timeout", "max_upload_mb"):
                overrides[key] = float(value)
            elif key in ("supabase_url", "supabase_key", "storage_prefix",
                         "users_table", "files_table"):
                overrides[key] = str(value)
            else:
                logger.debug(f"Ignoring unknown setting: {key}")
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Invalid value for setting '{key}': {value!r}",
                config_key=key,
            ) from e
    return replace(settings, **overrides)


def load_settings() -> AppSettings:
    """
    Build AppSettings from secrets, then environment, then defaults.

    Environment variables only fill keys the secrets did not provide.
    """
    raw = _read_environment()
    raw.update(_read_secrets())
    settings = _coerce(AppSettings(), raw)
    logger.debug(
        f"Settings loaded (supabase configured={settings.supabase_configured}, "
        f"local db={settings.local_db_path})"
    )
    return settings
