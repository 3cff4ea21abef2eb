import streamlit as st

from dashh_core.config import AppSettings, load_settings
from dashh_core.logging import get_logger, setup_logging
from dashh_core.offline import ConnectionState, ConnectionStatus, PersistenceFacade

logger = get_logger(__name__)

# Central registry for session-state keys used across the app.
SESSION_DEFAULTS = {
    "authenticated": False,
    "user_id": None,
    "email": None,
    "name": None,
    "auth_mode": "login",
    "selected_file_id": None,
    "search_query": "",
    "category_filter": "all",
    "sort_key": "uploaded_at",
    "last_upload_items": [],
    "offline_notice": False,
    "debug_mode": False,
}

SETTINGS_KEY = "_dashh_settings"
FACADE_KEY = "_dashh_facade"


@st.cache_resource
def _configure_logging():
    setup_logging()


def init_state():
    """Initialize logging (once per process) and session state defaults."""
    _configure_logging()
    for k, v in SESSION_DEFAULTS.items():
        if k not in st.session_state:
            st.session_state[k] = v


def get_settings() -> AppSettings:
    if SETTINGS_KEY not in st.session_state:
        st.session_state[SETTINGS_KEY] = load_settings()
    return st.session_state[SETTINGS_KEY]


def _on_mode_change(state: ConnectionState):
    st.session_state["offline_notice"] = state.status == ConnectionStatus.LOCAL_FALLBACK


def get_persistence() -> PersistenceFacade:
    """
    The persistence facade of this browser session.

    Created on first use; every session gets its own Supabase client and
    fallback state.

    Raises:
        ConfigurationError: if Supabase is not configured
    """
    if FACADE_KEY not in st.session_state:
        facade = PersistenceFacade.from_settings(get_settings())
        facade.register_status_callback(_on_mode_change)
        facade.initialize()
        st.session_state[FACADE_KEY] = facade
        logger.info("Persistence facade created for new session")
    return st.session_state[FACADE_KEY]


def clear_user_state():
    """Reset everything tied to the signed-in user (keeps the facade)."""
    for k, v in SESSION_DEFAULTS.items():
        if k != "debug_mode":
            st.session_state[k] = v


def has_persistence() -> bool:
    return FACADE_KEY in st.session_state
