"""
Authentication helpers for Dashh.

Credentials are checked by Supabase Auth through the session's
PersistenceFacade; these helpers mirror the outcome into st.session_state
so pages can gate themselves.
"""

import streamlit as st
from typing import Optional

from dashh_core.data.models import AuthUser
from dashh_core.services.base_service import ServiceResult
from dashh_core.state.session import clear_user_state, get_persistence, has_persistence, init_state


# ==================== SESSION HELPERS ====================

def _remember_user(user: AuthUser, name: Optional[str] = None):
    st.session_state.authenticated = True
    st.session_state.user_id = user.id
    st.session_state.email = user.email
    st.session_state.name = name or user.display_name


def check_authentication() -> bool:
    """
    Check if the current user is authenticated.

    Returns:
        bool: True if the session holds a signed-in user
    """
    if not st.session_state.get("authenticated", False):
        return False
    return has_persistence() and get_persistence().is_authenticated


def get_current_user() -> Optional[AuthUser]:
    if not check_authentication():
        return None
    return get_persistence().current_user


def get_user_name() -> Optional[str]:
    if not check_authentication():
        return None
    return st.session_state.get("name")


# ==================== LOGIN / LOGOUT ====================

def login_user(email: str, password: str) -> ServiceResult:
    result = get_persistence().login(email, password)
    if result:
        _remember_user(result.data)
    return result


def register_user(email: str, password: str, name: Optional[str] = None) -> ServiceResult:
    result = get_persistence().register(email, password, name=name)
    if result:
        _remember_user(result.data, name=name)
    return result


def logout_user() -> ServiceResult:
    """
    Sign out and clear the user's session state.
    """
    result = get_persistence().logout()
    clear_user_state()
    return result


# ==================== PAGE PROTECTION ====================

def require_authentication():
    """
    Stop the page unless a user is signed in.

    Call at the top of every protected page.
    """
    init_state()
    if check_authentication():
        return
    st.warning("🔒 Please sign in to access this page.")
    st.page_link("Welcome.py", label="Go to sign in", icon="🔑")
    st.stop()
