"""
Authentication module for Dashh.
Supabase Auth email/password sign-in mirrored into Streamlit session state.
"""

from .authentication import (
    check_authentication,
    get_current_user,
    get_user_name,
    login_user,
    register_user,
    logout_user,
    require_authentication,
)
from .navigation import (
    add_logout_button,
    initialize_navigation,
    render_connection_badge,
)

__all__ = [
    "check_authentication",
    "get_current_user",
    "get_user_name",
    "login_user",
    "register_user",
    "logout_user",
    "require_authentication",
    "add_logout_button",
    "initialize_navigation",
    "render_connection_badge",
]
