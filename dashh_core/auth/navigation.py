"""
Sidebar for signed-in pages: user info, storage mode and logout.
"""

import streamlit as st

from dashh_core.state.session import get_persistence
from .authentication import check_authentication, get_user_name, logout_user


def render_connection_badge():
    status = get_persistence().get_status()
    if status["is_remote"]:
        st.sidebar.success("☁️ Cloud storage")
    else:
        st.sidebar.warning("📴 Offline: saving on this device")
        if status.get("error"):
            st.sidebar.caption(status["error"])


def add_logout_button():
    """
    Add user info, storage mode and a logout button to the sidebar.
    """
    if not check_authentication():
        return

    st.sidebar.markdown(f"**👤 {get_user_name()}**")
    st.sidebar.caption(st.session_state.get("email") or "")
    render_connection_badge()

    if st.sidebar.button("🚪 Logout", use_container_width=True):
        result = logout_user()
        if not result:
            st.sidebar.error(f"Logout error: {result.error}")
        st.switch_page("Welcome.py")


def initialize_navigation():
    """
    Initialize navigation system.
    Call this at the start of every signed-in page.
    """
    add_logout_button()
