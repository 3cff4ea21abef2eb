from __future__ import annotations
import streamlit as st

from dashh_core.auth.authentication import check_authentication, login_user, register_user
from dashh_core.errors import ConfigurationError, handle_error
from dashh_core.state.session import get_persistence, init_state
from dashh_core.ui.theme import apply_css, hero_card

# ============================================================================
# PAGE CONFIGURATION
# ============================================================================
st.set_page_config(
    page_title="Dashh - Sign in",
    page_icon="📁",
    layout="centered",
    initial_sidebar_state="collapsed",  # Hide sidebar until login
)

init_state()
apply_css()

# ============================================================================
# BACKEND CHECK
# ============================================================================
try:
    get_persistence()
except ConfigurationError as e:
    handle_error(e)
    st.stop()

if check_authentication():
    st.switch_page("pages/01_Dashboard.py")

# ============================================================================
# LOGIN / REGISTER
# ============================================================================
hero_card("Welcome to Dashh", "Your personal file storage dashboard")

is_sign_up = st.session_state.auth_mode == "register"

with st.form("auth_form", clear_on_submit=False):
    st.markdown(f"### {'Create your account' if is_sign_up else 'Sign in to your account'}")

    name = ""
    if is_sign_up:
        name = st.text_input("Full name", placeholder="Enter your full name")
    email = st.text_input("Email", placeholder="Enter your email")
    password = st.text_input("Password", type="password", placeholder="Enter your password")

    submitted = st.form_submit_button(
        "Create Account" if is_sign_up else "Sign in",
        use_container_width=True,
    )

if submitted:
    with st.spinner("Creating your account..." if is_sign_up else "Signing in..."):
        if is_sign_up:
            result = register_user(email, password, name=name.strip() or None)
        else:
            result = login_user(email, password)

    if result:
        if result.meta("degraded"):
            st.session_state.offline_notice = True
        st.switch_page("pages/01_Dashboard.py")
    else:
        st.error(result.error)

toggle_label = (
    "Already have an account? Sign in" if is_sign_up
    else "Don't have an account? Sign up"
)
if st.button(toggle_label, type="tertiary"):
    st.session_state.auth_mode = "login" if is_sign_up else "register"
    st.rerun()
