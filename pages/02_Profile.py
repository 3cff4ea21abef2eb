# =============================================================================
# 02_Profile.py - User Profile
# View and edit the signed-in user's profile
# =============================================================================
from __future__ import annotations
import streamlit as st

from dashh_core.auth.authentication import require_authentication
from dashh_core.auth.navigation import add_logout_button
from dashh_core.services.file_catalog import format_file_size
from dashh_core.state.session import get_persistence
from dashh_core.ui.components import header, render_offline_banner, stat_card
from dashh_core.ui.theme import apply_css

st.set_page_config(
    page_title="Profile - Dashh",
    page_icon="👤",
    layout="centered",
)

require_authentication()

apply_css()
add_logout_button()

facade = get_persistence()

header("Your Profile", "Manage how your name appears in Dashh", icon="👤")
render_offline_banner(facade.get_status())

result = facade.get_user_profile()
if not result:
    st.error(f"Could not load profile: {result.error}")
    st.stop()

profile = result.data
if result.meta("persisted") is False:
    st.warning("Your profile could not be saved yet; showing defaults.")

if profile.is_first_login:
    st.info("👋 First time here? Tell us your name.")

col1, col2 = st.columns(2)
with col1:
    stat_card("Files", str(profile.total_files if profile.total_files is not None else "-"))
with col2:
    stat_card(
        "Storage Used",
        format_file_size(profile.storage_used_bytes) if profile.storage_used_bytes is not None else "-",
    )

with st.form("profile_form"):
    st.text_input("Email", value=profile.email, disabled=True)
    name = st.text_input("Display name", value=profile.name)
    c1, c2 = st.columns(2)
    with c1:
        first_name = st.text_input("First name", value=profile.first_name)
    with c2:
        last_name = st.text_input("Last name", value=profile.last_name)
    saved = st.form_submit_button("Save changes", use_container_width=True)

if saved:
    patch = {
        key: value
        for key, value in {"name": name, "first_name": first_name, "last_name": last_name}.items()
        if value.strip() != (getattr(profile, key) or "")
    }
    if not patch:
        st.info("Nothing to update.")
    else:
        updated = facade.update_user_profile(patch)
        if updated:
            if "name" in patch:
                st.session_state.name = updated.data.name
            st.toast("Profile updated", icon="✅")
            st.rerun()
        else:
            st.error(updated.error)

created = profile.created_at.strftime("%Y-%m-%d") if profile.created_at else "unknown"
st.caption(f"Member since {created} • {profile.profile_update_count} profile update(s)")
