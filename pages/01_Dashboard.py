# =============================================================================
# 01_Dashboard.py - Files Dashboard
# Stats, uploads, search/filter, preview/download/delete, storage chart
# =============================================================================
"""
Dashboard - the signed-in home page.

Sections:
1. Usage stats (total files, storage used, uploads today)
2. Upload - multi-file upload through UploadPipeline
3. Your Files - search, category filter, sort, preview, download, delete
4. Storage - per-category breakdown chart
"""
from __future__ import annotations
import streamlit as st
import plotly.express as px

from dashh_core.auth.authentication import require_authentication
from dashh_core.auth.navigation import add_logout_button
from dashh_core.errors import ErrorContext, safe_execute
from dashh_core.services.file_catalog import (
    CATEGORIES,
    filter_by_category,
    files_to_dataframe,
    format_file_size,
    search_files,
    sort_files,
    storage_by_category,
)
from dashh_core.services.upload_pipeline import UploadPipeline
from dashh_core.state.session import get_persistence, get_settings
from dashh_core.ui.components import (
    CATEGORY_ICONS,
    add_grid,
    header,
    render_file_preview,
    render_offline_banner,
    render_stats,
    render_upload_items,
)
from dashh_core.ui.theme import CATEGORY_COLORS, apply_css

st.set_page_config(
    page_title="Dashboard - Dashh",
    page_icon="📁",
    layout="wide",
)

# ============================================================================
# AUTHENTICATION CHECK
# ============================================================================
require_authentication()

apply_css()
add_logout_button()

facade = get_persistence()
settings = get_settings()

if "uploader_key" not in st.session_state:
    st.session_state.uploader_key = 0

header("Welcome back!", "Upload and manage your files with ease", icon="📁")
render_offline_banner(facade.get_status())

# =============================================================================
# STATS
# =============================================================================
stats_result = facade.get_user_stats()
if stats_result:
    render_stats(stats_result.data)
else:
    st.error(f"Could not load stats: {stats_result.error}")

# =============================================================================
# UPLOAD
# =============================================================================
st.markdown("### ⬆️ Upload Files")

with st.container(border=True):
    uploaded = st.file_uploader(
        "Drag and drop files here, or browse",
        accept_multiple_files=True,
        key=f"uploader_{st.session_state.uploader_key}",
        help=f"Files above {settings.max_upload_mb:g} MB are accepted but slow to store.",
    )
    col_tags, col_desc = st.columns(2)
    with col_tags:
        tags_text = st.text_input("Tags", placeholder="comma separated, e.g. work, receipts")
    with col_desc:
        description = st.text_input("Description", placeholder="Optional note")

    if st.button("Upload", disabled=not uploaded, use_container_width=True):
        progress = st.progress(0, text="Preparing upload...")
        pipeline = UploadPipeline(max_upload_mb=settings.max_upload_mb)
        pipeline.set_progress_callback(lambda pct, msg: progress.progress(min(pct, 100), text=msg))

        tags = [t.strip() for t in tags_text.split(",") if t.strip()]
        result = pipeline.run(uploaded, facade, tags=tags, description=description.strip())

        if result:
            st.session_state.last_upload_items = result.meta("items", [])
            stored, failed = len(result.data), result.meta("failed", 0)
            if stored:
                st.toast(f"Uploaded {stored} file(s)", icon="✅")
            if failed:
                st.toast(f"{failed} file(s) failed to upload", icon="❌")
        else:
            st.error(f"Upload failed: {result.error}")

        st.session_state.uploader_key += 1
        st.rerun()

    if st.session_state.last_upload_items:
        render_upload_items(st.session_state.last_upload_items)

# =============================================================================
# FILES
# =============================================================================
files_result = facade.get_user_files()
if not files_result:
    st.error(f"Could not load files: {files_result.error}")
    st.stop()

all_files = files_result.data

tab_files, tab_storage = st.tabs(["📂 Your Files", "📊 Storage"])

with tab_files:
    col_search, col_cat, col_sort = st.columns([3, 2, 2])
    with col_search:
        query = st.text_input("Search", key="search_query", placeholder="Search by name, tag or description")
    with col_cat:
        category = st.selectbox(
            "Type",
            ["all"] + CATEGORIES,
            key="category_filter",
            format_func=lambda c: "All types" if c == "all" else f"{CATEGORY_ICONS[c]} {c.title()}",
        )
    with col_sort:
        sort_labels = {"uploaded_at": "Newest first", "name": "Name", "size_bytes": "Largest first"}
        sort_key = st.selectbox("Sort", list(sort_labels), key="sort_key",
                                format_func=sort_labels.get)

    visible = sort_files(
        filter_by_category(search_files(all_files, query), category),
        key=sort_key,
        descending=sort_key != "name",
    )

    if not all_files:
        st.info("No files uploaded yet. Upload your first file to get started.")
    elif not visible:
        st.info("No files match your search.")
    else:
        st.caption(f"Showing {len(visible)} of {len(all_files)} file(s)")

        for record in visible:
            with st.container(border=True):
                col_info, col_actions = st.columns([5, 2])
                with col_info:
                    uploaded_at = record.uploaded_at.strftime("%Y-%m-%d %H:%M") if record.uploaded_at else "unknown"
                    st.markdown(f"{CATEGORY_ICONS[record.category]} **{record.name}**")
                    st.caption(
                        f"{format_file_size(record.size_bytes)} • "
                        f"{record.mime_type or 'unknown type'} • uploaded {uploaded_at}"
                    )
                    if record.tags:
                        st.caption(" ".join(f"`{tag}`" for tag in record.tags))
                with col_actions:
                    c1, c2 = st.columns(2)
                    if c1.button("👁️ View", key=f"view_{record.id}", use_container_width=True):
                        selected = st.session_state.selected_file_id
                        st.session_state.selected_file_id = None if selected == record.id else record.id
                        st.rerun()
                    if c2.button("🗑️ Delete", key=f"delete_{record.id}", use_container_width=True):
                        st.session_state[f"confirm_delete_{record.id}"] = True

                if st.session_state.get(f"confirm_delete_{record.id}"):
                    st.warning(f'Delete "{record.name}"? This cannot be undone.')
                    yes, no = st.columns(2)
                    if yes.button("Yes, delete", key=f"confirm_yes_{record.id}"):
                        deleted = facade.delete_file(record.id)
                        st.session_state.pop(f"confirm_delete_{record.id}", None)
                        if deleted:
                            st.toast(deleted.data["message"], icon="🗑️")
                            if st.session_state.selected_file_id == record.id:
                                st.session_state.selected_file_id = None
                        else:
                            st.toast(f"Delete failed: {deleted.error}", icon="❌")
                        st.rerun()
                    if no.button("Cancel", key=f"confirm_no_{record.id}"):
                        st.session_state.pop(f"confirm_delete_{record.id}", None)
                        st.rerun()

                if st.session_state.selected_file_id == record.id:
                    content_result = facade.get_file_content(record.id)
                    if content_result:
                        with ErrorContext(f"Previewing {record.name}"):
                            render_file_preview(record, content_result.data["content"])
                    else:
                        st.error(content_result.error)

        with st.expander("Table view"):
            st.dataframe(
                files_to_dataframe(visible).drop(columns=["id", "size_bytes"]),
                use_container_width=True,
                hide_index=True,
            )

with tab_storage:
    summary = safe_execute(
        storage_by_category,
        all_files,
        error_message="Could not build the storage breakdown",
    )
    # safe_execute has already shown the error when summary is None
    if summary is not None and summary.empty:
        st.info("Storage breakdown appears once you have uploaded files.")
    elif summary is not None:
        col_pie, col_bar = st.columns(2)
        with col_pie:
            fig = px.pie(
                summary,
                names="category",
                values="size_bytes",
                color="category",
                color_discrete_map=CATEGORY_COLORS,
                hole=0.45,
                title="Storage by type",
            )
            fig.update_traces(customdata=summary[["size"]], hovertemplate="%{label}: %{customdata[0]}")
            st.plotly_chart(add_grid(fig), use_container_width=True)
        with col_bar:
            fig = px.bar(
                summary,
                x="category",
                y="files",
                color="category",
                color_discrete_map=CATEGORY_COLORS,
                title="Files by type",
            )
            fig.update_layout(showlegend=False)
            st.plotly_chart(add_grid(fig), use_container_width=True)
        st.dataframe(summary[["category", "files", "size"]], use_container_width=True, hide_index=True)
