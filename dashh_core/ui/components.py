from dataclasses import replace
from html import escape
from typing import Iterable, Optional

import streamlit as st

from dashh_core.data.models import FileRecord, Stats
from dashh_core.errors import FileEncodingError, RecordNotFoundError
from dashh_core.services.file_catalog import download_payload, format_file_size, preview_kind
from dashh_core.services.upload_pipeline import UploadItem, UploadStatus
from .theme import GRID_COLOR, SUBTLE_TEXT, TEXT_COLOR, CARD_BG_LIGHT

CATEGORY_ICONS = {
    "image": "🖼️",
    "video": "🎬",
    "audio": "🎵",
    "pdf": "📕",
    "archive": "🗜️",
    "document": "📄",
    "other": "📁",
}

STATUS_ICONS = {
    UploadStatus.PENDING: "⏳",
    UploadStatus.CONVERTING: "🔄",
    UploadStatus.UPLOADING: "⬆️",
    UploadStatus.COMPLETED: "✅",
    UploadStatus.ERROR: "❌",
}


def header(title: str, subtitle: str, icon: str = "📁"):
    st.markdown(f"""
        <div class="main-header">
            <div style="display:flex;gap:1.2rem;align-items:center;">
                <div style="font-size:3rem;filter:drop-shadow(0 0 15px rgba(255,255,255,.5));">{icon}</div>
                <div>
                    <h1 style="margin:0; font-size:2.4rem; color:white;">{title}</h1>
                    <p style="margin:.35rem 0 0 0;color:rgba(255,255,255,.85);font-size:1.05rem">{subtitle}</p>
                </div>
            </div>
        </div>
    """, unsafe_allow_html=True)


def add_grid(fig):
    """Shared plotly styling."""
    fig.update_xaxes(showgrid=True, gridcolor=GRID_COLOR, zeroline=False,
                     showline=True, linecolor=GRID_COLOR,
                     tickfont=dict(color=SUBTLE_TEXT), title_font=dict(color=TEXT_COLOR))
    fig.update_yaxes(showgrid=True, gridcolor=GRID_COLOR, zeroline=False,
                     showline=True, linecolor=GRID_COLOR,
                     tickfont=dict(color=SUBTLE_TEXT), title_font=dict(color=TEXT_COLOR))
    fig.update_layout(plot_bgcolor=CARD_BG_LIGHT, paper_bgcolor=CARD_BG_LIGHT,
                      font=dict(family="Segoe UI, sans-serif", size=12, color=TEXT_COLOR),
                      title_font=dict(color=TEXT_COLOR))
    return fig


def stat_card(label: str, value: str, note: str = ""):
    note_html = f'<div class="stat-note">{escape(note)}</div>' if note else ""
    st.markdown(f"""
        <div class="stat-card">
            <div class="stat-label">{escape(label)}</div>
            <div class="stat-value">{escape(value)}</div>
            {note_html}
        </div>
    """, unsafe_allow_html=True)


def render_stats(stats: Stats):
    note = "Estimated from this device" if stats.estimated else ""
    col1, col2, col3 = st.columns(3)
    with col1:
        stat_card("Total Files", str(stats.total_files), note)
    with col2:
        stat_card("Storage Used", format_file_size(stats.storage_used_bytes), note)
    with col3:
        stat_card("Uploaded Today", str(stats.today_uploads), note)


def render_offline_banner(status: dict):
    if status.get("is_remote", True):
        return
    st.markdown(
        '<div class="offline-banner">📴 Working offline: changes are saved on this device '
        'and will not appear on other devices.</div>',
        unsafe_allow_html=True,
    )


def render_upload_items(items: Iterable[UploadItem]):
    for item in items:
        line = f"{STATUS_ICONS[item.status]} **{item.name}** ({format_file_size(item.size_bytes)})"
        if item.status == UploadStatus.ERROR:
            st.error(f"{line}: {item.error}")
        elif item.warning:
            st.warning(f"{line}: {item.warning}")
        else:
            st.markdown(line)


def render_file_preview(record: FileRecord, content: Optional[str] = None):
    """
    Inline preview for images, video, audio and PDFs, plus a download button.

    `content` overrides the record's own content (e.g. after a content fetch).
    """
    if content is not None and content != record.content:
        record = replace(record, content=content)

    try:
        data, mime = download_payload(record)
    except RecordNotFoundError:
        st.info("No preview available: file content is missing.")
        return
    except FileEncodingError as e:
        st.warning(f"Could not decode this file: {e.message}")
        return

    kind = preview_kind(mime)
    if kind == "image":
        st.image(data, caption=record.name, use_container_width=True)
    elif kind == "video":
        st.video(data, format=mime)
    elif kind == "audio":
        st.audio(data, format=mime)
    elif kind == "pdf":
        st.markdown(
            f'<iframe src="{record.content}" width="100%" height="600" '
            f'style="border:1px solid {GRID_COLOR}; border-radius:10px;"></iframe>',
            unsafe_allow_html=True,
        )
    else:
        st.info(f"{CATEGORY_ICONS[record.category]} Preview is not available for this file type. "
                f"Click download to open the file.")

    st.download_button(
        "⬇️ Download",
        data=data,
        file_name=record.name,
        mime=mime,
        key=f"download_{record.id}",
    )
