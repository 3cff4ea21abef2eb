import streamlit as st

# === COLOR PALETTE ===
PRIMARY_COLOR    = "#667eea"
SECONDARY_COLOR  = "#764ba2"
SUCCESS_COLOR    = "#10b981"
WARNING_COLOR    = "#f59e0b"
DANGER_COLOR     = "#ef4444"
TEXT_COLOR       = "#2c3e50"
SUBTLE_TEXT      = "#495057"
GRID_COLOR       = "#e5e7eb"
BACKGROUND_COLOR = "#f8f9fa"
CARD_BG_LIGHT    = "#ffffff"

# Chart colors per file category
CATEGORY_COLORS = {
    "image": "#3b82f6",
    "video": "#8b5cf6",
    "audio": "#10b981",
    "pdf": "#ef4444",
    "archive": "#f97316",
    "document": "#0ea5e9",
    "other": "#9ca3af",
}


def apply_css():
    """Global styles shared by every page."""
    st.markdown(f"""
        <style>
        .main {{
            background-color: {BACKGROUND_COLOR};
            color: {TEXT_COLOR};
            font-family: 'Segoe UI','Inter','SF Pro Display',sans-serif;
        }}
        .main-header {{
            background: linear-gradient(135deg, {PRIMARY_COLOR} 0%, {SECONDARY_COLOR} 100%);
            padding: 2rem; border-radius: 16px; margin-bottom: 2rem;
            border: 1px solid rgba(255,255,255,0.1); box-shadow: 0 8px 32px rgba(102,126,234,.3);
        }}
        .stat-card {{
            background: {CARD_BG_LIGHT}; padding: 20px; border-radius: 12px;
            box-shadow: 0 2px 8px rgba(0,0,0,0.08); margin: 10px 0; border: 1px solid {GRID_COLOR};
        }}
        .stat-card .stat-label {{ color: {SUBTLE_TEXT}; font-size: .85rem; font-weight: 500; }}
        .stat-card .stat-value {{ color: {TEXT_COLOR}; font-size: 1.8rem; font-weight: 700; }}
        .stat-card .stat-note {{ color: {WARNING_COLOR}; font-size: .75rem; }}
        .file-card {{
            background: {CARD_BG_LIGHT}; padding: 1rem 1.2rem; border-radius: 12px; margin: .5rem 0;
            border: 1px solid {GRID_COLOR}; box-shadow: 0 2px 6px rgba(0,0,0,0.05);
        }}
        .offline-banner {{
            background: {WARNING_COLOR}20; border: 1px solid {WARNING_COLOR};
            color: {TEXT_COLOR}; padding: .6rem 1rem; border-radius: 10px; margin-bottom: 1rem;
        }}
        .stButton button {{
            background: linear-gradient(135deg, {PRIMARY_COLOR} 0%, {SECONDARY_COLOR} 100%);
            color: white; border: none; border-radius: 10px; padding: .48rem 1.2rem; font-weight: 600;
            transition: all .3s ease; cursor: pointer;
        }}
        .stButton button:hover {{ transform: translateY(-2px); box-shadow: 0 6px 20px rgba(102,126,234,.3); }}
        .stButton button:disabled {{ background: #ced4da; color: #6c757d; cursor: not-allowed; opacity: 0.65; }}
        h1,h2,h3,h4,h5,h6 {{ color: {TEXT_COLOR}; font-weight: 600; }}
        h3 {{ font-size: 1.3rem; margin-top: 1.5rem; margin-bottom: 0.8rem; color: {PRIMARY_COLOR}; }}
        [data-testid="stSidebar"] {{ background-color: {CARD_BG_LIGHT}; border-right: 1px solid {GRID_COLOR}; }}
        .plotly-chart {{ border-radius: 10px; overflow: hidden; box-shadow: 0 2px 8px rgba(0,0,0,0.08); border: 1px solid {GRID_COLOR}; }}
        </style>
    """, unsafe_allow_html=True)


def hero_card(title: str, subtitle: str, icon: str = "📁"):
    st.markdown(f"""
        <div class="main-header" style="text-align:center;">
            <div style="font-size:3.2rem;">{icon}</div>
            <h1 style="margin:.4rem 0 0 0; color:white;">{title}</h1>
            <p style="margin:.4rem 0 0 0; color:rgba(255,255,255,.85); font-size:1.05rem">{subtitle}</p>
        </div>
    """, unsafe_allow_html=True)
