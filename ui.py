import html
from datetime import datetime
from typing import Optional

import streamlit as st

from use_cases.navigation import NAV_LINKS, Page


def setup_style():
    st.markdown("""
    <style>
        @import url('https://fonts.googleapis.com/css2?family=Manrope:wght@400;600;700;800&family=Playfair+Display:wght@600;700&display=swap');

        :root {
            --brand: #6d3fd1;
            --brand-2: #4f46e5;
            --text-main: #1f2333;
            --text-soft: rgba(31, 35, 51, 0.66);
            --card-bg: #ffffff;
            --card-border: rgba(109, 63, 209, 0.14);
            --card-shadow: 0 10px 30px rgba(40, 24, 92, 0.08);
            --ease-fluid: cubic-bezier(0.22, 1, 0.36, 1);
            --anim-mid: 340ms;
        }

        html, body, .stApp {
            font-family: 'Manrope', sans-serif;
            color: var(--text-main);
            background: linear-gradient(180deg, #f7f5fd 0%, #ffffff 60%);
        }

        h1, h2, h3 {
            font-family: 'Playfair Display', serif;
        }

        .main .block-container {
            padding-top: 1.2rem;
            padding-bottom: 2rem;
            animation: pageSlideIn var(--anim-mid) var(--ease-fluid);
        }

        @keyframes pageSlideIn {
            from { opacity: 0; transform: translate3d(0, 8px, 0); }
            to { opacity: 1; transform: translate3d(0, 0, 0); }
        }

        .pm-brand {
            font-family: 'Playfair Display', serif;
            font-size: 1.5rem;
            font-weight: 700;
            background: linear-gradient(90deg, var(--brand), var(--brand-2));
            -webkit-background-clip: text;
            color: transparent;
        }

        .pm-hero {
            padding: 3rem 2rem;
            border-radius: 22px;
            color: #ffffff;
            background: linear-gradient(120deg, var(--brand) 0%, var(--brand-2) 100%);
            box-shadow: var(--card-shadow);
            margin-bottom: 1.5rem;
        }
        .pm-hero h1 { color: #ffffff; margin-bottom: 0.4rem; }
        .pm-hero p { color: rgba(255, 255, 255, 0.85); font-size: 1.1rem; }

        .pm-card {
            background: var(--card-bg);
            border: 1px solid var(--card-border);
            border-radius: 16px;
            padding: 1.1rem 1.3rem;
            box-shadow: var(--card-shadow);
            margin-bottom: 0.9rem;
        }
        .pm-card h4 { margin: 0 0 0.35rem 0; }
        .pm-meta { color: var(--text-soft); font-size: 0.85rem; }
        .pm-quote { font-style: italic; }

        .pm-badge {
            display: inline-block;
            padding: 0.1rem 0.6rem;
            border-radius: 999px;
            font-size: 0.75rem;
            font-weight: 700;
        }
        .pm-badge.approved { background: #dcfce7; color: #166534; }
        .pm-badge.pending { background: #fef3c7; color: #92400e; }

        .pm-footer {
            margin-top: 3rem;
            padding: 1.5rem 0;
            border-top: 1px solid var(--card-border);
            color: var(--text-soft);
            font-size: 0.9rem;
        }

        .pm-loading-overlay {
            position: fixed;
            inset: 0;
            z-index: 9999;
            display: flex;
            align-items: center;
            justify-content: center;
            background: rgba(247, 245, 253, 0.7);
            backdrop-filter: blur(4px);
        }
        .pm-loading-card {
            padding: 1.4rem 2rem;
            border-radius: 16px;
            background: var(--card-bg);
            box-shadow: var(--card-shadow);
            text-align: center;
        }
    </style>
    """, unsafe_allow_html=True)


def show_loading_overlay(message="Loading..."):
    st.markdown(
        f"""
        <div class="pm-loading-overlay">
          <div class="pm-loading-card">{html.escape(message)}</div>
        </div>
        """,
        unsafe_allow_html=True
    )


def format_date(value: Optional[str]) -> str:
    """ISO timestamp -> 'January 15, 2024'; unparseable values pass through."""
    if not value:
        return ""
    try:
        return datetime.fromisoformat(value).strftime("%B %d, %Y")
    except ValueError:
        return value


def render_flash(message):
    if not message:
        return
    level, text = message
    {"success": st.success, "warning": st.warning, "error": st.error}.get(level, st.info)(text)


def render_navbar(current_page: Page, state, on_navigate, on_logout):
    cols = st.columns([2.2] + [1] * len(NAV_LINKS) + [1.3])
    cols[0].markdown('<div class="pm-brand">The Power Ministry</div>', unsafe_allow_html=True)

    for col, (page, label) in zip(cols[1:], NAV_LINKS):
        if col.button(label, key=f"nav_{page.value}", use_container_width=True,
                      type="primary" if page is current_page else "secondary"):
            on_navigate(page)

    with cols[-1]:
        if state.loading:
            st.caption("...")
        elif state.account is None:
            if st.button("Sign In", key="nav_login", use_container_width=True):
                on_navigate(Page.LOGIN)
        else:
            with st.popover(state.display_name or "Account", use_container_width=True):
                if state.is_admin and st.button("Admin Panel", key="nav_admin", use_container_width=True):
                    on_navigate(Page.ADMIN)
                if st.button("Share Testimony", key="nav_testimony", use_container_width=True):
                    on_navigate(Page.TESTIMONY)
                if st.button("Sign Out", key="nav_logout", use_container_width=True):
                    on_logout()
    st.divider()


def render_footer():
    st.markdown(
        """
        <div class="pm-footer">
          <b>The Power Ministry</b> &middot; Empowering believers, transforming lives.<br>
          info@powerministry.org &middot; (555) 123-4567 &middot; 123 Faith Street, Hope City, HC 12345
        </div>
        """,
        unsafe_allow_html=True
    )


def render_post_card(post):
    st.markdown(
        f"""
        <div class="pm-card">
          <h4>{html.escape(post.title)}</h4>
          <div class="pm-meta">{format_date(post.published_at)}</div>
          <p>{html.escape(post.excerpt or post.content[:200])}</p>
        </div>
        """,
        unsafe_allow_html=True
    )


def render_testimony_card(testimony):
    st.markdown(
        f"""
        <div class="pm-card">
          <h4>{html.escape(testimony.title)}</h4>
          <p class="pm-quote">&ldquo;{html.escape(testimony.content)}&rdquo;</p>
          <div class="pm-meta">{html.escape(testimony.author_name)} &middot; {format_date(testimony.approved_at)}</div>
        </div>
        """,
        unsafe_allow_html=True
    )


def status_badge(approved: bool, on_label="Approved", off_label="Pending") -> str:
    css = "approved" if approved else "pending"
    return f'<span class="pm-badge {css}">{on_label if approved else off_label}</span>'
