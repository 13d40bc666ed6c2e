import logging

import streamlit as st

import ui
from errors import DataServiceError
from use_cases.navigation import Page
from utils import session_manager

log = logging.getLogger(__name__)


def render_admin_login():
    gate = session_manager.get_demo_gate()

    if st.button("← Back to Home"):
        session_manager.navigate(Page.HOME)

    st.title("Admin Login")
    st.caption("Demo dashboard access. Site moderation uses your regular account.")

    if not gate.enabled:
        st.info("The demo dashboard is not configured on this site.")
        return

    with st.form("demo_admin_login"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        if st.form_submit_button("Sign In", type="primary"):
            if gate.login(email, password):
                session_manager.navigate(Page.ADMIN_DASHBOARD)
            else:
                st.error("Invalid credentials")


def render_admin_dashboard():
    """Read-only overview of public content for the demo admin."""
    gate = session_manager.get_demo_gate()
    if not gate.is_authenticated():
        session_manager.navigate(Page.ADMIN_LOGIN)
        return

    services = session_manager.get_services()

    c_title, c_logout = st.columns([5, 1])
    c_title.title("Admin Dashboard")
    if c_logout.button("Logout", use_container_width=True):
        gate.logout()
        session_manager.navigate(Page.HOME)

    try:
        posts = services.blog.list_published_posts()
        testimonies = services.testimonies.list_public()
    except DataServiceError as e:
        log.error(f"Demo dashboard failed to load: {e}")
        st.error("Could not load dashboard data. Please try again.")
        return

    c1, c2 = st.columns(2)
    c1.metric("Published posts", len(posts))
    c2.metric("Approved testimonies", len(testimonies))

    tab_posts, tab_testimonies = st.tabs(["Blogs", "Testimonies"])
    with tab_posts:
        for post in posts:
            ui.render_post_card(post)
    with tab_testimonies:
        for testimony in testimonies:
            ui.render_testimony_card(testimony)
