import streamlit as st
import streamlit.components.v1 as components
import os

from infrastructure.observability import setup_observability
setup_observability()

import ui
from use_cases import bootstrap, rbac_policy, route_guard
from use_cases.navigation import Page
from utils import session_manager
from views import (
    about_view, admin_view, blog_view, demo_admin_view, guard_view,
    home_view, login_view, testimonies_view,
)
from datetime import datetime, timezone

# --- PAGE SETUP ---
st.set_page_config(page_title="The Power Ministry", page_icon="✝️", layout="wide", initial_sidebar_state="collapsed")

# --- PROD HARDENING ---
FORCE_HTTPS = os.getenv("FORCE_HTTPS", "False").lower() == "true"

# Health Check (Basic load-balancer heartbeat)
if st.query_params.get("health") == "1":
    st.write({"status": "ok", "version": "1.0", "time": datetime.now(timezone.utc).isoformat()})
    st.stop()

if FORCE_HTTPS:
    proto = st.context.headers.get("x-forwarded-proto", "http").lower()
    if proto != "https":
        st.error("🚨 Insecure connection. Please use HTTPS.")
        st.stop()

# Streamlit cannot set HTTP headers, so frame/sniff policies go in as meta tags.
components.html(
    """
    <script>
    var head = window.parent.document.getElementsByTagName('head')[0] || document.getElementsByTagName('head')[0];
    [["X-Content-Type-Options", "nosniff"], ["X-Frame-Options", "DENY"]].forEach(function (pair) {
        var meta = document.createElement('meta');
        meta.httpEquiv = pair[0];
        meta.content = pair[1];
        head.appendChild(meta);
    });
    </script>
    """,
    height=0,
)

ui.setup_style()

# --- STARTUP ORCHESTRATION ---
startup_result = bootstrap.run_startup()
if startup_result.status == "STOP":
    st.error("The site is temporarily unavailable. Please try again later.")
    st.stop()

store = session_manager.get_session_store()
# Picks up expiry/refresh of the identity session between reruns.
state = store.refresh()
route = session_manager.get_navigator().route

# Build Sentry Context
try:
    import sentry_sdk
    if sentry_sdk.get_client().is_active():
        sentry_sdk.set_user({"id": state.account.id} if state.account else None)
        sentry_sdk.set_tag("app.page", route.page.value)
except (ImportError, AttributeError):
    pass

if route.show_chrome:
    ui.render_navbar(route.page, state, session_manager.navigate, session_manager.logout)

ui.render_flash(session_manager.pop_flash())


def _render_page(page, payload):
    if page is Page.HOME:
        home_view.render_home()
    elif page is Page.ABOUT:
        about_view.render_about()
    elif page is Page.BLOG:
        blog_view.render_blog()
    elif page is Page.BLOG_POST:
        blog_view.render_blog_post(payload)
    elif page is Page.TESTIMONIES:
        testimonies_view.render_testimonies()
    elif page is Page.TESTIMONY:
        testimonies_view.render_testimony_form()
    elif page is Page.ADMIN:
        admin_view.render_admin_panel()
    elif page is Page.ADMIN_LOGIN:
        demo_admin_view.render_admin_login()
    elif page is Page.ADMIN_DASHBOARD:
        demo_admin_view.render_admin_dashboard()
    elif page is Page.LOGIN:
        login_view.render_auth_screen()


# --- ROUTE GUARD ---
if route.access == "admin":
    gate = rbac_policy.enforce_admin(state, "VIEW_ADMIN_PANEL")
    if gate == "WAIT":
        guard_view.render_wait()
    elif gate == "DENY":
        guard_view.render_access_denied()
    else:
        _render_page(route.page, route.payload)
else:
    guard = route_guard.evaluate(route.access == "auth", state)
    if guard.status == "WAIT":
        guard_view.render_wait()
    elif guard.status == "PROMPT":
        guard_view.render_sign_in_prompt()
    else:
        _render_page(route.page, route.payload)

if route.show_chrome:
    ui.render_footer()
