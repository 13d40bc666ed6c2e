import logging

import streamlit as st

from errors import AuthenticationError
from use_cases.demo_admin import DemoAdminGate
from use_cases.navigation import Navigator

log = logging.getLogger(__name__)

"""
SESSION STATE CONTRACT

This module owns the per-browser Streamlit session state.

Keys of st.session_state:

services: AppServices | None
    identity/data clients, services and the session store of this browser session
    default: None
    owner: bootstrap

startup_done: bool
    set once services are wired and the session store has resolved
    default: False
    owner: bootstrap

navigator: Navigator
    current page and the last opened blog post
    default: Navigator() on the home page
    owner: session_manager

flash: tuple[str, str] | None
    (level, message) shown once on the next render
    default: None
    owner: views

admin_edit_post_id: str | None
    post currently open in the admin editor
    default: None
    owner: admin_view

demo_admin_authenticated: bool
    demo dashboard flag, written only by DemoAdminGate
    default: absent
    owner: demo_admin
"""


def init_session_state():
    if 'services' not in st.session_state:
        st.session_state.services = None
    if 'startup_done' not in st.session_state:
        st.session_state.startup_done = False
    if 'navigator' not in st.session_state:
        st.session_state.navigator = Navigator()
    if 'flash' not in st.session_state:
        st.session_state.flash = None
    if 'admin_edit_post_id' not in st.session_state:
        st.session_state.admin_edit_post_id = None


def get_services():
    return st.session_state.services


def get_session_store():
    return get_services().session


def get_navigator() -> Navigator:
    return st.session_state.navigator


def get_demo_gate() -> DemoAdminGate:
    config = get_services().config
    return DemoAdminGate(st.session_state, config.demo_admin_email, config.demo_admin_password)


def flash(level: str, message: str):
    st.session_state.flash = (level, message)


def pop_flash():
    message = st.session_state.get("flash")
    st.session_state.flash = None
    return message


def navigate(page_id, payload=None):
    get_navigator().navigate(page_id, payload)
    st.rerun()


def logout():
    try:
        get_session_store().sign_out()
        flash("success", "You have been signed out.")
    except AuthenticationError as e:
        log.warning(f"Remote sign-out failed, local session cleared: {e}")
        flash("warning", "Signed out on this device, but the server could not be reached.")
    get_navigator().navigate("home")
    st.rerun()
