import streamlit as st

import ui
from use_cases.navigation import Page
from utils import session_manager


def render_wait():
    ui.show_loading_overlay("Checking your session...")


def render_sign_in_prompt():
    st.header("🔒 Sign in required")
    st.write("Please sign in to continue. Your account lets you share testimonies with the community.")
    c1, c2, _ = st.columns([1, 1, 3])
    if c1.button("Sign In", type="primary", use_container_width=True):
        session_manager.navigate(Page.LOGIN)
    if c2.button("Back to Home", use_container_width=True):
        session_manager.navigate(Page.HOME)


def render_access_denied():
    st.header("⛔ Access denied")
    st.write("This area is reserved for site administrators.")
    if st.button("Back to Home"):
        session_manager.navigate(Page.HOME)
