import logging

import streamlit as st

import ui
from errors import DataServiceError, ValidationError
from utils import session_manager

log = logging.getLogger(__name__)


def submission_defaults(state):
    """(name, email) to prefill; blank for a signed-out visitor."""
    if state.account is None:
        return "", ""
    return state.display_name, state.account.email


def _render_submission_form(services, form_key: str):
    name_default, email_default = submission_defaults(services.session.state)

    with st.form(form_key, clear_on_submit=True):
        c1, c2 = st.columns(2)
        name = c1.text_input("Your name *", value=name_default)
        email = c2.text_input("Email *", value=email_default)
        title = st.text_input("Title *")
        content = st.text_area("Your testimony *", height=220)
        if st.form_submit_button("Submit Testimony", type="primary"):
            try:
                services.testimonies.submit({
                    "author_name": name,
                    "author_email": email,
                    "title": title,
                    "content": content,
                })
                st.success("Thank you for sharing! Your testimony will be published once it has been reviewed.")
            except ValidationError as e:
                for message in e.errors.values():
                    st.error(message)
            except DataServiceError as e:
                log.error(f"Testimony submission failed: {e}")
                st.error("Could not submit your testimony. Please try again.")


def render_testimonies():
    services = session_manager.get_services()
    st.title("🙌 Testimonies")
    st.caption("Stories of faith, hope, and transformation")

    try:
        testimonies = services.testimonies.list_public()
    except DataServiceError as e:
        log.error(f"Testimony feed failed to load: {e}")
        st.error("Could not load testimonies. Please try again.")
        testimonies = []

    if not testimonies:
        st.info("No testimonies have been shared yet.")
    for testimony in testimonies:
        ui.render_testimony_card(testimony)

    st.divider()
    st.subheader("Have a Testimony to Share?")
    st.write("Your story could inspire and encourage others. No account needed; testimonies are published after review.")
    with st.expander("Share Your Testimony"):
        _render_submission_form(services, "public_testimony_form")


def render_testimony_form():
    """Members' submission page, prefilled from the signed-in account."""
    services = session_manager.get_services()

    st.title("Share Your Testimony")
    st.caption("Your story could inspire and encourage others. Testimonies are published after review.")
    _render_submission_form(services, "testimony_form")
