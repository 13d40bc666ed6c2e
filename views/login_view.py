import streamlit as st

from errors import AuthenticationError, ValidationError
from use_cases.navigation import Page
from utils import session_manager


def _show_errors(e: ValidationError):
    for message in e.errors.values():
        st.error(message)


def render_auth_screen():
    store = session_manager.get_session_store()

    if st.button("← Back to Home", type="secondary"):
        session_manager.navigate(Page.HOME)

    st.title("🔐 Welcome to The Power Ministry")

    if store.state.account is not None:
        st.success(f"You are signed in as {store.state.display_name}.")
        if st.button("Continue", type="primary"):
            session_manager.navigate(Page.HOME)
        return

    tab_login, tab_register, tab_resend = st.tabs(["Sign In", "Create Account", "Resend Confirmation"])

    with tab_login:
        with st.form("login_form", clear_on_submit=False):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Sign In", type="primary")
            if submitted:
                try:
                    store.sign_in(email, password)
                    session_manager.flash("success", "Welcome back!")
                    session_manager.navigate(Page.HOME)
                except ValidationError as e:
                    _show_errors(e)
                except AuthenticationError as e:
                    st.error(str(e))

    with tab_register:
        with st.form("register_form", clear_on_submit=False):
            full_name = st.text_input("Full name *")
            email = st.text_input("Email *")
            password = st.text_input("Password *", type="password",
                                     help="At least 8 characters with uppercase, lowercase and a number.")
            password_confirm = st.text_input("Confirm password *", type="password")
            submitted = st.form_submit_button("Create Account", type="primary")
            if submitted:
                try:
                    result = store.sign_up(email, password, full_name, password_confirm)
                except ValidationError as e:
                    _show_errors(e)
                except AuthenticationError as e:
                    st.error(str(e))
                else:
                    if result.pending_verification:
                        st.success("Account created! Please check your email to confirm your address, then sign in.")
                    else:
                        session_manager.flash("success", "Account created. Welcome!")
                        session_manager.navigate(Page.HOME)

    with tab_resend:
        st.caption("Didn't receive the confirmation email? Send it again.")
        with st.form("resend_form", clear_on_submit=True):
            email = st.text_input("Email")
            if st.form_submit_button("Resend"):
                try:
                    store.resend_verification(email)
                    st.success("If that address is awaiting confirmation, a new email is on its way.")
                except ValidationError as e:
                    _show_errors(e)
                except AuthenticationError as e:
                    st.error(str(e))
