import logging

import streamlit as st

import ui
from errors import DataServiceError
from use_cases.navigation import Page
from utils import session_manager

log = logging.getLogger(__name__)


def render_home():
    services = session_manager.get_services()

    st.markdown(
        """
        <div class="pm-hero">
          <h1>Experience the Power of Faith</h1>
          <p>Join a community dedicated to worship, teaching and service, and discover the life-changing
          message of Jesus Christ.</p>
        </div>
        """,
        unsafe_allow_html=True
    )

    c1, c2, _ = st.columns([1, 1, 2])
    if c1.button("Read the Blog", type="primary", use_container_width=True):
        session_manager.navigate(Page.BLOG)
    if c2.button("Share Your Testimony", use_container_width=True):
        session_manager.navigate(Page.TESTIMONY)

    try:
        posts = services.blog.list_published_posts(limit=3)
        testimonies = services.testimonies.list_public(limit=3)
    except DataServiceError as e:
        log.error(f"Home feed failed to load: {e}")
        st.warning("Latest content is unavailable right now. Please try again later.")
        return

    col_posts, col_testimonies = st.columns(2)
    with col_posts:
        st.subheader("Latest from the Blog")
        if not posts:
            st.caption("No posts yet.")
        for post in posts:
            ui.render_post_card(post)
            if st.button("Read more", key=f"home_post_{post.id}"):
                session_manager.navigate(Page.BLOG_POST, post.slug)

    with col_testimonies:
        st.subheader("Recent Testimonies")
        if not testimonies:
            st.caption("No testimonies yet.")
        for testimony in testimonies:
            ui.render_testimony_card(testimony)
        if testimonies and st.button("See all testimonies"):
            session_manager.navigate(Page.TESTIMONIES)
