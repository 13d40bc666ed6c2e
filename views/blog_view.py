import logging

import streamlit as st

import ui
from errors import DataServiceError, ValidationError
from use_cases.navigation import Page
from utils import session_manager

log = logging.getLogger(__name__)


def render_blog():
    services = session_manager.get_services()
    st.title("📝 Blog")
    st.caption("Teaching, encouragement and news from our ministry.")

    try:
        posts = services.blog.list_published_posts()
    except DataServiceError as e:
        log.error(f"Blog list failed to load: {e}")
        st.error("Could not load blog posts. Please try again.")
        return

    if not posts:
        st.info("No posts have been published yet.")
        return

    search = st.text_input("🔍 Search posts", "")
    if search:
        needle = search.lower()
        posts = [p for p in posts if needle in p.title.lower() or needle in p.excerpt.lower()]

    for post in posts:
        ui.render_post_card(post)
        if st.button("Read more →", key=f"open_{post.id}"):
            session_manager.navigate(Page.BLOG_POST, post.slug)


def _render_comments(services, post):
    st.subheader("Comments")
    try:
        comments = services.blog.list_comments(post.id)
    except DataServiceError as e:
        log.error(f"Comments failed to load for post {post.id}: {e}")
        st.warning("Comments are unavailable right now.")
        comments = []

    if not comments:
        st.caption("Be the first to share your thoughts.")
    for comment in comments:
        st.markdown(f"**{comment.author_name}** · {ui.format_date(comment.created_at)}")
        st.write(comment.content)
        st.divider()

    state = services.session.state
    default_name = state.display_name if state.account else ""
    default_email = state.account.email if state.account else ""

    with st.form(f"comment_form_{post.id}", clear_on_submit=True):
        st.write("**Leave a comment**")
        c1, c2 = st.columns(2)
        name = c1.text_input("Name *", value=default_name)
        email = c2.text_input("Email *", value=default_email)
        content = st.text_area("Comment *")
        if st.form_submit_button("Submit Comment", type="primary"):
            try:
                services.blog.submit_comment(post.id, name, email, content)
                st.success("Thank you! Your comment will appear once it has been approved.")
            except ValidationError as e:
                for message in e.errors.values():
                    st.error(message)
            except DataServiceError as e:
                log.error(f"Comment submission failed: {e}")
                st.error("Could not submit your comment. Please try again.")


def render_blog_post(slug):
    services = session_manager.get_services()

    if st.button("← Back to Blog"):
        session_manager.navigate(Page.BLOG)

    try:
        post = services.blog.get_post_by_slug(slug)
    except DataServiceError as e:
        log.error(f"Blog post {slug} failed to load: {e}")
        st.error("Could not load this post. Please try again.")
        return

    if post is None:
        st.warning("This post could not be found.")
        return

    if post.featured_image:
        st.image(post.featured_image, use_container_width=True)
    st.title(post.title)
    st.caption(ui.format_date(post.published_at))
    st.markdown(post.content)
    st.divider()
    _render_comments(services, post)
