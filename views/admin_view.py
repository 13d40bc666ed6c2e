import json
import logging

import pandas as pd
import streamlit as st

import auth
import ui
from errors import DataServiceError, ValidationError
from infrastructure.repositories.sqlite_audit_repository import AuditAction
from use_cases import admin_flow
from utils import session_manager

log = logging.getLogger(__name__)


def _show_failure(action: str, error: Exception):
    """Log the backend error; the admin only sees a fixed retry message."""
    log.error(f"Admin action failed ({action}): {error}")
    st.error(f"Could not {action}. Please try again.")


def _items_frame(items, columns):
    rows = [{label: getattr(item, attr) for attr, label in columns} for item in items]
    return pd.DataFrame(rows, columns=[label for _, label in columns])


def _render_overview(snapshot):
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Posts", len(snapshot.posts))
    c2.metric("Published", sum(1 for p in snapshot.posts if p.published))
    c3.metric("Pending comments", snapshot.pending_comments)
    c4.metric("Pending testimonies", snapshot.pending_testimonies)


def _render_post_editor(services, actor, snapshot):
    editing_id = st.session_state.admin_edit_post_id
    editing = next((p for p in snapshot.posts if p.id == editing_id), None)

    st.subheader("✏️ Edit post" if editing else "➕ New post")
    with st.form("post_form", clear_on_submit=editing is None):
        title = st.text_input("Title *", value=editing.title if editing else "")
        excerpt = st.text_input("Excerpt", value=editing.excerpt if editing else "")
        featured_image = st.text_input("Featured image URL", value=(editing.featured_image or "") if editing else "")
        content = st.text_area("Content * (Markdown)", value=editing.content if editing else "", height=260)
        published = st.checkbox("Published", value=editing.published if editing else False)

        c1, c2 = st.columns([1, 1])
        save = c1.form_submit_button("💾 Save", type="primary", use_container_width=True)
        cancel = c2.form_submit_button("Cancel", use_container_width=True) if editing else False

    if cancel:
        st.session_state.admin_edit_post_id = None
        st.rerun()
    if save:
        try:
            post = admin_flow.save_post(
                services.blog, actor,
                title=title, content=content, excerpt=excerpt,
                featured_image=featured_image, published=published,
                post_id=editing.id if editing else None,
            )
        except ValidationError as e:
            for message in e.errors.values():
                st.error(message)
        except DataServiceError as e:
            _show_failure("save the post", e)
        else:
            st.session_state.admin_edit_post_id = None
            st.success(f"Saved: {post.title}")
            st.rerun()


def _render_posts_tab(services, actor, snapshot):
    _render_post_editor(services, actor, snapshot)
    st.divider()

    st.subheader(f"All posts ({len(snapshot.posts)})")
    for post in snapshot.posts:
        c1, c2, c3, c4 = st.columns([4, 1.2, 1, 1])
        c1.markdown(f"**{post.title}**  \n`/{post.slug}` · {ui.format_date(post.created_at)}")
        c2.markdown(ui.status_badge(post.published, "Published", "Draft"), unsafe_allow_html=True)
        if c3.button("Edit", key=f"edit_post_{post.id}", use_container_width=True):
            st.session_state.admin_edit_post_id = post.id
            st.rerun()
        if c4.button("🗑", key=f"delete_post_{post.id}", use_container_width=True, help="Delete permanently"):
            try:
                admin_flow.delete_post(services.blog, post.id, actor)
                st.rerun()
            except DataServiceError as e:
                _show_failure("delete the post", e)


def _render_moderation_list(workflow, actor, items, describe, key_prefix):
    pending = [i for i in items if not i.approved]
    if pending:
        st.warning(f"Awaiting review: {len(pending)}")
    else:
        st.info("Nothing awaiting review.")

    for item in items:
        c1, c2, c3 = st.columns([5, 1.2, 0.8])
        with c1:
            st.markdown(describe(item))
            st.markdown(ui.status_badge(item.approved), unsafe_allow_html=True)
        label = "Unapprove" if item.approved else "✅ Approve"
        if c2.button(label, key=f"{key_prefix}_toggle_{item.id}", use_container_width=True):
            try:
                admin_flow.set_item_approval(workflow, item.id, not item.approved, actor)
                st.rerun()
            except DataServiceError as e:
                _show_failure("update the item", e)
        if c3.button("🗑", key=f"{key_prefix}_delete_{item.id}", use_container_width=True, help="Delete permanently"):
            try:
                admin_flow.delete_item(workflow, item.id, actor)
                st.rerun()
            except DataServiceError as e:
                _show_failure("delete the item", e)
        st.divider()


def _render_comments_tab(services, actor, snapshot):
    titles = {p.id: p.title for p in snapshot.posts}

    def describe(c):
        post_title = titles.get(c.blog_post_id, "deleted post")
        return f"**{c.author_name}** ({c.author_email}) on *{post_title}*  \n{c.content}"

    _render_moderation_list(services.blog.comments, actor, snapshot.comments, describe, "comment")


def _render_testimonies_tab(services, actor, snapshot):
    def describe(t):
        return f"**{t.title}** by {t.author_name} ({t.author_email}) · {ui.format_date(t.created_at)}  \n{t.content}"

    _render_moderation_list(services.testimonies, actor, snapshot.testimonies, describe, "testimony")

    if snapshot.testimonies:
        with st.expander("Table view"):
            df = _items_frame(snapshot.testimonies, [
                ("title", "Title"), ("author_name", "Author"), ("approved", "Approved"),
                ("approved_at", "Approved at"), ("created_at", "Submitted"),
            ])
            st.dataframe(df, use_container_width=True, hide_index=True)


def _format_metadata(raw):
    if not raw:
        return ""
    try:
        return ", ".join(f"{k}={v}" for k, v in json.loads(raw).items())
    except ValueError:
        return raw


def _render_audit_tab():
    st.caption("Most recent security and moderation events.")
    actions = ["All"] + [a.value for a in AuditAction]
    action_filter = st.selectbox("Action", actions, index=0)
    logs = auth.get_audit_repo().get_logs(limit=200, action_filter=action_filter)
    if not logs:
        st.info("No audit entries.")
        return

    df = pd.DataFrame(logs, columns=["id", "Time (UTC)", "Actor", "Action", "Target", "Target id", "Metadata", "Result"])
    df["Metadata"] = df["Metadata"].map(_format_metadata)
    st.dataframe(df.drop(columns=["id"]), use_container_width=True, hide_index=True)


def render_admin_panel():
    """Admin panel; callers must have passed the admin gate."""
    services = session_manager.get_services()
    actor = services.session.state.profile

    st.header("⚙️ Admin Panel")

    try:
        snapshot = admin_flow.load_moderation_snapshot(services.blog, services.blog.comments, services.testimonies)
    except DataServiceError as e:
        _show_failure("load admin data", e)
        if st.button("🔄 Retry"):
            st.rerun()
        return

    _render_overview(snapshot)

    tab_posts, tab_comments, tab_testimonies, tab_audit = st.tabs(
        ["📝 Posts", f"💬 Comments ({snapshot.pending_comments})",
         f"🙌 Testimonies ({snapshot.pending_testimonies})", "🛡 Audit"]
    )
    with tab_posts:
        _render_posts_tab(services, actor, snapshot)
    with tab_comments:
        _render_comments_tab(services, actor, snapshot)
    with tab_testimonies:
        _render_testimonies_tab(services, actor, snapshot)
    with tab_audit:
        _render_audit_tab()
