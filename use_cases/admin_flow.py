"""Admin panel orchestration: batch loading and audited moderation actions."""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Tuple

import auth
from errors import DataServiceError
from infrastructure.repositories.sqlite_audit_repository import AuditAction
from use_cases.domain_models import BlogPost, Comment, Profile, Testimony

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdminSnapshot:
    posts: Tuple[BlogPost, ...]
    comments: Tuple[Comment, ...]
    testimonies: Tuple[Testimony, ...]

    @property
    def pending_comments(self) -> int:
        return sum(1 for c in self.comments if not c.approved)

    @property
    def pending_testimonies(self) -> int:
        return sum(1 for t in self.testimonies if not t.approved)


def load_moderation_snapshot(blog, comments, testimonies) -> AdminSnapshot:
    """Fetch every moderated collection concurrently; any failure fails the whole load."""
    loaders = {
        "posts": blog.list_all_posts,
        "comments": comments.list_all,
        "testimonies": testimonies.list_all,
    }
    results = {}
    with ThreadPoolExecutor(max_workers=len(loaders)) as executor:
        futures = {name: executor.submit(fn) for name, fn in loaders.items()}
        for name, future in futures.items():
            try:
                results[name] = future.result()
            except DataServiceError as e:
                log.error(f"Admin load failed on {name}: {e}")
                raise DataServiceError(f"Failed to load {name}: {e.message}", e.status_code) from e

    return AdminSnapshot(
        posts=tuple(results["posts"]),
        comments=tuple(results["comments"]),
        testimonies=tuple(results["testimonies"]),
    )


def _audit(action: AuditAction, target_type: str, target_id: Optional[str], actor: Optional[Profile], metadata=None):
    auth.get_audit_repo().log_action(
        action,
        target_type=target_type,
        actor_id=actor.id if actor else None,
        actor_email=actor.email if actor else None,
        target_id=target_id,
        metadata=metadata,
    )


def set_item_approval(workflow, item_id: str, value: bool, actor: Optional[Profile]):
    item = workflow.set_approval(item_id, value)
    action = AuditAction.ITEM_APPROVED if value else AuditAction.ITEM_UNAPPROVED
    _audit(action, workflow.policy.table, item_id, actor, {"approved": bool(value)})
    return item


def delete_item(workflow, item_id: str, actor: Optional[Profile]) -> None:
    workflow.delete(item_id)
    _audit(AuditAction.ITEM_DELETED, workflow.policy.table, item_id, actor)


def save_post(blog, actor: Optional[Profile], **fields) -> BlogPost:
    if fields.get("post_id") is None:
        fields["author_id"] = actor.id if actor else None
    post = blog.save_post(**fields)
    _audit(AuditAction.POST_SAVED, "blog_posts", post.id, actor, {"published": post.published})
    return post


def delete_post(blog, post_id: str, actor: Optional[Profile]) -> None:
    blog.delete_post(post_id)
    _audit(AuditAction.POST_DELETED, "blog_posts", post_id, actor)
