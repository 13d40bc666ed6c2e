"""Application layer contracts for orchestrating high-level flows."""

from .admin_flow import AdminSnapshot, load_moderation_snapshot
from .moderation import BLOG_POSTS, COMMENTS, TESTIMONIES, ModerationPolicy, ModerationWorkflow
from .navigation import Navigator, Page, Route
from .route_guard import GuardResult, GuardStatus, admin_gate, evaluate
from .session_store import SessionState, SessionStore

__all__ = [
    "AdminSnapshot",
    "BLOG_POSTS",
    "COMMENTS",
    "GuardResult",
    "GuardStatus",
    "ModerationPolicy",
    "ModerationWorkflow",
    "Navigator",
    "Page",
    "Route",
    "SessionState",
    "SessionStore",
    "TESTIMONIES",
    "admin_gate",
    "evaluate",
    "load_moderation_snapshot",
]
