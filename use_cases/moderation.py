"""Approval lifecycle shared by comments, testimonies and the blog post publish flag.

Items are created pending, toggled between approved and pending by an
administrator, and may be deleted permanently. The flag and its timestamp
always move together: the timestamp is set exactly when the flag is on.
Callers are expected to have passed the admin gate before calling the
privileged transitions; the workflow itself does not look at identity.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

import auth
from errors import DataServiceError, ValidationError
from use_cases.domain_models import BlogPost, Comment, Testimony, iso_now

log = logging.getLogger(__name__)

FIELD_LABELS = {
    "blog_post_id": "Post",
    "author_name": "Name",
    "author_email": "Email",
    "title": "Title",
    "content": "Message",
}


@dataclass(frozen=True)
class ModerationPolicy:
    table: str
    flag_field: str
    timestamp_field: str
    public_order: str
    model: Callable[[Dict[str, Any]], Any]
    submit_fields: Tuple[str, ...] = ()
    required_fields: Tuple[str, ...] = ()
    email_field: Optional[str] = None
    # Column stamped with the transition time on every flag change.
    touched_field: Optional[str] = None


COMMENTS = ModerationPolicy(
    table="comments",
    flag_field="approved",
    timestamp_field="approved_at",
    public_order="created_at",
    model=Comment.from_row,
    submit_fields=("blog_post_id", "author_name", "author_email", "content"),
    required_fields=("blog_post_id", "author_name", "author_email", "content"),
    email_field="author_email",
)

TESTIMONIES = ModerationPolicy(
    table="testimonies",
    flag_field="approved",
    timestamp_field="approved_at",
    public_order="approved_at",
    model=Testimony.from_row,
    submit_fields=("author_name", "author_email", "title", "content"),
    required_fields=("author_name", "author_email", "title", "content"),
    email_field="author_email",
)

# Posts have no public submission step; only the flag/timestamp rule applies.
BLOG_POSTS = ModerationPolicy(
    table="blog_posts",
    flag_field="published",
    timestamp_field="published_at",
    public_order="published_at",
    model=BlogPost.from_row,
    touched_field="updated_at",
)


def flag_values(policy: ModerationPolicy, value: bool, current: Optional[Dict[str, Any]], now: str) -> Dict[str, Any]:
    """Flag/timestamp pair for the requested state; an already-set timestamp is kept."""
    if not value:
        return {policy.flag_field: False, policy.timestamp_field: None}
    previous = current.get(policy.timestamp_field) if current and current.get(policy.flag_field) else None
    return {policy.flag_field: True, policy.timestamp_field: previous or now}


class ModerationWorkflow:
    def __init__(self, data, policy: ModerationPolicy, clock: Callable[[], str] = iso_now):
        self.data = data
        self.policy = policy
        self.clock = clock

    def _validate(self, fields: Dict[str, Any]) -> Dict[str, str]:
        cleaned: Dict[str, str] = {}
        errors: Dict[str, str] = {}
        for name in self.policy.submit_fields:
            value = str(fields.get(name) or "").strip()
            cleaned[name] = value
            if name in self.policy.required_fields and not value:
                errors[name] = f"{FIELD_LABELS.get(name, name)} is required"

        email_field = self.policy.email_field
        if email_field and email_field not in errors:
            msg = auth.email_error(cleaned[email_field])
            if msg:
                errors[email_field] = msg

        if errors:
            raise ValidationError(errors)
        return cleaned

    def submit(self, fields: Dict[str, Any]):
        """Persist a public submission as pending; approval fields in the input are ignored."""
        if not self.policy.submit_fields:
            raise ValueError(f"{self.policy.table} does not accept public submissions")

        row: Dict[str, Any] = self._validate(fields)
        row[self.policy.flag_field] = False
        row[self.policy.timestamp_field] = None
        row["created_at"] = self.clock()

        created = self.data.insert(self.policy.table, row)
        log.info(f"New pending item in {self.policy.table}: {created.get('id')}")
        return self.policy.model(created)

    def get(self, item_id: str):
        rows = self.data.select(self.policy.table, filters={"id": item_id}, limit=1)
        return self.policy.model(rows[0]) if rows else None

    def set_approval(self, item_id: str, value: bool):
        rows = self.data.select(self.policy.table, filters={"id": item_id}, limit=1)
        if not rows:
            raise DataServiceError(f"{self.policy.table} item {item_id} not found")

        now = self.clock()
        values = flag_values(self.policy, bool(value), rows[0], now)
        if self.policy.touched_field:
            values[self.policy.touched_field] = now
        updated = self.data.update(self.policy.table, values, filters={"id": item_id})
        if not updated:
            raise DataServiceError(f"{self.policy.table} item {item_id} not found")
        return self.policy.model(updated[0])

    def approve(self, item_id: str):
        return self.set_approval(item_id, True)

    def delete(self, item_id: str) -> None:
        self.data.delete(self.policy.table, filters={"id": item_id})
        log.info(f"Deleted {self.policy.table} item {item_id}")

    def list_public(self, limit: Optional[int] = None, **filters) -> List[Any]:
        filters[self.policy.flag_field] = True
        rows = self.data.select(self.policy.table, filters=filters, order=self.policy.public_order, limit=limit)
        # Guard against a backend that ignores the filter.
        return [self.policy.model(r) for r in rows if r.get(self.policy.flag_field)]

    def list_all(self, **filters) -> List[Any]:
        rows = self.data.select(self.policy.table, filters=filters or None, order="created_at")
        return [self.policy.model(r) for r in rows]
