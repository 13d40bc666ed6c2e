import logging
from typing import Callable, List, Optional

from slugify import slugify as _slugify

from errors import DataServiceError, ValidationError
from use_cases.domain_models import BlogPost, Comment, iso_now
from use_cases.moderation import BLOG_POSTS, COMMENTS, ModerationWorkflow, flag_values

log = logging.getLogger(__name__)

TABLE = BLOG_POSTS.table


def slugify(title: str) -> str:
    """'The Power of Faith!' -> 'the-power-of-faith'.

    Every non-alphanumeric run becomes one separator: entities and numeric
    character references stay literal, and commas between digits split them.
    """
    return _slugify(title or "", entities=False, decimal=False, hexadecimal=False, replacements=[(",", "-")])


class BlogService:
    def __init__(self, data, clock: Callable[[], str] = iso_now):
        self.data = data
        self.clock = clock
        self.posts = ModerationWorkflow(data, BLOG_POSTS, clock=clock)
        self.comments = ModerationWorkflow(data, COMMENTS, clock=clock)

    # --- posts ---

    def list_published_posts(self, limit: Optional[int] = None) -> List[BlogPost]:
        return self.posts.list_public(limit=limit)

    def list_all_posts(self) -> List[BlogPost]:
        return self.posts.list_all()

    def get_post(self, post_id: str) -> Optional[BlogPost]:
        return self.posts.get(post_id)

    def get_post_by_slug(self, slug: str, include_drafts: bool = False) -> Optional[BlogPost]:
        filters = {"slug": slug}
        if not include_drafts:
            filters["published"] = True
        rows = self.data.select(TABLE, filters=filters, limit=1)
        return BlogPost.from_row(rows[0]) if rows else None

    def save_post(self, *, title: str, content: str, excerpt: str = "", featured_image: Optional[str] = None,
                  published: bool = False, author_id: Optional[str] = None, post_id: Optional[str] = None) -> BlogPost:
        """Create or update a post; slug and publish timestamp are derived, never taken from input."""
        errors = {}
        if not (title or "").strip():
            errors["title"] = "Title is required"
        elif not slugify(title):
            errors["title"] = "Title must contain letters or digits"
        if not (content or "").strip():
            errors["content"] = "Content is required"
        if errors:
            raise ValidationError(errors)

        slug = slugify(title)
        taken = self.data.select(TABLE, filters={"slug": slug}, limit=1)
        if taken and taken[0]["id"] != post_id:
            raise ValidationError({"title": "A post with this title already exists"})

        current = None
        if post_id is not None:
            rows = self.data.select(TABLE, filters={"id": post_id}, limit=1)
            if not rows:
                raise DataServiceError(f"Blog post {post_id} not found")
            current = rows[0]

        now = self.clock()
        values = {
            "title": title.strip(),
            "slug": slug,
            "content": content,
            "excerpt": (excerpt or "").strip(),
            "featured_image": (featured_image or "").strip() or None,
            "updated_at": now,
        }
        values.update(flag_values(BLOG_POSTS, bool(published), current, now))

        if current is None:
            values["author_id"] = author_id
            values["created_at"] = now
            row = self.data.insert(TABLE, values)
            log.info(f"Created blog post {row.get('id')} ({values['slug']})")
            return BlogPost.from_row(row)

        rows = self.data.update(TABLE, values, filters={"id": post_id})
        if not rows:
            raise DataServiceError(f"Blog post {post_id} not found")
        return BlogPost.from_row(rows[0])

    def set_published(self, post_id: str, value: bool) -> BlogPost:
        return self.posts.set_approval(post_id, value)

    def delete_post(self, post_id: str) -> None:
        self.posts.delete(post_id)

    # --- comments ---

    def list_comments(self, post_id: str) -> List[Comment]:
        return self.comments.list_public(blog_post_id=post_id)

    def submit_comment(self, post_id: str, author_name: str, author_email: str, content: str) -> Comment:
        return self.comments.submit({
            "blog_post_id": post_id,
            "author_name": author_name,
            "author_email": author_email,
            "content": content,
        })
