"""Generic data API contract over the named collections."""

from typing import Any, Dict, List, Optional, Protocol

Row = Dict[str, Any]

TABLE_COLUMNS: Dict[str, tuple] = {
    "profiles": ("id", "email", "full_name", "is_admin", "created_at"),
    "blog_posts": (
        "id", "title", "slug", "content", "excerpt", "featured_image", "author_id",
        "published", "published_at", "created_at", "updated_at",
    ),
    "comments": (
        "id", "blog_post_id", "author_name", "author_email", "content",
        "approved", "approved_at", "created_at",
    ),
    "testimonies": (
        "id", "author_name", "author_email", "title", "content",
        "approved", "approved_at", "created_at",
    ),
}


class DataClient(Protocol):
    def select(
        self,
        table: str,
        *,
        filters: Optional[Row] = None,
        order: Optional[str] = None,
        descending: bool = True,
        limit: Optional[int] = None,
    ) -> List[Row]: ...

    def insert(self, table: str, row: Row) -> Row: ...

    def update(self, table: str, values: Row, *, filters: Row) -> List[Row]: ...

    def delete(self, table: str, *, filters: Row) -> None: ...
