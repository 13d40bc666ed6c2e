from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_now() -> str:
    return utc_now().isoformat()


@dataclass(frozen=True)
class Account:
    """Identity-service issued account; the app only keeps a reference."""
    id: str
    email: str
    user_metadata: Dict[str, Any] = field(default_factory=dict)
    email_confirmed: bool = True

    @property
    def full_name(self) -> str:
        return str(self.user_metadata.get("full_name") or "")

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Account":
        return cls(
            id=str(payload["id"]),
            email=payload.get("email") or "",
            user_metadata=dict(payload.get("user_metadata") or {}),
            email_confirmed=bool(payload.get("email_confirmed_at") or payload.get("confirmed_at")),
        )


@dataclass(frozen=True)
class AuthSession:
    access_token: str
    account: Account
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        now = now or utc_now()
        return now.timestamp() >= self.expires_at


@dataclass(frozen=True)
class SignUpResult:
    account: Account
    session: Optional[AuthSession] = None

    @property
    def pending_verification(self) -> bool:
        return self.session is None


@dataclass(frozen=True)
class Profile:
    id: str
    email: str
    full_name: str
    is_admin: bool
    created_at: str

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Profile":
        return cls(
            id=str(row["id"]),
            email=row.get("email") or "",
            full_name=row.get("full_name") or "",
            is_admin=bool(row.get("is_admin")),
            created_at=row.get("created_at") or "",
        )


@dataclass(frozen=True)
class BlogPost:
    id: str
    title: str
    slug: str
    content: str
    excerpt: str
    featured_image: Optional[str]
    author_id: Optional[str]
    published: bool
    published_at: Optional[str]
    created_at: str
    updated_at: str

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "BlogPost":
        return cls(
            id=str(row["id"]),
            title=row.get("title") or "",
            slug=row.get("slug") or "",
            content=row.get("content") or "",
            excerpt=row.get("excerpt") or "",
            featured_image=row.get("featured_image") or None,
            author_id=row.get("author_id"),
            published=bool(row.get("published")),
            published_at=row.get("published_at"),
            created_at=row.get("created_at") or "",
            updated_at=row.get("updated_at") or "",
        )


@dataclass(frozen=True)
class Comment:
    id: str
    blog_post_id: str
    author_name: str
    author_email: str
    content: str
    approved: bool
    approved_at: Optional[str]
    created_at: str

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Comment":
        return cls(
            id=str(row["id"]),
            blog_post_id=str(row.get("blog_post_id") or ""),
            author_name=row.get("author_name") or "",
            author_email=row.get("author_email") or "",
            content=row.get("content") or "",
            approved=bool(row.get("approved")),
            approved_at=row.get("approved_at"),
            created_at=row.get("created_at") or "",
        )


@dataclass(frozen=True)
class Testimony:
    id: str
    author_name: str
    author_email: str
    title: str
    content: str
    approved: bool
    approved_at: Optional[str]
    created_at: str

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Testimony":
        return cls(
            id=str(row["id"]),
            author_name=row.get("author_name") or "",
            author_email=row.get("author_email") or "",
            title=row.get("title") or "",
            content=row.get("content") or "",
            approved=bool(row.get("approved")),
            approved_at=row.get("approved_at"),
            created_at=row.get("created_at") or "",
        )
