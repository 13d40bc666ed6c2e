"""Page selection over the closed set of site pages."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Literal, Optional, Union

log = logging.getLogger(__name__)


class Page(str, Enum):
    HOME = "home"
    ABOUT = "about"
    BLOG = "blog"
    BLOG_POST = "blog-post"
    TESTIMONIES = "testimonies"
    TESTIMONY = "testimony"
    ADMIN = "admin"
    ADMIN_LOGIN = "admin-login"
    ADMIN_DASHBOARD = "admin-dashboard"
    LOGIN = "login"


PageAccess = Literal["public", "auth", "admin", "demo_admin"]

PAGE_ACCESS: Dict[Page, PageAccess] = {
    Page.HOME: "public",
    Page.ABOUT: "public",
    Page.BLOG: "public",
    Page.BLOG_POST: "public",
    Page.TESTIMONIES: "public",
    Page.TESTIMONY: "auth",
    Page.ADMIN: "admin",
    Page.ADMIN_LOGIN: "public",
    Page.ADMIN_DASHBOARD: "demo_admin",
    Page.LOGIN: "public",
}

# Rendered without navbar and footer.
CHROMELESS_PAGES = frozenset({Page.LOGIN, Page.ADMIN_LOGIN, Page.ADMIN_DASHBOARD})

NAV_LINKS = (
    (Page.HOME, "Home"),
    (Page.ABOUT, "About"),
    (Page.BLOG, "Blog"),
    (Page.TESTIMONIES, "Testimonies"),
)


@dataclass(frozen=True)
class Route:
    page: Page
    payload: Optional[str] = None

    @property
    def show_chrome(self) -> bool:
        return self.page not in CHROMELESS_PAGES

    @property
    def access(self) -> PageAccess:
        return PAGE_ACCESS[self.page]


def parse_page(page_id: Union[str, Page]) -> Page:
    try:
        return Page(page_id)
    except ValueError:
        raise ValueError(f"Unknown page: {page_id!r}") from None


class Navigator:
    def __init__(self, start: Union[str, Page] = Page.HOME):
        self._route = Route(parse_page(start))
        self._selected_post: Optional[str] = None

    @property
    def route(self) -> Route:
        return self._route

    def navigate(self, page_id: Union[str, Page], payload: Optional[str] = None) -> Route:
        """Select a page; blog-post needs a post slug, from the payload or the last one opened."""
        page = parse_page(page_id)

        if page is Page.BLOG_POST:
            if payload:
                self._selected_post = payload
            payload = self._selected_post
            if not payload:
                log.debug("blog-post requested without a post; falling back to blog")
                page = Page.BLOG

        self._route = Route(page, payload if page is Page.BLOG_POST else None)
        return self._route
