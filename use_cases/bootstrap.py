"""Startup orchestration: backend configuration, service wiring and local bootstrap."""

from dataclasses import dataclass
from typing import Any, Literal, Optional, Tuple

import logging

import auth
from errors import DataServiceError
from infrastructure.identity.local_identity import LocalIdentityClient
from infrastructure.identity.supabase_identity import SupabaseIdentityClient
from infrastructure.repositories.sqlite_content_repository import SQLiteContentRepository
from infrastructure.repositories.supabase_data_client import SupabaseDataClient
from services.blog_service import BlogService
from services.profile_service import ProfileService
from use_cases.moderation import TESTIMONIES, ModerationWorkflow
from use_cases.session_store import SessionStore
from utils import session_manager

log = logging.getLogger(__name__)

StartupStatus = Literal["CONTINUE", "STOP"]
Backend = Literal["supabase", "local"]


@dataclass(frozen=True)
class StartupResult:
    """Result contract for startup/bootstrap orchestration."""

    status: StartupStatus
    planned_steps: Tuple[str, ...]
    error: Optional[str] = None


@dataclass(frozen=True)
class BackendConfig:
    backend: Backend
    supabase_url: Optional[str] = None
    supabase_anon_key: Optional[str] = None
    content_db: str = "content.db"
    auth_db: str = "auth.db"
    require_email_verification: bool = False
    request_timeout: float = 10.0
    demo_admin_email: Optional[str] = None
    demo_admin_password: Optional[str] = None


@dataclass
class AppServices:
    config: BackendConfig
    identity: Any
    data: Any
    profiles: ProfileService
    blog: BlogService
    testimonies: ModerationWorkflow
    session: SessionStore


def _flag(value) -> bool:
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def load_backend_config() -> BackendConfig:
    url = auth.get_setting("SUPABASE_URL")
    anon_key = auth.get_setting("SUPABASE_ANON_KEY")
    backend: Backend = "supabase" if url and anon_key else "local"

    try:
        timeout = float(auth.get_setting("REQUEST_TIMEOUT", 10))
    except (TypeError, ValueError):
        log.warning("REQUEST_TIMEOUT is not a number; using 10 seconds")
        timeout = 10.0

    return BackendConfig(
        backend=backend,
        supabase_url=url,
        supabase_anon_key=anon_key,
        content_db=auth.get_setting("CONTENT_DB", "content.db"),
        auth_db=auth.get_setting("AUTH_DB", "auth.db"),
        require_email_verification=_flag(auth.get_setting("REQUIRE_EMAIL_VERIFICATION", "false")),
        request_timeout=timeout,
        demo_admin_email=auth.get_setting("DEMO_ADMIN_EMAIL"),
        demo_admin_password=auth.get_setting("DEMO_ADMIN_PASSWORD"),
    )


def build_services(config: BackendConfig) -> AppServices:
    if config.backend == "supabase":
        identity = SupabaseIdentityClient(config.supabase_url, config.supabase_anon_key, timeout=config.request_timeout)
        data = SupabaseDataClient(
            config.supabase_url,
            config.supabase_anon_key,
            token_provider=identity.access_token,
            timeout=config.request_timeout,
        )
    else:
        identity = LocalIdentityClient(config.auth_db, require_verification=config.require_email_verification)
        data = SQLiteContentRepository(config.content_db)

    profiles = ProfileService(data)
    return AppServices(
        config=config,
        identity=identity,
        data=data,
        profiles=profiles,
        blog=BlogService(data),
        testimonies=ModerationWorkflow(data, TESTIMONIES),
        session=SessionStore(identity, profiles),
    )


def run_startup() -> StartupResult:
    """Wire services for this browser session once and resolve the current session."""
    executed_steps = []

    session_manager.init_session_state()
    executed_steps.append("init_session_state")

    if session_manager.st.session_state.startup_done:
        return StartupResult(status="CONTINUE", planned_steps=tuple(executed_steps))

    auth.init_audit_db()
    executed_steps.append("init_audit_db")

    config = load_backend_config()
    services = build_services(config)
    executed_steps.append(f"build_services_{config.backend}")

    try:
        if config.backend == "local":
            services.identity.init_db()
            executed_steps.append("init_auth_db")
            services.data.init_db()
            executed_steps.append("init_content_db")
            auth.bootstrap_admin(services.identity, services.profiles)
            executed_steps.append("bootstrap_admin")
    except (DataServiceError, RuntimeError) as e:
        log.error(f"Local backend bootstrap failed: {e}", exc_info=True)
        return StartupResult(status="STOP", planned_steps=tuple(executed_steps), error=str(e))

    session_manager.st.session_state.services = services
    services.session.start()
    executed_steps.append("start_session_store")

    session_manager.st.session_state.startup_done = True
    return StartupResult(status="CONTINUE", planned_steps=tuple(executed_steps))
