"""
Logging and Sentry setup for the ministry site.

Member and visitor emails, access tokens and refresh tokens pass through the
identity and moderation code paths. They are redacted from log records and
from Sentry events before either leaves the process. Everything is driven by
environment variables so it works before Streamlit secrets are readable.
"""

import logging
import os
import re
from typing import Any, Dict, Optional

log = logging.getLogger(__name__)

REDACTED = "[REDACTED]"

SENSITIVE_PATTERNS = [
    re.compile(r"eyJ[a-zA-Z0-9_\-]+\.[a-zA-Z0-9_\-]+\.[a-zA-Z0-9_\-]+"),  # JWT access tokens
    re.compile(r"[a-zA-Z0-9_\-\.]{40,}"),  # refresh tokens, API keys
    re.compile(r"[^\s@\"'<>(),;:]+@[^\s@\"'<>(),;:]+\.[a-zA-Z]{2,}"),  # email addresses
]

# Sentry event sections that may carry form input or headers.
EVENT_SECTIONS = ("request", "extra", "contexts")


def redact(text: str) -> str:
    for pattern in SENSITIVE_PATTERNS:
        text = pattern.sub(REDACTED, text)
    return text


def _scrub(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {k: _scrub(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_scrub(i) for i in obj]
    if isinstance(obj, str):
        return redact(obj)
    return obj


class RedactingFilter(logging.Filter):
    """Rewrites each record's message with emails and tokens masked."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            return True
        record.msg = redact(message)
        record.args = None
        return True


def _scrub_sensitive_data(event: Dict[str, Any], hint: Dict[str, Any]) -> Dict[str, Any]:
    """Sentry before_send hook: masks frame variables, breadcrumbs, request data and the user email."""
    for exc in (event.get("exception") or {}).get("values") or []:
        for frame in (exc.get("stacktrace") or {}).get("frames") or []:
            if "vars" in frame:
                frame["vars"] = _scrub(frame["vars"])

    if "breadcrumbs" in event and "values" in event["breadcrumbs"]:
        event["breadcrumbs"]["values"] = _scrub(event["breadcrumbs"]["values"])

    for section in EVENT_SECTIONS:
        if section in event:
            event[section] = _scrub(event[section])

    if isinstance(event.get("logentry"), dict):
        event["logentry"] = _scrub(event["logentry"])

    user = event.get("user")
    if isinstance(user, dict):
        user.pop("email", None)
        user.pop("ip_address", None)

    return event


def _scrub_breadcrumb(crumb: Dict[str, Any], hint: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    return _scrub(crumb)


def setup_observability() -> None:
    """Configure logging and, when SENTRY_DSN is set, Sentry. Safe to call on every rerun."""
    log_level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RedactingFilter) for f in handler.filters):
            handler.addFilter(RedactingFilter())

    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)

    sentry_dsn = os.getenv("SENTRY_DSN")
    if not sentry_dsn:
        log.debug("SENTRY_DSN not provided. Running without Sentry.")
        return

    try:
        import sentry_sdk
    except ImportError:
        log.warning("SENTRY_DSN provided but sentry-sdk is not installed. Skipping Sentry init.")
        return

    if sentry_sdk.get_client().is_active():
        return

    sentry_env = os.getenv("SENTRY_ENV", "development")
    sentry_sdk.init(
        dsn=sentry_dsn,
        environment=sentry_env,
        release=os.getenv("SENTRY_RELEASE") or None,
        traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.2")),
        send_default_pii=False,
        before_send=_scrub_sensitive_data,
        before_breadcrumb=_scrub_breadcrumb,
    )
    log.info(f"Sentry SDK initialized (env: {sentry_env})")
