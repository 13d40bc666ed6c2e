from infrastructure.repositories.sqlite_audit_repository import SQLiteAuditRepository
import logging
import os
import re
import streamlit as st
from typing import Dict, Optional

from errors import AuthenticationError, ValidationError

log = logging.getLogger(__name__)

AUDIT_DB = "audit.db"
PASSWORD_MIN_LENGTH = 8
FULL_NAME_MIN_LENGTH = 2
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

def get_secret(key):
    try:
        return st.secrets.get(key)
    except FileNotFoundError:
        return None

def get_setting(key, default=None):
    value = get_secret(key) or os.getenv(key)
    return value if value not in (None, "") else default

_audit_repo = None

def get_audit_repo() -> SQLiteAuditRepository:
    global _audit_repo
    db_path = get_setting("AUDIT_DB", AUDIT_DB)
    if _audit_repo is None or _audit_repo.db_path != db_path:
        _audit_repo = SQLiteAuditRepository(db_path)
    return _audit_repo

def init_audit_db():
    get_audit_repo().init_db()

# --- VALIDATION ---

def email_error(email: Optional[str]) -> Optional[str]:
    if not EMAIL_RE.match((email or "").strip()):
        return "Please enter a valid email address"
    return None

def password_error(password: Optional[str]) -> Optional[str]:
    password = password or ""
    if len(password) < PASSWORD_MIN_LENGTH:
        return f"Password must be at least {PASSWORD_MIN_LENGTH} characters"
    if not (re.search(r"[a-z]", password) and re.search(r"[A-Z]", password) and re.search(r"\d", password)):
        return "Password must contain uppercase, lowercase, and number"
    return None

def validate_sign_up(email, password, full_name, confirm_password=None):
    errors: Dict[str, str] = {}
    name = (full_name or "").strip()
    if not name:
        errors["full_name"] = "Full name is required"
    elif len(name) < FULL_NAME_MIN_LENGTH:
        errors["full_name"] = f"Full name must be at least {FULL_NAME_MIN_LENGTH} characters"

    msg = email_error(email)
    if msg:
        errors["email"] = msg
    msg = password_error(password)
    if msg:
        errors["password"] = msg
    if confirm_password is not None and password != confirm_password:
        errors["confirm_password"] = "Passwords do not match"

    if errors:
        raise ValidationError(errors)

def validate_sign_in(email, password):
    errors: Dict[str, str] = {}
    msg = email_error(email)
    if msg:
        errors["email"] = msg
    if not password:
        errors["password"] = "Password is required"
    if errors:
        raise ValidationError(errors)

def validate_email_only(email):
    msg = email_error(email)
    if msg:
        raise ValidationError({"email": msg})

# --- ADMIN BOOTSTRAP (local backend) ---

def bootstrap_admin(identity, profiles):
    """Create the configured administrator account on the local backend."""
    admin_email = get_setting("ADMIN_EMAIL")
    admin_password = get_setting("ADMIN_PASSWORD")
    if not admin_email or not admin_password:
        return None

    admin_name = get_setting("ADMIN_NAME", "Administrator")
    account = identity.find_account(admin_email)
    if account is None:
        try:
            account = identity.create_account(admin_email, admin_password, {"full_name": admin_name}, confirmed=True)
        except AuthenticationError as e:
            log.error(f"Admin bootstrap failed for {admin_email}: {e}")
            return None

    profile = profiles.ensure_profile(account, full_name=admin_name)
    if not profile.is_admin:
        profile = profiles.set_admin(profile.id, True)
        log.info(f"Promoted bootstrap admin {admin_email}")
    return profile
