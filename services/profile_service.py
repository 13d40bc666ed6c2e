import logging
from typing import Optional

from errors import DataServiceError
from use_cases.domain_models import Account, Profile, iso_now

log = logging.getLogger(__name__)

TABLE = "profiles"


class ProfileService:
    def __init__(self, data):
        self.data = data

    def get_profile(self, profile_id: str) -> Optional[Profile]:
        rows = self.data.select(TABLE, filters={"id": profile_id}, limit=1)
        return Profile.from_row(rows[0]) if rows else None

    def ensure_profile(self, account: Account, full_name: Optional[str] = None) -> Profile:
        """Fetch the account's profile, creating it with is_admin=False on first use."""
        existing = self.get_profile(account.id)
        if existing is not None:
            return existing

        row = {
            "id": account.id,
            "email": account.email,
            "full_name": (full_name or account.full_name or account.email.split("@")[0]).strip(),
            "is_admin": False,
            "created_at": iso_now(),
        }
        try:
            created = self.data.insert(TABLE, row)
        except DataServiceError:
            # Another resolution may have inserted it first; re-read before giving up.
            existing = self.get_profile(account.id)
            if existing is None:
                raise
            return existing
        log.info(f"Created profile for account {account.id}")
        return Profile.from_row(created)

    def set_admin(self, profile_id: str, value: bool) -> Profile:
        rows = self.data.update(TABLE, {"is_admin": bool(value)}, filters={"id": profile_id})
        if not rows:
            raise DataServiceError(f"Profile {profile_id} not found")
        return Profile.from_row(rows[0])
