"""Error taxonomy shared by the identity, data and application layers."""

from typing import Dict, Optional


class ValidationError(Exception):
    """Field-level input problems, raised before any network call."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(self.errors.values()))


class AuthenticationError(Exception):
    """Invalid credentials or a failed identity-service call."""


class DataServiceError(Exception):
    """Any failure reported by the data API."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)
