"""
Authenticated user identity.

The upstream authentication provider hands over a ``(user_id, email,
token)`` triple. Access control only needs a stable key from it to scope
session records; the token is carried for API calls and never persisted.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any


@dataclass
class UserIdentity:
    """Identity of the logged-in user."""

    user_id: str
    email: str | None = None
    display_name: str | None = None

    # Bearer credential for the remote data API
    auth_token: str | None = None
    token_expiry: datetime | None = None

    @classmethod
    def from_auth(cls, user_id: str, email: str | None, token: str | None) -> "UserIdentity":
        """Build an identity from the provider's triple."""
        return cls(user_id=user_id, email=email, auth_token=token)

    @property
    def user_key(self) -> str:
        """Key used to scope this user's session records."""
        return self.user_id

    def is_authenticated(self) -> bool:
        """Check whether the bearer token is present and unexpired."""
        if self.auth_token is None:
            return False
        if self.token_expiry is None:
            return True
        return datetime.now(UTC) < self.token_expiry

    def auth_headers(self) -> dict[str, str]:
        """HTTP headers for authenticated calls to the data API."""
        if self.auth_token is None:
            return {}
        return {"Authorization": f"Bearer {self.auth_token}"}

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "user_id": self.user_id,
            "email": self.email,
            "display_name": self.display_name,
            "token_expiry": self.token_expiry.isoformat() if self.token_expiry else None,
            # Note: auth_token intentionally excluded for security
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserIdentity":
        """Deserialize from dictionary."""
        token_expiry = None
        if data.get("token_expiry"):
            token_expiry = datetime.fromisoformat(data["token_expiry"])

        return cls(
            user_id=data["user_id"],
            email=data.get("email"),
            display_name=data.get("display_name"),
            token_expiry=token_expiry,
        )
