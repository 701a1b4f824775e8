"""Authentication boundary: bearer token to user id."""

from typing import Protocol
from uuid import UUID


class TokenVerifier(Protocol):
    """Interface for verifying access tokens issued by the auth service."""

    def verify(self, token: str) -> UUID | None:
        """Return the user id for a valid token, or None."""
