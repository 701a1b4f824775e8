"""Supabase Auth token verification."""

import logging
from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from nutrisnap.services.auth import TokenVerifier

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseTokenVerifier(TokenVerifier):
    """Resolve Supabase access tokens to user ids."""

    client: Client

    def verify(self, token: str) -> UUID | None:
        """Return the user id for a valid access token."""
        try:
            response = self.client.auth.get_user(token)
        except Exception:
            _logger.warning("Rejected access token", exc_info=True)
            return None
        user = getattr(response, "user", None)
        if user is None:
            return None
        return UUID(str(user.id))
