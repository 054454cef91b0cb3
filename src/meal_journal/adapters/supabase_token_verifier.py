"""Bearer token verification through Supabase Auth."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from supabase import Client

_logger = logging.getLogger(__name__)


class TokenVerifier(Protocol):
    """Interface for turning a bearer token into a user id."""

    def verify(self, token: str) -> UUID | None:
        """Return the user id for a valid token, else None."""


@dataclass
class SupabaseTokenVerifier(TokenVerifier):
    """Verifies access tokens issued by Supabase Auth."""

    client: Client

    def verify(self, token: str) -> UUID | None:
        """Resolve the token's user, returning None when it is rejected."""
        try:
            response = self.client.auth.get_user(token)
        except Exception as exc:
            _logger.info("Rejected access token: %s", exc)
            return None
        user = getattr(response, "user", None)
        if user is None:
            return None
        try:
            return UUID(str(user.id))
        except ValueError:
            _logger.warning("Auth user id is not a UUID: %r", user.id)
            return None
