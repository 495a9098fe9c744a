"""Identity verification port and JWT adapter.

verify(token) turns a bearer credential into a caller identity. A missing
credential is Unauthenticated; a credential that is present but cannot be
verified (bad signature, expired, malformed, missing subject) is Forbidden.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import jwt

from ..config import Settings
from ..domain.errors import ForbiddenError, UnauthenticatedError
from .jwt import decode_token

logger = logging.getLogger(__name__)


class IdentityVerifierPort(ABC):
    """Port interface for bearer credential verification."""

    @abstractmethod
    def verify(self, token: Optional[str]) -> str:
        """Return the caller identity for token.

        Raises:
            UnauthenticatedError: If no token is given
            ForbiddenError: If the token is invalid or expired
        """
        pass


class JWTIdentityVerifier(IdentityVerifierPort):
    """Verifies JWTs signed with the configured key; caller id is the sub claim."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def verify(self, token: Optional[str]) -> str:
        if not token:
            raise UnauthenticatedError("No token provided")

        try:
            payload = decode_token(token, self.settings)
        except jwt.ExpiredSignatureError:
            logger.info("Rejected expired bearer token")
            raise ForbiddenError("Invalid or expired token")
        except jwt.InvalidTokenError as e:
            logger.info(f"Rejected invalid bearer token: {e}")
            raise ForbiddenError("Invalid or expired token")

        caller_id = payload.get("sub")
        if not caller_id or not isinstance(caller_id, str):
            raise ForbiddenError("Invalid or expired token")

        return caller_id
