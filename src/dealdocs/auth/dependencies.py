"""FastAPI dependencies for authentication.

Usage:
    @router.get("/my-deals")
    def my_documents(caller_id: CurrentCaller):
        ...

The bearer scheme is declared with auto_error=False so that a missing
Authorization header is reported as 401 by the verifier itself, while a
present-but-invalid credential is reported as 403.
"""

from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..config import Settings, get_settings
from .verifier import IdentityVerifierPort, JWTIdentityVerifier


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def get_identity_verifier(
    settings: Annotated[Settings, Depends(get_settings)],
) -> IdentityVerifierPort:
    """Dependency for the identity verifier (override in tests)."""
    return JWTIdentityVerifier(settings)


def get_current_caller(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    verifier: Annotated[IdentityVerifierPort, Depends(get_identity_verifier)],
) -> str:
    """Extract and verify the bearer token, returning the caller identity.

    Raises:
        UnauthenticatedError: If the Authorization header is missing or not Bearer
        ForbiddenError: If the token is invalid or expired
    """
    token = credentials.credentials if credentials else None
    return verifier.verify(token)


# Type alias for dependency injection
CurrentCaller = Annotated[str, Depends(get_current_caller)]
