"""JWT bearer token validation

Tokens are issued by the identity provider; this service only verifies them.
create_access_token exists for local tooling and tests that need a token
signed with the configured key.

JWT Token Claims Structure:
===========================

- sub (Subject): Caller identity, compared against deal participant sets
  Example: "user-7c9e6679"

- iat (Issued At) / exp (Expiration): Unix timestamps; exp is enforced

- aud (Audience) / iss (Issuer): Enforced only when JWT_AUDIENCE / JWT_ISSUER
  are configured

Example Token Payload:
{
  "sub": "user-7c9e6679",
  "iat": 1704368400,
  "exp": 1704372000
}
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from ..config import Settings, get_settings


def create_access_token(
    caller_id: str,
    settings: Optional[Settings] = None,
    expires_in: Optional[timedelta] = None,
    extra_claims: Optional[Dict[str, Any]] = None,
) -> str:
    """Create a signed JWT for caller_id.

    Args:
        caller_id: Identity placed in the sub claim
        settings: Settings holding the signing key (defaults to get_settings())
        expires_in: Token lifetime (default ACCESS_TOKEN_EXPIRE_MINUTES);
                    negative values produce an already-expired token
        extra_claims: Additional claims merged into the payload

    Returns:
        str: Signed JWT token
    """
    settings = settings or get_settings()
    if expires_in is None:
        expires_in = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        'sub': caller_id,
        'iat': int(now.timestamp()),
        'exp': int((now + expires_in).timestamp()),
    }
    if settings.JWT_AUDIENCE:
        payload['aud'] = settings.JWT_AUDIENCE
    if settings.JWT_ISSUER:
        payload['iss'] = settings.JWT_ISSUER
    if extra_claims:
        payload.update(extra_claims)

    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str, settings: Optional[Settings] = None) -> Dict[str, Any]:
    """Decode and validate a JWT token.

    Args:
        token: JWT token string
        settings: Settings holding the verification key

    Returns:
        dict: Decoded token payload with claims

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid or tampered
    """
    settings = settings or get_settings()

    options = {'require': ['exp', 'sub']}
    kwargs: Dict[str, Any] = {}
    if settings.JWT_AUDIENCE:
        kwargs['audience'] = settings.JWT_AUDIENCE
    else:
        options['verify_aud'] = False
    if settings.JWT_ISSUER:
        kwargs['issuer'] = settings.JWT_ISSUER

    return jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=[settings.JWT_ALGORITHM],
        options=options,
        **kwargs,
    )
