"""Authentication module - bearer token verification"""

from .dependencies import CurrentCaller, get_current_caller, get_identity_verifier
from .verifier import IdentityVerifierPort, JWTIdentityVerifier

__all__ = [
    "CurrentCaller",
    "get_current_caller",
    "get_identity_verifier",
    "IdentityVerifierPort",
    "JWTIdentityVerifier",
]
