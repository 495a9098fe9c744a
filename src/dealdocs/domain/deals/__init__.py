"""Deals domain module - participant membership and access gate"""

from .authorization import authorize_deal_access, is_participant

__all__ = [
    "authorize_deal_access",
    "is_participant",
]
