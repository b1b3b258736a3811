"""
igprivate typed requests.
"""

from .base import InstagramRequest, jazoest, signed_body
from .accounts import LoginRequest, QeSyncRequest

__all__ = [
    "InstagramRequest",
    "LoginRequest",
    "QeSyncRequest",
    "jazoest",
    "signed_body",
]
