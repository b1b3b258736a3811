"""
igprivate response models: pydantic v2 typed responses.
"""

from .base import InstaModel, InstagramResponse
from .accounts import LoggedInUser, LoginResponse, QeSyncResponse

__all__ = [
    "InstaModel",
    "InstagramResponse",
    "LoggedInUser",
    "LoginResponse",
    "QeSyncResponse",
]
