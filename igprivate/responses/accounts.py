"""
Account Responses
=================
Models for /qe/sync/ and /accounts/login/.
"""

from typing import Any, List

from pydantic import Field, field_validator

from .base import InstaModel, InstagramResponse


class QeSyncResponse(InstagramResponse):
    """Experiment sync. Only its headers matter to the login flow."""
    experiments: List[Any] = Field(default_factory=list)


class LoggedInUser(InstaModel):
    """
    Account returned by a successful login.

    Fields:
        pk: Numeric account ID (64-bit)
        username: Instagram handle
        full_name: Display name
    """
    pk: int
    username: str = ""
    full_name: str = ""
    is_private: bool = False
    is_verified: bool = False
    profile_pic_url: str = ""

    @field_validator("pk", mode="before")
    @classmethod
    def coerce_pk(cls, v: Any) -> int:
        """pk sometimes arrives as a string."""
        return int(v)


class LoginResponse(InstagramResponse):
    """Successful /accounts/login/ response."""
    logged_in_user: LoggedInUser

    @property
    def pk(self) -> int:
        return self.logged_in_user.pk
