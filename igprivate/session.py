"""
Session
=======
Identity and credential state of one client.

The authorization token is the only field mutated while requests are in
flight, so it lives behind a lock: readers always see a whole token, and
once a rotation is applied every request built afterwards uses it.
"""

import threading
from typing import Dict, Optional

from .device import DeviceFingerprint
from .exceptions import LoginError


class Session:
    """
    Instagram session owned by a single InstagramClient.

    Usage:
        session = Session("username", "password")
        session.authorization = "Bearer IGT:2:..."
        session.authorization  # current token
    """

    def __init__(
        self,
        username: str,
        password: str,
        authorization: Optional[str] = None,
        device: Optional[DeviceFingerprint] = None,
    ):
        self._username = username
        self._password = password
        self._authorization = authorization
        self._account_id: Optional[int] = None
        self._lock = threading.Lock()
        self.device = device or DeviceFingerprint.generate(username)

    @property
    def username(self) -> str:
        return self._username

    @property
    def password(self) -> str:
        return self._password

    @property
    def authorization(self) -> Optional[str]:
        with self._lock:
            return self._authorization

    @authorization.setter
    def authorization(self, value: Optional[str]) -> None:
        with self._lock:
            self._authorization = value

    def rotate_authorization(self, token: str) -> Optional[str]:
        """Replace the authorization token, returning the previous one."""
        with self._lock:
            previous = self._authorization
            self._authorization = token
        return previous

    @property
    def account_id(self) -> Optional[int]:
        return self._account_id

    def set_account_id(self, pk: int) -> None:
        """Record the logged-in account pk. Set once per session."""
        if self._account_id is not None and self._account_id != pk:
            raise LoginError(
                f"Session already bound to account {self._account_id}, got {pk}"
            )
        self._account_id = int(pk)

    @property
    def is_authenticated(self) -> bool:
        return self.authorization is not None

    def to_dict(self) -> Dict:
        """Session summary for diagnostics. Never includes the password."""
        token = self.authorization
        if token:
            token = token[:12] + "***" if len(token) > 12 else "***"
        return {
            "username": self._username,
            "account_id": self._account_id,
            "authorization": token,
            "device_id": self.device.device_id,
        }

    def __repr__(self) -> str:
        return f"Session(username={self._username!r}, account_id={self._account_id})"
