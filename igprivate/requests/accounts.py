"""
Account Requests
================
Requests used by the login flow.
"""

from typing import Dict

from ..config import LOGIN_EXPERIMENTS, LOGIN_URL, QE_SYNC_URL
from ..responses.accounts import LoginResponse, QeSyncResponse
from ..session import Session
from .base import InstagramRequest, jazoest, signed_body


class QeSyncRequest(InstagramRequest[QeSyncResponse]):
    """
    Pre-login experiment sync.

    The response carries the password encryption key in its
    `ig-set-password-encryption-*` headers.
    """

    method = "POST"
    url = QE_SYNC_URL
    response_type = QeSyncResponse

    def form_data(self, session: Session) -> Dict[str, str]:
        return signed_body({
            "id": session.device.client_uuid,
            "server_config_retrieval": "1",
            "experiments": LOGIN_EXPERIMENTS,
        })


class LoginRequest(InstagramRequest[LoginResponse]):
    """
    Username + encrypted password login.

    Args:
        username: Instagram handle
        enc_password: "#PWD_INSTAGRAM:4:..." envelope
    """

    method = "POST"
    url = LOGIN_URL
    response_type = LoginResponse

    def __init__(self, username: str, enc_password: str):
        self.username = username
        self.enc_password = enc_password

    def form_data(self, session: Session) -> Dict[str, str]:
        device = session.device
        return signed_body({
            "jazoest": jazoest(device.phone_id),
            "country_codes": '[{"country_code":"1","source":["default"]}]',
            "phone_id": device.phone_id,
            "enc_password": self.enc_password,
            "username": self.username,
            "adid": device.advertising_id,
            "guid": device.client_uuid,
            "device_id": device.device_id,
            "google_tokens": "[]",
            "login_attempt_count": "0",
        })
