"""
igprivate: Instagram private API client
========================================
Password envelope encryption (#PWD_INSTAGRAM:4) and an authenticated,
async request pipeline with authorization token rotation.

Usage:
    from igprivate import InstagramClient

    async with InstagramClient("username", "password") as client:
        await client.login()
        print(client.account_id, client.authorization)
"""

from .client import InstagramClient, KeyMaterial, LoginState
from .config import ClientConfig
from .encryption import EnvelopeParts, PasswordEncryptor, encrypt_password, unpack_envelope
from .exceptions import (
    BadPassword,
    ChallengeRequired,
    CheckpointRequired,
    CryptoError,
    InstagramError,
    InvalidUser,
    LoginError,
    LoginRequired,
    MalformedResponse,
    MissingKeyMaterial,
    RateLimitError,
    TwoFactorRequired,
)
from .log_config import LogConfig
from .requests import InstagramRequest, LoginRequest, QeSyncRequest
from .responses import InstagramResponse, LoggedInUser, LoginResponse, QeSyncResponse
from .session import Session
from .transport import CurlTransport, RawResponse, Transport, WireRequest

__version__ = "1.0.0"

__all__ = [
    "InstagramClient",
    "KeyMaterial",
    "LoginState",
    "ClientConfig",
    "Session",
    "LogConfig",
    # Encryption
    "PasswordEncryptor",
    "EnvelopeParts",
    "encrypt_password",
    "unpack_envelope",
    # Requests / responses
    "InstagramRequest",
    "LoginRequest",
    "QeSyncRequest",
    "InstagramResponse",
    "LoggedInUser",
    "LoginResponse",
    "QeSyncResponse",
    # Transport
    "Transport",
    "CurlTransport",
    "WireRequest",
    "RawResponse",
    # Exceptions
    "InstagramError",
    "CryptoError",
    "LoginError",
    "MissingKeyMaterial",
    "BadPassword",
    "InvalidUser",
    "TwoFactorRequired",
    "MalformedResponse",
    "LoginRequired",
    "RateLimitError",
    "ChallengeRequired",
    "CheckpointRequired",
]
