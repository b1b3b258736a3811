"""
Instagram Private API Configuration and Constants
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# ============================================================
# API Base
# ============================================================
MOBILE_BASE_URL = "https://i.instagram.com"
MOBILE_API_BASE = f"{MOBILE_BASE_URL}/api/v1"

QE_SYNC_URL = f"{MOBILE_API_BASE}/qe/sync/"
LOGIN_URL = f"{MOBILE_API_BASE}/accounts/login/"

# Android app ID (sent as X-IG-App-ID on every mobile request)
IG_APP_ID_ANDROID = "567067343352427"

# Capabilities bitmask of the Android build
IG_CAPABILITIES = "3brTv10="

# Experiments requested by the app before showing the login screen
LOGIN_EXPERIMENTS = (
    "ig_android_fci_onboarding_friend_search,ig_android_device_detection_info_upload,"
    "ig_android_account_linking_upsell_universe,ig_android_direct_main_tab_universe_v2,"
    "ig_android_sign_in_help_only_one_account_family_universe,"
    "ig_android_sms_retriever_backtest_universe,ig_android_direct_add_direct_to_android_native_photo_share_sheet,"
    "ig_growth_android_profile_pic_prefill_with_fb_pic_2,ig_account_identity_logged_out_signals_global_holdout_universe,"
    "ig_android_login_identifier_fuzzy_match,ig_android_access_flow_prefill"
)

# ============================================================
# Response headers
# ============================================================
HEADER_SET_AUTHORIZATION = "ig-set-authorization"
HEADER_ENCRYPTION_KEY_ID = "ig-set-password-encryption-key-id"
HEADER_ENCRYPTION_PUB_KEY = "ig-set-password-encryption-pub-key"

# ============================================================
# Password envelope
# ============================================================
ENVELOPE_PREFIX = "#PWD_INSTAGRAM"
ENVELOPE_VERSION = 4          # outer protocol version in the envelope string
PAYLOAD_FORMAT = 1            # first byte of the binary payload
AES_KEY_SIZE = 32
IV_SIZE = 12
GCM_TAG_SIZE = 16

# ============================================================
# Timeout (in seconds)
# ============================================================
REQUEST_TIMEOUT = 15
CONNECT_TIMEOUT = 10


@dataclass
class ClientConfig:
    """
    Client settings, usually loaded from a .env file.

    Environment variables:
        IG_USERNAME, IG_PASSWORD  : account credentials
        IG_AUTHORIZATION          : existing bearer token (optional)
        IG_PROXY                  : proxy URL (optional)
        IG_TIMEOUT                : request timeout in seconds
        IG_DEBUG                  : "1"/"true" enables DebugLogger output
    """

    username: str = ""
    password: str = ""
    authorization: Optional[str] = None
    proxy: Optional[str] = None
    timeout: float = REQUEST_TIMEOUT
    debug: bool = False

    @classmethod
    def from_env(cls, env_path: str = ".env") -> "ClientConfig":
        env_file = Path(env_path)
        if env_file.exists():
            load_dotenv(env_file, override=True)

        return cls(
            username=os.getenv("IG_USERNAME", ""),
            password=os.getenv("IG_PASSWORD", ""),
            authorization=os.getenv("IG_AUTHORIZATION") or None,
            proxy=os.getenv("IG_PROXY") or None,
            timeout=float(os.getenv("IG_TIMEOUT", REQUEST_TIMEOUT)),
            debug=os.getenv("IG_DEBUG", "").lower() in ("1", "true", "yes"),
        )

    def __repr__(self) -> str:
        return (
            f"ClientConfig(username={self.username!r}, password='***', "
            f"authorization={'***' if self.authorization else None}, "
            f"proxy={self.proxy!r}, timeout={self.timeout}, debug={self.debug})"
        )
