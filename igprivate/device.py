"""
Device Fingerprint
==================
Android device identity for the Instagram Private API.

Every field is derived from a seed (usually the username), so the same
account always presents the same device:

    fp = DeviceFingerprint.generate("my_account")
    fp.device_id      → "android-7f3b8c2a1d4e9f0a"
    fp.phone_id       → "a1b2c3d4-e5f6-7890-abcd-..."
    fp.user_agent     → "Instagram 332.0.0.0.64 Android ..."
    fp.headers        → dict with the X-IG-* device headers
"""

import hashlib
import random
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List

from .config import IG_APP_ID_ANDROID, IG_CAPABILITIES


# Real Android phones (GSMArena specs)
DEVICE_DATABASE: List[Dict[str, Any]] = [
    {
        "manufacturer": "Samsung",
        "model": "SM-S928B",
        "android_version": 35,
        "android_release": "15",
        "dpi": "640dpi",
        "resolution": "1440x3120",
        "cpu": "exynos2400",
    },
    {
        "manufacturer": "Google",
        "model": "Pixel 8",
        "android_version": 34,
        "android_release": "14",
        "dpi": "420dpi",
        "resolution": "1080x2400",
        "cpu": "zuma",
    },
    {
        "manufacturer": "Xiaomi",
        "model": "2201116SG",
        "android_version": 33,
        "android_release": "13",
        "dpi": "440dpi",
        "resolution": "1080x2400",
        "cpu": "qcom",
    },
]

IG_APP_VERSIONS = [
    "332.0.0.0.64",
    "331.0.0.0.93",
    "330.0.0.0.89",
]


@dataclass
class DeviceFingerprint:
    """Android device identity. Same seed → same fingerprint."""

    manufacturer: str = ""
    model: str = ""
    android_version: int = 34
    android_release: str = "14"
    dpi: str = "480dpi"
    resolution: str = "1080x2400"
    cpu: str = ""

    device_id: str = ""          # android-[16 hex]
    phone_id: str = ""           # UUID
    client_uuid: str = ""        # UUID
    advertising_id: str = ""     # UUID

    ig_app_version: str = ""
    ig_app_version_code: str = ""
    locale: str = "en_US"

    @classmethod
    def generate(cls, seed: str = "", locale: str = "en_US") -> "DeviceFingerprint":
        """
        Generate a device fingerprint.

        Args:
            seed: Stable identifier (username). Empty = random one-time device.
            locale: Device locale
        """
        if not seed:
            seed = str(uuid.uuid4())

        rng = random.Random(seed)
        device = DEVICE_DATABASE[rng.randint(0, len(DEVICE_DATABASE) - 1)]

        def make_uuid(component: str) -> str:
            return str(uuid.uuid5(uuid.NAMESPACE_URL, f"{seed}:{component}"))

        def make_android_id(component: str) -> str:
            raw = hashlib.md5(f"{seed}:{component}".encode()).hexdigest()
            return f"android-{raw[:16]}"

        return cls(
            manufacturer=device["manufacturer"],
            model=device["model"],
            android_version=device["android_version"],
            android_release=device["android_release"],
            dpi=device["dpi"],
            resolution=device["resolution"],
            cpu=device["cpu"],
            device_id=make_android_id("device"),
            phone_id=make_uuid("phone"),
            client_uuid=make_uuid("uuid"),
            advertising_id=make_uuid("adid"),
            ig_app_version=IG_APP_VERSIONS[rng.randint(0, len(IG_APP_VERSIONS) - 1)],
            ig_app_version_code=str(rng.randint(520000000, 580000000)),
            locale=locale,
        )

    @property
    def user_agent(self) -> str:
        """Instagram Android app User-Agent string."""
        return (
            f"Instagram {self.ig_app_version} "
            f"Android ({self.android_version}/{self.android_release}; "
            f"{self.dpi}; {self.resolution}; "
            f"{self.manufacturer}; {self.model}; "
            f"{self.model.lower().replace('-', '').replace(' ', '')}; {self.cpu}; "
            f"{self.locale}; {self.ig_app_version_code})"
        )

    @property
    def headers(self) -> Dict[str, str]:
        """Device headers sent with every private API request."""
        return {
            "User-Agent": self.user_agent,
            "X-IG-App-ID": IG_APP_ID_ANDROID,
            "X-IG-Capabilities": IG_CAPABILITIES,
            "X-IG-Connection-Type": "WIFI",
            "X-IG-Device-ID": self.client_uuid,
            "X-IG-Android-ID": self.device_id,
            "X-IG-Device-Locale": self.locale,
            "X-IG-App-Locale": self.locale,
            "X-Pigeon-Session-Id": f"UFS-{self.client_uuid}-0",
            "X-FB-HTTP-Engine": "Liger",
            "Accept-Language": self.locale.replace("_", "-"),
            "Content-Type": "application/x-www-form-urlencoded; charset=UTF-8",
        }
