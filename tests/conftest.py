"""
Pytest fixtures for igprivate tests.
"""

import base64
import json
from typing import Callable, Dict, List

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from igprivate.device import DeviceFingerprint
from igprivate.encryption import unpack_envelope
from igprivate.transport import RawResponse, Transport, WireRequest


# ─── Keys ────────────────────────────────────────────────────

def public_key_header(private_key) -> str:
    """Encode a key the way Instagram sends ig-set-password-encryption-pub-key."""
    pem = private_key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return base64.b64encode(pem).decode("ascii")


@pytest.fixture(scope="session")
def rsa_2048():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def rsa_4096():
    return rsa.generate_private_key(public_exponent=65537, key_size=4096)


@pytest.fixture(scope="session")
def pub_key_2048(rsa_2048):
    return public_key_header(rsa_2048)


@pytest.fixture(scope="session")
def pub_key_4096(rsa_4096):
    return public_key_header(rsa_4096)


@pytest.fixture
def open_envelope():
    """Decrypt an envelope: RSA-unwrap the AES key, then AES-GCM with tag moved back to the end."""

    def _open(envelope: str, private_key) -> bytes:
        parts = unpack_envelope(envelope)
        aes_key = private_key.decrypt(parts.encrypted_key, padding.PKCS1v15())
        return AESGCM(aes_key).decrypt(
            parts.iv,
            parts.ciphertext + parts.tag,
            parts.timestamp.encode("ascii"),
        )

    return _open


# ─── Transport ───────────────────────────────────────────────

def make_response(status_code=200, json_data=None, text=None, headers=None) -> RawResponse:
    """Create a RawResponse."""
    if text is None:
        text = json.dumps(json_data if json_data is not None else {"status": "ok"})
    return RawResponse.build(status_code, headers or {}, text)


class FakeTransport(Transport):
    """
    In-memory transport.

    route(url, *items): items are RawResponse, exceptions, or async
    callables (request → RawResponse). The last item repeats.
    """

    def __init__(self):
        self.sent: List[WireRequest] = []
        self.routes: Dict[str, list] = {}
        self.closed = False

    def route(self, url: str, *items) -> "FakeTransport":
        self.routes.setdefault(url, []).extend(items)
        return self

    def sent_to(self, url: str) -> List[WireRequest]:
        return [r for r in self.sent if r.url == url]

    async def send(self, request: WireRequest) -> RawResponse:
        self.sent.append(request)
        queue = self.routes[request.url]
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, BaseException):
            raise item
        if callable(item):
            item = await item(request)
        return item

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def device():
    return DeviceFingerprint.generate("testuser")


def signed_payload(request: WireRequest) -> dict:
    """Decode signed_body=SIGNATURE.{json}."""
    body = request.data["signed_body"]
    assert body.startswith("SIGNATURE.")
    return json.loads(body[len("SIGNATURE."):])


@pytest.fixture
def fixed_random() -> Callable[[bytes, bytes], Callable[[int], bytes]]:
    """Random source returning a fixed AES key (32 bytes) and IV (12 bytes)."""

    def _make(aes_key: bytes, iv: bytes) -> Callable[[int], bytes]:
        values = {len(aes_key): aes_key, len(iv): iv}
        return lambda size: values[size]

    return _make
