"""
Password Encryption
===================
Builds the "#PWD_INSTAGRAM:4:{timestamp}:{payload}" envelope the mobile
login endpoint expects in `enc_password`.

Hybrid scheme (RSA PKCS#1 v1.5 + AES-256-GCM):
    1. Random 32-byte AES key + random 12-byte IV
    2. AES key encrypted with Instagram's RSA public key (PKCS#1 v1.5)
    3. Password encrypted with AES-GCM, AAD = timestamp string
    4. Binary payload, base64 encoded:

        [1:0x01][1:key_id][12:iv][2:len(rsa_key) LE][rsa_key][16:tag][ciphertext]

NOTE: the GCM tag comes BEFORE the ciphertext, the opposite of the
AESGCM output order.

Dependency: pip install cryptography
"""

import base64
import binascii
import os
import re
import struct
import time
from dataclasses import dataclass
from typing import Callable, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.serialization import load_der_public_key

from .config import (
    AES_KEY_SIZE,
    ENVELOPE_PREFIX,
    ENVELOPE_VERSION,
    GCM_TAG_SIZE,
    IV_SIZE,
    PAYLOAD_FORMAT,
)
from .exceptions import CryptoError

# PEM armor lines ("-----BEGIN PUBLIC KEY-----") and any whitespace
_PEM_FRAMING = re.compile(r"-----[^-]+-----|\s")
_KEY_ID_PATTERN = re.compile(r"[0-9]+")

# format byte + key id + iv + key length
_HEADER_SIZE = 1 + 1 + IV_SIZE + 2


@dataclass
class EnvelopeParts:
    """Fields of a decoded password envelope."""

    version: int
    timestamp: str
    payload_format: int
    key_id: int
    iv: bytes
    encrypted_key: bytes
    tag: bytes
    ciphertext: bytes


def key_id_byte(key_id: Union[str, int]) -> int:
    """
    Validate the server key id. It is written as a single byte.

    Accepts a plain int (not bool) or a string of ASCII digits.
    """
    if isinstance(key_id, bool):
        raise CryptoError(f"Encryption key id is not an integer: {key_id!r}")
    if isinstance(key_id, int):
        value = key_id
    elif isinstance(key_id, str) and _KEY_ID_PATTERN.fullmatch(key_id):
        value = int(key_id)
    else:
        raise CryptoError(f"Encryption key id is not an integer: {key_id!r}")
    if not 0 <= value <= 0xFF:
        raise CryptoError(f"Encryption key id {value} does not fit in one byte")
    return value


def load_public_key(public_key: str) -> rsa.RSAPublicKey:
    """
    Parse the `ig-set-password-encryption-pub-key` header value.

    The header is base64 of a PEM document; the PEM body is base64 of a
    DER SubjectPublicKeyInfo.
    """
    try:
        pem = base64.b64decode(public_key).decode("utf-8")
        der = base64.b64decode(_PEM_FRAMING.sub("", pem))
        key = load_der_public_key(der)
    except (binascii.Error, UnicodeDecodeError, ValueError, UnsupportedAlgorithm) as e:
        raise CryptoError(f"Invalid encryption public key: {e}") from e

    if not isinstance(key, rsa.RSAPublicKey):
        raise CryptoError(f"Encryption public key is not RSA: {type(key).__name__}")
    return key


class PasswordEncryptor:
    """
    Password envelope builder.

    Randomness and clock are injectable so envelopes can be reproduced
    in tests:

        enc = PasswordEncryptor(random_bytes=fixed_bytes, clock=lambda: 1700000000)
        enc.encrypt("hunter2", "123", pub_key_b64)
    """

    def __init__(
        self,
        random_bytes: Callable[[int], bytes] = os.urandom,
        clock: Callable[[], float] = time.time,
    ):
        self._random_bytes = random_bytes
        self._clock = clock

    def _draw(self, size: int) -> bytes:
        value = self._random_bytes(size)
        if len(value) != size:
            raise CryptoError(f"Random source returned {len(value)} bytes, expected {size}")
        return value

    def encrypt(self, password: Union[str, bytes], key_id: Union[str, int], public_key: str) -> str:
        """
        Encrypt a password for the login endpoint.

        Args:
            password: Plaintext password (str is UTF-8 encoded)
            key_id: Value of `ig-set-password-encryption-key-id`
            public_key: Value of `ig-set-password-encryption-pub-key`

        Returns:
            str: "#PWD_INSTAGRAM:4:{timestamp}:{payload_b64}"

        Raises:
            CryptoError: bad key material or cipher failure
        """
        key_byte = key_id_byte(key_id)
        rsa_key = load_public_key(public_key)

        aes_key = self._draw(AES_KEY_SIZE)
        iv = self._draw(IV_SIZE)
        timestamp = str(int(self._clock()))

        if isinstance(password, str):
            password = password.encode("utf-8")

        try:
            encrypted_key = rsa_key.encrypt(aes_key, padding.PKCS1v15())
            sealed = AESGCM(aes_key).encrypt(iv, password, timestamp.encode("ascii"))
        except (ValueError, TypeError) as e:
            raise CryptoError(f"Password encryption failed: {e}") from e

        if len(encrypted_key) > 0xFFFF:
            raise CryptoError(f"Encrypted key too long: {len(encrypted_key)} bytes")

        # AESGCM output: ciphertext + 16-byte tag
        tag = sealed[-GCM_TAG_SIZE:]
        ciphertext = sealed[:-GCM_TAG_SIZE]

        payload = b"".join((
            struct.pack("<BB", PAYLOAD_FORMAT, key_byte),
            iv,
            struct.pack("<H", len(encrypted_key)),
            encrypted_key,
            tag,
            ciphertext,
        ))

        payload_b64 = base64.b64encode(payload).decode("ascii")
        return f"{ENVELOPE_PREFIX}:{ENVELOPE_VERSION}:{timestamp}:{payload_b64}"


_default_encryptor = PasswordEncryptor()


def encrypt_password(password: Union[str, bytes], key_id: Union[str, int], public_key: str) -> str:
    """Encrypt a password with fresh system randomness and the current time."""
    return _default_encryptor.encrypt(password, key_id, public_key)


def unpack_envelope(envelope: str) -> EnvelopeParts:
    """
    Split an envelope string back into its fields.

    Raises:
        CryptoError: envelope or payload is structurally invalid
    """
    parts = envelope.split(":", 3)
    if len(parts) != 4 or parts[0] != ENVELOPE_PREFIX:
        raise CryptoError("Not a #PWD_INSTAGRAM envelope")
    _, version, timestamp, payload_b64 = parts

    try:
        payload = base64.b64decode(payload_b64, validate=True)
        version_num = int(version)
    except (binascii.Error, ValueError) as e:
        raise CryptoError(f"Malformed envelope: {e}") from e

    if len(payload) < _HEADER_SIZE:
        raise CryptoError(f"Envelope payload too short: {len(payload)} bytes")

    payload_format, key_id = struct.unpack_from("<BB", payload, 0)
    iv = payload[2:2 + IV_SIZE]
    (key_len,) = struct.unpack_from("<H", payload, 2 + IV_SIZE)

    key_end = _HEADER_SIZE + key_len
    if len(payload) < key_end + GCM_TAG_SIZE:
        raise CryptoError("Envelope payload truncated")

    return EnvelopeParts(
        version=version_num,
        timestamp=timestamp,
        payload_format=payload_format,
        key_id=key_id,
        iv=iv,
        encrypted_key=payload[_HEADER_SIZE:key_end],
        tag=payload[key_end:key_end + GCM_TAG_SIZE],
        ciphertext=payload[key_end + GCM_TAG_SIZE:],
    )
