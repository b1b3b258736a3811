"""
Tests for password envelope encryption (#PWD_INSTAGRAM:4).
"""

import base64
import os
import struct
import time

import pytest
from cryptography.hazmat.primitives.asymmetric import ec

from igprivate import encryption
from igprivate.encryption import (
    PasswordEncryptor,
    encrypt_password,
    key_id_byte,
    load_public_key,
    unpack_envelope,
)
from igprivate.exceptions import CryptoError

from conftest import public_key_header

AES_KEY = bytes(range(32, 64))
IV = bytes.fromhex("000102030405060708090a0b")
TIMESTAMP = 1700000000


def payload_of(envelope: str) -> bytes:
    return base64.b64decode(envelope.split(":", 3)[3])


class FakeRSAKey:
    """Deterministic stand-in for an RSA public key."""

    def __init__(self, size: int = 256):
        self.size = size

    def encrypt(self, data, pad):
        return bytes([0x42]) * self.size


class TestEnvelopeFormat:
    """Envelope string and payload layout."""

    def test_prefix_and_timestamp(self, pub_key_2048):
        before = int(time.time())
        envelope = encrypt_password("hunter2", "123", pub_key_2048)
        after = int(time.time())

        assert envelope.startswith("#PWD_INSTAGRAM:4:")
        timestamp = int(envelope.split(":")[2])
        assert before - 2 <= timestamp <= after + 2

    def test_end_to_end_scenario(self, rsa_2048, pub_key_2048, fixed_random, open_envelope):
        enc = PasswordEncryptor(random_bytes=fixed_random(AES_KEY, IV), clock=lambda: TIMESTAMP)
        envelope = enc.encrypt("hunter2", "123", pub_key_2048)

        assert envelope.startswith(f"#PWD_INSTAGRAM:4:{TIMESTAMP}:")
        payload = payload_of(envelope)
        rsa_len = rsa_2048.key_size // 8
        assert len(payload) == 1 + 1 + 12 + 2 + rsa_len + 16 + len("hunter2")
        assert open_envelope(envelope, rsa_2048) == b"hunter2"

    def test_payload_layout(self, rsa_2048, pub_key_2048, fixed_random):
        enc = PasswordEncryptor(random_bytes=fixed_random(AES_KEY, IV), clock=lambda: TIMESTAMP)
        payload = payload_of(enc.encrypt("hunter2", "123", pub_key_2048))

        assert payload[0] == 1
        assert payload[1] == 123
        assert payload[2:14] == IV
        (key_len,) = struct.unpack("<H", payload[14:16])
        assert key_len == 256

    @pytest.mark.parametrize("key_fixture,expected", [("rsa_2048", 256), ("rsa_4096", 512)])
    def test_length_field_matches_rsa_ciphertext(self, request, key_fixture, expected, open_envelope):
        private_key = request.getfixturevalue(key_fixture)
        envelope = encrypt_password("secret", 7, public_key_header(private_key))
        parts = unpack_envelope(envelope)

        (key_len,) = struct.unpack("<H", payload_of(envelope)[14:16])
        assert key_len == len(parts.encrypted_key) == expected
        assert open_envelope(envelope, private_key) == b"secret"

    def test_tag_precedes_ciphertext(self, rsa_2048, pub_key_2048, fixed_random):
        from cryptography.hazmat.primitives.ciphers.aead import AESGCM

        enc = PasswordEncryptor(random_bytes=fixed_random(AES_KEY, IV), clock=lambda: TIMESTAMP)
        parts = unpack_envelope(enc.encrypt("hunter2", "1", pub_key_2048))

        sealed = AESGCM(AES_KEY).encrypt(IV, b"hunter2", str(TIMESTAMP).encode())
        assert parts.tag == sealed[-16:]
        assert parts.ciphertext == sealed[:-16]

    def test_timestamp_is_aad(self, rsa_2048, pub_key_2048):
        from cryptography.exceptions import InvalidTag
        from cryptography.hazmat.primitives.asymmetric import padding
        from cryptography.hazmat.primitives.ciphers.aead import AESGCM

        parts = unpack_envelope(encrypt_password("hunter2", "1", pub_key_2048))
        aes_key = rsa_2048.decrypt(parts.encrypted_key, padding.PKCS1v15())
        with pytest.raises(InvalidTag):
            AESGCM(aes_key).decrypt(parts.iv, parts.ciphertext + parts.tag, b"0")


class TestDeterminism:
    """Fixed randomness + clock → identical output."""

    def test_byte_identical_with_stubbed_rsa(self, monkeypatch, pub_key_2048, fixed_random):
        monkeypatch.setattr(encryption, "load_public_key", lambda key: FakeRSAKey())

        first = PasswordEncryptor(fixed_random(AES_KEY, IV), lambda: TIMESTAMP).encrypt("hunter2", "5", pub_key_2048)
        second = PasswordEncryptor(fixed_random(AES_KEY, IV), lambda: TIMESTAMP).encrypt("hunter2", "5", pub_key_2048)
        assert first == second

    def test_identical_outside_rsa_block(self, rsa_2048, pub_key_2048, fixed_random):
        # PKCS#1 v1.5 padding is randomized by the backend
        first = unpack_envelope(
            PasswordEncryptor(fixed_random(AES_KEY, IV), lambda: TIMESTAMP).encrypt("pw", "5", pub_key_2048)
        )
        second = unpack_envelope(
            PasswordEncryptor(fixed_random(AES_KEY, IV), lambda: TIMESTAMP).encrypt("pw", "5", pub_key_2048)
        )

        assert first.timestamp == second.timestamp
        assert first.iv == second.iv
        assert first.tag == second.tag
        assert first.ciphertext == second.ciphertext
        assert len(first.encrypted_key) == len(second.encrypted_key)

    def test_fresh_randomness_per_call(self, pub_key_2048):
        first = unpack_envelope(encrypt_password("pw", "5", pub_key_2048))
        second = unpack_envelope(encrypt_password("pw", "5", pub_key_2048))
        assert first.iv != second.iv
        assert first.ciphertext + first.tag != second.ciphertext + second.tag


class TestRoundTrip:
    """Decrypting the envelope recovers the password."""

    @pytest.mark.parametrize("length", [0, 1, 15, 16, 17, 64, 255, 256])
    def test_random_bytes(self, rsa_2048, pub_key_2048, open_envelope, length):
        password = os.urandom(length)
        envelope = encrypt_password(password, "42", pub_key_2048)
        assert open_envelope(envelope, rsa_2048) == password

    def test_empty_password(self, rsa_2048, pub_key_2048, open_envelope):
        envelope = encrypt_password("", "42", pub_key_2048)
        assert len(unpack_envelope(envelope).ciphertext) == 0
        assert open_envelope(envelope, rsa_2048) == b""

    def test_unicode_password(self, rsa_2048, pub_key_2048, open_envelope):
        password = "пароль🔑日本"
        envelope = encrypt_password(password, "42", pub_key_2048)
        assert open_envelope(envelope, rsa_2048) == password.encode("utf-8")


class TestKeyId:
    """Key id must fit in one byte."""

    @pytest.mark.parametrize("key_id,expected", [("0", 0), ("123", 123), ("255", 255), (17, 17)])
    def test_valid(self, key_id, expected):
        assert key_id_byte(key_id) == expected

    @pytest.mark.parametrize(
        "key_id",
        ["256", "-1", "1000", "abc", "", None, "1_2_3", " 7 ", "+7", 255.9, 7.0, True, False, -1, 256],
    )
    def test_invalid(self, key_id):
        with pytest.raises(CryptoError):
            key_id_byte(key_id)

    def test_out_of_range_fails_encryption(self, pub_key_2048):
        with pytest.raises(CryptoError):
            encrypt_password("hunter2", "300", pub_key_2048)


class TestKeyMaterial:
    """Malformed public keys raise CryptoError."""

    def test_not_base64(self):
        with pytest.raises(CryptoError):
            load_public_key("%%% not base64 %%%")

    def test_garbage_pem(self):
        pem = b"-----BEGIN PUBLIC KEY-----\nAAAA\n-----END PUBLIC KEY-----\n"
        with pytest.raises(CryptoError):
            load_public_key(base64.b64encode(pem).decode())

    def test_non_rsa_key(self):
        ec_key = ec.generate_private_key(ec.SECP256R1())
        with pytest.raises(CryptoError, match="not RSA"):
            load_public_key(public_key_header(ec_key))

    def test_pem_framing_stripped(self, rsa_2048, pub_key_2048):
        key = load_public_key(pub_key_2048)
        assert key.public_numbers() == rsa_2048.public_key().public_numbers()

    def test_short_random_source(self, pub_key_2048):
        enc = PasswordEncryptor(random_bytes=lambda size: b"\x00" * (size - 1))
        with pytest.raises(CryptoError):
            enc.encrypt("pw", "1", pub_key_2048)


class TestUnpackEnvelope:
    """Structural parsing."""

    def test_fields(self, pub_key_2048, fixed_random):
        enc = PasswordEncryptor(fixed_random(AES_KEY, IV), lambda: TIMESTAMP)
        parts = unpack_envelope(enc.encrypt("hunter2", "123", pub_key_2048))

        assert parts.version == 4
        assert parts.timestamp == str(TIMESTAMP)
        assert parts.payload_format == 1
        assert parts.key_id == 123
        assert parts.iv == IV
        assert len(parts.tag) == 16
        assert len(parts.ciphertext) == 7

    @pytest.mark.parametrize("envelope", [
        "hello",
        "#PWD_BROWSER:4:1700000000:AAAA",
        "#PWD_INSTAGRAM:x:1700000000:AAAA",
        "#PWD_INSTAGRAM:4:1700000000:!!!",
        "#PWD_INSTAGRAM:4:1700000000:" + base64.b64encode(b"\x01\x02").decode(),
    ])
    def test_invalid(self, envelope):
        with pytest.raises(CryptoError):
            unpack_envelope(envelope)

    def test_truncated_key(self):
        payload = b"\x01\x05" + IV + struct.pack("<H", 256) + b"\x00" * 10
        envelope = "#PWD_INSTAGRAM:4:1:" + base64.b64encode(payload).decode()
        with pytest.raises(CryptoError, match="truncated"):
            unpack_envelope(envelope)
