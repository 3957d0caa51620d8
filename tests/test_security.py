"""Unit tests for the two-stage credential scheme and session token generation."""

import base64
import unittest

from app.core.security import (
    FALLBACK_MARKER,
    InvalidCredentialFormat,
    generate_session_token,
    hash_credential,
    hash_password,
    normalize_submitted_digest,
    transport_digest,
    verify_credential,
)

PASSWORD_SHA256 = "5e884898da28047151d0e56f8dc6292773603d0d6aabbdd62a11ef721d1542d8"


def _marker(plain: str) -> str:
    # Same bytes as browser btoa(): one Latin-1 byte per character.
    return FALLBACK_MARKER + base64.b64encode(plain.encode("latin-1")).decode("ascii")


class TestTransportDigest(unittest.TestCase):
    def test_hex_sha256_of_plaintext(self) -> None:
        self.assertEqual(transport_digest("password"), PASSWORD_SHA256)

    def test_digest_passes_through_normalized(self) -> None:
        self.assertEqual(normalize_submitted_digest(PASSWORD_SHA256.upper()), PASSWORD_SHA256)

    def test_rejects_non_digest(self) -> None:
        for bad in ("password", "", "abc123", "z" * 64):
            with self.assertRaises(InvalidCredentialFormat):
                normalize_submitted_digest(bad)


class TestFallbackMarker(unittest.TestCase):
    """A plain: marker is decoded and digested server-side; the marker is never hashed."""

    def test_marker_yields_same_digest_as_client(self) -> None:
        self.assertEqual(normalize_submitted_digest(_marker("password")), PASSWORD_SHA256)

    def test_marker_verifies_against_normal_hash(self) -> None:
        stored = hash_password("s3cret-pass", rounds=4)
        self.assertTrue(verify_credential(normalize_submitted_digest(_marker("s3cret-pass")), stored))
        # The raw marker string must not match the stored hash.
        self.assertFalse(verify_credential(_marker("s3cret-pass"), stored))

    def test_marker_with_latin1_password(self) -> None:
        for plain in ("caf\u00e9", "\u00fcber-geheim", "se\u00f1or"):
            self.assertEqual(normalize_submitted_digest(_marker(plain)), transport_digest(plain))

    def test_latin1_marker_verifies_against_normal_hash(self) -> None:
        stored = hash_password("m\u00f6tley-cr\u00fce", rounds=4)
        digest = normalize_submitted_digest(_marker("m\u00f6tley-cr\u00fce"))
        self.assertTrue(verify_credential(digest, stored))

    def test_marker_is_logged_as_warning(self) -> None:
        with self.assertLogs("app.core.security", level="WARNING"):
            normalize_submitted_digest(_marker("password"))

    def test_malformed_marker(self) -> None:
        with self.assertRaises(InvalidCredentialFormat):
            normalize_submitted_digest(FALLBACK_MARKER + "not base64!!")


class TestHashing(unittest.TestCase):
    def test_verify_round(self) -> None:
        digest = transport_digest("hunter22")
        stored = hash_credential(digest, rounds=4)
        self.assertNotEqual(stored, digest)
        self.assertTrue(verify_credential(digest, stored))
        self.assertFalse(verify_credential(transport_digest("hunter23"), stored))

    def test_corrupt_stored_hash_is_a_mismatch(self) -> None:
        self.assertFalse(verify_credential(PASSWORD_SHA256, "not-a-bcrypt-hash"))

    def test_session_tokens_are_unique_and_opaque(self) -> None:
        tokens = {generate_session_token() for _ in range(50)}
        self.assertEqual(len(tokens), 50)
        for t in tokens:
            self.assertGreaterEqual(len(t), 43)
