"""Unit tests for SHA-256 helpers."""

from __future__ import annotations

import hashlib

from keyward.utils.hash import sha256, sha256_compare


class TestSha256:
    def test_matches_hashlib(self):
        assert sha256("abc") == hashlib.sha256(b"abc").hexdigest()

    def test_lowercase_hex(self):
        digest = sha256("anything")

        assert len(digest) == 64
        assert digest == digest.lower()
        int(digest, 16)


class TestSha256Compare:
    def test_equal(self):
        digest = sha256("value")
        assert sha256_compare(digest, digest) is True

    def test_different(self):
        assert sha256_compare(sha256("a"), sha256("b")) is False

    def test_different_length(self):
        assert sha256_compare(sha256("a"), sha256("a")[:10]) is False
