"""Tests for Linear webhook signature validation."""

import hashlib
import hmac

import pytest

from linear_opencode.webhooks.signature import (
    extract_delivery_id,
    extract_signature,
    sign,
    verify_signature,
)

SECRET = "lin_wh_secret"
BODY = b'{"type":"Comment","action":"create","data":{"body":"hi"}}'


def _sig(body: bytes, secret: str = SECRET) -> str:
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


class TestVerifySignature:
    def test_valid(self):
        assert verify_signature(BODY, _sig(BODY), SECRET) is True

    def test_sign_matches_hmac(self):
        assert sign(BODY, SECRET) == _sig(BODY)

    def test_wrong_secret(self):
        assert verify_signature(BODY, _sig(BODY, "other"), SECRET) is False

    def test_surrounding_whitespace_ignored(self):
        assert verify_signature(BODY, f"  {_sig(BODY)}\n", SECRET) is True

    def test_no_secret_rejects(self):
        assert verify_signature(BODY, _sig(BODY, ""), "") is False
        assert verify_signature(BODY, _sig(BODY), None) is False

    def test_no_signature_rejects(self):
        assert verify_signature(BODY, "", SECRET) is False
        assert verify_signature(BODY, None, SECRET) is False

    def test_non_ascii_signature_does_not_raise(self):
        assert verify_signature(BODY, "é" * 64, SECRET) is False

    @pytest.mark.parametrize("index", [0, 10, len(BODY) // 2, len(BODY) - 1])
    def test_body_byte_mutation_fails(self, index):
        mutated = bytearray(BODY)
        mutated[index] ^= 0x01
        assert verify_signature(bytes(mutated), _sig(BODY), SECRET) is False

    @pytest.mark.parametrize("index", [0, 31, 63])
    def test_signature_char_mutation_fails(self, index):
        good = _sig(BODY)
        replacement = "0" if good[index] != "0" else "1"
        bad = good[:index] + replacement + good[index + 1:]
        assert verify_signature(BODY, bad, SECRET) is False

    def test_uppercase_digest_fails(self):
        good = _sig(BODY)
        if good.upper() != good:
            assert verify_signature(BODY, good.upper(), SECRET) is False


class TestHeaders:
    def test_extract_signature_case_insensitive(self):
        assert extract_signature({"linear-signature": "abc"}) == "abc"
        assert extract_signature({"Linear-Signature": "abc"}) == "abc"

    def test_extract_signature_missing(self):
        assert extract_signature({"Content-Type": "application/json"}) is None
        assert extract_signature({"Linear-Signature": ""}) is None

    def test_extract_delivery_id(self):
        assert extract_delivery_id({"LINEAR-DELIVERY": "d-1"}) == "d-1"
        assert extract_delivery_id({}) is None
