"""Password hashing, session token signing and webhook signatures."""

from datetime import timedelta

import pytest

from storefront.core.security import (
    JWTError,
    create_token,
    decode_token,
    hash_password,
    sign_payload,
    verify_password,
    verify_signature,
)


class TestPasswords:
    def test_hash_is_not_plaintext_and_verifies(self):
        hashed = hash_password("p1")
        assert hashed != "p1"
        assert hashed.startswith("$2")
        assert verify_password("p1", hashed)

    def test_hash_uses_ten_rounds(self):
        assert hash_password("p1").split("$")[2] == "10"

    def test_wrong_password_fails(self):
        assert not verify_password("p2", hash_password("p1"))

    def test_empty_or_foreign_hash_never_verifies(self):
        assert not verify_password("p1", "")
        assert not verify_password("p1", "not-a-hash")


class TestTokens:
    def test_claims_survive_round_trip(self, settings):
        token = create_token({"id": "u1", "role": "admin", "email": "a@x.com"}, settings)
        claims = decode_token(token, settings)
        assert claims["id"] == "u1"
        assert claims["role"] == "admin"
        assert "exp" in claims

    def test_expired_token_is_rejected(self, settings):
        token = create_token({"id": "u1"}, settings, expires_delta=timedelta(seconds=-10))
        with pytest.raises(JWTError):
            decode_token(token, settings)

    def test_token_signed_with_other_secret_is_rejected(self, settings):
        from dataclasses import replace

        token = create_token({"id": "u1"}, replace(settings, secret_key="other"))
        with pytest.raises(JWTError):
            decode_token(token, settings)


class TestWebhookSignature:
    def test_valid_signature(self):
        body = b'{"payment_id": 42, "status": "approved"}'
        assert verify_signature(body, sign_payload(body, "s3cret"), "s3cret")

    def test_prefixed_signature(self):
        body = b"{}"
        assert verify_signature(body, "sha256=" + sign_payload(body, "s3cret"), "s3cret")

    def test_tampered_body_or_missing_signature(self):
        signature = sign_payload(b"{}", "s3cret")
        assert not verify_signature(b"{ }", signature, "s3cret")
        assert not verify_signature(b"{}", None, "s3cret")
        assert not verify_signature(b"{}", signature, "other")

    def test_non_ascii_signature_does_not_raise(self):
        assert not verify_signature(b"{}", "\xe9", "s3cret")
        assert not verify_signature(b"{}", "sha256=\u00e9\u00e9", "s3cret")
        assert not verify_signature(b"{}", "\u2603", "s3cret")
