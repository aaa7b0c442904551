"""
Tests for signed bearer tokens — issue, verify, tamper, expiry.
"""

import json
from base64 import urlsafe_b64decode, urlsafe_b64encode

import pytest

from auth.tokens import InvalidToken, TokenIssuer, TokenSettings
from config.settings import DEFAULT_JWT_SECRET, Settings

WEEK = 86400 * 7


class _Clock:
    def __init__(self, now: float):
        self.now = now

    def __call__(self) -> float:
        return self.now


def _issuer(secret="s3cret", clock=None) -> TokenIssuer:
    return TokenIssuer(TokenSettings(secret=secret, lifetime_seconds=WEEK), clock=clock or _Clock(1_000_000))


class TestTokenIssuer:
    def test_roundtrip_returns_user_id(self):
        issuer = _issuer()
        assert issuer.verify(issuer.issue("user-42")) == "user-42"

    def test_payload_has_only_user_id_and_expiry(self):
        token = _issuer().issue("user-42")
        payload = json.loads(urlsafe_b64decode(token.split(".")[0]))
        assert payload == {"user_id": "user-42", "exp": 1_000_000 + WEEK}

    def test_expired_token_rejected(self):
        clock = _Clock(1_000_000)
        issuer = _issuer(clock=clock)
        token = issuer.issue("user-42")

        clock.now += WEEK - 1
        assert issuer.verify(token) == "user-42"

        clock.now += 1
        with pytest.raises(InvalidToken, match="expired"):
            issuer.verify(token)

    def test_other_secret_rejected(self):
        token = _issuer(secret="one").issue("user-42")
        with pytest.raises(InvalidToken, match="signature"):
            _issuer(secret="two").verify(token)

    def test_tampered_payload_rejected(self):
        issuer = _issuer()
        body, sig = issuer.issue("user-42").split(".")
        forged = urlsafe_b64encode(
            json.dumps({"user_id": "admin", "exp": 9_999_999_999}).encode()
        ).decode()
        with pytest.raises(InvalidToken):
            issuer.verify(f"{forged}.{sig}")

    @pytest.mark.parametrize("token", ["", "no-dot", "!!!.abc", "abc.ééé"])
    def test_malformed_tokens_rejected(self, token):
        with pytest.raises(InvalidToken):
            _issuer().verify(token)

    def test_signed_but_malformed_payload_rejected(self):
        issuer = _issuer()
        raw = json.dumps(["not", "an", "object"]).encode()
        token = urlsafe_b64encode(raw).decode() + "." + issuer._sign(raw)
        with pytest.raises(InvalidToken, match="payload"):
            issuer.verify(token)

    def test_signed_payload_without_exp_rejected(self):
        issuer = _issuer()
        raw = json.dumps({"user_id": "user-42"}).encode()
        token = urlsafe_b64encode(raw).decode() + "." + issuer._sign(raw)
        with pytest.raises(InvalidToken, match="exp"):
            issuer.verify(token)


class TestTokenSettings:
    def test_from_settings(self):
        settings = Settings(_env_file=None, jwt_secret="abc", jwt_expiry_seconds=60)
        assert TokenSettings.from_settings(settings) == TokenSettings(secret="abc", lifetime_seconds=60)

    def test_default_secret_fallback(self, monkeypatch):
        monkeypatch.delenv("JWT_SECRET", raising=False)
        settings = Settings(_env_file=None)
        assert settings.jwt_secret == DEFAULT_JWT_SECRET
        assert settings.uses_default_secret
        assert settings.jwt_expiry_seconds == WEEK
