from __future__ import annotations

import hmac

from django.conf import settings
from django.contrib.auth.hashers import check_password, make_password
from django.utils.module_loading import import_string


class BaseCredentialVerifier:
    """
    Interface for team password storage and checks.
      - encode(raw): value stored in Team.password
      - verify(raw, stored): True when raw matches the stored value
    """

    def encode(self, raw: str) -> str:
        raise NotImplementedError

    def verify(self, raw: str, stored: str) -> bool:
        raise NotImplementedError


class PlaintextVerifier(BaseCredentialVerifier):
    """
    Stores the password as typed and compares for exact equality.
    Kept for compatibility with existing team records; this is a known
    security gap. Set TEAM_PASSWORD_HASHING=1 to switch to HashedVerifier.
    """

    def encode(self, raw: str) -> str:
        return raw

    def verify(self, raw: str, stored: str) -> bool:
        return hmac.compare_digest((raw or "").encode("utf-8"), (stored or "").encode("utf-8"))


class HashedVerifier(BaseCredentialVerifier):
    """Django password hashers (PBKDF2 by default)."""

    def encode(self, raw: str) -> str:
        return make_password(raw)

    def verify(self, raw: str, stored: str) -> bool:
        return check_password(raw, stored)


def get_verifier() -> BaseCredentialVerifier:
    return import_string(settings.TEAM_CREDENTIAL_VERIFIER)()
