"""Tests for the ID token dependency."""

import pytest
from fastapi import HTTPException

from core import security


def raise_value_error(token):
    raise ValueError("The default Firebase app does not exist.")


class TestGetCurrentUser:
    def test_returns_claims(self, monkeypatch):
        monkeypatch.setattr(security.auth, "verify_id_token", lambda token: {"uid": "camper-1"})
        assert security.get_current_user("token")["uid"] == "camper-1"

    def test_claims_without_uid_are_rejected(self, monkeypatch):
        monkeypatch.setattr(security.auth, "verify_id_token", lambda token: {"email": "a@b.c"})
        with pytest.raises(HTTPException) as excinfo:
            security.get_current_user("token")
        assert excinfo.value.status_code == 401

    def test_uninitialized_firebase_is_503(self, monkeypatch):
        monkeypatch.setattr(security.auth, "verify_id_token", raise_value_error)
        with pytest.raises(HTTPException) as excinfo:
            security.get_current_user("token")
        assert excinfo.value.status_code == 503
