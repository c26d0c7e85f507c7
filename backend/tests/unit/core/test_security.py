"""Unit tests for password hashing and the password policy."""

from __future__ import annotations

import pytest
from evcharging.core.security import (
    PasswordHasher,
    password_hasher,
    password_policy_errors,
)
from tests.helpers.utils import not_raises


class TestPasswordHasher:
    def test_hash_is_salted_and_verifiable(self):
        first = password_hasher.hash("Abc12345!")
        second = password_hasher.hash("Abc12345!")

        assert first != second
        assert "Abc12345!" not in first
        assert password_hasher.verify("Abc12345!", first)
        assert password_hasher.verify("Abc12345!", second)

    def test_wrong_password_does_not_verify(self):
        hashed = password_hasher.hash("Abc12345!")
        assert not password_hasher.verify("abc12345!", hashed)

    @pytest.mark.parametrize("stored", [None, "", "not-a-hash", "pbkdf2:sha256$broken"])
    def test_missing_or_malformed_hash_verifies_false(self, stored):
        with not_raises(Exception):
            assert password_hasher.verify("Abc12345!", stored) is False

    def test_empty_password_is_rejected(self):
        with pytest.raises(ValueError):
            password_hasher.hash("")

    def test_explicit_method_is_embedded_in_hash(self):
        hasher = PasswordHasher(method="pbkdf2:sha256:1000")
        hashed = hasher.hash("Abc12345!")
        assert hashed.startswith("pbkdf2:sha256:1000$")
        assert hasher.verify("Abc12345!", hashed)


class TestPasswordPolicy:
    def test_strong_password_has_no_errors(self):
        assert password_policy_errors("Abc12345!") == []

    @pytest.mark.parametrize(
        "password, missing",
        [
            ("Ab1!", "at least 8 characters"),
            ("abc12345!", "uppercase"),
            ("ABC12345!", "lowercase"),
            ("Abcdefgh!", "number"),
            ("Abc123456", "special character"),
        ],
    )
    def test_each_rule_is_reported(self, password, missing):
        errors = password_policy_errors(password)
        assert len(errors) == 1
        assert missing in errors[0]
