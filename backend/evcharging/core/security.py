"""Password hashing and password-strength policy."""

from __future__ import annotations

import re
from typing import Final

from werkzeug.security import check_password_hash, generate_password_hash

PASSWORD_MIN_LENGTH: Final[int] = 8
PASSWORD_POLICY_MESSAGE: Final[str] = (
    "Password must contain at least 8 characters, one uppercase letter, "
    "one lowercase letter, one number, and one special character"
)

_UPPER = re.compile(r"[A-Z]")
_LOWER = re.compile(r"[a-z]")
_DIGIT = re.compile(r"\d")
_SPECIAL = re.compile(r"[^A-Za-z0-9]")


class PasswordHasher:
    """
    One-way, salted, adaptive password hashing.

    Backed by :func:`werkzeug.security.generate_password_hash`, which embeds
    the algorithm, cost parameters and a fresh random salt in every hash, so
    two calls with the same input never produce the same output.
    """

    def __init__(self, method: str | None = None) -> None:
        """
        :param method: Optional werkzeug method string (e.g. ``"scrypt"`` or
            ``"pbkdf2:sha256:600000"``). ``None`` keeps werkzeug's default.
        :type method: str | None
        """
        self.method = method

    def hash(self, plaintext: str) -> str:
        """
        Hash ``plaintext`` with a fresh salt.

        :param plaintext: Raw password.
        :type plaintext: str
        :returns: Self-describing hash string.
        :rtype: str
        :raises ValueError: If ``plaintext`` is empty or not a string.
        """
        if not isinstance(plaintext, str) or not plaintext:
            raise ValueError("Password must be a non-empty string.")
        if self.method:
            return generate_password_hash(plaintext, method=self.method)
        return generate_password_hash(plaintext)

    def verify(self, plaintext: str, hashed: str | None) -> bool:
        """
        Check ``plaintext`` against a stored hash.

        A missing or malformed stored hash verifies as ``False``.

        :param plaintext: Candidate password.
        :type plaintext: str
        :param hashed: Stored hash produced by :meth:`hash`.
        :type hashed: str | None
        :returns: ``True`` only when the password reproduces the hash.
        :rtype: bool
        """
        if not hashed or not isinstance(plaintext, str):
            return False
        try:
            return bool(check_password_hash(hashed, plaintext))
        except (ValueError, TypeError):
            return False


password_hasher = PasswordHasher()


def password_policy_errors(password: str) -> list[str]:
    """Return the list of unmet password rules (empty when the password is strong)."""
    errors: list[str] = []
    if len(password or "") < PASSWORD_MIN_LENGTH:
        errors.append(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
    if not _UPPER.search(password or ""):
        errors.append("Password must contain an uppercase letter")
    if not _LOWER.search(password or ""):
        errors.append("Password must contain a lowercase letter")
    if not _DIGIT.search(password or ""):
        errors.append("Password must contain a number")
    if not _SPECIAL.search(password or ""):
        errors.append("Password must contain a special character")
    return errors
