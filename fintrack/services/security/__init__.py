"""Security services package."""

from fintrack.services.security.passwords import PasswordHasher

__all__ = ["PasswordHasher"]
