"""Tests for password hashing."""

import pytest

from fintrack.services.security import PasswordHasher


class TestPasswordHasher:
    """Tests for PasswordHasher."""

    def test_hash_is_not_plaintext(self, hasher):
        """Test that the stored form never contains the password."""
        stored = hasher.hash("password1")
        assert "password1" not in stored
        assert stored.startswith("pbkdf2_sha256$1000$")

    def test_verify_round_trip(self, hasher):
        """Test that the right password verifies and a wrong one does not."""
        stored = hasher.hash("password1")
        assert hasher.verify("password1", stored) is True
        assert hasher.verify("password2", stored) is False

    def test_salt_differs_per_hash(self, hasher):
        """Test that hashing the same password twice gives different hashes."""
        assert hasher.hash("password1") != hasher.hash("password1")

    def test_iterations_travel_with_hash(self):
        """Test that a hash made at one cost verifies under another."""
        stored = PasswordHasher(iterations=1000).hash("password1")
        assert PasswordHasher(iterations=2000).verify("password1", stored) is True

    @pytest.mark.parametrize("stored", [
        "",
        "not-a-hash",
        "md5$1000$abcd$abcd",
        "pbkdf2_sha256$zero$abcd$abcd",
        "pbkdf2_sha256$0$abcd$abcd",
        "pbkdf2_sha256$1000$zz$abcd",
        "pbkdf2_sha256$1000$$",
    ])
    def test_malformed_hash_never_verifies(self, hasher, stored):
        """Test that unparseable hashes are a plain mismatch."""
        assert hasher.verify("password1", stored) is False

    def test_rejects_non_positive_iterations(self):
        """Test that the cost must be positive."""
        with pytest.raises(ValueError):
            PasswordHasher(iterations=0)

    def test_default_iterations_from_settings(self):
        """Test that the configured cost is used by default."""
        assert PasswordHasher().iterations >= 1000
