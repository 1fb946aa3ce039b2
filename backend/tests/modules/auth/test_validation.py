import pytest

from modules.auth.validation import (
    check_password_strength,
    is_valid_email,
    is_valid_rwanda_phone,
    normalize_rwanda_phone,
)


class TestEmail:
    @pytest.mark.parametrize("email", ["a@example.com", "first.last@sub.example.rw"])
    def test_valid(self, email):
        assert is_valid_email(email) is True

    @pytest.mark.parametrize("email", ["", "plain", "a@b", "a b@example.com", "@example.com"])
    def test_invalid(self, email):
        assert is_valid_email(email) is False


class TestRwandaPhone:
    @pytest.mark.parametrize(
        "phone",
        ["+250788123456", "250788123456", "0788123456", "788123456", "078 812 3456", "(078) 812-3456"],
    )
    def test_valid(self, phone):
        assert is_valid_rwanda_phone(phone) is True

    @pytest.mark.parametrize(
        "phone",
        ["", "12345", "+25078812345", "0688123456", "+1 555 123 4567", "07881234ab"],
    )
    def test_invalid(self, phone):
        assert is_valid_rwanda_phone(phone) is False

    @pytest.mark.parametrize(
        "phone",
        ["+250788123456", "250788123456", "0788123456", "788123456", "078 812 3456"],
    )
    def test_normalize(self, phone):
        assert normalize_rwanda_phone(phone) == "+250788123456"


class TestPasswordStrength:
    def test_strong(self):
        result = check_password_strength("Str0ng!Pass")
        assert result.is_valid is True
        assert result.strength == "strong"
        assert result.errors == []

    def test_medium(self):
        result = check_password_strength("Password1")
        assert result.is_valid is False
        assert result.strength == "medium"
        assert result.errors == ["Password must contain at least one special character"]

    def test_weak(self):
        result = check_password_strength("abc")
        assert result.strength == "weak"
        assert "Password must be at least 8 characters long" in result.errors
