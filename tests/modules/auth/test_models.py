"""Tests for auth module models."""

import pytest

from modules.auth.models import (
    ChangePasswordForm,
    LoginResponse,
    RegisterForm,
    ResetPasswordForm,
    User,
    VerifyOtpForm,
)
from shared.exceptions import ValidationError
from shared.forms import validate_form


class TestUser:
    def test_parses_backend_payload(self, user_payload):
        """Should read the camelCase wire names."""
        user = User.model_validate(user_payload)
        assert user.id == "665f1c2e8b1d4a0012345678"
        assert user.first_name == "Jane"
        assert user.is_email_verified is True

    def test_dump_by_alias_round_trips_names(self, user_payload):
        dumped = User.model_validate(user_payload).model_dump(by_alias=True, mode="json")
        assert dumped["_id"] == user_payload["_id"]
        assert dumped["firstName"] == "Jane"

    def test_full_name_and_initials(self, user):
        assert user.full_name == "Jane Doe"
        assert user.initials == "JD"

    def test_ignores_unknown_fields(self, user_payload):
        user = User.model_validate({**user_payload, "walletId": "w-1"})
        assert not hasattr(user, "walletId")

    def test_login_response(self, user_payload):
        response = LoginResponse.model_validate({"user": user_payload, "token": "tok"})
        assert response.user.email == "jane@x.com"


class TestRegisterForm:
    def valid(self, **overrides):
        data = {
            "first_name": "Jane",
            "last_name": "Doe",
            "email": "jane@x.com",
            "password": "secret1",
        }
        data.update(overrides)
        return data

    def test_valid(self):
        form = validate_form(RegisterForm, self.valid())
        assert form.referral_code is None

    def test_referral_code_normalised(self):
        """Referral codes are trimmed and uppercased."""
        form = validate_form(RegisterForm, self.valid(referral_code=" abc123 "))
        assert form.referral_code == "ABC123"

    def test_blank_referral_code_is_none(self):
        form = validate_form(RegisterForm, self.valid(referral_code="  "))
        assert form.referral_code is None

    @pytest.mark.parametrize(
        "field, value, message",
        [
            ("first_name", "J", "First name must be at least 2 characters"),
            ("last_name", "D", "Last name must be at least 2 characters"),
            ("email", "jane", "Invalid email address"),
            ("password", "12345", "Password must be at least 6 characters"),
            ("referral_code", "ABC12", "Referral code must be 6 alphanumeric characters"),
        ],
    )
    def test_field_messages(self, field, value, message):
        with pytest.raises(ValidationError) as exc_info:
            validate_form(RegisterForm, self.valid(**{field: value}))
        assert exc_info.value.fields[field] == message


class TestVerifyOtpForm:
    def test_normalises_phone(self):
        form = validate_form(VerifyOtpForm, {"otp": "123456", "phone": "+2348012345678"})
        assert form.phone == "08012345678"

    @pytest.mark.parametrize("phone", ["2348012345678", "0801 234 5678", "+234 801-234-5678"])
    def test_accepts_typed_variants(self, phone):
        """Spaces, dashes and a bare 234 prefix are tidied before the check."""
        form = validate_form(VerifyOtpForm, {"otp": "123456", "phone": phone})
        assert form.phone == "08012345678"

    def test_incomplete_otp(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_form(VerifyOtpForm, {"otp": "12345", "phone": "08012345678"})
        assert exc_info.value.fields["otp"] == "Please enter the complete OTP"

    def test_missing_phone(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_form(VerifyOtpForm, {"otp": "123456", "phone": "  "})
        assert exc_info.value.fields["phone"] == "Please enter your phone number"

    def test_invalid_phone(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_form(VerifyOtpForm, {"otp": "123456", "phone": "07999999999"})
        assert exc_info.value.fields["phone"] == "Invalid phone number format"


class TestPasswordForms:
    def test_mismatch(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_form(ResetPasswordForm, {"new_password": "secret1", "confirm_password": "secret2"})
        assert exc_info.value.fields["confirm_password"] == "Passwords don't match"

    def test_change_password_requires_current(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_form(
                ChangePasswordForm,
                {"current_password": "", "new_password": "secret1", "confirm_password": "secret1"},
            )
        assert exc_info.value.fields["current_password"] == "Current password is required"
