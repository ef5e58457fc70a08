"""
Authentication module data models.

Wire payloads use the backend's camelCase names; the models expose snake_case
attributes and keep the camelCase names as aliases so a dump with
``by_alias=True`` reproduces exactly what the backend sent.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from shared.forms import check_email, check_min_length
from shared.formatting import (
    clean_phone_number,
    format_phone_number,
    is_valid_referral_code,
    normalize_referral_code,
    validate_phone_number,
)


class User(BaseModel):
    """Identity record owned by the backend and cached for the session."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., alias="_id", description="User ID")
    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    email: str = Field(..., description="Email address")
    phone: Optional[str] = Field(None, description="Phone number in 0XXXXXXXXXX form")
    is_active: bool = Field(default=True, alias="isActive")
    is_email_verified: bool = Field(default=False, alias="isEmailVerified")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def initials(self) -> str:
        return f"{self.first_name[:1]}{self.last_name[:1]}".upper()


class LoginResponse(BaseModel):
    """Payload of a successful login or OTP verification."""

    user: User
    token: str


@dataclass(frozen=True)
class AuthState:
    """
    Immutable snapshot of the session.

    Readers always receive a snapshot; the store replaces it wholesale on
    every change so a reader never sees a user without its token.
    """

    user: Optional[User] = None
    token: Optional[str] = None
    is_authenticated: bool = False
    is_auth_loading: bool = True


class PendingRegistration(BaseModel):
    """
    Registration details kept between the register and verify-OTP steps.

    The email is deliberately absent: the OTP step takes it from the URL.
    """

    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    password: str
    referral_code: Optional[str] = Field(None, alias="referralCode")
    saved_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        alias="savedAt",
    )
    last_resend_at: Optional[datetime] = Field(None, alias="lastResendAt")


# ----------------------------------------------------------------------------
# Forms
# ----------------------------------------------------------------------------


class RegisterForm(BaseModel):
    first_name: str
    last_name: str
    email: str
    password: str
    referral_code: Optional[str] = None

    @field_validator("first_name")
    @classmethod
    def _first_name(cls, v: str) -> str:
        return check_min_length(v.strip(), 2, "First name must be at least 2 characters")

    @field_validator("last_name")
    @classmethod
    def _last_name(cls, v: str) -> str:
        return check_min_length(v.strip(), 2, "Last name must be at least 2 characters")

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return check_email(v.strip())

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        return check_min_length(v, 6, "Password must be at least 6 characters")

    @field_validator("referral_code", mode="before")
    @classmethod
    def _referral_code(cls, v: Optional[str]) -> Optional[str]:
        code = normalize_referral_code(v)
        if code is not None and not is_valid_referral_code(code):
            raise ValueError("Referral code must be 6 alphanumeric characters")
        return code


class VerifyOtpForm(BaseModel):
    otp: str
    phone: str

    @field_validator("otp")
    @classmethod
    def _otp(cls, v: str) -> str:
        if len(v) != 6 or not v.isdigit():
            raise ValueError("Please enter the complete OTP")
        return v

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str) -> str:
        v = clean_phone_number(v)
        if not v:
            raise ValueError("Please enter your phone number")
        if not validate_phone_number(v):
            raise ValueError("Invalid phone number format")
        return format_phone_number(v)


class LoginForm(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return check_email(v.strip())

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        return check_min_length(v, 1, "Password is required")


class EmailForm(BaseModel):
    email: str

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return check_email(v.strip())


class ResetPasswordForm(BaseModel):
    new_password: str
    confirm_password: str

    @field_validator("new_password")
    @classmethod
    def _new_password(cls, v: str) -> str:
        return check_min_length(v, 6, "Password must be at least 6 characters")

    @field_validator("confirm_password")
    @classmethod
    def _passwords_match(cls, v: str, info: ValidationInfo) -> str:
        if "new_password" in info.data and v != info.data["new_password"]:
            raise ValueError("Passwords don't match")
        return v


class ChangePasswordForm(ResetPasswordForm):
    current_password: str

    @field_validator("current_password")
    @classmethod
    def _current_password(cls, v: str) -> str:
        return check_min_length(v, 1, "Current password is required")
