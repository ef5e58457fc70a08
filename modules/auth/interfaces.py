"""
Authentication module interface.

Flows depend on IAuthService, not the concrete implementation, so tests can
drive them with an AsyncMock.
"""

from typing import Any, Optional, Protocol, runtime_checkable

from shared.models import ApiResponse

from .models import LoginResponse, User


@runtime_checkable
class IAuthService(Protocol):
    """Backend user/auth endpoints."""

    async def register(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        referral_code: Optional[str] = None,
    ) -> ApiResponse[Any]:
        """Start a registration; the backend emails an OTP."""
        ...

    async def verify_otp(
        self,
        email: str,
        otp: str,
        first_name: str,
        last_name: str,
        password: str,
        phone: str,
        referral_code: Optional[str] = None,
    ) -> ApiResponse[LoginResponse]:
        """Complete a registration. Success creates the user and a session."""
        ...

    async def resend_otp(
        self,
        email: str,
        first_name: str,
        last_name: str,
        password: str,
        referral_code: Optional[str] = None,
    ) -> ApiResponse[Any]:
        ...

    async def login(self, email: str, password: str) -> ApiResponse[LoginResponse]:
        ...

    async def get_profile(self) -> ApiResponse[User]:
        ...

    async def forgot_password(self, email: str) -> ApiResponse[Any]:
        ...

    async def reset_password(self, email: str, otp: str, new_password: str) -> ApiResponse[Any]:
        ...

    async def change_password(
        self,
        current_password: str,
        new_password: str,
    ) -> ApiResponse[Any]:
        ...
