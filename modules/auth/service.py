"""
Authentication service implementation.

Maps each user/auth operation onto its backend endpoint.
"""

from typing import Any, Optional

from shared.http import ApiClient
from shared.models import ApiResponse

from .interfaces import IAuthService
from .models import LoginResponse, User


class AuthService(IAuthService):
    """Backend user endpoints under ``/users``."""

    def __init__(self, api: ApiClient):
        self._api = api

    async def register(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        referral_code: Optional[str] = None,
    ) -> ApiResponse[Any]:
        payload = {
            "firstName": first_name,
            "lastName": last_name,
            "email": email,
            "password": password,
        }
        if referral_code:
            payload["referralCode"] = referral_code
        return await self._api.post("/users/register", json=payload)

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
        payload = {
            "email": email,
            "otp": otp,
            "firstName": first_name,
            "lastName": last_name,
            "password": password,
            "phone": phone,
        }
        if referral_code:
            payload["referralCode"] = referral_code
        return await self._api.post("/users/verify-otp", model=LoginResponse, json=payload)

    async def resend_otp(
        self,
        email: str,
        first_name: str,
        last_name: str,
        password: str,
        referral_code: Optional[str] = None,
    ) -> ApiResponse[Any]:
        payload = {
            "email": email,
            "firstName": first_name,
            "lastName": last_name,
            "password": password,
        }
        if referral_code:
            payload["referralCode"] = referral_code
        return await self._api.post("/users/resend-otp", json=payload)

    async def login(self, email: str, password: str) -> ApiResponse[LoginResponse]:
        return await self._api.post(
            "/users/login",
            model=LoginResponse,
            json={"email": email, "password": password},
        )

    async def get_profile(self) -> ApiResponse[User]:
        return await self._api.get("/users/profile", model=User)

    async def forgot_password(self, email: str) -> ApiResponse[Any]:
        return await self._api.post("/users/forgot-password", json={"email": email})

    async def reset_password(self, email: str, otp: str, new_password: str) -> ApiResponse[Any]:
        return await self._api.post(
            "/users/reset-password",
            json={"email": email, "otp": otp, "newPassword": new_password},
        )

    async def change_password(
        self,
        current_password: str,
        new_password: str,
    ) -> ApiResponse[Any]:
        return await self._api.post(
            "/users/change-password",
            json={"currentPassword": current_password, "newPassword": new_password},
        )

    async def check_health(self) -> ApiResponse[Any]:
        """Backend liveness probe."""
        return await self._api.get("/health")
