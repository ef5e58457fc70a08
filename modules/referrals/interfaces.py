"""
Referral module interface.
"""

from typing import Protocol, runtime_checkable

from shared.models import ApiResponse

from .models import ReferralCode, ReferralStats


@runtime_checkable
class IReferralService(Protocol):
    """Backend referral endpoints."""

    async def get_referral_code(self) -> ApiResponse[ReferralCode]:
        """The signed-in user's own referral code."""
        ...

    async def get_referral_stats(self) -> ApiResponse[ReferralStats]:
        """Referral count and total rewards earned."""
        ...
