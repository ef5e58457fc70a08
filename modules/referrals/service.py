"""
Referral service implementation.
"""

from shared.http import ApiClient
from shared.models import ApiResponse

from .interfaces import IReferralService
from .models import ReferralCode, ReferralStats


class ReferralService(IReferralService):
    def __init__(self, api: ApiClient):
        self._api = api

    async def get_referral_code(self) -> ApiResponse[ReferralCode]:
        return await self._api.get("/referrals/code", model=ReferralCode)

    async def get_referral_stats(self) -> ApiResponse[ReferralStats]:
        return await self._api.get("/referrals/stats", model=ReferralStats)
