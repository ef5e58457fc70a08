"""
Referral page.

Shows the user's code, a shareable registration link and what the code
has earned so far.
"""

import asyncio
import logging
from decimal import Decimal
from enum import Enum
from typing import Optional
from urllib.parse import urlencode

from shared.exceptions import RechargeError, error_message
from shared.flow import Flow
from shared.fsm import StateMachine
from shared.navigation import REGISTER

from .interfaces import IReferralService

logger = logging.getLogger(__name__)

SHARE_TITLE = "Join RechargeEarn"


class ReferralStep(str, Enum):
    LOADING = "loading"
    READY = "ready"


class ReferralOverview(Flow[ReferralStep]):
    """
    Referral code plus stats, fetched together.

    Args:
        service: Referral endpoints
        frontend_url: Origin the share link points at
    """

    def __init__(self, service: IReferralService, frontend_url: str):
        super().__init__(
            StateMachine(
                "referrals",
                ReferralStep.LOADING,
                {
                    ReferralStep.LOADING: {ReferralStep.READY},
                    ReferralStep.READY: {ReferralStep.LOADING},
                },
            )
        )
        self._service = service
        self._frontend_url = frontend_url.rstrip("/")
        self.referral_code: Optional[str] = None
        self.total_referrals = 0
        self.total_rewards = Decimal(0)

    async def load(self) -> bool:
        if self._machine.state is ReferralStep.READY:
            self._machine.move(ReferralStep.LOADING)
        self._clear_errors()
        self.is_loading = True
        try:
            code, stats = await asyncio.gather(
                self._service.get_referral_code(),
                self._service.get_referral_stats(),
            )
        except RechargeError as e:
            logger.warning(f"Failed to fetch referral data: {e.message}")
            self.error = error_message(e, "Failed to fetch referral data")
            return False
        finally:
            self.is_loading = False
            self._machine.move(ReferralStep.READY)

        if code.success and code.data is not None:
            self.referral_code = code.data.referral_code
        if stats.success and stats.data is not None:
            self.total_referrals = stats.data.total_referrals
            self.total_rewards = stats.data.total_rewards
        return True

    @property
    def share_url(self) -> Optional[str]:
        """Registration link that pre-fills the referral code."""
        if not self.referral_code:
            return None
        return f"{self._frontend_url}{REGISTER}?{urlencode({'ref': self.referral_code})}"

    @property
    def share_text(self) -> Optional[str]:
        if not self.referral_code:
            return None
        return f"Use my referral code {self.referral_code} to join RechargeEarn and earn rewards!"
