"""
Referrals module.

Public API:
- IReferralService / ReferralService: backend referral endpoints
- ReferralOverview: code, stats and share link
"""

from .interfaces import IReferralService
from .models import ReferralCode, ReferralStats
from .service import ReferralService
from .flows import SHARE_TITLE, ReferralOverview, ReferralStep

__all__ = [
    "IReferralService",
    "ReferralService",
    "ReferralCode",
    "ReferralStats",
    "ReferralOverview",
    "ReferralStep",
    "SHARE_TITLE",
]
