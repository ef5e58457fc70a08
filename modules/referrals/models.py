"""
Referral module data models.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class ReferralCode(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    referral_code: str = Field(..., alias="referralCode")


class ReferralStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    referral_code: str = Field("", alias="referralCode")
    total_referrals: int = Field(0, alias="totalReferrals", description="Users who signed up with the code")
    total_rewards: Decimal = Field(Decimal(0), alias="totalRewards", description="Rewards earned, major units")
