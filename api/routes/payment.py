"""
Payment landing endpoints.

The gateway sends the browser back here after a wallet top-up, with the
payment reference in the query string.
"""

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from modules.auth.models import User
from modules.wallet.flows import PaymentVerificationFlow
from modules.wallet.interfaces import IWalletService
from shared.formatting import format_currency
from shared.navigation import Navigator

from ..dependencies import get_navigator_dependency, get_wallet_service
from ..middleware.session import require_session

router = APIRouter()

FAILURE_REASONS = [
    "Insufficient funds in your account",
    "Incorrect card details",
    "Network connectivity issues",
    "Card declined by your bank",
]


class PaymentResultResponse(BaseModel):
    """Outcome of a payment verification."""

    status: str
    reference: Optional[str] = None
    amount: Optional[Decimal] = None
    amount_display: Optional[str] = None
    new_balance: Optional[Decimal] = None
    new_balance_display: Optional[str] = None
    error: Optional[str] = None


class PaymentFailedResponse(BaseModel):
    status: str = "failed"
    message: str
    reasons: list[str]


@router.get("/success", response_model=PaymentResultResponse)
async def payment_success(
    request: Request,
    user: User = Depends(require_session),
    wallet: IWalletService = Depends(get_wallet_service),
    navigator: Navigator = Depends(get_navigator_dependency),
) -> PaymentResultResponse:
    """
    Verify the payment named by ``reference`` (or ``trxref``).

    Requires a session. The result is final; reload to check again.
    """
    flow = PaymentVerificationFlow(wallet, navigator)
    step = await flow.run(dict(request.query_params))
    return PaymentResultResponse(
        status=step.value,
        reference=flow.reference,
        amount=flow.amount,
        amount_display=format_currency(flow.amount) if flow.amount is not None else None,
        new_balance=flow.new_balance,
        new_balance_display=(
            format_currency(flow.new_balance) if flow.new_balance is not None else None
        ),
        error=flow.error or None,
    )


@router.get("/failed", response_model=PaymentFailedResponse)
async def payment_failed(user: User = Depends(require_session)) -> PaymentFailedResponse:
    """Static guidance for payments the gateway reports as failed."""
    return PaymentFailedResponse(
        message="Your payment could not be processed. Please try again.",
        reasons=FAILURE_REASONS,
    )
