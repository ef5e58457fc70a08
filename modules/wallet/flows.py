"""
Wallet flows.

- WalletFundingFlow: amount -> initialize payment -> gateway redirect
- PaymentVerificationFlow: gateway landing -> verify -> success | failed
- WalletOverview: balance and recent transactions
- DashboardView: greeting and balance
"""

import asyncio
import logging
from decimal import Decimal
from enum import Enum
from typing import Mapping, Optional

from shared.adapters import extract_minor_amount, payment_reference_from_query
from shared.exceptions import RechargeError, error_message
from shared.flow import Flow
from shared.fsm import StateMachine
from shared.navigation import DASHBOARD, WALLET, Navigator

from .interfaces import IWalletService
from .models import FundWalletForm, Transaction, WalletBalance

logger = logging.getLogger(__name__)

RECENT_TRANSACTIONS_LIMIT = 20

NO_REFERENCE = "No payment reference found"
VERIFICATION_FAILED = "Payment verification failed"
VERIFICATION_UNREACHABLE = (
    "Failed to verify payment. Please check your wallet balance or contact support."
)

ALL_CATEGORIES = "all"


# ----------------------------------------------------------------------------
# Funding
# ----------------------------------------------------------------------------


class FundingStep(str, Enum):
    COLLECTING = "collecting"
    REDIRECTED = "redirected"


class WalletFundingFlow(Flow[FundingStep]):
    """
    Fund the wallet through the hosted gateway page.

    The flow ends by leaving the application; the result comes back later
    on the payment landing route.
    """

    def __init__(self, service: IWalletService, navigator: Navigator, email: str = ""):
        super().__init__(
            StateMachine(
                "wallet-funding",
                FundingStep.COLLECTING,
                {FundingStep.COLLECTING: {FundingStep.REDIRECTED}},
            )
        )
        self._service = service
        self._navigator = navigator
        self.email = email
        self.authorization_url: Optional[str] = None
        self.reference: Optional[str] = None

    async def submit(self, amount: Decimal, email: Optional[str] = None) -> bool:
        form = self._validate(
            FundWalletForm,
            {"email": email if email is not None else self.email, "amount": amount},
        )
        if form is None:
            return False
        response = await self._call(
            self._service.initialize_payment(form.email, form.amount),
            "Failed to initialize payment",
        )
        if response is None or response.data is None:
            return False

        self.authorization_url = response.data.authorization_url
        self.reference = response.data.reference
        logger.info(f"Payment {self.reference} initialised for {form.amount}")
        self._machine.move(FundingStep.REDIRECTED)
        self._navigator.redirect_external(self.authorization_url)
        return True


# ----------------------------------------------------------------------------
# Verification
# ----------------------------------------------------------------------------


class VerificationStep(str, Enum):
    VERIFYING = "verifying"
    SUCCESS = "success"
    FAILED = "failed"


VERIFICATION_TRANSITIONS = {
    VerificationStep.VERIFYING: {VerificationStep.SUCCESS, VerificationStep.FAILED},
    VerificationStep.SUCCESS: set(),
    VerificationStep.FAILED: set(),
}


class PaymentVerificationFlow(Flow[VerificationStep]):
    """
    Payment landing page.

    Verifies the reference the gateway appended to the return URL. On
    success the credited amount and a freshly fetched balance are shown; a
    failed balance fetch leaves ``new_balance`` empty without failing the
    page. Nothing is retried.
    """

    def __init__(self, service: IWalletService, navigator: Optional[Navigator] = None):
        super().__init__(
            StateMachine("payment-verification", VerificationStep.VERIFYING, VERIFICATION_TRANSITIONS)
        )
        self._service = service
        self._navigator = navigator
        self.reference: Optional[str] = None
        self.amount: Optional[Decimal] = None
        self.new_balance: Optional[Decimal] = None

    async def run(self, query: Mapping[str, str]) -> VerificationStep:
        """Verify the payment named in the landing URL's query."""
        self.reference = payment_reference_from_query(query)
        if not self.reference:
            return self._fail(NO_REFERENCE)

        self.is_loading = True
        try:
            response = await self._service.verify_payment(self.reference)
        except RechargeError as e:
            return self._fail(error_message(e, VERIFICATION_UNREACHABLE))
        finally:
            self.is_loading = False

        if not response.success:
            return self._fail(response.message or VERIFICATION_FAILED)

        self.amount = extract_minor_amount(response.data)
        self.new_balance = await self._fetch_balance()
        logger.info(f"Payment {self.reference} verified")
        self._machine.move(VerificationStep.SUCCESS)
        return VerificationStep.SUCCESS

    async def _fetch_balance(self) -> Optional[Decimal]:
        try:
            response = await self._service.get_balance()
        except RechargeError as e:
            logger.warning(f"Balance refresh after payment failed: {e.message}")
            return None
        if not response.success or response.data is None:
            logger.warning("Balance refresh after payment returned no balance")
            return None
        return response.data.balance

    def _fail(self, message: str) -> VerificationStep:
        self.error = message
        self._machine.move(VerificationStep.FAILED)
        return VerificationStep.FAILED

    def go_to_wallet(self) -> None:
        if self._navigator is not None:
            self._navigator.push(WALLET)

    def go_to_dashboard(self) -> None:
        if self._navigator is not None:
            self._navigator.push(DASHBOARD)


# ----------------------------------------------------------------------------
# Overview pages
# ----------------------------------------------------------------------------


class ViewStep(str, Enum):
    LOADING = "loading"
    READY = "ready"


def _view_machine(name: str) -> StateMachine[ViewStep]:
    return StateMachine(
        name,
        ViewStep.LOADING,
        {ViewStep.LOADING: {ViewStep.READY}, ViewStep.READY: {ViewStep.LOADING}},
    )


class WalletOverview(Flow[ViewStep]):
    """Wallet page: balance, recent transactions and a category filter."""

    def __init__(self, service: IWalletService):
        super().__init__(_view_machine("wallet-overview"))
        self._service = service
        self.balance: Optional[WalletBalance] = None
        self.transactions: list[Transaction] = []
        self.category = ALL_CATEGORIES

    async def load(self) -> bool:
        """Fetch balance and the latest transactions concurrently."""
        if self._machine.state is ViewStep.READY:
            self._machine.move(ViewStep.LOADING)
        self._clear_errors()
        self.is_loading = True
        try:
            balance, transactions = await asyncio.gather(
                self._service.get_balance(),
                self._service.get_transactions(limit=RECENT_TRANSACTIONS_LIMIT),
            )
        except RechargeError as e:
            logger.warning(f"Failed to fetch wallet data: {e.message}")
            self.error = error_message(e, "Failed to fetch wallet data")
            return False
        finally:
            self.is_loading = False
            self._machine.move(ViewStep.READY)

        if balance.success and balance.data is not None:
            self.balance = balance.data
        if transactions.success and transactions.data is not None:
            self.transactions = list(transactions.data)
        return True

    def filter(self, category: str) -> list[Transaction]:
        self.category = category
        return self.visible_transactions

    @property
    def visible_transactions(self) -> list[Transaction]:
        if self.category == ALL_CATEGORIES:
            return list(self.transactions)
        return [t for t in self.transactions if t.category == self.category]

    @property
    def categories(self) -> list[str]:
        """Categories present in the loaded history, in first-seen order."""
        return list(dict.fromkeys(t.category for t in self.transactions))


class DashboardView(Flow[ViewStep]):
    """Dashboard: greeting plus balance. A failed fetch leaves the balance at 0."""

    def __init__(self, service: IWalletService):
        super().__init__(_view_machine("dashboard"))
        self._service = service
        self.balance = Decimal(0)
        self.currency = "NGN"

    async def load(self) -> Decimal:
        if self._machine.state is ViewStep.READY:
            self._machine.move(ViewStep.LOADING)
        self.is_loading = True
        try:
            response = await self._service.get_balance()
            if response.success and response.data is not None:
                self.balance = response.data.balance
                self.currency = response.data.currency
        except RechargeError as e:
            logger.warning(f"Failed to fetch balance: {e.message}")
        finally:
            self.is_loading = False
            self._machine.move(ViewStep.READY)
        return self.balance
