"""
Command handlers for the terminal client.

Each handler drives one flow controller against the shared service
container and renders the result. Handlers return a process exit code.
"""

import argparse
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from rich.prompt import Confirm, Prompt

from api.dependencies import ServiceContainer
from modules.auth.flows import (
    ForgotPasswordFlow,
    ForgotPasswordStep,
    LoginFlow,
    ProfileFlow,
    RegistrationFlow,
)
from modules.auth.guard import SessionGuard
from modules.auth.models import User
from modules.referrals.flows import ReferralOverview
from modules.utilities.flows import (
    AirtimePurchaseFlow,
    CablePurchaseFlow,
    DataPurchaseFlow,
    ElectricityFlow,
    TransactionLookup,
)
from modules.utilities.models import CABLE_PLANS
from modules.wallet.flows import (
    DashboardView,
    PaymentVerificationFlow,
    VerificationStep,
    WalletFundingFlow,
    WalletOverview,
)
from shared.flow import Flow
from shared.formatting import format_currency
from shared.navigation import query_params

from .display import (
    console,
    print_error,
    print_field_errors,
    print_hint,
    print_success,
    render_balance,
    render_cable_plans,
    render_confirmation,
    render_data_plans,
    render_meter_info,
    render_referrals,
    render_token,
    render_transactions,
    render_user,
)

logger = logging.getLogger(__name__)


def _fail(flow: Flow) -> int:
    print_error(flow.error or "Something went wrong")
    if len(flow.field_errors) > 1:
        print_field_errors(flow.field_errors)
    return 1


def _ask(value: Optional[str], label: str, password: bool = False) -> str:
    if value is not None:
        return value
    return Prompt.ask(label, password=password, console=console)


def _amount(value: Any) -> Any:
    """Parse a CLI amount; unparseable text goes to form validation as-is."""
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return value


def _confirm(args: argparse.Namespace, question: str = "Proceed?") -> bool:
    if getattr(args, "yes", False):
        return True
    return Confirm.ask(question, console=console, default=False)


def require_user(container: ServiceContainer) -> Optional[User]:
    """Session guard for commands. Prints a hint when there is no session."""
    store = container.auth_store
    with SessionGuard(store, container.navigator) as guard:
        if guard.allowed and store.user is not None:
            return store.user
    print_error("You are not signed in.")
    print_hint("Run `rechargeearn login` first.")
    return None


# ----------------------------------------------------------------------------
# Account
# ----------------------------------------------------------------------------


async def register(container: ServiceContainer, args: argparse.Namespace) -> int:
    flow = RegistrationFlow(
        container.auth,
        container.auth_store,
        container.pending_registration,
        container.navigator,
    )
    if args.link:
        flow.prefill(query_params(args.link))
        if flow.referral_code:
            print_hint(f"Using referral code {flow.referral_code}")
    ok = await flow.submit_registration(
        first_name=_ask(args.first_name, "First name"),
        last_name=_ask(args.last_name, "Last name"),
        email=_ask(args.email, "Email"),
        password=_ask(args.password, "Password", password=True),
        referral_code=args.referral,
    )
    if not ok:
        return _fail(flow)
    print_success(f"Verification code sent to {flow.email}")
    print_hint(f"Next: rechargeearn verify-otp --email {flow.email} --phone <phone>")
    return 0


async def verify_otp(container: ServiceContainer, args: argparse.Namespace) -> int:
    flow = RegistrationFlow(
        container.auth,
        container.auth_store,
        container.pending_registration,
        container.navigator,
    )
    flow.open_otp_step(args.email)
    if flow.recovery_route is not None:
        print_error(flow.error)
        print_hint("Run `rechargeearn register` again.")
        return 1

    otp = _ask(args.otp, "Verification code")
    ok = await flow.verify(_ask(args.phone, "Phone number"), otp.strip())
    if not ok:
        return _fail(flow)
    user = container.auth_store.user
    print_success(f"Welcome, {user.first_name if user else flow.email}! Your account is ready.")
    return 0


async def resend_otp(container: ServiceContainer, args: argparse.Namespace) -> int:
    flow = RegistrationFlow(
        container.auth,
        container.auth_store,
        container.pending_registration,
        container.navigator,
    )
    flow.open_otp_step(args.email)
    if not await flow.resend():
        return _fail(flow)
    print_success(f"A new code was sent to {flow.email}")
    return 0


async def login(container: ServiceContainer, args: argparse.Namespace) -> int:
    flow = LoginFlow(container.auth, container.auth_store, container.navigator)
    if flow.redirect_if_authenticated():
        user = container.auth_store.user
        print_hint(f"Already signed in as {user.email if user else 'unknown user'}.")
        return 0
    ok = await flow.submit(_ask(args.email, "Email"), _ask(args.password, "Password", password=True))
    if not ok:
        return _fail(flow)
    user = container.auth_store.user
    print_success(f"Signed in as {user.email if user else args.email}")
    return 0


async def logout(container: ServiceContainer, args: argparse.Namespace) -> int:
    container.auth_store.logout()
    print_success("Signed out")
    return 0


async def profile(container: ServiceContainer, args: argparse.Namespace) -> int:
    if require_user(container) is None:
        return 1
    flow = ProfileFlow(container.auth, container.auth_store, container.storage)
    if not await flow.load():
        return _fail(flow)
    if flow.profile is not None:
        console.print(render_user(flow.profile))
    return 0


async def change_password(container: ServiceContainer, args: argparse.Namespace) -> int:
    if require_user(container) is None:
        return 1
    flow = ProfileFlow(container.auth, container.auth_store, container.storage)
    flow.open_change_password()
    ok = await flow.change_password(
        _ask(args.current_password, "Current password", password=True),
        _ask(args.new_password, "New password", password=True),
        _ask(args.confirm_password, "Confirm new password", password=True),
    )
    if not ok:
        return _fail(flow)
    print_success("Password changed")
    return 0


async def forgot_password(container: ServiceContainer, args: argparse.Namespace) -> int:
    flow = ForgotPasswordFlow(container.auth)
    if not await flow.submit_email(_ask(args.email, "Email")):
        return _fail(flow)
    print_success(f"Reset code sent to {flow.email}")
    return await _finish_reset(flow, args)


async def reset_password(container: ServiceContainer, args: argparse.Namespace) -> int:
    """Reset with a code from an earlier ``forgot-password``."""
    flow = ForgotPasswordFlow(container.auth)
    if not flow.resume(_ask(args.email, "Email")):
        return _fail(flow)
    return await _finish_reset(flow, args)


async def _finish_reset(flow: ForgotPasswordFlow, args: argparse.Namespace) -> int:
    flow.enter_otp(_ask(args.otp, "Reset code"))
    if flow.step is not ForgotPasswordStep.RESET and not flow.continue_to_reset():
        return _fail(flow)
    new_password = _ask(args.new_password, "New password", password=True)
    confirm_password = _ask(args.confirm_password, "Confirm new password", password=True)
    if not await flow.submit_reset(new_password, confirm_password):
        return _fail(flow)
    print_success("Password reset. You can now sign in with your new password.")
    return 0


# ----------------------------------------------------------------------------
# Wallet
# ----------------------------------------------------------------------------


async def dashboard(container: ServiceContainer, args: argparse.Namespace) -> int:
    user = require_user(container)
    if user is None:
        return 1
    view = DashboardView(container.wallet)
    await view.load()
    console.print(f"[bold]Welcome back, {user.first_name}![/bold]")
    console.print(render_balance(view.balance, view.currency))
    return 0


async def wallet(container: ServiceContainer, args: argparse.Namespace) -> int:
    if require_user(container) is None:
        return 1
    overview = WalletOverview(container.wallet)
    if not await overview.load():
        return _fail(overview)
    if overview.balance is not None:
        console.print(render_balance(overview.balance.balance, overview.balance.currency))
    transactions = overview.filter(args.category)
    if transactions:
        console.print(render_transactions(transactions))
    else:
        print_hint("No transactions yet.")
    return 0


async def fund(container: ServiceContainer, args: argparse.Namespace) -> int:
    user = require_user(container)
    if user is None:
        return 1
    flow = WalletFundingFlow(container.wallet, container.navigator, email=user.email)
    if not await flow.submit(_amount(args.amount), email=args.email):
        return _fail(flow)
    console.print(f"Complete your payment at: [link={flow.authorization_url}]{flow.authorization_url}[/link]")
    print_hint(f"Reference: {flow.reference}")
    print_hint(f"Afterwards: rechargeearn verify-payment --reference {flow.reference}")
    return 0


async def verify_payment(container: ServiceContainer, args: argparse.Namespace) -> int:
    if require_user(container) is None:
        return 1
    flow = PaymentVerificationFlow(container.wallet, container.navigator)
    query = {"reference": args.reference} if args.reference else {}
    step = await flow.run(query)
    if step is VerificationStep.FAILED:
        print_error(flow.error)
        print_hint("Check your wallet balance or contact support.")
        return 1
    print_success("Payment verified")
    if flow.amount is not None:
        console.print(f"Amount: [bold]{format_currency(flow.amount)}[/bold]")
    console.print(f"Reference: {flow.reference}")
    if flow.new_balance is not None:
        console.print(render_balance(flow.new_balance, title="New Balance"))
    return 0


# ----------------------------------------------------------------------------
# Utilities
# ----------------------------------------------------------------------------


async def data(container: ServiceContainer, args: argparse.Namespace) -> int:
    user = require_user(container)
    if user is None:
        return 1
    flow = DataPurchaseFlow(container.utilities, user_phone=user.phone)
    try:
        flow.select_network(args.network)
    except ValueError as e:
        print_error(str(e))
        return 1
    if not await flow.load_plans():
        return _fail(flow)

    if args.action == "plans":
        plans = flow.visible_plans
        if not plans:
            print_hint(f"No plans available for {flow.network}.")
        else:
            console.print(render_data_plans(flow.network, plans))
        return 0

    if args.plan is None:
        print_error("Choose a plan with --plan <id>")
        return 1
    if not flow.select_plan(args.plan):
        return _fail(flow)
    if not flow.review(args.phone):
        return _fail(flow)
    if flow.confirmation is not None:
        console.print(render_confirmation(flow.confirmation))
    if not _confirm(args):
        flow.cancel_confirmation()
        print_hint("Cancelled.")
        return 1
    if not await flow.confirm():
        return _fail(flow)
    print_success("Data purchase successful! Your data will be credited shortly.")
    return 0


async def airtime(container: ServiceContainer, args: argparse.Namespace) -> int:
    user = require_user(container)
    if user is None:
        return 1
    flow = AirtimePurchaseFlow(container.utilities, user_phone=user.phone)
    ok = await flow.purchase(
        phone_number=args.phone,
        amount=_amount(_ask(args.amount, "Amount")),
        network=args.network,
    )
    if not ok:
        return _fail(flow)
    print_success("Airtime purchase successful! Your airtime will be credited shortly.")
    return 0


async def electricity(container: ServiceContainer, args: argparse.Namespace) -> int:
    user = require_user(container)
    if user is None:
        return 1
    flow = ElectricityFlow(container.utilities, user_phone=user.phone)
    if not await flow.verify_meter(
        _ask(args.meter, "Meter number"),
        provider=args.provider,
        plan_type=args.plan_type,
    ):
        return _fail(flow)
    if flow.meter_info is not None:
        console.print(render_meter_info(flow.meter_info))

    if not flow.review(_amount(_ask(args.amount, "Amount")), phone_number=args.phone):
        return _fail(flow)
    if flow.confirmation is not None:
        console.print(render_confirmation(flow.confirmation))
    if not _confirm(args, "Confirm & Pay?"):
        flow.cancel_confirmation()
        print_hint("Cancelled.")
        return 1
    if not await flow.confirm():
        return _fail(flow)
    console.print(render_token(flow.token, flow.meter_number))
    return 0


async def transaction(container: ServiceContainer, args: argparse.Namespace) -> int:
    if require_user(container) is None:
        return 1
    lookup = TransactionLookup(container.utilities)
    if not await lookup.find(_ask(args.reference, "Transaction reference")):
        return _fail(lookup)
    console.print(render_transactions([lookup.transaction]))
    if lookup.token:
        print_success(f"Token: {lookup.token}")
    return 0


async def cable(container: ServiceContainer, args: argparse.Namespace) -> int:
    if require_user(container) is None:
        return 1
    flow = CablePurchaseFlow(container.utilities)
    if args.plan is None:
        console.print(render_cable_plans(CABLE_PLANS))
        return 0
    if not flow.select_plan(args.plan):
        return _fail(flow)
    if not await flow.purchase(_ask(args.smartcard, "Smartcard number")):
        return _fail(flow)
    print_success("Cable subscription successful!")
    return 0


# ----------------------------------------------------------------------------
# Referrals
# ----------------------------------------------------------------------------


async def referrals(container: ServiceContainer, args: argparse.Namespace) -> int:
    if require_user(container) is None:
        return 1
    overview = ReferralOverview(container.referrals, container.settings.frontend_url)
    if not await overview.load():
        return _fail(overview)
    console.print(
        render_referrals(
            overview.referral_code,
            overview.total_referrals,
            overview.total_rewards,
            overview.share_url,
        )
    )
    if overview.share_text:
        print_hint(overview.share_text)
    return 0


COMMANDS = {
    "register": register,
    "verify-otp": verify_otp,
    "resend-otp": resend_otp,
    "login": login,
    "logout": logout,
    "profile": profile,
    "change-password": change_password,
    "forgot-password": forgot_password,
    "reset-password": reset_password,
    "dashboard": dashboard,
    "wallet": wallet,
    "fund": fund,
    "verify-payment": verify_payment,
    "data": data,
    "airtime": airtime,
    "electricity": electricity,
    "cable": cable,
    "transaction": transaction,
    "referrals": referrals,
}
