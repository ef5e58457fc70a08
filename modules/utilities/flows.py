"""
Bill-payment flows.

- ElectricityFlow: verify meter -> purchase -> confirm -> token (10 s)
- DataPurchaseFlow: plans by network -> select -> confirm -> success (2 s)
- AirtimePurchaseFlow: network, phone, amount -> success (3 s)
- CablePurchaseFlow: plan, smartcard -> success (3 s)
- TransactionLookup: one transaction by reference

Every success screen resets itself once its display window has passed;
``poll`` (run by ``step``) applies the reset.
"""

import logging
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from modules.wallet.models import Transaction
from shared.adapters import extract_recharge_token, unwrap_payload
from shared.flow import Flow
from shared.formatting import generate_reference
from shared.fsm import Clock, Deadline, StateMachine

from .interfaces import IUtilitiesService
from .models import (
    CABLE_PLANS,
    DEFAULT_NETWORK,
    NETWORKS,
    AirtimeForm,
    CableForm,
    CablePlan,
    ConfirmDetail,
    DataPlan,
    DataPurchaseForm,
    ElectricityPurchaseForm,
    MeterForm,
    MeterInfo,
    PlanType,
    PurchaseConfirmation,
    find_cable_plan,
    parse_data_plans,
)
from .plans import DEFAULT_PLAN_ID, DEFAULT_PROVIDER, get_plan_id

logger = logging.getLogger(__name__)

ELECTRICITY_SUCCESS_SECONDS = 10
DATA_SUCCESS_SECONDS = 2
AIRTIME_SUCCESS_SECONDS = 3
CABLE_SUCCESS_SECONDS = 3

QUICK_AIRTIME_AMOUNTS = (100, 200, 500, 1000, 2000, 5000)


# ----------------------------------------------------------------------------
# Electricity
# ----------------------------------------------------------------------------


class ElectricityStep(str, Enum):
    VERIFY = "verify"
    PURCHASE = "purchase"
    CONFIRMING = "confirming"
    SUCCESS = "success"


ELECTRICITY_TRANSITIONS = {
    ElectricityStep.VERIFY: {ElectricityStep.PURCHASE},
    ElectricityStep.PURCHASE: {ElectricityStep.VERIFY, ElectricityStep.CONFIRMING},
    ElectricityStep.CONFIRMING: {ElectricityStep.PURCHASE, ElectricityStep.SUCCESS},
    ElectricityStep.SUCCESS: {ElectricityStep.VERIFY},
}


class ElectricityFlow(Flow[ElectricityStep]):
    """
    Prepaid/postpaid electricity purchase.

    The meter is verified first so the user can check whose meter it is.
    Wrong details are not refunded, so the charge is only issued from the
    confirmation step.
    """

    def __init__(
        self,
        service: IUtilitiesService,
        user_phone: Optional[str] = None,
        clock: Optional[Clock] = None,
    ):
        super().__init__(
            StateMachine("electricity", ElectricityStep.VERIFY, ELECTRICITY_TRANSITIONS),
            clock,
        )
        self._service = service
        self._default_phone = user_phone or ""
        self._reset_timer = Deadline(self._clock)
        self._clear_state()

    def _clear_state(self) -> None:
        self.provider = DEFAULT_PROVIDER
        self.plan_type = PlanType.PREPAID
        self.plan_id = DEFAULT_PLAN_ID
        self.meter_number = ""
        self.meter_info: Optional[MeterInfo] = None
        self.phone_number = self._default_phone
        self.amount: Optional[Decimal] = None
        self.confirmation: Optional[PurchaseConfirmation] = None
        self.token: Optional[str] = None

    def poll(self) -> None:
        if self._machine.state is ElectricityStep.SUCCESS and self._reset_timer.expired():
            self._reset_timer.cancel()
            self._clear_state()
            self._machine.move(ElectricityStep.VERIFY)

    async def verify_meter(
        self,
        meter_number: str,
        provider: str = DEFAULT_PROVIDER,
        plan_type: Union[PlanType, str] = PlanType.PREPAID,
    ) -> bool:
        if self.step is not ElectricityStep.VERIFY:
            return False
        form = self._validate(
            MeterForm,
            {"provider": provider, "plan_type": plan_type, "meter_number": meter_number},
        )
        if form is None:
            return False

        plan_id = get_plan_id(form.provider, form.plan_type)
        response = await self._call(
            self._service.verify_meter(plan_id, form.meter_number),
            "Failed to verify meter",
        )
        if response is None:
            return False

        details = unwrap_payload(response.data)
        self.meter_info = MeterInfo.model_validate(details if isinstance(details, Mapping) else {})
        self.provider = form.provider
        self.plan_type = form.plan_type
        self.plan_id = plan_id
        self.meter_number = form.meter_number
        self._machine.move(ElectricityStep.PURCHASE)
        return True

    def back(self) -> None:
        """Return to meter entry. The verified meter must be checked again."""
        if self._machine.state is ElectricityStep.PURCHASE:
            self.meter_info = None
            self._clear_errors()
            self._machine.move(ElectricityStep.VERIFY)

    def review(self, amount: Decimal, phone_number: Optional[str] = None) -> bool:
        """Validate the purchase form and open the confirmation step."""
        if self.step is not ElectricityStep.PURCHASE or self.meter_info is None:
            return False
        phone = phone_number if phone_number is not None else self.phone_number
        form = self._validate(ElectricityPurchaseForm, {"phone_number": phone, "amount": amount})
        if form is None:
            return False

        self.phone_number = form.phone_number
        self.amount = form.amount
        self.confirmation = PurchaseConfirmation(
            title="Confirm Electricity Purchase",
            details=[
                ConfirmDetail("Meter Number", self.meter_number),
                ConfirmDetail("Provider", self.provider),
                ConfirmDetail("Plan Type", self.plan_type.label),
                ConfirmDetail("Phone Number", self.phone_number),
            ],
            amount=form.amount,
        )
        self._machine.move(ElectricityStep.CONFIRMING)
        return True

    def cancel_confirmation(self) -> None:
        if self._machine.state is ElectricityStep.CONFIRMING:
            self.confirmation = None
            self._machine.move(ElectricityStep.PURCHASE)

    async def confirm(self) -> bool:
        """Issue the charge. Only reachable through ``review``."""
        if self.step is not ElectricityStep.CONFIRMING or self.meter_info is None:
            return False
        if self.amount is None:
            return False

        response = await self._call(
            self._service.purchase_electricity(
                phone_number=self.phone_number,
                plan_id=self.plan_id,
                amount=self.amount,
                meter_number=self.meter_number,
            ),
            "Failed to purchase electricity",
        )
        self.confirmation = None
        if response is None:
            self._machine.move(ElectricityStep.PURCHASE)
            return False

        self.token = extract_recharge_token(response.data)
        logger.info(f"Electricity purchased for meter {self.meter_number}")
        self._machine.move(ElectricityStep.SUCCESS)
        self._reset_timer.start(ELECTRICITY_SUCCESS_SECONDS)
        return True


# ----------------------------------------------------------------------------
# Data
# ----------------------------------------------------------------------------


class DataStep(str, Enum):
    BROWSING = "browsing"
    SELECTED = "selected"
    CONFIRMING = "confirming"
    SUCCESS = "success"


DATA_TRANSITIONS = {
    DataStep.BROWSING: {DataStep.SELECTED},
    DataStep.SELECTED: {DataStep.BROWSING, DataStep.CONFIRMING},
    DataStep.CONFIRMING: {DataStep.SELECTED, DataStep.SUCCESS},
    DataStep.SUCCESS: {DataStep.BROWSING},
}


class DataPurchaseFlow(Flow[DataStep]):
    """
    Data bundle purchase.

    Plan availability and pricing change on the provider side, so the list
    is marked stale after every purchase; ``refresh_if_stale`` reloads it
    once the success screen has closed.
    """

    def __init__(
        self,
        service: IUtilitiesService,
        user_phone: Optional[str] = None,
        clock: Optional[Clock] = None,
    ):
        super().__init__(
            StateMachine("data-purchase", DataStep.BROWSING, DATA_TRANSITIONS),
            clock,
        )
        self._service = service
        self._reset_timer = Deadline(self._clock)
        self.phone_number = user_phone or ""
        self.plans: dict[str, list[DataPlan]] = {}
        self.network = DEFAULT_NETWORK
        self.selected_plan: Optional[DataPlan] = None
        self.pending_phone = ""
        self.confirmation: Optional[PurchaseConfirmation] = None
        self.plans_stale = False

    def poll(self) -> None:
        if self._machine.state is DataStep.SUCCESS and self._reset_timer.expired():
            self._reset_timer.cancel()
            self.selected_plan = None
            self.plans_stale = True
            self._machine.move(DataStep.BROWSING)

    @property
    def visible_plans(self) -> list[DataPlan]:
        return self.plans.get(self.network, [])

    async def load_plans(self) -> bool:
        response = await self._call(self._service.get_data_plans(), "Failed to fetch data plans")
        if response is None:
            return False
        self.plans = parse_data_plans(response.data)
        self.plans_stale = False
        logger.debug(f"Loaded data plans for {sorted(self.plans)}")
        return True

    async def refresh_if_stale(self) -> bool:
        if self.step is DataStep.BROWSING and self.plans_stale:
            return await self.load_plans()
        return False

    def select_network(self, network: str) -> None:
        network = network.strip().upper()
        if network not in NETWORKS:
            raise ValueError(f"Unknown network: {network}")
        self.network = network

    def select_plan(self, plan: Union[DataPlan, int]) -> bool:
        if isinstance(plan, int):
            found = next((p for p in self.visible_plans if p.id == plan), None)
            if found is None:
                self.error = "Plan not found"
                return False
            plan = found
        if not plan.available:
            self.error = "This plan is currently unavailable"
            return False
        if self.step is not DataStep.BROWSING:
            return False
        self._clear_errors()
        self.selected_plan = plan
        self._machine.move(DataStep.SELECTED)
        return True

    def close(self) -> None:
        """Dismiss the plan dialog."""
        if self._machine.state is DataStep.SELECTED:
            self.selected_plan = None
            self.pending_phone = ""
            self._machine.move(DataStep.BROWSING)

    def review(self, phone_number: Optional[str] = None) -> bool:
        if self.step is not DataStep.SELECTED or self.selected_plan is None:
            return False
        phone = phone_number if phone_number is not None else self.phone_number
        form = self._validate(DataPurchaseForm, {"phone_number": phone})
        if form is None:
            return False

        self.pending_phone = form.phone_number
        self.confirmation = PurchaseConfirmation(
            title="Confirm Data Purchase",
            details=[
                ConfirmDetail("Plan", self.selected_plan.name),
                ConfirmDetail("Phone Number", self.pending_phone),
                ConfirmDetail("Network", self.network),
            ],
            amount=self.selected_plan.amount,
            confirm_label="Confirm & Purchase",
        )
        self._machine.move(DataStep.CONFIRMING)
        return True

    def cancel_confirmation(self) -> None:
        if self._machine.state is DataStep.CONFIRMING:
            self.confirmation = None
            self.pending_phone = ""
            self._machine.move(DataStep.SELECTED)

    async def confirm(self) -> bool:
        if self.step is not DataStep.CONFIRMING or self.selected_plan is None:
            return False
        response = await self._call(
            self._service.purchase_data(
                phone_number=self.pending_phone,
                plan_id=self.selected_plan.id,
                reference=generate_reference(),
                network=self.network,
            ),
            "Failed to purchase data",
        )
        self.confirmation = None
        if response is None:
            self._machine.move(DataStep.SELECTED)
            return False

        logger.info(f"Data plan {self.selected_plan.id} purchased on {self.network}")
        self.pending_phone = ""
        self._machine.move(DataStep.SUCCESS)
        self._reset_timer.start(DATA_SUCCESS_SECONDS)
        return True


# ----------------------------------------------------------------------------
# Airtime and cable
# ----------------------------------------------------------------------------


class PurchaseStep(str, Enum):
    FORM = "form"
    SUCCESS = "success"


PURCHASE_TRANSITIONS = {
    PurchaseStep.FORM: {PurchaseStep.SUCCESS},
    PurchaseStep.SUCCESS: {PurchaseStep.FORM},
}


class _SinglePageFlow(Flow[PurchaseStep]):
    """One form, one call, a success banner that clears itself."""

    success_seconds: float = 3

    def __init__(self, name: str, clock: Optional[Clock] = None):
        super().__init__(StateMachine(name, PurchaseStep.FORM, PURCHASE_TRANSITIONS), clock)
        self._reset_timer = Deadline(self._clock)

    def poll(self) -> None:
        if self._machine.state is PurchaseStep.SUCCESS and self._reset_timer.expired():
            self._reset_timer.cancel()
            self._machine.move(PurchaseStep.FORM)

    def _succeed(self) -> None:
        self._machine.move(PurchaseStep.SUCCESS)
        self._reset_timer.start(self.success_seconds)


class AirtimePurchaseFlow(_SinglePageFlow):
    success_seconds = AIRTIME_SUCCESS_SECONDS

    def __init__(
        self,
        service: IUtilitiesService,
        user_phone: Optional[str] = None,
        clock: Optional[Clock] = None,
    ):
        super().__init__("airtime-purchase", clock)
        self._service = service
        self._default_phone = user_phone or ""
        self.phone_number = self._default_phone
        self.network = DEFAULT_NETWORK
        self.amount: Optional[Decimal] = None

    def select_network(self, network: str) -> None:
        self.network = network.strip().upper()

    def select_quick_amount(self, amount: int) -> None:
        if amount not in QUICK_AIRTIME_AMOUNTS:
            raise ValueError(f"Not a quick amount: {amount}")
        self.amount = Decimal(amount)

    async def purchase(
        self,
        phone_number: Optional[str] = None,
        amount: Optional[Any] = None,
        network: Optional[str] = None,
    ) -> bool:
        if self.step is not PurchaseStep.FORM:
            return False
        form = self._validate(
            AirtimeForm,
            {
                "phone_number": phone_number if phone_number is not None else self.phone_number,
                "amount": amount if amount is not None else self.amount,
                "network": network or self.network,
            },
        )
        if form is None:
            return False

        response = await self._call(
            self._service.purchase_airtime(
                phone_number=form.phone_number,
                amount=form.amount,
                network=form.network,
                reference=generate_reference(),
            ),
            "Failed to purchase airtime",
        )
        if response is None:
            return False

        logger.info(f"Airtime of {form.amount} purchased on {form.network}")
        self.phone_number = self._default_phone
        self.network = DEFAULT_NETWORK
        self.amount = None
        self._succeed()
        return True


class CablePurchaseFlow(_SinglePageFlow):
    success_seconds = CABLE_SUCCESS_SECONDS

    def __init__(self, service: IUtilitiesService, clock: Optional[Clock] = None):
        super().__init__("cable-purchase", clock)
        self._service = service
        self.plans = CABLE_PLANS
        self.selected_plan: Optional[CablePlan] = None

    def select_plan(self, plan_id: int) -> bool:
        plan = find_cable_plan(plan_id)
        if plan is None:
            self.error = "Please select a plan"
            return False
        self.selected_plan = plan
        return True

    async def purchase(self, smartcard_number: str, plan_id: Optional[int] = None) -> bool:
        if self.step is not PurchaseStep.FORM:
            return False
        if plan_id is None:
            plan_id = self.selected_plan.id if self.selected_plan else 0
        form = self._validate(CableForm, {"smartcard_number": smartcard_number, "plan_id": plan_id})
        if form is None:
            return False

        response = await self._call(
            self._service.purchase_cable(form.smartcard_number, form.plan_id),
            "Failed to purchase cable subscription",
        )
        if response is None:
            return False

        logger.info(f"Cable plan {form.plan_id} purchased")
        self.selected_plan = None
        self._succeed()
        return True


# ----------------------------------------------------------------------------
# Transaction lookup
# ----------------------------------------------------------------------------


class LookupStep(str, Enum):
    SEARCHING = "searching"
    FOUND = "found"


class TransactionLookup(Flow[LookupStep]):
    """Find one wallet transaction by its reference, e.g. to re-read an electricity token."""

    def __init__(self, service: IUtilitiesService):
        super().__init__(
            StateMachine(
                "transaction-lookup",
                LookupStep.SEARCHING,
                {LookupStep.SEARCHING: {LookupStep.FOUND}, LookupStep.FOUND: {LookupStep.FOUND}},
            )
        )
        self._service = service
        self.transaction: Optional[Transaction] = None

    @property
    def token(self) -> Optional[str]:
        return self.transaction.token if self.transaction else None

    async def find(self, reference: str) -> bool:
        self._clear_errors()
        reference = reference.strip()
        if not reference:
            self.error = "Please enter a transaction reference"
            return False

        response = await self._call(
            self._service.get_transaction_by_reference(reference),
            "Transaction not found",
        )
        if response is None:
            return False
        try:
            transaction = Transaction.model_validate(unwrap_payload(response.data))
        except PydanticValidationError:
            logger.warning(f"Unexpected transaction record for {reference}")
            self.error = "Transaction not found"
            return False

        self.transaction = transaction
        self._machine.move(LookupStep.FOUND)
        return True
