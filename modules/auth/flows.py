"""
Authentication flows.

- RegistrationFlow: register -> verify OTP (with phone) -> session
- ForgotPasswordFlow: email -> OTP -> new password -> done
- LoginFlow: credentials -> session
- ProfileFlow: refresh profile, change password
"""

import logging
from datetime import timedelta
from enum import Enum
from typing import Mapping, Optional

from shared.flow import Flow
from shared.formatting import normalize_referral_code
from shared.fsm import Clock, Deadline, StateMachine
from shared.navigation import DASHBOARD, REGISTER, VERIFY_OTP, Navigator
from shared.storage import TOKEN_KEY, KeyValueStore

from .interfaces import IAuthService
from .models import (
    ChangePasswordForm,
    EmailForm,
    LoginForm,
    PendingRegistration,
    RegisterForm,
    ResetPasswordForm,
    User,
    VerifyOtpForm,
)
from .otp_input import OtpInput
from .pending import PendingRegistrationStore
from .store import AuthStore

logger = logging.getLogger(__name__)

RESEND_COOLDOWN = timedelta(seconds=60)
PASSWORD_CHANGED_DISPLAY_SECONDS = 2

REGISTRATION_MISSING = "Registration data missing. Please register again."
INCOMPLETE_OTP = "Please enter the complete OTP"


# ----------------------------------------------------------------------------
# Registration
# ----------------------------------------------------------------------------


class RegistrationStep(str, Enum):
    COLLECTING_REGISTRATION = "collecting-registration"
    COLLECTING_OTP = "collecting-otp"
    DONE = "done"


REGISTRATION_TRANSITIONS = {
    RegistrationStep.COLLECTING_REGISTRATION: {RegistrationStep.COLLECTING_OTP},
    RegistrationStep.COLLECTING_OTP: {RegistrationStep.DONE},
    RegistrationStep.DONE: set(),
}


class RegistrationFlow(Flow[RegistrationStep]):
    """
    Registration with email OTP verification.

    The two steps live on different pages, so the flow can also be opened
    directly at the OTP step with ``open_otp_step`` using the email from the
    page URL. Verification needs both that email and the pending
    registration saved by the first step; without them no request is made
    and ``recovery_route`` points back to the registration page.
    """

    def __init__(
        self,
        service: IAuthService,
        store: AuthStore,
        pending: PendingRegistrationStore,
        navigator: Navigator,
        clock: Optional[Clock] = None,
    ):
        super().__init__(
            StateMachine(
                "registration",
                RegistrationStep.COLLECTING_REGISTRATION,
                REGISTRATION_TRANSITIONS,
            ),
            clock,
        )
        self._service = service
        self._store = store
        self._pending_store = pending
        self._navigator = navigator
        self.email = ""
        self.pending: Optional[PendingRegistration] = None
        self.otp_input = OtpInput()
        self.is_resending = False
        self.referral_code: Optional[str] = None

    @property
    def recovery_route(self) -> Optional[str]:
        """Where to send the user when the OTP step cannot complete."""
        if self._machine.state is RegistrationStep.COLLECTING_OTP and not self.can_verify:
            return REGISTER
        return None

    @property
    def can_verify(self) -> bool:
        return bool(self.email) and self.pending is not None

    @property
    def resend_available_in(self) -> int:
        """Seconds until another OTP may be requested (0 = now)."""
        return self._pending_store.resend_available_in(RESEND_COOLDOWN)

    def prefill(self, query: Mapping[str, str]) -> None:
        """Take the referral code from a shared `/register?ref=CODE` link."""
        code = normalize_referral_code(query.get("ref"))
        if code:
            self.referral_code = code

    async def submit_registration(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        referral_code: Optional[str] = None,
    ) -> bool:
        if referral_code is None:
            referral_code = self.referral_code
        form = self._validate(
            RegisterForm,
            {
                "first_name": first_name,
                "last_name": last_name,
                "email": email,
                "password": password,
                "referral_code": referral_code,
            },
        )
        if form is None:
            return False

        response = await self._call(
            self._service.register(
                first_name=form.first_name,
                last_name=form.last_name,
                email=form.email,
                password=form.password,
                referral_code=form.referral_code,
            ),
            "Registration failed. Please try again.",
        )
        if response is None:
            return False

        self._pending_store.save(
            PendingRegistration(
                first_name=form.first_name,
                last_name=form.last_name,
                password=form.password,
                referral_code=form.referral_code,
            )
        )
        self._machine.move(RegistrationStep.COLLECTING_OTP)
        self.open_otp_step(form.email)
        self._navigator.push(VERIFY_OTP, {"email": form.email})
        return True

    def open_otp_step(self, email: Optional[str]) -> None:
        """Enter the OTP step with the email taken from the page URL."""
        if self._machine.state is RegistrationStep.COLLECTING_REGISTRATION:
            self._machine.move(RegistrationStep.COLLECTING_OTP)
        self.email = (email or "").strip()
        self.pending = self._pending_store.load()
        self.otp_input.clear()
        if not self.can_verify:
            self.error = REGISTRATION_MISSING

    async def verify(self, phone: str, otp: Optional[str] = None) -> bool:
        """Submit OTP + phone together with the pending registration."""
        if not self.can_verify or self.pending is None:
            self._clear_errors()
            self.error = REGISTRATION_MISSING
            return False

        code = otp if otp is not None else self.otp_input.value
        if len(code) != 6:
            self._clear_errors()
            self.error = INCOMPLETE_OTP
            return False

        form = self._validate(VerifyOtpForm, {"otp": code, "phone": phone})
        if form is None:
            return False

        pending = self.pending
        response = await self._call(
            self._service.verify_otp(
                email=self.email,
                otp=form.otp,
                first_name=pending.first_name,
                last_name=pending.last_name,
                password=pending.password,
                phone=form.phone,
                referral_code=pending.referral_code,
            ),
            "Invalid or expired OTP. Please try again.",
        )
        if response is None:
            return False
        if response.data is None:
            self.error = "Invalid or expired OTP. Please try again."
            return False

        self._pending_store.clear()
        self.pending = None
        self._store.set_auth(response.data.user, response.data.token)
        self._machine.move(RegistrationStep.DONE)
        self._navigator.push(DASHBOARD)
        return True

    async def resend(self) -> bool:
        """Request a new OTP. Advisory 60 s cooldown, kept with the pending registration."""
        if not self.can_verify or self.pending is None:
            self._clear_errors()
            self.error = REGISTRATION_MISSING
            return False
        if self.resend_available_in > 0:
            self.error = f"Please wait {self.resend_available_in}s before requesting a new code"
            return False

        self.is_resending = True
        try:
            response = await self._call(
                self._service.resend_otp(
                    email=self.email,
                    first_name=self.pending.first_name,
                    last_name=self.pending.last_name,
                    password=self.pending.password,
                    referral_code=self.pending.referral_code,
                ),
                "Failed to resend OTP. Please try again.",
            )
        finally:
            self.is_resending = False
        if response is None:
            return False

        self._pending_store.record_resend()
        self.otp_input.clear()
        return True


# ----------------------------------------------------------------------------
# Forgot password
# ----------------------------------------------------------------------------


class ForgotPasswordStep(str, Enum):
    EMAIL = "email"
    OTP = "otp"
    RESET = "reset"
    SUCCESS = "success"


FORGOT_PASSWORD_TRANSITIONS = {
    ForgotPasswordStep.EMAIL: {ForgotPasswordStep.OTP},
    ForgotPasswordStep.OTP: {ForgotPasswordStep.RESET},
    ForgotPasswordStep.RESET: {ForgotPasswordStep.SUCCESS},
    ForgotPasswordStep.SUCCESS: set(),
}


class ForgotPasswordFlow(Flow[ForgotPasswordStep]):
    """
    Password reset by emailed OTP.

    Filling all six OTP digits moves straight to the new-password step; the
    code itself is only checked by the backend on the final submission.
    """

    def __init__(self, service: IAuthService, clock: Optional[Clock] = None):
        super().__init__(
            StateMachine("forgot-password", ForgotPasswordStep.EMAIL, FORGOT_PASSWORD_TRANSITIONS),
            clock,
        )
        self._service = service
        self.email = ""
        self.otp_input = OtpInput(on_complete=self._on_otp_complete)

    @property
    def otp(self) -> str:
        return self.otp_input.value

    def _on_otp_complete(self, code: str) -> None:
        if self._machine.state is ForgotPasswordStep.OTP:
            self._machine.move(ForgotPasswordStep.RESET)

    async def submit_email(self, email: str) -> bool:
        form = self._validate(EmailForm, {"email": email})
        if form is None:
            return False
        response = await self._call(
            self._service.forgot_password(form.email),
            "Failed to send reset code. Please try again.",
        )
        if response is None:
            return False
        self.email = form.email
        self._machine.move(ForgotPasswordStep.OTP)
        return True

    def resume(self, email: str) -> bool:
        """Continue with a code requested earlier, without sending a new one."""
        form = self._validate(EmailForm, {"email": email})
        if form is None:
            return False
        self.email = form.email
        if self._machine.state is ForgotPasswordStep.EMAIL:
            self._machine.move(ForgotPasswordStep.OTP)
        return True

    def enter_otp(self, code: str) -> None:
        """Paste a whole code into the digit boxes."""
        self.otp_input.paste(code)

    def continue_to_reset(self) -> bool:
        if not self.otp_input.complete:
            self.error = INCOMPLETE_OTP
            return False
        if self._machine.state is ForgotPasswordStep.OTP:
            self._machine.move(ForgotPasswordStep.RESET)
        return True

    async def submit_reset(self, new_password: str, confirm_password: str) -> bool:
        form = self._validate(
            ResetPasswordForm,
            {"new_password": new_password, "confirm_password": confirm_password},
        )
        if form is None:
            return False
        if len(self.otp) != 6:
            self.error = INCOMPLETE_OTP
            return False
        response = await self._call(
            self._service.reset_password(self.email, self.otp, form.new_password),
            "Invalid or expired OTP. Please try again.",
        )
        if response is None:
            return False
        self._machine.move(ForgotPasswordStep.SUCCESS)
        return True


# ----------------------------------------------------------------------------
# Login
# ----------------------------------------------------------------------------


class LoginStep(str, Enum):
    CREDENTIALS = "credentials"
    DONE = "done"


class LoginFlow(Flow[LoginStep]):
    def __init__(self, service: IAuthService, store: AuthStore, navigator: Navigator):
        super().__init__(
            StateMachine("login", LoginStep.CREDENTIALS, {LoginStep.CREDENTIALS: {LoginStep.DONE}})
        )
        self._service = service
        self._store = store
        self._navigator = navigator

    def redirect_if_authenticated(self) -> bool:
        """Landing and login pages send signed-in users to the dashboard."""
        if self._store.is_authenticated:
            self._navigator.push(DASHBOARD)
            return True
        return False

    async def submit(self, email: str, password: str) -> bool:
        form = self._validate(LoginForm, {"email": email, "password": password})
        if form is None:
            return False
        response = await self._call(
            self._service.login(form.email, form.password),
            "Login failed. Please check your credentials.",
        )
        if response is None or response.data is None:
            return False
        self._store.set_auth(response.data.user, response.data.token)
        self._machine.move(LoginStep.DONE)
        self._navigator.push(DASHBOARD)
        return True


# ----------------------------------------------------------------------------
# Profile
# ----------------------------------------------------------------------------


class ProfileStep(str, Enum):
    VIEWING = "viewing"
    CHANGING_PASSWORD = "changing-password"
    PASSWORD_CHANGED = "password-changed"


PROFILE_TRANSITIONS = {
    ProfileStep.VIEWING: {ProfileStep.CHANGING_PASSWORD},
    ProfileStep.CHANGING_PASSWORD: {ProfileStep.VIEWING, ProfileStep.PASSWORD_CHANGED},
    ProfileStep.PASSWORD_CHANGED: {ProfileStep.VIEWING},
}


class ProfileFlow(Flow[ProfileStep]):
    """Profile page: refresh the cached user and change the password."""

    def __init__(
        self,
        service: IAuthService,
        store: AuthStore,
        storage: KeyValueStore,
        clock: Optional[Clock] = None,
    ):
        super().__init__(
            StateMachine("profile", ProfileStep.VIEWING, PROFILE_TRANSITIONS),
            clock,
        )
        self._service = service
        self._store = store
        self._storage = storage
        self.profile: Optional[User] = store.user
        self._close_timer = Deadline(self._clock)

    def poll(self) -> None:
        if self._machine.state is ProfileStep.PASSWORD_CHANGED and self._close_timer.expired():
            self._close_timer.cancel()
            self._machine.move(ProfileStep.VIEWING)

    async def load(self) -> bool:
        """Fetch the profile and refresh the session's cached user."""
        response = await self._call(self._service.get_profile(), "Failed to fetch profile")
        if response is None or response.data is None:
            return False
        self.profile = response.data
        token = self._store.token or self._storage.get_item(TOKEN_KEY) or ""
        self._store.set_auth(response.data, token)
        return True

    def open_change_password(self) -> None:
        self._clear_errors()
        self._machine.move(ProfileStep.CHANGING_PASSWORD)

    def cancel_change_password(self) -> None:
        if self._machine.state is ProfileStep.CHANGING_PASSWORD:
            self._machine.move(ProfileStep.VIEWING)

    async def change_password(
        self,
        current_password: str,
        new_password: str,
        confirm_password: str,
    ) -> bool:
        if self.step is ProfileStep.PASSWORD_CHANGED:
            self._close_timer.cancel()
            self._machine.move(ProfileStep.VIEWING)
        if self._machine.state is ProfileStep.VIEWING:
            self._machine.move(ProfileStep.CHANGING_PASSWORD)
        form = self._validate(
            ChangePasswordForm,
            {
                "current_password": current_password,
                "new_password": new_password,
                "confirm_password": confirm_password,
            },
        )
        if form is None:
            return False
        response = await self._call(
            self._service.change_password(form.current_password, form.new_password),
            "Failed to change password",
        )
        if response is None:
            return False
        self._machine.move(ProfileStep.PASSWORD_CHANGED)
        self._close_timer.start(PASSWORD_CHANGED_DISPLAY_SECONDS)
        return True
