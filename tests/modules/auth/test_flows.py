"""Tests for the authentication flows."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from modules.auth.flows import (
    INCOMPLETE_OTP,
    REGISTRATION_MISSING,
    ForgotPasswordFlow,
    ForgotPasswordStep,
    LoginFlow,
    LoginStep,
    ProfileFlow,
    ProfileStep,
    RegistrationFlow,
    RegistrationStep,
)
from modules.auth.models import LoginResponse, PendingRegistration
from modules.auth.pending import PendingRegistrationStore
from shared.exceptions import ApiError, ExternalServiceError
from shared.navigation import DASHBOARD, REGISTER, VERIFY_OTP
from shared.storage import TOKEN_KEY


@pytest.fixture
def service(envelope):
    """Auth service double where every call succeeds."""
    service = MagicMock()
    for name in (
        "register",
        "verify_otp",
        "resend_otp",
        "login",
        "get_profile",
        "forgot_password",
        "reset_password",
        "change_password",
    ):
        setattr(service, name, AsyncMock(return_value=envelope({})))
    return service


@pytest.fixture
def pending_store(storage, clock):
    """Pending registration store running on the test clock."""
    return PendingRegistrationStore(storage, now=lambda: datetime.fromtimestamp(clock(), timezone.utc))


class TestRegistrationFlow:
    @pytest.fixture
    def flow(self, service, store, pending_store, navigator, clock):
        return RegistrationFlow(service, store, pending_store, navigator, clock)

    @pytest.mark.asyncio
    async def test_end_to_end(self, flow, service, store, pending_store, navigator, envelope, user):
        """Register, then verify with OTP and phone, then land on the dashboard."""
        assert await flow.submit_registration("Jane", "Doe", "jane@x.com", "secret1")
        assert flow.step is RegistrationStep.COLLECTING_OTP
        assert navigator.current == f"{VERIFY_OTP}?email=jane%40x.com"
        assert pending_store.load() is not None

        service.verify_otp.return_value = envelope(LoginResponse(user=user, token="tok-123"))
        assert await flow.verify("08012345678", "123456")

        service.verify_otp.assert_awaited_once_with(
            email="jane@x.com",
            otp="123456",
            first_name="Jane",
            last_name="Doe",
            password="secret1",
            phone="08012345678",
            referral_code=None,
        )
        assert store.is_authenticated
        assert store.token == "tok-123"
        assert pending_store.load() is None
        assert navigator.path == DASHBOARD
        assert flow.step is RegistrationStep.DONE

    @pytest.mark.asyncio
    async def test_invalid_form_makes_no_call(self, flow, service):
        assert not await flow.submit_registration("J", "Doe", "jane@x.com", "secret1")
        service.register.assert_not_awaited()
        assert flow.field_errors["first_name"] == "First name must be at least 2 characters"

    @pytest.mark.asyncio
    async def test_register_failure_stays(self, flow, service, pending_store):
        service.register.side_effect = ApiError("Email already registered", status_code=400)
        assert not await flow.submit_registration("Jane", "Doe", "jane@x.com", "secret1")
        assert flow.error == "Email already registered"
        assert flow.step is RegistrationStep.COLLECTING_REGISTRATION
        assert pending_store.load() is None

    @pytest.mark.asyncio
    async def test_verify_without_pending_data(self, flow, service):
        """Opening the OTP page without pending data must not call the backend."""
        flow.open_otp_step("jane@x.com")
        assert flow.error == REGISTRATION_MISSING
        assert flow.recovery_route == REGISTER

        assert not await flow.verify("08012345678", "123456")
        service.verify_otp.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_verify_without_email(self, flow, service, pending_store):
        pending_store.save(PendingRegistration(first_name="Jane", last_name="Doe", password="secret1"))
        flow.open_otp_step(None)
        assert not await flow.verify("08012345678", "123456")
        service.verify_otp.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_verify_incomplete_otp(self, flow, service):
        await flow.submit_registration("Jane", "Doe", "jane@x.com", "secret1")
        assert not await flow.verify("08012345678", "1234")
        assert flow.error == INCOMPLETE_OTP
        service.verify_otp.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_verify_uses_digit_boxes(self, flow, service, envelope, user):
        await flow.submit_registration("Jane", "Doe", "jane@x.com", "secret1")
        flow.otp_input.paste("654321")
        service.verify_otp.return_value = envelope(LoginResponse(user=user, token="t"))
        assert await flow.verify("+2348012345678")
        assert service.verify_otp.await_args.kwargs["otp"] == "654321"
        assert service.verify_otp.await_args.kwargs["phone"] == "08012345678"

    @pytest.mark.asyncio
    async def test_verify_rejected(self, flow, service, envelope, store):
        await flow.submit_registration("Jane", "Doe", "jane@x.com", "secret1")
        service.verify_otp.return_value = envelope(success=False, message="Invalid OTP")
        assert not await flow.verify("08012345678", "123456")
        assert flow.error == "Invalid OTP"
        assert not store.is_authenticated
        assert flow.step is RegistrationStep.COLLECTING_OTP

    @pytest.mark.asyncio
    async def test_referral_code_carried_to_verify(self, flow, service, envelope, user):
        await flow.submit_registration("Jane", "Doe", "jane@x.com", "secret1", "abc123")
        service.verify_otp.return_value = envelope(LoginResponse(user=user, token="t"))
        await flow.verify("08012345678", "123456")
        assert service.verify_otp.await_args.kwargs["referral_code"] == "ABC123"

    @pytest.mark.asyncio
    async def test_resend_cooldown(self, flow, service, clock):
        """A second resend inside 60 s should be refused locally."""
        await flow.submit_registration("Jane", "Doe", "jane@x.com", "secret1")
        assert await flow.resend()
        assert flow.resend_available_in == 60

        clock.advance(30)
        assert not await flow.resend()
        assert flow.resend_available_in == 30
        assert service.resend_otp.await_count == 1

        clock.advance(30)
        assert await flow.resend()
        assert service.resend_otp.await_count == 2

    @pytest.mark.asyncio
    async def test_resend_cooldown_spans_flows(self, flow, service, store, pending_store, navigator, clock):
        """Each CLI run builds a new flow; the cooldown must still apply."""
        await flow.submit_registration("Jane", "Doe", "jane@x.com", "secret1")
        assert await flow.resend()

        clock.advance(10)
        later = RegistrationFlow(service, store, pending_store, navigator, clock)
        later.open_otp_step("jane@x.com")
        assert later.resend_available_in == 50
        assert not await later.resend()
        assert service.resend_otp.await_count == 1

    @pytest.mark.asyncio
    async def test_resend_carries_referral_code(self, flow, service):
        await flow.submit_registration("Jane", "Doe", "jane@x.com", "secret1", "abc123")
        assert await flow.resend()
        service.resend_otp.assert_awaited_once_with(
            email="jane@x.com",
            first_name="Jane",
            last_name="Doe",
            password="secret1",
            referral_code="ABC123",
        )

    @pytest.mark.asyncio
    async def test_prefill_from_share_link(self, flow, service):
        """A `?ref=` code from a shared link is used, uppercased."""
        flow.prefill({"ref": "abc123"})
        assert flow.referral_code == "ABC123"

        await flow.submit_registration("Jane", "Doe", "jane@x.com", "secret1")
        assert service.register.await_args.kwargs["referral_code"] == "ABC123"

    @pytest.mark.asyncio
    async def test_typed_code_overrides_prefill(self, flow, service):
        flow.prefill({"ref": "abc123"})
        await flow.submit_registration("Jane", "Doe", "jane@x.com", "secret1", "zzz999")
        assert service.register.await_args.kwargs["referral_code"] == "ZZZ999"

    def test_prefill_ignores_blank(self, flow):
        flow.prefill({"ref": "  "})
        flow.prefill({})
        assert flow.referral_code is None

    @pytest.mark.asyncio
    async def test_resend_failure(self, flow, service):
        await flow.submit_registration("Jane", "Doe", "jane@x.com", "secret1")
        service.resend_otp.side_effect = ExternalServiceError("down", service="backend")
        assert not await flow.resend()
        assert flow.error == "Failed to resend OTP. Please try again."
        assert flow.resend_available_in == 0
        assert flow.is_resending is False


class TestForgotPasswordFlow:
    @pytest.fixture
    def flow(self, service):
        return ForgotPasswordFlow(service)

    @pytest.mark.asyncio
    async def test_full_reset(self, flow, service):
        assert await flow.submit_email("jane@x.com")
        assert flow.step is ForgotPasswordStep.OTP

        flow.enter_otp("123456")
        assert flow.step is ForgotPasswordStep.RESET

        assert await flow.submit_reset("newpass", "newpass")
        service.reset_password.assert_awaited_once_with("jane@x.com", "123456", "newpass")
        assert flow.step is ForgotPasswordStep.SUCCESS

    @pytest.mark.asyncio
    async def test_auto_advance_without_server_check(self, flow, service):
        """Completing the digits advances with no request."""
        await flow.submit_email("jane@x.com")
        for digit in "999999":
            flow.otp_input.type(digit)
        assert flow.step is ForgotPasswordStep.RESET
        service.reset_password.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_email(self, flow, service):
        assert not await flow.submit_email("jane")
        service.forgot_password.assert_not_awaited()
        assert flow.step is ForgotPasswordStep.EMAIL

    @pytest.mark.asyncio
    async def test_password_mismatch(self, flow, service):
        await flow.submit_email("jane@x.com")
        flow.enter_otp("123456")
        assert not await flow.submit_reset("newpass", "other1")
        assert flow.field_errors["confirm_password"] == "Passwords don't match"
        service.reset_password.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_bad_code_rejected_at_reset(self, flow, service):
        await flow.submit_email("jane@x.com")
        flow.enter_otp("123456")
        service.reset_password.side_effect = ApiError("", status_code=400)
        assert not await flow.submit_reset("newpass", "newpass")
        assert flow.error == "Invalid or expired OTP. Please try again."
        assert flow.step is ForgotPasswordStep.RESET

    def test_continue_requires_complete_code(self, flow):
        flow.resume("jane@x.com")
        flow.enter_otp("123")
        assert not flow.continue_to_reset()
        assert flow.error == INCOMPLETE_OTP

    def test_resume_skips_email_request(self, flow, service):
        assert flow.resume("jane@x.com")
        assert flow.step is ForgotPasswordStep.OTP
        service.forgot_password.assert_not_awaited()


class TestLoginFlow:
    @pytest.fixture
    def flow(self, service, store, navigator):
        return LoginFlow(service, store, navigator)

    @pytest.mark.asyncio
    async def test_login(self, flow, service, store, navigator, envelope, user):
        service.login.return_value = envelope(LoginResponse(user=user, token="tok-123"))
        assert await flow.submit("jane@x.com", "secret1")
        assert store.is_authenticated
        assert navigator.path == DASHBOARD
        assert flow.step is LoginStep.DONE

    @pytest.mark.asyncio
    async def test_bad_credentials(self, flow, service, store):
        service.login.side_effect = ApiError("Invalid credentials", status_code=401)
        assert not await flow.submit("jane@x.com", "wrong")
        assert flow.error == "Invalid credentials"
        assert not store.is_authenticated

    @pytest.mark.asyncio
    async def test_fallback_message(self, flow, service):
        service.login.side_effect = ExternalServiceError("down", service="backend")
        await flow.submit("jane@x.com", "secret1")
        assert flow.error == "Login failed. Please check your credentials."

    def test_redirect_if_authenticated(self, service, signed_in_store, navigator):
        flow = LoginFlow(service, signed_in_store, navigator)
        assert flow.redirect_if_authenticated()
        assert navigator.path == DASHBOARD


class TestProfileFlow:
    @pytest.fixture
    def flow(self, service, signed_in_store, storage, clock):
        return ProfileFlow(service, signed_in_store, storage, clock)

    @pytest.mark.asyncio
    async def test_load_refreshes_session_user(self, flow, service, signed_in_store, storage, envelope, user):
        renamed = user.model_copy(update={"first_name": "Janet"})
        service.get_profile.return_value = envelope(renamed)
        assert await flow.load()
        assert signed_in_store.user.first_name == "Janet"
        assert signed_in_store.token == "tok-123"
        assert storage.get_item(TOKEN_KEY) == "tok-123"

    @pytest.mark.asyncio
    async def test_change_password_auto_closes(self, flow, service, clock):
        """The success state should close itself after two seconds."""
        flow.open_change_password()
        assert await flow.change_password("old", "newpass", "newpass")
        service.change_password.assert_awaited_once_with("old", "newpass")
        assert flow.step is ProfileStep.PASSWORD_CHANGED

        clock.advance(1)
        assert flow.step is ProfileStep.PASSWORD_CHANGED
        clock.advance(1)
        assert flow.step is ProfileStep.VIEWING

    @pytest.mark.asyncio
    async def test_change_password_failure(self, flow, service):
        service.change_password.side_effect = ApiError("Current password is incorrect", status_code=400)
        assert not await flow.change_password("bad", "newpass", "newpass")
        assert flow.error == "Current password is incorrect"
        assert flow.step is ProfileStep.CHANGING_PASSWORD

    def test_cancel(self, flow):
        flow.open_change_password()
        flow.cancel_change_password()
        assert flow.step is ProfileStep.VIEWING
