"""
Authentication module.

Session state, the session guard, the user endpoints and the registration,
password and login flows.

Public API:
- IAuthService / AuthService: backend user endpoints
- AuthStore: session store (one per ServiceContainer)
- SessionGuard: gate for authenticated pages
- RegistrationFlow, ForgotPasswordFlow, LoginFlow, ProfileFlow
- OtpInput: digit-by-digit OTP entry
"""

from .interfaces import IAuthService
from .service import AuthService
from .models import AuthState, LoginResponse, PendingRegistration, User
from .store import AuthStore
from .guard import GuardStatus, SessionGuard
from .otp_input import OtpInput
from .pending import PendingRegistrationStore
from .flows import (
    ForgotPasswordFlow,
    ForgotPasswordStep,
    LoginFlow,
    ProfileFlow,
    ProfileStep,
    RegistrationFlow,
    RegistrationStep,
)

__all__ = [
    # Interface
    "IAuthService",
    "AuthService",
    # Models
    "AuthState",
    "LoginResponse",
    "PendingRegistration",
    "User",
    # Session
    "AuthStore",
    "GuardStatus",
    "SessionGuard",
    "PendingRegistrationStore",
    # Flows
    "OtpInput",
    "RegistrationFlow",
    "RegistrationStep",
    "ForgotPasswordFlow",
    "ForgotPasswordStep",
    "LoginFlow",
    "ProfileFlow",
    "ProfileStep",
]
