"""
Session guard for landing routes.

Routes that need a signed-in user depend on ``require_session``; without a
session the browser is sent to the login route with a 303.
"""

from fastapi import Depends, HTTPException, status

from modules.auth.guard import SessionGuard
from modules.auth.models import User
from modules.auth.store import AuthStore
from shared.navigation import LOGIN, Navigator

from ..dependencies import get_auth_store_dependency, get_navigator_dependency


class LoginRedirect(HTTPException):
    """Redirect to the login route with a consistent format."""

    def __init__(self):
        super().__init__(
            status_code=status.HTTP_303_SEE_OTHER,
            detail="Authentication required",
            headers={"Location": LOGIN},
        )


async def require_session(
    store: AuthStore = Depends(get_auth_store_dependency),
    navigator: Navigator = Depends(get_navigator_dependency),
) -> User:
    """
    Dependency that requires a session.

    Usage:
        @router.get("/payment/success")
        async def landing(user: User = Depends(require_session)):
            ...
    """
    with SessionGuard(store, navigator) as guard:
        if not guard.allowed or store.user is None:
            raise LoginRedirect()
        return store.user
