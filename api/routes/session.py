"""
Session endpoints.

The landing server has no sign-in form of its own: guarded routes redirect
here, and this page points at the terminal client.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from modules.auth.store import AuthStore

from ..dependencies import get_auth_store_dependency

router = APIRouter()


class SessionResponse(BaseModel):
    authenticated: bool
    user: Optional[str] = None
    message: str


@router.get("/login", response_model=SessionResponse)
async def login_hint(store: AuthStore = Depends(get_auth_store_dependency)) -> SessionResponse:
    if store.is_authenticated and store.user is not None:
        return SessionResponse(
            authenticated=True,
            user=store.user.email,
            message="Already signed in.",
        )
    return SessionResponse(
        authenticated=False,
        message="Sign in with `rechargeearn login`, then retry the payment page.",
    )
