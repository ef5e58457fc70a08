"""
HTTP client for the RechargeEarn backend.

Single point of egress: every request carries the bearer token read from
durable storage, and any 401 tears the session down process-wide before the
call fails. There are no retries and no timeouts beyond httpx defaults.
"""

import logging
from typing import Any, Callable, Optional, TypeVar

import httpx
from pydantic import ValidationError as PydanticValidationError

from .config import get_settings
from .exceptions import ApiError, ExternalServiceError, SessionExpiredError
from .models import ApiResponse
from .navigation import LOGIN, get_navigator
from .storage import TOKEN_KEY, USER_KEY, KeyValueStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

UnauthorizedHandler = Callable[[], None]


class ApiClient:
    """
    Thin async wrapper around httpx.AsyncClient.

    Args:
        storage: Durable store holding the ``token`` key
        base_url: Backend base URL. Defaults to settings.api_url.
        on_unauthorized: Called once for every 401 response. Defaults to
                         clearing the stored token/user and navigating to
                         the login route.
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        storage: KeyValueStore,
        base_url: Optional[str] = None,
        on_unauthorized: Optional[UnauthorizedHandler] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._storage = storage
        self._on_unauthorized = on_unauthorized or self._default_unauthorized
        self.base_url = (base_url or get_settings().api_url).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Content-Type": "application/json"},
            event_hooks={
                "request": [self._attach_token],
                "response": [self._check_unauthorized],
            },
            transport=transport,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _default_unauthorized(self) -> None:
        self._storage.remove_item(TOKEN_KEY)
        self._storage.remove_item(USER_KEY)
        get_navigator().push(LOGIN)

    async def _attach_token(self, request: httpx.Request) -> None:
        token = self._storage.get_item(TOKEN_KEY)
        if token:
            request.headers["Authorization"] = f"Bearer {token}"
        logger.debug(f"{request.method} {request.url}")

    async def _check_unauthorized(self, response: httpx.Response) -> None:
        if response.status_code == 401:
            logger.warning(
                f"401 from {response.request.method} {response.request.url.path}, "
                "clearing session"
            )
            self._on_unauthorized()

    async def request(
        self,
        method: str,
        path: str,
        model: Any = Any,
        json: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> ApiResponse:
        """
        Send a request and parse the response envelope.

        Args:
            method: HTTP method
            path: Path relative to the base URL (e.g. "/wallet/balance")
            model: Type of ``data`` on success
            json: JSON body
            params: Query parameters; None values are dropped

        Returns:
            ApiResponse[model]

        Raises:
            SessionExpiredError: Backend answered 401 (session already cleared)
            ApiError: Any other non-2xx status
            ExternalServiceError: Transport failure or unparseable body
        """
        if params is not None:
            params = {k: v for k, v in params.items() if v is not None}

        try:
            response = await self._client.request(method, path, json=json, params=params)
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise ExternalServiceError(
                "Could not reach the server. Please check your connection.",
                service="backend",
                details={"error": str(e)},
            )

        body = self._decode(response)

        if response.status_code == 401:
            raise SessionExpiredError(body.get("message") or "Session expired. Please log in again.")

        if not response.is_success:
            raise ApiError(
                body.get("message") or "",
                status_code=response.status_code,
                errors=body.get("errors") or [],
            )

        envelope = ApiResponse[model] if body.get("success") else ApiResponse[Any]
        try:
            return envelope.model_validate(body)
        except PydanticValidationError as e:
            logger.warning(f"{method} {path}: unexpected response shape: {e}")
            raise ExternalServiceError(
                "Unexpected response from server",
                service="backend",
                details={"path": path},
            )

    def _decode(self, response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            if response.is_success:
                raise ExternalServiceError(
                    "Unexpected response from server",
                    service="backend",
                    details={"status_code": response.status_code},
                )
            return {}
        return body if isinstance(body, dict) else {}

    async def get(
        self,
        path: str,
        model: Any = Any,
        params: Optional[dict[str, Any]] = None,
    ) -> ApiResponse:
        return await self.request("GET", path, model=model, params=params)

    async def post(
        self,
        path: str,
        model: Any = Any,
        json: Optional[dict[str, Any]] = None,
    ) -> ApiResponse:
        return await self.request("POST", path, model=model, json=json)
