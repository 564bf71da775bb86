"""Async HTTP client for the Grant Tracker API."""

from typing import Any
from uuid import UUID

import httpx
from pydantic import BaseModel
from pydantic_core import to_jsonable_python

from src.api.grant.schemas import GrantModel
from src.client.errors import ApiError, MutationError, RoleResolutionError, SessionError
from src.utils.logger import get_logger
from src.utils.settings.session import SessionSettings

logger = get_logger(__name__)


class GrantTrackerClient:
    """
    Thin wrapper over an injected ``httpx.AsyncClient``.

    Holds the bearer token of the signed-in user and the application session
    token returned by the Session Bridge. Successful calls return the
    ``data`` member of the response envelope; failures raise an
    :class:`~src.client.errors.ApiError` subclass.
    """

    def __init__(self, http_client: httpx.AsyncClient, cookie_name: str | None = None):
        self.http_client = http_client
        self.cookie_name = cookie_name or SessionSettings().SESSION_COOKIE_NAME
        self.access_token: str | None = None
        self.session_token: str | None = None

    def set_access_token(self, access_token: str | None) -> None:
        self.access_token = access_token

    def clear_credentials(self) -> None:
        self.access_token = None
        self.session_token = None

    def _get_headers(self, with_session: bool = False) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        if with_session and self.session_token:
            headers["Cookie"] = f"{self.cookie_name}={self.session_token}"
        return headers

    async def _request(
        self,
        method: str,
        endpoint: str,
        error_cls: type[ApiError] = ApiError,
        with_session: bool = False,
        **kwargs,
    ) -> Any:
        headers = kwargs.pop("headers", {})
        headers.update(self._get_headers(with_session))

        try:
            response = await self.http_client.request(
                method, endpoint, headers=headers, **kwargs
            )
        except httpx.RequestError as e:
            logger.error("API request failed", method=method, endpoint=endpoint, error=str(e))
            raise error_cls(f"Request to {endpoint} failed: {e}") from e

        if response.is_error:
            error = error_cls.from_response(response)
            logger.warning(
                "API error response",
                method=method,
                endpoint=endpoint,
                status_code=response.status_code,
                message_code=error.message_code,
            )
            raise error

        return response.json().get("data")

    # Session Bridge

    async def create_session(self, user_id: UUID, persistent: bool) -> dict[str, Any]:
        data = await self._request(
            "POST",
            "/api/session",
            error_cls=SessionError,
            json={"user_id": str(user_id), "persistent": persistent},
        )
        self.session_token = data["token"]
        return data

    async def revoke_session(self) -> None:
        await self._request(
            "DELETE", "/api/session", error_cls=SessionError, with_session=True
        )
        self.session_token = None

    async def get_session(self) -> dict[str, Any]:
        return await self._request(
            "GET", "/api/session", error_cls=SessionError, with_session=True
        )

    # Users and roles

    async def resolve_roles(self) -> dict[str, Any]:
        return await self._request("GET", "/v1/roles/me", error_cls=RoleResolutionError)

    async def onboard(self, full_name: str | None = None) -> dict[str, Any]:
        return await self._request(
            "POST", "/v1/users/onboard", json={"full_name": full_name}
        )

    async def get_profile(self) -> dict[str, Any]:
        return await self._request("GET", "/v1/users/me")

    # Grants

    async def list_grants(self, deleted: bool = False) -> list[GrantModel]:
        endpoint = "/v1/grants/deleted" if deleted else "/v1/grants"
        data = await self._request("GET", endpoint)
        return [GrantModel.model_validate(item) for item in data or []]

    async def get_grant(self, grant_id: UUID) -> GrantModel:
        return GrantModel.model_validate(
            await self._request("GET", f"/v1/grants/{grant_id}")
        )

    async def create_grant(self, grant: BaseModel | dict[str, Any]) -> GrantModel:
        data = await self._request(
            "POST", "/v1/grants", error_cls=MutationError, json=_to_payload(grant)
        )
        return GrantModel.model_validate(data)

    async def update_grant(
        self, grant_id: UUID, changes: BaseModel | dict[str, Any]
    ) -> GrantModel:
        data = await self._request(
            "PATCH",
            f"/v1/grants/{grant_id}",
            error_cls=MutationError,
            json=_to_payload(changes),
        )
        return GrantModel.model_validate(data)

    async def delete_grant(self, grant_id: UUID) -> GrantModel:
        data = await self._request(
            "DELETE", f"/v1/grants/{grant_id}", error_cls=MutationError
        )
        return GrantModel.model_validate(data)

    async def restore_grant(self, grant_id: UUID) -> GrantModel:
        data = await self._request(
            "POST", f"/v1/grants/{grant_id}/restore", error_cls=MutationError
        )
        return GrantModel.model_validate(data)

    # Donor workflow

    async def get_donor_status(self) -> dict[str, Any]:
        return await self._request("GET", "/api/donor")

    async def request_donor(self, notes: str | None = None) -> dict[str, Any]:
        return await self._request("POST", "/api/donor", json={"notes": notes})


def _to_payload(value: BaseModel | dict[str, Any]) -> dict[str, Any]:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", exclude_unset=True)
    return to_jsonable_python(value)
