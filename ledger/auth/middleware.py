"""Bearer-token identity resolution with guest-mode fallback."""

import logging
from typing import Annotated, Protocol

import httpx
from fastapi import Depends, Request
from fastapi.security import APIKeyHeader

from ledger.errors import GuestConfigError, UnauthorizedError

logger = logging.getLogger(__name__)

API_KEY_HEADER = APIKeyHeader(name="Authorization", auto_error=False)


class IdentityProvider(Protocol):
    async def get_user_id(self, token: str) -> str | None: ...


class SupabaseIdentityProvider:
    """Validates access tokens against Supabase Auth."""

    def __init__(self, http: httpx.AsyncClient, *, base_url: str, api_key: str) -> None:
        self._http = http
        self.url = f"{base_url.rstrip('/')}/auth/v1/user"
        self.api_key = api_key

    async def get_user_id(self, token: str) -> str | None:
        try:
            r = await self._http.get(
                self.url,
                headers={"apikey": self.api_key, "Authorization": f"Bearer {token}"},
            )
        except httpx.RequestError as err:
            logger.warning("Identity provider unreachable: %s", err)
            return None
        if r.status_code != 200:
            return None
        try:
            user_id = r.json().get("id")
        except ValueError:
            return None
        return user_id or None


def bearer_token(auth_header: str | None) -> str | None:
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    token = auth_header[7:].strip()
    return token or None


class IdentityResolver:
    """
    Maps a request's Authorization header to a user id.

    - Bearer token present: validated with the provider, else unauthorized.
    - No bearer token, guest mode on: the configured guest id, else GuestConfigError.
    - No bearer token, guest mode off: unauthorized.

    This is the only place that looks at the guest-mode flag.
    """

    def __init__(
        self,
        provider: IdentityProvider,
        *,
        guest_mode_enabled: bool,
        guest_user_id: str | None,
    ) -> None:
        self.provider = provider
        self.guest_mode_enabled = guest_mode_enabled
        self.guest_user_id = guest_user_id

    async def resolve(self, auth_header: str | None) -> str:
        token = bearer_token(auth_header)
        if token is None:
            if not self.guest_mode_enabled:
                raise UnauthorizedError("Missing or invalid Authorization header")
            if not self.guest_user_id:
                raise GuestConfigError()
            return self.guest_user_id
        user_id = await self.provider.get_user_id(token)
        if not user_id:
            raise UnauthorizedError("Invalid or expired token")
        return user_id


async def get_current_user_id(
    request: Request,
    auth_header: str | None = Depends(API_KEY_HEADER),
) -> str:
    """Dependency: resolve the acting user id for this request."""
    resolver: IdentityResolver = request.app.state.identity
    return await resolver.resolve(auth_header)


# Type alias for dependency injection
UserIdDep = Annotated[str, Depends(get_current_user_id)]
