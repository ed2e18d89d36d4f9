"""Unit tests for identity resolution."""

import httpx
import pytest

from ledger.auth.middleware import IdentityResolver, SupabaseIdentityProvider
from ledger.errors import GuestConfigError, UnauthorizedError

GUEST = "11111111-1111-4111-8111-111111111111"
USER = "33333333-3333-4333-8333-333333333333"


class Provider:
    def __init__(self):
        self.calls = []

    async def get_user_id(self, token):
        self.calls.append(token)
        return USER if token == "good" else None


async def test_valid_token_wins_over_guest():
    """A valid token resolves to its user even in guest mode."""
    resolver = IdentityResolver(Provider(), guest_mode_enabled=True, guest_user_id=GUEST)
    assert await resolver.resolve("Bearer good") == USER


async def test_invalid_token_is_unauthorized_even_in_guest_mode():
    """A bad token never falls back to the guest."""
    resolver = IdentityResolver(Provider(), guest_mode_enabled=True, guest_user_id=GUEST)
    with pytest.raises(UnauthorizedError):
        await resolver.resolve("Bearer bad")


async def test_guest_fallback_without_header():
    """No header in guest mode resolves to the guest id."""
    provider = Provider()
    resolver = IdentityResolver(provider, guest_mode_enabled=True, guest_user_id=GUEST)
    assert await resolver.resolve(None) == GUEST
    assert await resolver.resolve("Basic abc") == GUEST
    assert provider.calls == []


async def test_guest_mode_without_guest_id_is_misconfigured():
    """Guest mode without a guest id is a config error."""
    resolver = IdentityResolver(Provider(), guest_mode_enabled=True, guest_user_id=None)
    with pytest.raises(GuestConfigError):
        await resolver.resolve(None)


async def test_no_header_without_guest_mode_is_unauthorized():
    """No header without guest mode is unauthorized."""
    resolver = IdentityResolver(Provider(), guest_mode_enabled=False, guest_user_id=GUEST)
    with pytest.raises(UnauthorizedError):
        await resolver.resolve(None)
    with pytest.raises(UnauthorizedError):
        await resolver.resolve("Bearer   ")


async def test_supabase_provider():
    """Provider returns the user id for valid tokens only."""
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/auth/v1/user"
        assert request.headers["apikey"] == "service"
        if request.headers["Authorization"] == "Bearer good":
            return httpx.Response(200, json={"id": USER, "email": "a@b.c"})
        return httpx.Response(401, json={"msg": "invalid JWT"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        provider = SupabaseIdentityProvider(http, base_url="https://sb.test", api_key="service")
        assert await provider.get_user_id("good") == USER
        assert await provider.get_user_id("expired") is None
