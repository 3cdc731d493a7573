"""
Tests for the API client: auth header, error mapping and 401 handling.
"""

import httpx
import pytest

from chowhub.api import SESSION_EXPIRED_MESSAGE, ApiClient, ApiError, SessionExpiredError


class TestRequests:
    @pytest.mark.asyncio
    async def test_bearer_token_attached(self, api, backend):
        await api.get("/menu-management")

        _, request = backend.calls[-1]
        assert request.headers["Authorization"] == "Bearer tok123"
        assert request.headers["Content-Type"] == "application/json"
        assert str(request.url) == "http://chowhub.test/api/menu-management"

    @pytest.mark.asyncio
    async def test_no_header_without_token(self, session, backend):
        client = ApiClient(session, base_url="http://chowhub.test/api", transport=httpx.MockTransport(backend.handler))

        await client.get("/categories")

        _, request = backend.calls[-1]
        assert "Authorization" not in request.headers

    @pytest.mark.asyncio
    async def test_non_2xx_raises_with_server_message(self, api, backend):
        backend.add("POST", "/order/create-order", status=422, body={"error": "Missing items"})

        with pytest.raises(ApiError) as info:
            await api.post("/order/create-order", json={})

        assert str(info.value) == "Missing items"
        assert info.value.status == 422

    @pytest.mark.asyncio
    async def test_generic_message_when_body_has_none(self, api, backend):
        backend.add("GET", "/categories", status=500, body={})

        with pytest.raises(ApiError, match="API Error"):
            await api.get("/categories")

    @pytest.mark.asyncio
    async def test_transport_failure_is_wrapped(self, logged_in):
        def boom(request):
            raise httpx.ConnectError("refused", request=request)

        client = ApiClient(logged_in, base_url="http://chowhub.test/api", transport=httpx.MockTransport(boom))

        with pytest.raises(ApiError) as info:
            await client.get("/categories")

        assert info.value.status is None


class TestUnauthorized:
    @pytest.mark.asyncio
    async def test_401_clears_session_and_notifies(self, api, backend, logged_in):
        backend.add("GET", "/categories", status=401, body={"error": "jwt expired"})
        notices = []
        api.on_session_expired = notices.append

        with pytest.raises(SessionExpiredError):
            await api.get("/categories")

        assert logged_in.token is None
        assert logged_in.user is None
        assert notices == [SESSION_EXPIRED_MESSAGE]

    @pytest.mark.asyncio
    async def test_other_errors_keep_session(self, api, backend, logged_in):
        backend.add("GET", "/categories", status=403, body={"error": "forbidden"})

        with pytest.raises(ApiError):
            await api.get("/categories")

        assert logged_in.is_authenticated
