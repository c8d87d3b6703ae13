"""Tests for the HTTP session: client lifecycle, headers, transport retries."""

import httpx
import pytest

from hubjobs.core.config import CrawlerConfig
from hubjobs.http.session import HttpSession


def _session(handler, **kw: object) -> HttpSession:  # type: ignore[no-untyped-def]
    return HttpSession(
        CrawlerConfig(user_agent="test-agent/1.0"),
        transport=httpx.MockTransport(handler),
        backoff_min_s=0,
        backoff_max_s=0,
        **kw,  # type: ignore[arg-type]
    )


class TestLifecycle:
    def test_client_requires_enter(self) -> None:
        session = HttpSession(CrawlerConfig())
        with pytest.raises(RuntimeError, match="not entered"):
            _ = session.client

    async def test_client_closed_on_exit(self) -> None:
        session = _session(lambda r: httpx.Response(200))
        async with session:
            client = session.client
            assert not client.is_closed
        assert client.is_closed
        with pytest.raises(RuntimeError):
            _ = session.client


class TestGet:
    async def test_sends_user_agent_and_params(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, text="ok")

        async with _session(handler) as session:
            response = await session.get("https://thehub.io/api/v2/jobsandfeatured", params={"page": "2"})

        assert response.text == "ok"
        assert seen[0].headers["User-Agent"] == "test-agent/1.0"
        assert seen[0].url.params["page"] == "2"

    async def test_error_status_returned_not_retried(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(500)

        async with _session(handler) as session:
            response = await session.get("https://thehub.io/x")

        assert response.status_code == 500
        assert calls == 1

    async def test_transport_error_retried(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            if calls < 3:
                raise httpx.ConnectError("connection reset", request=request)
            return httpx.Response(200, text="recovered")

        async with _session(handler, transport_retries=3) as session:
            response = await session.get("https://thehub.io/x")

        assert response.text == "recovered"
        assert calls == 3

    async def test_transport_error_reraised_after_retries(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            raise httpx.ReadTimeout("timed out", request=request)

        async with _session(handler, transport_retries=2) as session:
            with pytest.raises(httpx.ReadTimeout):
                await session.get("https://thehub.io/x")

        assert calls == 3

    async def test_single_attempt_without_retry(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            raise httpx.ConnectError("connection reset", request=request)

        async with _session(handler, transport_retries=3) as session:
            with pytest.raises(httpx.ConnectError):
                await session.get("https://thehub.io/jobs/x", retry=False)

        assert calls == 1

    async def test_transport_retries_default_from_config(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            raise httpx.ConnectError("connection reset", request=request)

        session = HttpSession(
            CrawlerConfig(transport_retries=1),
            transport=httpx.MockTransport(handler),
            backoff_min_s=0,
            backoff_max_s=0,
        )
        async with session:
            with pytest.raises(httpx.ConnectError):
                await session.get("https://thehub.io/x")

        assert calls == 2

    async def test_follows_redirects(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/jobs/old":
                return httpx.Response(301, headers={"Location": "https://thehub.io/jobs/new"})
            return httpx.Response(200, text=request.url.path)

        async with _session(handler) as session:
            response = await session.get("https://thehub.io/jobs/old")

        assert response.text == "/jobs/new"
        assert str(response.url) == "https://thehub.io/jobs/new"
