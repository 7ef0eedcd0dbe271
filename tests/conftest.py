"""Shared test fixtures and configuration."""

from typing import Any, Callable, Optional, Union

import httpx
import pytest

from ragchat import Client, ClientConfig, RequestConfig

StatusReply = Union[dict[str, Any], httpx.Response, Exception]


class FakeSearchService:
    """In-memory stand-in for the search service, served via MockTransport."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.submit_status = 200
        self.submit_body: Any = {"task_id": "task-123"}
        self.submit_error: Optional[Exception] = None
        self.status_replies: list[StatusReply] = []
        self.default_status: dict[str, Any] = {"status": "PENDING"}
        self.on_status_request: Optional[Callable[[int], None]] = None

    def queue_status(self, *replies: StatusReply) -> None:
        self.status_replies.extend(replies)

    @property
    def submit_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]

    @property
    def status_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "GET"]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.method == "POST" and request.url.path == "/search":
            if self.submit_error is not None:
                raise self.submit_error
            if isinstance(self.submit_body, str):
                return httpx.Response(self.submit_status, text=self.submit_body)
            return httpx.Response(self.submit_status, json=self.submit_body)

        if request.method == "GET" and request.url.path.startswith("/tasks/"):
            if self.on_status_request is not None:
                self.on_status_request(len(self.status_requests))
            reply: StatusReply = (
                self.status_replies.pop(0) if self.status_replies else self.default_status
            )
            if isinstance(reply, Exception):
                raise reply
            if isinstance(reply, httpx.Response):
                return reply
            return httpx.Response(200, json=reply)

        return httpx.Response(404, text="not found")


class SleepRecorder:
    """Records requested delays instead of sleeping."""

    def __init__(self) -> None:
        self.poll: list[float] = []
        self.stream: list[float] = []
        self.on_poll_sleep: Optional[Callable[[int], None]] = None

    async def poll_sleep(self, milliseconds: float) -> None:
        self.poll.append(milliseconds)
        if self.on_poll_sleep is not None:
            self.on_poll_sleep(len(self.poll))

    async def stream_sleep(self, milliseconds: float) -> None:
        self.stream.append(milliseconds)


@pytest.fixture
def search_service() -> FakeSearchService:
    """Provide a scripted fake search service."""
    return FakeSearchService()


@pytest.fixture
def client_config() -> ClientConfig:
    """Provide a small, fast configuration."""
    return ClientConfig(base_url="http://search.test", poll_interval_ms=1000, max_poll_attempts=5)


@pytest.fixture
def sleeps(monkeypatch: pytest.MonkeyPatch) -> SleepRecorder:
    """Replace poll and streaming delays with a recorder."""
    recorder = SleepRecorder()
    monkeypatch.setattr("ragchat.client.sleep_ms", recorder.poll_sleep)
    monkeypatch.setattr("ragchat.streaming.sleep_ms", recorder.stream_sleep)
    return recorder


@pytest.fixture
async def mock_client(search_service, client_config, sleeps):
    """Provide a client whose HTTP transport is the fake service."""
    client = Client(client_config, RequestConfig(api_key="secret-key"))
    client._http = client._build_http_client(httpx.MockTransport(search_service.handler))
    yield client
    await client.close()
