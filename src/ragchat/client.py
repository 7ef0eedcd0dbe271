"""Client implementation for submitting and polling search tasks."""

import json
from collections.abc import Mapping, Sequence
from typing import Any, Optional

import httpx

from ragchat._internal.utils import get_logger, sleep_ms
from ragchat.cancellation import CancellationToken
from ragchat.config import ClientConfig, RequestConfig
from ragchat.exceptions import (
    InvalidInputError,
    PollTimeoutError,
    RequestCancelledError,
    SubmissionError,
    TaskFailedError,
)
from ragchat.streaming import ProgressSink, stream_text
from ragchat.types import Message, PollState, SearchResult, SubmitResponse, TaskStatusResponse

logger = get_logger(__name__)

SEARCH_TOP_N = 20
SEARCH_PER_PAGE = 100
QUERY_LOG_LENGTH = 100


def _content_to_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, Sequence):
        # Multi-part content: [{"type": "text", "text": "..."}, ...]
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, Mapping) and isinstance(part.get("text"), str):
                parts.append(part["text"])
        return "".join(parts)
    return ""


def extract_query(messages: Sequence[Message]) -> str:
    """Return the text of the last message, or an empty string."""
    if not messages:
        return ""
    last = messages[-1]
    if isinstance(last, str):
        return last
    if isinstance(last, Mapping):
        return _content_to_text(last.get("content"))
    return _content_to_text(getattr(last, "content", None))


def final_text(result: SearchResult) -> str:
    """Derive display text: ``answer``, then ``text``, then compact JSON."""
    if isinstance(result, Mapping):
        for key in ("answer", "text"):
            value = result.get(key)
            if isinstance(value, str) and value:
                return value
    return json.dumps(result, separators=(",", ":"), ensure_ascii=False, default=str)


def _format_seconds(seconds: float) -> str:
    """Plain decimal seconds without trailing zeros, e.g. ``375`` or ``0.5``."""
    return f"{seconds:.3f}".rstrip("0").rstrip(".")

class TaskHandle:
    """Handle to a submitted search task.

    Holds the state of a single poll loop; a new handle is created for
    every submission so concurrent requests never share mutable state.
    """

    def __init__(self, task_id: str, client: "Client") -> None:
        self.task_id = task_id
        self._client = client
        self.state = PollState.AWAITING_FIRST_POLL
        self.attempts = 0
        self.last_status: Optional[str] = None

    async def _fetch_status(
        self, cancel_token: Optional[CancellationToken] = None
    ) -> TaskStatusResponse:
        response = await self._client._request(
            "GET", self._client.config.task_url(self.task_id), cancel_token
        )
        response.raise_for_status()
        return TaskStatusResponse.model_validate(response.json())

    def _evaluate(self, response: TaskStatusResponse) -> Optional[SearchResult]:
        """Return the result on success, ``None`` while pending."""
        status = response.normalized_status()
        self.last_status = status

        if response.is_success_status():
            if response.result is None:
                raise TaskFailedError(
                    "Task completed but no result provided", task_id=self.task_id
                )
            return response.result
        if response.is_failure_status():
            error_msg = response.error_message()
            raise TaskFailedError(
                f"Search task failed: {error_msg}",
                task_id=self.task_id,
                remote_error=error_msg,
            )
        return None

    async def try_result(
        self, cancel_token: Optional[CancellationToken] = None
    ) -> Optional[SearchResult]:
        """Check the task once without sleeping.

        Returns ``None`` while the task is pending and the result payload once
        it succeeded. Terminal failures raise ``TaskFailedError``; HTTP and
        transport errors propagate as ``httpx`` exceptions.
        """
        return self._evaluate(await self._fetch_status(cancel_token))

    async def wait(self, cancel_token: Optional[CancellationToken] = None) -> SearchResult:
        """Poll until the task reaches a terminal status or the budget runs out."""
        config = self._client.config
        self.state = PollState.AWAITING_FIRST_POLL
        self.attempts = 0

        while self.attempts < config.max_poll_attempts:
            if cancel_token is not None and cancel_token.cancelled:
                self.state = PollState.CANCELLED
                logger.info("Request aborted by user (task %s)", self.task_id)
                raise RequestCancelledError(cancel_token.reason, task_id=self.task_id)

            # The first status check is immediate.
            if self.attempts > 0:
                await sleep_ms(config.poll_interval_ms)
            self.attempts += 1
            self.state = PollState.POLLING

            try:
                response = await self._fetch_status(cancel_token)
            except RequestCancelledError:
                self.state = PollState.CANCELLED
                logger.info("Request aborted by user (task %s)", self.task_id)
                raise
            except httpx.HTTPStatusError as e:
                logger.warning(
                    "Poll attempt %d failed: %d", self.attempts, e.response.status_code
                )
                continue
            except (httpx.HTTPError, ValueError) as e:
                logger.error("Poll error on attempt %d: %s", self.attempts, e)
                continue

            logger.info(
                "Poll %d/%d: Status = %s",
                self.attempts,
                config.max_poll_attempts,
                response.normalized_status(),
            )

            try:
                result = self._evaluate(response)
            except TaskFailedError:
                self.state = PollState.FAILED
                raise

            if result is not None:
                self.state = PollState.SUCCEEDED
                return result

        self.state = PollState.TIMED_OUT
        elapsed = self.attempts * config.poll_interval_seconds
        raise PollTimeoutError(
            f"Search timed out after {self.attempts} attempts ({_format_seconds(elapsed)}s)",
            attempts=self.attempts,
            elapsed_seconds=elapsed,
            task_id=self.task_id,
        )


class Client:
    """Client for the asynchronous legal search service."""

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        request_config: Optional[RequestConfig] = None,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        # Support both keyword construction and explicit config objects
        if config is not None:
            self._config = config
        else:
            self._config = ClientConfig.from_env(base_url=base_url, **kwargs)

        if request_config is not None:
            self._request_config = request_config
        else:
            self._request_config = RequestConfig.from_env(api_key=api_key)

        self._http: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_env(cls, **overrides: Any) -> "Client":
        """Create a client from ``RAG_*`` environment variables."""
        api_key = overrides.pop("api_key", None)
        sender = overrides.pop("sender", None)
        return cls(
            ClientConfig.from_env(**overrides),
            RequestConfig.from_env(api_key=api_key, sender=sender),
        )

    @staticmethod
    def builder() -> "ClientBuilder":
        """Create a client builder."""
        return ClientBuilder()

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def request_config(self) -> RequestConfig:
        return self._request_config

    @property
    def sender(self) -> str:
        return self._request_config.sender

    def _build_http_client(
        self, transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> httpx.AsyncClient:
        # Redirects are followed for both submission and polling.
        return httpx.AsyncClient(
            timeout=self._config.timeout, follow_redirects=True, transport=transport
        )

    def _ensure_connection(self) -> httpx.AsyncClient:
        """Create the shared HTTP client on first use."""
        if self._http is None:
            self._http = self._build_http_client()
        return self._http

    async def _request(
        self,
        method: str,
        url: str,
        cancel_token: Optional[CancellationToken] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        http = self._ensure_connection()
        headers = self._request_config.auth_headers()
        if cancel_token is None:
            return await http.request(method, url, headers=headers, **kwargs)
        cancel_token.raise_if_cancelled()
        return await cancel_token.guard(http.request(method, url, headers=headers, **kwargs))

    async def submit(
        self, query: str, cancel_token: Optional[CancellationToken] = None
    ) -> TaskHandle:
        """Create a search task and return a handle to it."""
        payload = {"query": query, "top_n": SEARCH_TOP_N, "per_page": SEARCH_PER_PAGE}

        try:
            response = await self._request(
                "POST", self._config.search_url(), cancel_token, json=payload
            )
        except httpx.HTTPError as e:
            logger.error("Failed to start search: %s", e)
            raise SubmissionError(f"Search request failed: {e}") from e

        if not response.is_success:
            logger.error("Failed to start search: HTTP %d", response.status_code)
            raise SubmissionError(
                f"Search request failed: {response.status_code} - {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            body = SubmitResponse.model_validate(response.json())
        except ValueError as e:
            raise SubmissionError(
                f"Invalid response from /search endpoint: {e}",
                status_code=response.status_code,
                body=response.text,
            ) from e

        if not body.task_id:
            logger.error("Failed to start search: no task_id in response")
            raise SubmissionError(
                "No task_id received from /search endpoint",
                status_code=response.status_code,
                body=response.text,
            )

        logger.info("Task created: %s", body.task_id)
        return TaskHandle(task_id=body.task_id, client=self)

    async def send_completion(
        self,
        messages: Sequence[Message],
        on_progress: Optional[ProgressSink] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> str:
        """Run a search for the last message and return the final answer text.

        When ``on_progress`` is given the answer is also delivered to it in
        small chunks before returning. Cancellation is honoured until a result
        is obtained; delivery always runs to completion.
        """
        query = extract_query(messages)
        if not query:
            raise InvalidInputError("No query found in payload")

        logger.info('Starting search for query: "%s..."', query[:QUERY_LOG_LENGTH])

        handle = await self.submit(query, cancel_token)
        result = await handle.wait(cancel_token)
        text = final_text(result)

        logger.info("Search completed. Answer length: %d chars", len(text))

        if on_progress is not None:
            await stream_text(text, on_progress)

        return text

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self) -> "Client":
        self._ensure_connection()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


class ClientBuilder:
    """Builder for client configuration."""

    def __init__(self) -> None:
        self._config: dict[str, Any] = {}
        self._request: dict[str, Any] = {}

    def base_url(self, url: str) -> "ClientBuilder":
        """set search service base URL."""
        self._config["base_url"] = url
        return self

    def poll_interval_ms(self, interval_ms: int) -> "ClientBuilder":
        """set delay between status checks."""
        self._config["poll_interval_ms"] = interval_ms
        return self

    def max_poll_attempts(self, attempts: int) -> "ClientBuilder":
        """set maximum number of status checks."""
        self._config["max_poll_attempts"] = attempts
        return self

    def timeout(self, timeout: float) -> "ClientBuilder":
        """set HTTP request timeout in seconds."""
        self._config["timeout"] = timeout
        return self

    def api_key(self, key: str) -> "ClientBuilder":
        """set bearer credential."""
        self._request["api_key"] = key
        return self

    def sender(self, sender: str) -> "ClientBuilder":
        """set sender display name."""
        self._request["sender"] = sender
        return self

    def build(self) -> Client:
        """Build the client; unset values fall back to the environment."""
        return Client(
            ClientConfig.from_env(**self._config),
            RequestConfig.from_env(**self._request),
        )
