"""ragchat Python Client Library.

An asyncio client that submits queries to a long-running search service,
polls for the result and streams the answer back to the caller.
"""

from ragchat._version import __version__, __version_info__
from ragchat.cancellation import CancellationToken
from ragchat.client import Client, ClientBuilder, TaskHandle, extract_query, final_text
from ragchat.config import ClientConfig, RequestConfig
from ragchat.exceptions import (
    CancelledError,
    ConfigurationError,
    InvalidInputError,
    PollTimeoutError,
    RagChatError,
    RequestCancelledError,
    SubmissionError,
    TaskFailedError,
)
from ragchat.streaming import stream_text
from ragchat.types import ChatMessage, PollState, TaskStatus

__all__ = [
    "CancellationToken",
    "CancelledError",
    "ChatMessage",
    "Client",
    "ClientBuilder",
    "ClientConfig",
    "ConfigurationError",
    "InvalidInputError",
    "PollState",
    "PollTimeoutError",
    "RagChatError",
    "RequestCancelledError",
    "RequestConfig",
    "SubmissionError",
    "TaskFailedError",
    "TaskHandle",
    "TaskStatus",
    "__version__",
    "__version_info__",
    "extract_query",
    "final_text",
    "stream_text",
]
