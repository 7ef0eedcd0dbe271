"""Exception hierarchy for the ragchat client library."""

from typing import Any, Optional


class RagChatError(Exception):
    """Base exception for all ragchat errors."""

    def __init__(self, message: str, **extra_data: Any) -> None:
        super().__init__(message)
        self.message = message
        self.extra_data = extra_data


class ConfigurationError(RagChatError):
    """Raised when client configuration cannot be loaded."""

    pass


class InvalidInputError(RagChatError):
    """Raised when no query can be extracted from the messages."""

    pass


class SubmissionError(RagChatError):
    """Raised when the search task could not be created."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
        **extra_data: Any,
    ) -> None:
        super().__init__(message, **extra_data)
        self.status_code = status_code
        self.body = body


class TaskFailedError(RagChatError):
    """Raised when the remote service reports a terminal task failure."""

    def __init__(
        self,
        message: str,
        task_id: Optional[str] = None,
        remote_error: Optional[str] = None,
        **extra_data: Any,
    ) -> None:
        super().__init__(message, **extra_data)
        self.task_id = task_id
        self.remote_error = remote_error


class CancelledError(RagChatError):
    """Raised when the caller's cancellation token is triggered."""

    pass


class PollTimeoutError(RagChatError):
    """Raised when the poll budget runs out before a terminal status."""

    def __init__(
        self,
        message: str,
        attempts: int,
        elapsed_seconds: float,
        task_id: Optional[str] = None,
        **extra_data: Any,
    ) -> None:
        super().__init__(message, **extra_data)
        self.attempts = attempts
        self.elapsed_seconds = elapsed_seconds
        self.task_id = task_id


# Preferred alias to avoid confusion with asyncio.CancelledError in user code.
class RequestCancelledError(CancelledError):
    """Alias for CancelledError to avoid shadowing asyncio names."""

    pass
