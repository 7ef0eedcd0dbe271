"""Type definitions for the ragchat client library."""

from collections.abc import Mapping
from enum import Enum
from typing import Any, Optional, Protocol, Union

from pydantic import BaseModel, ConfigDict, field_validator


class TaskStatus(str, Enum):
    """Status values reported by the search service."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    SUCCESS = "SUCCESS"
    COMPLETED = "COMPLETED"
    FAILURE = "FAILURE"
    FAILED = "FAILED"
    ERROR = "ERROR"

    @classmethod
    def normalize(cls, raw: Optional[str]) -> Optional[str]:
        """Uppercase a raw status value; unknown values pass through."""
        if raw is None:
            return None
        return str(raw).upper()

    @classmethod
    def is_success(cls, status: Optional[str]) -> bool:
        return status in (cls.SUCCESS.value, cls.COMPLETED.value)

    @classmethod
    def is_failure(cls, status: Optional[str]) -> bool:
        return status in (cls.FAILURE.value, cls.FAILED.value, cls.ERROR.value)


class PollState(str, Enum):
    """Local state of one poll loop."""

    AWAITING_FIRST_POLL = "awaiting_first_poll"
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self not in (PollState.AWAITING_FIRST_POLL, PollState.POLLING)


class HasContent(Protocol):
    """Any message object exposing a ``content`` attribute."""

    content: Any


class ChatMessage(BaseModel):
    """A conversational message."""

    role: str = "user"
    content: str


Message = Union[str, ChatMessage, HasContent, Mapping[str, Any]]


class SubmitResponse(BaseModel):
    """Body returned by ``POST /search``."""

    model_config = ConfigDict(extra="allow")

    task_id: Optional[str] = None

    @field_validator("task_id", mode="before")
    @classmethod
    def _coerce_numeric_id(cls, value: Any) -> Any:
        # Some deployments return integer task ids.
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class TaskStatusResponse(BaseModel):
    """Body returned by ``GET /tasks/{task_id}``."""

    model_config = ConfigDict(extra="allow")

    status: Optional[str] = None
    result: Optional[Any] = None
    error: Optional[Any] = None

    def normalized_status(self) -> Optional[str]:
        return TaskStatus.normalize(self.status)

    def is_success_status(self) -> bool:
        return TaskStatus.is_success(self.normalized_status())

    def is_failure_status(self) -> bool:
        return TaskStatus.is_failure(self.normalized_status())

    def error_message(self) -> str:
        """Remote failure detail: ``result.error``, then ``error``, then a default."""
        if isinstance(self.result, Mapping) and self.result.get("error"):
            return str(self.result["error"])
        if self.error:
            return str(self.error)
        return "Unknown error"


SearchResult = Any
