"""Outcome of attempting a single step."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Status(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    SKIPPED = "skipped"
    IGNORED = "ignored"


# Reasons the runner itself produces
NOT_INSTALLED = "not installed"
DECLINED = "declined"
ABORTED = "aborted"


@dataclass(frozen=True)
class Outcome:
    """Classified result of a step.

    Use the ``success``/``failure``/``skipped``/``ignored`` constructors
    rather than building instances by hand.
    """

    status: Status
    reason: Optional[str] = None

    @classmethod
    def success(cls) -> "Outcome":
        return cls(Status.SUCCESS)

    @classmethod
    def failure(cls, reason: str) -> "Outcome":
        return cls(Status.FAILURE, reason)

    @classmethod
    def skipped(cls, reason: str) -> "Outcome":
        return cls(Status.SKIPPED, reason)

    @classmethod
    def ignored(cls) -> "Outcome":
        return cls(Status.IGNORED)

    @property
    def ok(self) -> bool:
        """True unless the step failed."""
        return self.status is not Status.FAILURE

    def __str__(self) -> str:
        if self.reason:
            return f"{self.status.value}: {self.reason}"
        return self.status.value
