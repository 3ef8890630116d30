# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runner

"""Execution outcome models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt


class Outcome(str, Enum):
    """Closed classification of a single command's execution."""

    SUCCESS = "Success"
    RUNTIME_ERROR = "RuntimeError"
    TIME_LIMIT_EXCEEDED = "TimeLimitExceeded"
    MEMORY_LIMIT_EXCEEDED = "MemoryLimitExceeded"
    OTHER_ERROR = "OtherError"


class CommandResult(BaseModel):
    """Result of one command, as written by the isolation runtime.

    Attributes:
        outcome: Terminal classification of the command.
        stdout: Captured standard output.
        stderr: Captured standard error.
        elapsed: Execution time in seconds.
        memory: Peak memory usage in KB.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    outcome: Outcome = Field(alias="state")
    stdout: str = ""
    stderr: str = ""
    elapsed: NonNegativeInt = Field(default=0, alias="time")
    memory: NonNegativeInt = 0


class JobResult(BaseModel):
    """Ordered command results correlated with the originating submission."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    results: tuple[CommandResult, ...] = Field(alias="sandbox_results")
    submission_id: str = Field(alias="submit_id")

    @property
    def succeeded(self) -> bool:
        """True when every command finished with ``Outcome.SUCCESS``."""
        return all(r.outcome is Outcome.SUCCESS for r in self.results)
