# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runner

"""Submission models: resource budgets, commands and jobs."""

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt


class Budget(BaseModel):
    """Per-command resource ceiling forwarded verbatim to the isolation runtime.

    Units are defined by the caller (seconds, kilobytes). The runner never
    interprets them beyond checking they are non-negative.

    Attributes:
        time_limit: Hard wall-clock limit.
        time_reserved: Reserved time slice, a scheduling hint.
        memory_limit: Hard memory ceiling.
        memory_reserved: Reserved memory.
        large_stack: Request an enlarged stack.
        output_limit: Captured output ceiling, 0 means unlimited.
        process_limit: Concurrently spawned processes, 0 means unlimited.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    time_limit: NonNegativeInt
    time_reserved: NonNegativeInt
    memory_limit: NonNegativeInt
    memory_reserved: NonNegativeInt
    large_stack: bool = False
    output_limit: NonNegativeInt = 0
    process_limit: NonNegativeInt = 0


class Command(BaseModel):
    """One step of a submission."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    command: str
    args: tuple[str, ...] = ()
    input: str = ""
    budget: Budget = Field(alias="config")


class Job(BaseModel):
    """A submission: ordered commands, an isolation profile and a correlation id.

    Commands run in order and later ones see the filesystem left by earlier
    ones. ``submission_id`` is opaque and only echoed back on the result.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    commands: tuple[Command, ...]
    profile: str = Field(alias="image")
    submission_id: str = Field(alias="submit_id")
