# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runner

from pathlib import Path
from typing import Literal

from pydantic import Field, NonNegativeInt, PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict


class RunnerConfig(BaseSettings):
    """
    Configuration for the job runner.
    """

    # Transport
    redis_url: str = "redis://localhost:6379/0"
    inbound_stream: str = "Server2Runner"
    outbound_stream: str = "Runner2Server"
    max_stream_length: PositiveInt = 1_000_000  # approximate retained entries
    read_block_ms: PositiveInt = 5000
    read_batch_size: PositiveInt = 16
    publish_min_replicas: NonNegativeInt = 0
    publish_confirm_timeout_ms: PositiveInt = 1000

    # Workspaces
    template_dir: Path = Path("sandbox")
    workspace_root: Path = Path(".")

    # Isolation runtime
    runtime: Literal["docker", "process"] = "docker"
    runtime_command: list[str] = Field(default_factory=lambda: ["docker", "run", "--rm"])
    entrypoint: str = "./sandbox"
    container_workdir: str = "/sandbox"
    network_mode: str = "none"
    profiles: dict[str, str] = Field(default_factory=dict)
    strict_profiles: bool = False

    # Dispatch
    max_concurrent_jobs: NonNegativeInt = 0  # 0 = unbounded

    model_config = SettingsConfigDict(
        env_prefix="COREASON_RUNNER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
