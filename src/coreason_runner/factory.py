# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runner

from coreason_runner.config import RunnerConfig
from coreason_runner.runtime import IsolationRuntime
from coreason_runner.runtimes.docker import DockerRuntime
from coreason_runner.runtimes.process import ProcessRuntime


class RuntimeFactory:
    """
    Factory to create IsolationRuntime instances based on configuration.
    """

    @staticmethod
    def get_runtime(config: RunnerConfig) -> IsolationRuntime:
        """
        Returns an instance of the configured IsolationRuntime.
        """
        options = {
            "entrypoint": config.entrypoint,
            "container_workdir": config.container_workdir,
            "network_mode": config.network_mode,
            "profiles": config.profiles,
            "strict_profiles": config.strict_profiles,
        }

        if config.runtime == "docker":
            return DockerRuntime(**options)
        elif config.runtime == "process":
            return ProcessRuntime(command=config.runtime_command, **options)
        else:
            # This should be unreachable due to Pydantic validation, but for safety:
            raise ValueError(f"Unknown runtime: {config.runtime}")  # pragma: no cover
