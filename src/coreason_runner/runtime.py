# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runner

from abc import ABC, abstractmethod

from coreason_runner.exceptions import RuntimeInvocationError
from coreason_runner.workspace import WorkspaceHandle


class IsolationRuntime(ABC):
    """
    Abstract base class for isolation runtime adapters (e.g., Docker Engine, CLI).
    Follows the Strategy Pattern.

    An adapter launches the external runtime against a staged workspace and
    waits for it to exit. It never judges job success: the outcome of every
    command is whatever the runtime writes to the workspace result file.
    """

    def __init__(
        self,
        entrypoint: str = "./sandbox",
        container_workdir: str = "/sandbox",
        network_mode: str = "none",
        profiles: dict[str, str] | None = None,
        strict_profiles: bool = False,
    ):
        self.entrypoint = entrypoint
        self.container_workdir = container_workdir
        self.network_mode = network_mode
        self.profiles = profiles or {}
        self.strict_profiles = strict_profiles

    def resolve_image(self, profile: str) -> str:
        """Map a job's isolation profile to an image reference.

        Raises:
            RuntimeInvocationError: If the profile is empty, or unknown while
                strict profiles are enabled.
        """
        if profile in self.profiles:
            return self.profiles[profile]
        if self.strict_profiles or not profile:
            raise RuntimeInvocationError(f"Unknown isolation profile: {profile!r}")
        return profile

    @abstractmethod
    async def execute(self, handle: WorkspaceHandle, profile: str) -> None:
        """Run the isolation runtime against a workspace.

        Blocks the calling task until the runtime process exits, whatever its
        exit status.

        Args:
            handle: The staged workspace, mounted as the runtime's working root.
            profile: The job's isolation profile, resolved to an image.

        Raises:
            RuntimeInvocationError: If the runtime cannot be launched at all.
        """
        pass  # pragma: no cover
