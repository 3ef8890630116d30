# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runner

import asyncio
from typing import Any

from loguru import logger

from coreason_runner.exceptions import RuntimeInvocationError
from coreason_runner.runtime import IsolationRuntime
from coreason_runner.workspace import WorkspaceHandle


class ProcessRuntime(IsolationRuntime):
    """
    Runs the isolation runtime through an external command line,
    e.g. ``docker run --rm`` or ``podman run --rm``.
    """

    def __init__(self, command: list[str] | None = None, **kwargs: Any):
        super().__init__(**kwargs)
        self.command = command or ["docker", "run", "--rm"]

    def build_argv(self, handle: WorkspaceHandle, image: str) -> list[str]:
        argv = [*self.command, "-v", f"{handle.path}:{self.container_workdir}", "-w", self.container_workdir]
        if self.network_mode:
            argv.extend(["--network", self.network_mode])
        argv.extend([image, self.entrypoint])
        return argv

    async def execute(self, handle: WorkspaceHandle, profile: str) -> None:
        """
        Launch the runtime command and wait for it to exit.
        """
        image = self.resolve_image(profile)
        argv = self.build_argv(handle, image)
        logger.info(f"Running isolation runtime for workspace {handle.workspace_id}: {' '.join(argv)}")
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error(f"Failed to launch isolation runtime {argv[0]}: {e}")
            raise RuntimeInvocationError(f"Failed to launch isolation runtime: {e}") from e

        _, stderr = await proc.communicate()
        if proc.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip() if stderr else ""
            logger.warning(
                f"Isolation runtime exited with status {proc.returncode} "
                f"for workspace {handle.workspace_id}: {detail}"
            )
