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

import docker
from docker.errors import ContainerError, DockerException
from loguru import logger

from coreason_runner.exceptions import RuntimeInvocationError
from coreason_runner.runtime import IsolationRuntime
from coreason_runner.workspace import WorkspaceHandle


class DockerRuntime(IsolationRuntime):
    """
    Docker Engine API implementation of the IsolationRuntime.
    """

    def __init__(self, client: docker.DockerClient | None = None, **kwargs: Any):
        super().__init__(**kwargs)
        self.client = client or docker.from_env()

    def _run(self, handle: WorkspaceHandle, image: str) -> None:
        self.client.containers.run(
            image,
            command=self.entrypoint,
            volumes={str(handle.path): {"bind": self.container_workdir, "mode": "rw"}},
            working_dir=self.container_workdir,
            network_mode=self.network_mode,
            remove=True,
            detach=False,
        )

    async def execute(self, handle: WorkspaceHandle, profile: str) -> None:
        """
        Run the sandbox entry point in a throwaway container.
        """
        image = self.resolve_image(profile)
        logger.info(f"Running isolation runtime for workspace {handle.workspace_id} with image {image}")
        try:
            # Offload blocking Docker call to thread
            await asyncio.to_thread(self._run, handle, image)
        except ContainerError as e:
            # Non-zero exit is not a job failure, the result file decides
            logger.warning(
                f"Isolation runtime exited with status {e.exit_status} for workspace {handle.workspace_id}"
            )
        except DockerException as e:
            logger.error(f"Failed to launch isolation runtime with image {image}: {e}")
            raise RuntimeInvocationError(f"Failed to launch isolation runtime: {e}") from e
