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
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from uuid import uuid4

import aiofiles  # type: ignore[import-untyped]
from loguru import logger

from coreason_runner.codec import decode_results, encode_commands
from coreason_runner.exceptions import ResultMissing, TemplateMissingError, WorkspaceError
from coreason_runner.models import Command, JobResult

COMMANDS_FILE = "commands.yaml"
RESULTS_FILE = "results.yaml"


@dataclass(frozen=True)
class WorkspaceHandle:
    """A staged per-job directory."""

    workspace_id: str
    path: Path
    submission_id: str = ""

    @property
    def commands_path(self) -> Path:
        return self.path / COMMANDS_FILE

    @property
    def results_path(self) -> Path:
        return self.path / RESULTS_FILE


class WorkspaceManager:
    """Creates, populates and removes per-job workspaces.

    Workspaces are named with a random UUID, so concurrent jobs never share a
    directory and no locking is needed between them.
    """

    def __init__(self, template_dir: Path, root: Path = Path(".")):
        """Initializes the WorkspaceManager.

        Args:
            template_dir: Baseline runtime image copied into every workspace.
            root: Parent directory under which workspaces are created.
        """
        self.template_dir = Path(template_dir)
        self.root = Path(root)

    def check_template(self) -> None:
        """Verify the baseline template exists.

        Raises:
            TemplateMissingError: If the template directory is absent.
        """
        if not self.template_dir.is_dir():
            raise TemplateMissingError(f"Sandbox template not found: {self.template_dir}")

    def _stage_sync(self, handle: WorkspaceHandle) -> None:
        try:
            handle.path.mkdir(parents=False)
        except OSError as e:
            raise WorkspaceError(f"Failed to create workspace {handle.path}: {e}") from e
        try:
            shutil.copytree(self.template_dir, handle.path, symlinks=True, dirs_exist_ok=True)
            # copytree overwrites the root's mode with the template's
            os.chmod(handle.path, 0o777)
        except (OSError, shutil.Error) as e:
            shutil.rmtree(handle.path, ignore_errors=True)
            raise WorkspaceError(f"Failed to populate workspace {handle.path}: {e}") from e

    async def stage(self, submission_id: str = "") -> WorkspaceHandle:
        """Create a fresh workspace populated with the baseline template.

        Args:
            submission_id: Submission the workspace is created for, carried on
                the handle so results can be correlated.

        Returns:
            WorkspaceHandle: The staged workspace.

        Raises:
            TemplateMissingError: If the template directory is absent.
            WorkspaceError: If the directory cannot be created or populated.
        """
        self.check_template()
        workspace_id = str(uuid4())
        handle = WorkspaceHandle(
            workspace_id=workspace_id,
            path=(self.root / workspace_id).resolve(),
            submission_id=submission_id,
        )
        await asyncio.to_thread(self._stage_sync, handle)
        logger.debug(f"Staged workspace {workspace_id} for submission {submission_id}")
        return handle

    async def write_commands(self, handle: WorkspaceHandle, commands: list[Command] | tuple[Command, ...]) -> None:
        """Serialize the command list into the workspace.

        Raises:
            WorkspaceError: If the file cannot be written.
        """
        try:
            async with aiofiles.open(handle.commands_path, "w", encoding="utf-8") as f:
                await f.write(encode_commands(commands))
        except OSError as e:
            raise WorkspaceError(f"Failed to write {handle.commands_path}: {e}") from e

    async def read_result(self, handle: WorkspaceHandle) -> JobResult:
        """Load the results written by the isolation runtime.

        Raises:
            ResultMissing: If the runtime did not write a result file.
            ResultMalformed: If the result file cannot be parsed.
            WorkspaceError: If the file exists but cannot be read.
        """
        try:
            async with aiofiles.open(handle.results_path, "r", encoding="utf-8") as f:
                content = await f.read()
        except FileNotFoundError as e:
            raise ResultMissing(f"No result file in workspace {handle.workspace_id}") from e
        except OSError as e:
            raise WorkspaceError(f"Failed to read {handle.results_path}: {e}") from e

        return JobResult(results=tuple(decode_results(content)), submission_id=handle.submission_id)

    async def release(self, handle: WorkspaceHandle | None) -> None:
        """Recursively delete a workspace.

        Safe to call on an already released or never staged workspace.
        """
        if handle is None or not handle.path.exists():
            return
        try:
            await asyncio.to_thread(shutil.rmtree, handle.path)
            logger.debug(f"Released workspace {handle.workspace_id}")
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Failed to release workspace {handle.workspace_id}: {e}")
