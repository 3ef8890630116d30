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

from loguru import logger

from coreason_runner.exceptions import JobCancelled, ResultIntegrityError
from coreason_runner.models import Job, JobResult
from coreason_runner.runtime import IsolationRuntime
from coreason_runner.workspace import WorkspaceHandle, WorkspaceManager


class JobExecutor:
    """Runs one job end to end inside its own workspace."""

    def __init__(self, workspaces: WorkspaceManager, runtime: IsolationRuntime):
        self.workspaces = workspaces
        self.runtime = runtime

    @staticmethod
    def _checkpoint(cancel: asyncio.Event | None, job: Job, stage: str) -> None:
        if cancel is not None and cancel.is_set():
            raise JobCancelled(f"Submission {job.submission_id} cancelled {stage}")

    async def run(self, job: Job, cancel: asyncio.Event | None = None) -> JobResult:
        """Stage, execute and collect a job.

        The workspace is released on every path.

        Args:
            job: The job to run.
            cancel: Optional cooperative cancellation signal, checked before
                staging and around the runtime invocation.

        Returns:
            JobResult: One result per command, in command order.

        Raises:
            JobCancelled: If ``cancel`` was set at a checkpoint.
            WorkspaceError: If the workspace cannot be prepared.
            RuntimeInvocationError: If the isolation runtime cannot be launched.
            ResultMissing: If the runtime wrote no result file.
            ResultMalformed: If the result file cannot be parsed.
            ResultIntegrityError: If the result count differs from the command count.
        """
        self._checkpoint(cancel, job, "before staging")
        handle: WorkspaceHandle | None = None
        try:
            handle = await self.workspaces.stage(job.submission_id)
            await self.workspaces.write_commands(handle, job.commands)
            self._checkpoint(cancel, job, "before execution")

            await self.runtime.execute(handle, job.profile)

            self._checkpoint(cancel, job, "after execution")
            result = await self.workspaces.read_result(handle)
        finally:
            await self.workspaces.release(handle)

        if len(result.results) != len(job.commands):
            raise ResultIntegrityError(
                f"Submission {job.submission_id}: {len(job.commands)} commands "
                f"but {len(result.results)} results"
            )
        logger.debug(f"Submission {job.submission_id} finished with {len(result.results)} results")
        return result
