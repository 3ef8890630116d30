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
from collections.abc import AsyncIterable

from loguru import logger

from coreason_runner.codec import decode_job
from coreason_runner.exceptions import ParseError, RunnerError
from coreason_runner.executor import JobExecutor
from coreason_runner.models import Job
from coreason_runner.publisher import ResultPublisher


class JobDispatcher:
    """Consumes inbound job messages and runs each job as its own task.

    Per message: Received -> Parsed -> Dispatched -> (Succeeded | Dropped).
    Consumption is strictly sequential and in delivery order; execution is
    not, so results may be published in any order. A dropped job produces no
    result and is only visible in the logs.
    """

    def __init__(
        self,
        executor: JobExecutor,
        publisher: ResultPublisher,
        max_concurrent_jobs: int = 0,
    ):
        """Initializes the JobDispatcher.

        Args:
            executor: Runs a single job.
            publisher: Sends finished results.
            max_concurrent_jobs: Admission limit on in-flight jobs. When
                reached, dispatch blocks until a job finishes. 0 disables it.
        """
        self.executor = executor
        self.publisher = publisher
        self._semaphore = asyncio.Semaphore(max_concurrent_jobs) if max_concurrent_jobs else None
        self._tasks: set[asyncio.Task[None]] = set()
        self._cancel = asyncio.Event()
        self._stopping = False

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def handle(self, raw: bytes | str) -> asyncio.Task[None] | None:
        """Parse one message and dispatch it.

        Returns:
            The spawned task, or None if the message was dropped.
        """
        try:
            job = decode_job(raw)
        except ParseError as e:
            logger.error(f"Dropped malformed job message: {e}")
            return None
        except Exception:
            logger.exception("Dropped job message: unexpected error while parsing")
            return None

        if self._semaphore is not None:
            await self._semaphore.acquire()

        logger.info(f"Dispatching submission {job.submission_id} ({len(job.commands)} commands, profile {job.profile})")
        task = asyncio.create_task(self._process(job), name=f"job-{job.submission_id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _process(self, job: Job) -> None:
        try:
            try:
                result = await self.executor.run(job, self._cancel)
            except RunnerError as e:
                logger.error(f"Dropped submission {job.submission_id}: {type(e).__name__}: {e}")
                return
            except Exception:
                logger.exception(f"Dropped submission {job.submission_id}: unexpected error")
                return
            await self.publisher.publish(result)
        finally:
            if self._semaphore is not None:
                self._semaphore.release()

    async def run(self, messages: AsyncIterable[bytes | str]) -> None:
        """Consume messages until the source ends or ``stop()`` is called.

        In-flight jobs are awaited before returning.
        """
        try:
            async for raw in messages:
                await self.handle(raw)
                if self._stopping:
                    break
        finally:
            await self.drain()

    async def drain(self) -> None:
        """Wait for every in-flight job to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def stop(self, cancel: bool = False) -> None:
        """Stop consuming new messages.

        Args:
            cancel: Also signal in-flight jobs to abandon work at their next
                checkpoint. Their workspaces are still released.
        """
        logger.info(f"Stopping dispatcher with {self.in_flight} jobs in flight (cancel={cancel})")
        self._stopping = True
        if cancel:
            self._cancel.set()
