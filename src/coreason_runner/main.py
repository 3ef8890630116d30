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
import signal
import sys
from pathlib import Path

import anyio
from docker.errors import DockerException
from loguru import logger

import coreason_runner.utils.logger  # noqa: F401
from coreason_runner.codec import decode_job, encode_job
from coreason_runner.config import RunnerConfig
from coreason_runner.dispatcher import JobDispatcher
from coreason_runner.exceptions import RunnerError, TemplateMissingError, TransportError
from coreason_runner.executor import JobExecutor
from coreason_runner.factory import RuntimeFactory
from coreason_runner.publisher import ResultPublisher
from coreason_runner.streams import StreamConsumer, StreamProducer, apply_retention, connect
from coreason_runner.workspace import WorkspaceManager


async def serve(config: RunnerConfig | None = None) -> None:
    """Run the orchestrator until SIGINT/SIGTERM.

    Raises:
        TemplateMissingError: If the baseline template is missing.
        TransportError: If the message transport is unreachable.
        DockerException: If the docker daemon is unreachable.
    """
    config = config or RunnerConfig()

    workspaces = WorkspaceManager(config.template_dir, config.workspace_root)
    workspaces.check_template()
    runtime = RuntimeFactory.get_runtime(config)

    client = await connect(config.redis_url)
    for stream in (config.inbound_stream, config.outbound_stream):
        await apply_retention(client, stream, config.max_stream_length)
    consumer = StreamConsumer(
        client,
        config.inbound_stream,
        block_ms=config.read_block_ms,
        count=config.read_batch_size,
    )
    producer = StreamProducer(
        client,
        config.outbound_stream,
        max_length=config.max_stream_length,
        min_replicas=config.publish_min_replicas,
        confirm_timeout_ms=config.publish_confirm_timeout_ms,
    )
    dispatcher = JobDispatcher(
        JobExecutor(workspaces, runtime),
        ResultPublisher(producer),
        max_concurrent_jobs=config.max_concurrent_jobs,
    )

    def _shutdown() -> None:
        dispatcher.stop()
        consumer.close()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _shutdown)

    logger.info(
        f"Runner started: {config.inbound_stream} -> {config.outbound_stream} "
        f"(runtime={config.runtime}, template={config.template_dir})"
    )
    try:
        await dispatcher.run(consumer)
    finally:
        await client.aclose()
        logger.info("Runner stopped")


async def submit(job_file: Path, config: RunnerConfig | None = None) -> str:
    """Validate a job file and append it to the inbound stream.

    Returns:
        str: The stream entry id.
    """
    config = config or RunnerConfig()
    job = decode_job(job_file.read_bytes())
    client = await connect(config.redis_url)
    try:
        producer = StreamProducer(client, config.inbound_stream, max_length=config.max_stream_length)
        return await producer.send_with_confirm(encode_job(job))
    finally:
        await client.aclose()


def main() -> None:
    """Entry point for the runner."""
    try:
        anyio.run(serve)
    except (TemplateMissingError, TransportError, DockerException) as e:
        logger.critical(f"Runner failed to start: {e}")
        sys.exit(1)


def send() -> None:
    """Entry point for submitting a job file: ``coreason-runner-send JOB.yaml``."""
    if len(sys.argv) != 2:
        print("usage: coreason-runner-send JOB.yaml", file=sys.stderr)
        sys.exit(2)
    try:
        entry_id = anyio.run(submit, Path(sys.argv[1]))
    except (RunnerError, OSError) as e:
        logger.error(f"Failed to submit {sys.argv[1]}: {e}")
        sys.exit(1)
    print(f"Sent message to stream as entry {entry_id}")


if __name__ == "__main__":  # pragma: no cover
    main()
