# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runner

"""Redis Streams transport.

The inbound stream is read from "next": entries already present when the
consumer starts are ignored. Outbound sends are confirmed: ``XADD`` returns
only once the server has appended the entry, optionally followed by ``WAIT``
for replica acknowledgment.
"""

import asyncio
from collections.abc import AsyncIterator
from typing import Any

import redis.asyncio as aioredis
from loguru import logger
from redis.exceptions import RedisError

from coreason_runner.exceptions import PublishError, TransportError

BODY_FIELD = b"body"


async def connect(redis_url: str) -> Any:
    """Open a client and verify the server is reachable.

    Raises:
        TransportError: If the server cannot be reached.
    """
    client = aioredis.from_url(redis_url)
    try:
        await client.ping()
    except (RedisError, OSError) as e:
        await client.aclose()
        raise TransportError(f"Cannot connect to {redis_url}: {e}") from e
    logger.info(f"Connected to message transport at {redis_url}")
    return client


async def apply_retention(client: Any, stream: str, max_length: int) -> None:
    """Trim a stream to roughly ``max_length`` entries.

    Failures are logged; the stream is still usable without a cap.
    """
    try:
        await client.xtrim(stream, maxlen=max_length, approximate=True)
    except RedisError as e:
        logger.warning(f"Failed to apply retention to {stream}: {e}")


def _decode_id(entry_id: bytes | str) -> str:
    return entry_id.decode("utf-8") if isinstance(entry_id, bytes) else entry_id


class StreamConsumer:
    """Yields raw message bodies from a stream in delivery order."""

    def __init__(
        self,
        client: Any,
        stream: str,
        block_ms: int = 5000,
        count: int = 16,
        retry_delay: float = 1.0,
    ):
        self.client = client
        self.stream = stream
        self.block_ms = block_ms
        self.count = count
        self.retry_delay = retry_delay
        self.last_id: str | None = None
        self._closed = False

    async def _resolve_start(self) -> str:
        # Pin "next" to the current tail so no entry slips between reads
        latest = await self.client.xrevrange(self.stream, count=1)
        return _decode_id(latest[0][0]) if latest else "0-0"

    async def messages(self) -> AsyncIterator[bytes]:
        """Iterate over message bodies until ``close()`` is called."""
        while not self._closed:
            try:
                if self.last_id is None:
                    self.last_id = await self._resolve_start()
                    logger.info(f"Consuming {self.stream} after entry {self.last_id}")
                response = await self.client.xread(
                    {self.stream: self.last_id}, count=self.count, block=self.block_ms
                )
            except RedisError as e:
                logger.error(f"Failed to read from {self.stream}: {e}")
                await asyncio.sleep(self.retry_delay)
                continue

            for _stream, entries in response or []:
                for entry_id, fields in entries:
                    self.last_id = _decode_id(entry_id)
                    body = fields.get(BODY_FIELD)
                    if body is None:
                        logger.warning(f"Skipping entry {self.last_id} without a body field")
                        continue
                    yield body

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self.messages()

    def close(self) -> None:
        """Stop iteration after the current read returns."""
        self._closed = True


class StreamProducer:
    """Appends message bodies to a stream with confirmation."""

    def __init__(
        self,
        client: Any,
        stream: str,
        max_length: int = 1_000_000,
        min_replicas: int = 0,
        confirm_timeout_ms: int = 1000,
    ):
        self.client = client
        self.stream = stream
        self.max_length = max_length
        self.min_replicas = min_replicas
        self.confirm_timeout_ms = confirm_timeout_ms

    async def send_with_confirm(self, body: str | bytes) -> str:
        """Append one entry and return its id once acknowledged.

        Raises:
            PublishError: If the server rejects the entry or too few replicas
                acknowledge it in time.
        """
        try:
            if not self.min_replicas:
                entry_id = await self.client.xadd(
                    self.stream, {BODY_FIELD: body}, maxlen=self.max_length, approximate=True
                )
                return _decode_id(entry_id)

            # WAIT only counts writes made on its own connection
            async with self.client.pipeline(transaction=False) as pipe:
                pipe.xadd(self.stream, {BODY_FIELD: body}, maxlen=self.max_length, approximate=True)
                pipe.wait(self.min_replicas, self.confirm_timeout_ms)
                entry_id, acked = await pipe.execute()
        except RedisError as e:
            raise PublishError(f"Failed to publish to {self.stream}: {e}") from e

        if acked < self.min_replicas:
            raise PublishError(
                f"Only {acked}/{self.min_replicas} replicas acknowledged entry {_decode_id(entry_id)}"
            )
        return _decode_id(entry_id)
