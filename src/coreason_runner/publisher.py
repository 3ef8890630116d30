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

from coreason_runner.codec import encode_job_result
from coreason_runner.exceptions import PublishError
from coreason_runner.models import JobResult
from coreason_runner.streams import StreamProducer


class ResultPublisher:
    """Sends job results over one shared outbound connection.

    Sends are serialized with a lock so that confirmations never interleave;
    encoding happens outside the lock.
    """

    def __init__(self, producer: StreamProducer):
        self.producer = producer
        self._lock = asyncio.Lock()

    async def publish(self, result: JobResult) -> bool:
        """Encode and send a result.

        Failures are logged and the result is lost; nothing is retried.

        Args:
            result: The finished job's result.

        Returns:
            bool: True when the outbound channel acknowledged the result.
        """
        body = encode_job_result(result)
        async with self._lock:
            try:
                entry_id = await self.producer.send_with_confirm(body)
            except PublishError as e:
                logger.error(f"Failed to publish result for submission {result.submission_id}: {e}")
                return False
            except Exception:
                logger.exception(f"Failed to publish result for submission {result.submission_id}")
                return False
        logger.info(
            f"Published result for submission {result.submission_id} as entry {entry_id} (succeeded={result.succeeded})"
        )
        return True
