# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runner

"""YAML encoding for message bodies and workspace files.

The isolation runtime image reads ``commands.yaml`` and writes
``results.yaml`` using the same field names as the message bodies, so every
model is dumped with its wire aliases.
"""

from collections.abc import Sequence
from typing import Any

import yaml
from pydantic import BaseModel, TypeAdapter, ValidationError

from coreason_runner.exceptions import ParseError, ResultMalformed
from coreason_runner.models import Command, CommandResult, Job, JobResult

_commands_adapter = TypeAdapter(list[Command])
_results_adapter = TypeAdapter(list[CommandResult])


def _dump(data: Any) -> str:
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)


def _to_wire(model: BaseModel) -> Any:
    return model.model_dump(mode="json", by_alias=True)


def _load(text: str | bytes, error: type[ParseError]) -> Any:
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8")
        except UnicodeDecodeError as e:
            raise error(f"Payload is not valid UTF-8: {e}") from e
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise error(f"Payload is not valid YAML: {e}") from e
    except RecursionError as e:
        raise error("Payload is nested too deeply") from e


def encode_job(job: Job) -> str:
    return _dump(_to_wire(job))


def decode_job(payload: str | bytes) -> Job:
    """Parse an inbound message body into a Job.

    Raises:
        ParseError: If the body is not UTF-8 YAML describing a valid Job.
    """
    data = _load(payload, ParseError)
    try:
        return Job.model_validate(data)
    except ValidationError as e:
        raise ParseError(f"Invalid job: {e}") from e


def encode_commands(commands: Sequence[Command]) -> str:
    return _dump([_to_wire(c) for c in commands])


def decode_commands(payload: str | bytes) -> list[Command]:
    data = _load(payload, ParseError)
    try:
        return _commands_adapter.validate_python(data)
    except ValidationError as e:
        raise ParseError(f"Invalid command list: {e}") from e


def encode_results(results: Sequence[CommandResult]) -> str:
    return _dump([_to_wire(r) for r in results])


def decode_results(payload: str | bytes) -> list[CommandResult]:
    """Parse a ``results.yaml`` document.

    Raises:
        ResultMalformed: If the document is not a list of command results.
    """
    data = _load(payload, ResultMalformed)
    try:
        return _results_adapter.validate_python(data)
    except ValidationError as e:
        raise ResultMalformed(f"Invalid result list: {e}") from e


def encode_job_result(result: JobResult) -> str:
    return _dump(_to_wire(result))
