# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runner

"""Error taxonomy for the job runner.

Command-level failures (runtime errors, exceeded limits) are not exceptions;
they are ``Outcome`` values carried inside a ``JobResult``. Everything here is
an orchestrator-level failure that causes a job to be dropped.
"""


class RunnerError(Exception):
    """Base class for every orchestrator-level failure."""


class ParseError(RunnerError):
    """A message or file could not be deserialized into the expected model."""


class WorkspaceError(RunnerError):
    """Creating, populating or deleting a workspace failed."""


class TemplateMissingError(WorkspaceError):
    """The baseline template directory does not exist."""


class ResultMissing(RunnerError):
    """The isolation runtime exited without writing a result file."""


class ResultMalformed(ParseError):
    """A result file exists but cannot be parsed."""


class ResultIntegrityError(RunnerError):
    """The result file does not line up with the submitted commands."""


class RuntimeInvocationError(RunnerError):
    """The isolation runtime could not be launched."""


class JobCancelled(RunnerError):
    """A job observed the cancellation signal at a checkpoint."""


class TransportError(RunnerError):
    """The message transport is unavailable."""


class PublishError(TransportError):
    """A confirmed send was rejected or not acknowledged."""
