# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runner

"""
coreason-runner
"""

__version__ = "0.1.0"
__author__ = "Gowtham A Rao"
__email__ = "gowtham.rao@coreason.ai"

from .config import RunnerConfig
from .dispatcher import JobDispatcher
from .executor import JobExecutor
from .factory import RuntimeFactory
from .models import Budget, Command, CommandResult, Job, JobResult, Outcome
from .publisher import ResultPublisher
from .runtime import IsolationRuntime
from .runtimes.docker import DockerRuntime
from .runtimes.process import ProcessRuntime
from .workspace import WorkspaceHandle, WorkspaceManager

__all__ = [
    "Budget",
    "Command",
    "CommandResult",
    "DockerRuntime",
    "IsolationRuntime",
    "Job",
    "JobDispatcher",
    "JobExecutor",
    "JobResult",
    "Outcome",
    "ProcessRuntime",
    "ResultPublisher",
    "RunnerConfig",
    "RuntimeFactory",
    "WorkspaceHandle",
    "WorkspaceManager",
]
