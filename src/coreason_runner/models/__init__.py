# src/coreason_runner/models/__init__.py

"""
Data models for submissions and their results.
"""

from .jobs import Budget, Command, Job
from .results import CommandResult, JobResult, Outcome

__all__ = ["Budget", "Command", "CommandResult", "Job", "JobResult", "Outcome"]
