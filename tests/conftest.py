# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runner

from pathlib import Path
from typing import Any

import pytest

from coreason_runner.codec import decode_commands, encode_results
from coreason_runner.exceptions import RuntimeInvocationError
from coreason_runner.models import Budget, Command, CommandResult, Job, Outcome
from coreason_runner.runtime import IsolationRuntime
from coreason_runner.workspace import WorkspaceHandle, WorkspaceManager

GCC_VERSION = (
    "gcc (GCC) 14.2.0\nCopyright (C) 2024 Free Software Foundation, Inc.\n"
    "This is free software; see the source for copying conditions.  There is NO\n"
    "warranty; not even for MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.\n\n"
)


class FakeSandboxRuntime(IsolationRuntime):
    """Stands in for the sandbox image: reads commands.yaml, writes results.yaml."""

    def __init__(self, known_images: set[str] | None = None, **kwargs: Any):
        super().__init__(**kwargs)
        self.known_images = known_images if known_images is not None else {"gcc:14.2"}
        self.calls: list[tuple[WorkspaceHandle, str]] = []
        self.seen_files: list[set[str]] = []

    @staticmethod
    def simulate(command: Command) -> CommandResult:
        if command.command == "gcc" and command.args == ("--version",):
            return CommandResult(outcome=Outcome.SUCCESS, stdout=GCC_VERSION, elapsed=0, memory=1024)
        if command.command == "sleep":
            seconds = int(command.args[0])
            if seconds > command.budget.time_limit:
                return CommandResult(outcome=Outcome.TIME_LIMIT_EXCEEDED, elapsed=command.budget.time_limit)
            return CommandResult(outcome=Outcome.SUCCESS, elapsed=seconds)
        if command.command == "cat":
            return CommandResult(outcome=Outcome.SUCCESS, stdout=command.input)
        if command.command == "false":
            return CommandResult(outcome=Outcome.RUNTIME_ERROR)
        return CommandResult(outcome=Outcome.OTHER_ERROR, stderr="Error occurred")

    async def execute(self, handle: WorkspaceHandle, profile: str) -> None:
        image = self.resolve_image(profile)
        self.calls.append((handle, image))
        self.seen_files.append({p.name for p in handle.path.iterdir()})
        if image not in self.known_images:
            raise RuntimeInvocationError(f"Unable to find image '{image}' locally")
        commands = decode_commands(handle.commands_path.read_text(encoding="utf-8"))
        results = [self.simulate(c) for c in commands]
        handle.results_path.write_text(encode_results(results), encoding="utf-8")


@pytest.fixture
def budget() -> Budget:
    return Budget(
        time_limit=1,
        time_reserved=1,
        memory_limit=256000,
        memory_reserved=4096000,
        large_stack=False,
        output_limit=0,
        process_limit=0,
    )


@pytest.fixture
def gcc_job(budget: Budget) -> Job:
    return Job(
        commands=(Command(command="gcc", args=("--version",), input="", budget=budget),),
        profile="gcc:14.2",
        submission_id="submit-gcc",
    )


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    template = tmp_path / "template"
    template.mkdir()
    entry = template / "sandbox"
    entry.write_text("#!/bin/sh\n")
    entry.chmod(0o755)
    (template / "lib").mkdir()
    (template / "lib" / "profile.conf").write_text("seccomp=strict\n")
    return template


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    root = tmp_path / "workspaces"
    root.mkdir()
    return root


@pytest.fixture
def workspace_manager(template_dir: Path, workspace_root: Path) -> WorkspaceManager:
    return WorkspaceManager(template_dir, workspace_root)


@pytest.fixture
def fake_runtime() -> FakeSandboxRuntime:
    return FakeSandboxRuntime()
