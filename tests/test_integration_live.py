# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runner

import os
from pathlib import Path

import pytest

from coreason_runner.config import RunnerConfig
from coreason_runner.executor import JobExecutor
from coreason_runner.exceptions import RunnerError
from coreason_runner.factory import RuntimeFactory
from coreason_runner.models import Budget, Command, Job, Outcome
from coreason_runner.workspace import WorkspaceManager

pytestmark = [
    pytest.mark.live,
    pytest.mark.skipif(
        os.environ.get("COREASON_RUNNER_LIVE") != "1",
        reason="set COREASON_RUNNER_LIVE=1 with a sandbox template and Docker daemon",
    ),
]


@pytest.fixture
def live_executor(tmp_path: Path) -> JobExecutor:
    config = RunnerConfig(workspace_root=tmp_path)
    return JobExecutor(WorkspaceManager(config.template_dir, config.workspace_root), RuntimeFactory.get_runtime(config))


@pytest.mark.asyncio
async def test_gcc_version_live(live_executor: JobExecutor, gcc_job: Job) -> None:
    result = await live_executor.run(gcc_job)
    assert result.results[0].outcome is Outcome.SUCCESS
    assert result.results[0].stdout.startswith("gcc (GCC)")


@pytest.mark.asyncio
async def test_cpp_a_plus_b_live(live_executor: JobExecutor, budget: Budget) -> None:
    source = (
        "#include <iostream>\nint main() { int a, b; std::cin >> a >> b; "
        'std::cout << a << " + " << b << " = " << a + b << std::endl; }\n'
    )
    job = Job(
        commands=(
            Command(command="sh", args=("-c", f"echo '{source}' > main.cpp"), budget=budget),
            Command(command="g++", args=("main.cpp", "-o", "main"), budget=budget),
            Command(command="./main", input="1 2", budget=budget),
        ),
        profile="gcc:14.2",
        submission_id="live-cpp",
    )
    result = await live_executor.run(job)
    assert result.results[2].stdout == "1 + 2 = 3\n"


@pytest.mark.asyncio
async def test_time_limit_live(live_executor: JobExecutor, budget: Budget) -> None:
    job = Job(
        commands=(Command(command="sh", args=("-c", "while :; do :; done"), budget=budget),),
        profile="gcc:14.2",
        submission_id="live-tle",
    )
    result = await live_executor.run(job)
    assert result.results[0].outcome is Outcome.TIME_LIMIT_EXCEEDED


@pytest.mark.asyncio
async def test_unknown_image_live(live_executor: JobExecutor, gcc_job: Job) -> None:
    job = gcc_job.model_copy(update={"profile": "coreason/does-not-exist:0"})
    with pytest.raises(RunnerError):
        await live_executor.run(job)
