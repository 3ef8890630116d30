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
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from docker.errors import DockerException

from coreason_runner.codec import decode_job, encode_job
from coreason_runner.config import RunnerConfig
from coreason_runner.exceptions import TemplateMissingError, TransportError
from coreason_runner.main import main, send, serve, submit
from coreason_runner.models import Job


@pytest.fixture
def mock_client() -> Any:
    client = MagicMock()
    client.aclose = AsyncMock()
    client.xadd = AsyncMock(return_value=b"9-0")
    client.xtrim = AsyncMock(return_value=0)
    return client


@pytest.mark.asyncio
async def test_serve_wires_components(
    template_dir: Path, workspace_root: Path, mock_client: Any, fake_runtime: Any, gcc_job: Job
) -> None:
    config = RunnerConfig(template_dir=template_dir, workspace_root=workspace_root, outbound_stream="results")
    consumer = MagicMock()
    consumer.__aiter__.return_value = [encode_job(gcc_job).encode("utf-8")]

    with (
        patch("coreason_runner.main.connect", AsyncMock(return_value=mock_client)),
        patch("coreason_runner.main.RuntimeFactory.get_runtime", return_value=fake_runtime),
        patch("coreason_runner.main.StreamConsumer", return_value=consumer),
    ):
        await serve(config)

    mock_client.xadd.assert_awaited_once()
    stream, fields = mock_client.xadd.await_args.args
    assert stream == "results"
    assert "submit_id: submit-gcc" in fields[b"body"]
    mock_client.aclose.assert_awaited_once()
    assert list(workspace_root.iterdir()) == []
    trimmed = [c.args[0] for c in mock_client.xtrim.await_args_list]
    assert trimmed == [config.inbound_stream, "results"]
    assert mock_client.xtrim.await_args.kwargs == {"maxlen": config.max_stream_length, "approximate": True}


@pytest.mark.asyncio
async def test_serve_requires_template(tmp_path: Path) -> None:
    config = RunnerConfig(template_dir=tmp_path / "missing")
    with patch("coreason_runner.main.connect", AsyncMock()) as mock_connect:
        with pytest.raises(TemplateMissingError):
            await serve(config)
    mock_connect.assert_not_awaited()


def test_main_exits_on_startup_failure() -> None:
    with patch("coreason_runner.main.serve", AsyncMock(side_effect=TransportError("refused"))):
        with pytest.raises(SystemExit) as excinfo:
            main()
    assert excinfo.value.code == 1


def test_main_exits_when_docker_unreachable() -> None:
    with patch("coreason_runner.main.serve", AsyncMock(side_effect=DockerException("daemon not running"))):
        with patch("coreason_runner.main.logger") as mock_logger:
            with pytest.raises(SystemExit) as excinfo:
                main()
    assert excinfo.value.code == 1
    assert "daemon not running" in mock_logger.critical.call_args[0][0]


@pytest.mark.asyncio
async def test_submit_sends_validated_job(tmp_path: Path, mock_client: Any, gcc_job: Job) -> None:
    job_file = tmp_path / "job.yaml"
    job_file.write_text(encode_job(gcc_job))

    with patch("coreason_runner.main.connect", AsyncMock(return_value=mock_client)):
        entry_id = await submit(job_file, RunnerConfig(inbound_stream="jobs"))

    assert entry_id == "9-0"
    stream, fields = mock_client.xadd.await_args.args
    assert stream == "jobs"
    assert decode_job(fields[b"body"]) == gcc_job
    mock_client.aclose.assert_awaited_once()


def test_send_usage(capsys: Any) -> None:
    with patch("coreason_runner.main.sys.argv", ["coreason-runner-send"]):
        with pytest.raises(SystemExit) as excinfo:
            send()
    assert excinfo.value.code == 2
    assert "usage" in capsys.readouterr().err


def test_send_rejects_invalid_job(tmp_path: Path) -> None:
    job_file = tmp_path / "bad.yaml"
    job_file.write_text("commands: nope\n")
    with patch("coreason_runner.main.sys.argv", ["coreason-runner-send", str(job_file)]):
        with pytest.raises(SystemExit) as excinfo:
            send()
    assert excinfo.value.code == 1
