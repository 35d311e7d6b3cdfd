"""Tests for version-control sync."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from relay.middleware.error_handler import ExternalSyncException
from relay.publishing import GitSync


def fake_process(returncode: int = 0, stdout: bytes = b"", stderr: bytes = b"") -> MagicMock:
    process = MagicMock()
    process.returncode = returncode
    process.communicate = AsyncMock(return_value=(stdout, stderr))
    return process


@pytest.fixture
def git_sync(workspace) -> GitSync:
    return GitSync(str(workspace), remote="origin", branch="main")


async def test_sync_runs_add_commit_push(git_sync, workspace):
    exec_mock = AsyncMock(side_effect=[fake_process(), fake_process(), fake_process()])

    with patch("relay.publishing.git_sync.asyncio.create_subprocess_exec", exec_mock):
        await git_sync.sync("publish: Hello World")

    commands = [call.args for call in exec_mock.call_args_list]
    assert commands == [
        ("git", "add", "--", "src/content", "public/media"),
        ("git", "commit", "-m", "publish: Hello World"),
        ("git", "push", "origin", "main"),
    ]
    assert all(call.kwargs["cwd"] == str(workspace) for call in exec_mock.call_args_list)


async def test_sync_stops_at_first_failing_step(git_sync):
    exec_mock = AsyncMock(side_effect=[
        fake_process(),
        fake_process(returncode=1, stderr=b"nothing to commit"),
    ])

    with patch("relay.publishing.git_sync.asyncio.create_subprocess_exec", exec_mock):
        with pytest.raises(ExternalSyncException) as exc_info:
            await git_sync.sync("publish: Hello")

    assert exec_mock.call_count == 2
    details = exc_info.value.details
    assert details["service"] == "git"
    assert details["returncode"] == 1
    assert details["stderr"] == "nothing to commit"


async def test_sync_reports_missing_executable(workspace):
    git_sync = GitSync(str(workspace), git_executable=str(workspace / "no-such-git"))

    with pytest.raises(ExternalSyncException) as exc_info:
        await git_sync.sync("publish: Hello")

    assert exc_info.value.status_code == 502
    assert "no-such-git" in exc_info.value.details["command"]


def test_from_settings(settings):
    git_sync = GitSync.from_settings(settings.model_copy(update={"git_branch": "release"}))

    assert git_sync.workspace_path == settings.workspace_path
    assert git_sync.paths == ["src/content", "public/media"]
    assert git_sync.branch == "release"
