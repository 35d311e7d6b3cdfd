"""Version-Control Sync

Stages exported content and media in the workspace repository, commits
and pushes. Best-effort: failures are logged and raised to the
orchestrator, which swallows them. Nothing is retried or rolled back.
"""

import asyncio
import logging
from typing import Sequence

from relay.config import Settings
from relay.middleware.error_handler import ExternalSyncException

logger = logging.getLogger(__name__)


class GitSync:
    """Runs ``git add``, ``git commit`` and ``git push`` in the workspace."""

    def __init__(
        self,
        workspace_path: str,
        paths: Sequence[str] = ("src/content", "public/media"),
        remote: str = "origin",
        branch: str = "main",
        git_executable: str = "git",
    ):
        self.workspace_path = workspace_path
        self.paths = list(paths)
        self.remote = remote
        self.branch = branch
        self.git_executable = git_executable

    @classmethod
    def from_settings(cls, settings: Settings) -> "GitSync":
        return cls(
            workspace_path=settings.workspace_path,
            paths=(settings.content_dir, settings.media_dir),
            remote=settings.git_remote,
            branch=settings.git_branch,
        )

    async def sync(self, commit_message: str) -> None:
        """Stage, commit and push.

        Raises:
            ExternalSyncException: Any of the three steps failed.
        """
        try:
            await self._run("add", "--", *self.paths)
            await self._run("commit", "-m", commit_message)
            await self._run("push", self.remote, self.branch)
        except ExternalSyncException as e:
            logger.error(f"Git operation failed: {e.message}", extra={"details": e.details})
            raise

        logger.info(
            "Git commit and push successful",
            extra={"commit_message": commit_message, "branch": self.branch},
        )

    async def _run(self, *args: str) -> str:
        command = [self.git_executable, *args]
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                cwd=self.workspace_path,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ExternalSyncException(
                message=f"Could not run git {args[0]}: {e}",
                service="git",
                details={"command": " ".join(command)},
            ) from e

        stdout, stderr = await process.communicate()
        if process.returncode != 0:
            raise ExternalSyncException(
                message=f"git {args[0]} exited with status {process.returncode}",
                service="git",
                details={
                    "command": " ".join(command),
                    "returncode": process.returncode,
                    "stderr": stderr.decode("utf-8", errors="replace").strip(),
                },
            )

        logger.debug(f"git {args[0]} completed", extra={"cwd": self.workspace_path})
        return stdout.decode("utf-8", errors="replace")
