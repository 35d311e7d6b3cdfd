"""Artifact Renderer

Turns a published post and its tag names into a markdown file with YAML
frontmatter, and decides where that file lives in the workspace.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path, PurePosixPath
from typing import Any, Dict, Iterable, Optional

import yaml

from relay.config import Settings
from relay.models.enums import PostStatus
from relay.models.schemas import MediaResponse, PostResponse

logger = logging.getLogger(__name__)

FRONTMATTER_DELIMITER = "---"


@dataclass(frozen=True)
class RenderedArtifact:
    """Rendered file content and its workspace-relative path."""
    content: str
    path: str


class ArtifactRenderer:
    """Renders posts into workspace files.

    ``render`` and ``locate`` are pure; ``write``, ``remove`` and
    ``count_media`` touch the filesystem and let ``OSError`` propagate.
    """

    def __init__(
        self,
        workspace_path: str,
        content_dir: str = "src/content",
        extension: str = ".md",
        public_dir: str = "public",
    ):
        self.workspace = Path(workspace_path)
        self.content_dir = PurePosixPath(content_dir)
        self.extension = extension
        self.public_dir = public_dir

    @classmethod
    def from_settings(cls, settings: Settings) -> "ArtifactRenderer":
        return cls(
            workspace_path=settings.workspace_path,
            content_dir=settings.content_dir,
            extension=settings.artifact_extension,
            public_dir=PurePosixPath(settings.media_dir).parts[0],
        )

    # -- Pure transformations ------------------------------------------------

    def render(self, post: PostResponse, tag_names: Iterable[str]) -> RenderedArtifact:
        """Build the frontmatter + body artifact for a post."""
        frontmatter = self.frontmatter(post, tag_names)
        content = f"{FRONTMATTER_DELIMITER}\n{frontmatter}{FRONTMATTER_DELIMITER}\n\n{post.body}\n"
        return RenderedArtifact(content=content, path=self.locate(post))

    def locate(self, post: PostResponse) -> str:
        """Workspace-relative path of a post's artifact."""
        return str(self.content_dir / post.collection / f"{post.slug}{self.extension}")

    def frontmatter(self, post: PostResponse, tag_names: Iterable[str]) -> str:
        """YAML metadata block (without delimiters)."""
        data: Dict[str, Any] = {
            "title": post.title,
            "pubDate": _isoformat(post.published_at or post.created_at),
            "description": post.summary or "",
            "tags": [_tag_name(t) for t in tag_names],
            "draft": post.status != PostStatus.PUBLISHED,
        }
        return yaml.safe_dump(
            data,
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
            width=float("inf"),
        )

    # -- Filesystem ----------------------------------------------------------

    def resolve(self, relative_path: str) -> Path:
        """Absolute location of a workspace-relative path."""
        return self.workspace / relative_path

    def write(self, artifact: RenderedArtifact) -> Path:
        """Write an artifact, creating parent directories. Last write wins."""
        target = self.resolve(artifact.path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(artifact.content, encoding="utf-8")
        logger.info(f"Exported: {target}", extra={"path": artifact.path})
        return target

    def remove(self, post: PostResponse) -> bool:
        """Delete a post's artifact if present. Returns whether a file was removed."""
        target = self.resolve(self.locate(post))
        try:
            target.unlink()
        except FileNotFoundError:
            logger.debug(f"No exported file to delete at {target}")
            return False
        logger.info(f"Deleted exported file: {target}", extra={"path": str(target)})
        return True

    def count_media(self, media: Iterable[MediaResponse]) -> int:
        """Account for a post's media files, warning about missing ones."""
        count = 0
        for item in media:
            source = self.workspace / self.public_dir / item.storage_path.lstrip("/")
            if not source.exists():
                logger.warning(f"Media file not found: {source}", extra={"media_id": str(item.id)})
            count += 1
        return count


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _tag_name(tag: Any) -> str:
    # Accept plain names or tag records
    return tag if isinstance(tag, str) else tag.name

