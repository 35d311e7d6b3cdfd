"""Workspace export: artifact rendering, git sync and webhook notification."""

from .git_sync import GitSync
from .orchestrator import PublishOrchestrator
from .renderer import ArtifactRenderer, RenderedArtifact
from .webhook import PUBLISHED_EVENT, WebhookNotifier

__all__ = [
    "ArtifactRenderer",
    "GitSync",
    "PUBLISHED_EVENT",
    "PublishOrchestrator",
    "RenderedArtifact",
    "WebhookNotifier",
]
