"""
Process-wide documentation context.

Owns the long-lived pieces: HTTP clients, caches, the content pipeline and
the providers built on them. Create one per process (or per test), and close
it when done.
"""

import logging
from typing import Dict, Optional

from docsite.cache import TTLCache
from docsite.config import Settings, get_settings
from docsite.github.client import GitHubClient
from docsite.models import Project, Release
from docsite.pipeline.projects import ProjectProvider
from docsite.pipeline.tree_builder import TreeBuilder
from docsite.pipeline.versions import VersionResolver
from docsite.processors import (
    ContentPipeline,
    MacroProcessor,
    MarkdownProcessor,
    MavenMetadataClient,
)

logger = logging.getLogger(__name__)


class DocsContext:
    """
    Usage:
        context = DocsContext.from_settings()
        projects = await context.get_projects()
        await context.close()
    """

    def __init__(
        self,
        settings: Settings,
        github: GitHubClient,
        maven: MavenMetadataClient,
        pipeline: Optional[ContentPipeline] = None,
    ):
        self.settings = settings
        self.github = github
        self.maven = maven
        self.pipeline = pipeline or ContentPipeline([
            MacroProcessor(maven),
            MarkdownProcessor(
                docs_url_prefix=settings.docs_url_prefix,
                raw_url=settings.github_raw_url,
            ),
        ])

        self.release_cache: TTLCache[list[Release]] = TTLCache(
            github.list_releases, "releases", ttl_seconds=settings.release_cache_ttl
        )
        self.tree_builder = TreeBuilder(github, self.pipeline)
        self.version_resolver = VersionResolver(self.release_cache.get, self.tree_builder)
        self.project_provider = ProjectProvider(
            github, self.version_resolver, settings.github_organization
        )
        self.project_cache: TTLCache[Dict[str, Project]] = TTLCache(
            self.project_provider.fetch_projects, "projects", ttl_seconds=settings.project_cache_ttl
        )

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "DocsContext":
        settings = settings or get_settings()
        github = GitHubClient(
            access_token=settings.github_access_token,
            base_url=settings.github_api_url,
            max_concurrency=settings.github_max_concurrency,
            timeout=settings.http_timeout,
        )
        maven = MavenMetadataClient(
            base_url=settings.nexus_url,
            repository=settings.maven_repository,
            timeout=settings.http_timeout,
        )
        return cls(settings, github, maven)

    async def get_projects(self) -> Dict[str, Project]:
        return await self.project_cache.get()

    async def close(self):
        await self.github.close()
        await self.maven.close()
        logger.info("Documentation context closed")
