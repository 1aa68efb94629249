"""
Project provider - builds the project map of a GitHub organization.

Private and archived repositories are not published.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Protocol

from docsite.models import GitHubRepository, Project
from docsite.pipeline.versions import VersionResolver

logger = logging.getLogger(__name__)


class RepositorySource(Protocol):
    async def list_organization_repositories(self, organization: str) -> List[GitHubRepository]:
        ...


class ProjectProvider:
    def __init__(
        self,
        client: RepositorySource,
        version_resolver: VersionResolver,
        organization: str,
    ):
        self.client = client
        self.version_resolver = version_resolver
        self.organization = organization

    async def fetch_projects(self) -> Dict[str, Project]:
        """Every public, active repository of the organization as a Project."""
        repositories = await self.client.list_organization_repositories(self.organization)
        published = [r for r in repositories if not (r.private or r.archived)]
        logger.info(
            f"Building {len(published)} of {len(repositories)} repositories of {self.organization}"
        )

        built = await asyncio.gather(*(self._build_project(r) for r in published))
        return {project.name: project for project in built if project is not None}

    async def _build_project(self, repository: GitHubRepository) -> Optional[Project]:
        try:
            versions = await self.version_resolver.resolve_versions(repository)
        except Exception:
            logger.exception(f"Failed to resolve versions of {repository.full_name}, skipping")
            return None

        return Project(
            name=repository.name,
            display_name=repository.name,
            description=repository.description or "",
            stars=repository.stargazers_count,
            versions=versions.versions,
            latest_version=versions.latest,
        )
