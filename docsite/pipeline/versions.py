"""
Version resolver - one Version per GitHub release, each with its own
documentation tree built at the release tag.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Optional

from docsite.models import Documentation, GitHubRepository, Release, Version
from docsite.pipeline.tree_builder import TreeBuilder

logger = logging.getLogger(__name__)

# Lists a repository's releases newest first, given its full name
ReleaseSource = Callable[[str], Awaitable[List[Release]]]


@dataclass
class ResolvedVersions:
    latest: Optional[Version] = None
    versions: Dict[str, Version] = field(default_factory=dict)


class VersionResolver:
    """
    Resolves the versions of a repository from its releases.

    The newest release is the latest version. A repository without releases
    has no versions and no documentation is fetched for it. Documentation is
    built for every version concurrently; a version whose build fails keeps
    no documentation and does not affect the others.
    """

    def __init__(self, list_releases: ReleaseSource, tree_builder: TreeBuilder):
        self.list_releases = list_releases
        self.tree_builder = tree_builder

    async def resolve_versions(self, repository: GitHubRepository) -> ResolvedVersions:
        releases = await self.list_releases(repository.full_name)
        if not releases:
            logger.info(f"No releases for {repository.full_name}")
            return ResolvedVersions()

        refs: List[Version] = []
        seen = set()
        for index, release in enumerate(releases):
            if release.tag_name in seen:
                continue
            seen.add(release.tag_name)
            refs.append(Version(version=release.tag_name, latest=index == 0))

        documentation = await asyncio.gather(
            *(self._fetch_documentation(repository, ref) for ref in refs)
        )

        versions: Dict[str, Version] = {}
        for ref, docs in zip(refs, documentation):
            versions[ref.version] = ref.model_copy(update={"documentation": docs})

        latest = versions[refs[0].version]
        logger.info(
            f"Resolved {len(versions)} versions for {repository.full_name} (latest {latest.version})"
        )
        return ResolvedVersions(latest=latest, versions=versions)

    async def _fetch_documentation(
        self,
        repository: GitHubRepository,
        version: Version,
    ) -> Optional[Documentation]:
        try:
            return await self.tree_builder.fetch_documentation(repository, version)
        except Exception:
            logger.exception(
                f"Failed to build documentation for {repository.full_name}@{version.version}"
            )
            return None
