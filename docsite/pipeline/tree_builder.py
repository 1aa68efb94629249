"""
Tree builder - turns a repository's docs folder at a release tag into an
ordered tree of directories and rendered pages.

For each directory:
1. List the remote entries (a missing path yields nothing)
2. Read the optional index.txt manifest
3. Build every page and subdirectory concurrently; directories with no page
   anywhere below them are pruned
4. Order the results once all of them are known, by manifest position when
   there is a manifest, else by key (a page before a directory of the same key)
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Union

from docsite.constants import INDEX_FILE_NAME, PAGE_SUFFIX, ROOT_FOLDER, UNKNOWN_DATE
from docsite.models import (
    CommitInfo,
    DirectoryContent,
    DirectoryNode,
    Documentation,
    FileNode,
    GitHubContent,
    GitHubRepository,
    Version,
)
from docsite.processors.base import ContentPipeline, ProcessingContext
from docsite.processors.titles import humanize, page_title

logger = logging.getLogger(__name__)


class ContentClient(Protocol):
    """The remote operations the tree builder needs."""

    async def list_directory(
        self, repo_full_name: str, path: str, ref: str
    ) -> Optional[List[GitHubContent]]:
        ...

    async def download_raw(self, url: str) -> str:
        ...

    async def commit_history(
        self, repo_full_name: str, path: str, ref: str, limit: int = 1
    ) -> List[CommitInfo]:
        ...


@dataclass
class TreeEntry:
    """A built child of a directory before ordering."""
    key: str  # mapping key: file name without suffix, or directory name
    name: str  # remote name, e.g. "readme.md"
    node: Union[FileNode, DirectoryNode]


def parse_manifest(text: str) -> List[str]:
    """Child keys listed in an index.txt, one per line, in display order."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def _kind_rank(entry: TreeEntry) -> int:
    return 1 if isinstance(entry.node, DirectoryNode) else 0


def order_entries(entries: List[TreeEntry], manifest: Optional[List[str]]) -> List[TreeEntry]:
    """
    Sort directory entries for display.

    Without a manifest entries are sorted by key. With one, entries it lists
    come first in manifest order and the rest follow sorted by key. A page
    may be listed either by key ("readme") or by file name ("readme.md").
    A page sorts before a directory with the same key.
    """
    if manifest is None:
        return sorted(entries, key=lambda e: (e.key, _kind_rank(e)))

    positions: Dict[str, int] = {}
    for index, name in enumerate(manifest):
        positions.setdefault(name, index)

    def rank(entry: TreeEntry):
        index = positions.get(entry.key, positions.get(entry.name))
        if index is None:
            return (1, 0, entry.key, _kind_rank(entry))
        return (0, index, entry.key, _kind_rank(entry))

    return sorted(entries, key=rank)


class TreeBuilder:
    """
    Builds the documentation tree of one repository version.

    Usage:
        builder = TreeBuilder(client, pipeline)
        documentation = await builder.fetch_documentation(repository, version)
    """

    def __init__(
        self,
        client: ContentClient,
        pipeline: ContentPipeline,
        root_folder: str = ROOT_FOLDER,
    ):
        self.client = client
        self.pipeline = pipeline
        self.root_folder = root_folder.strip("/")

    async def fetch_documentation(
        self,
        repository: GitHubRepository,
        version: Version,
    ) -> Optional[Documentation]:
        """Documentation of a version, or None if its docs folder has no pages."""
        content = await self.build_tree(repository, version)
        if not content:
            logger.info(f"No documentation in {repository.full_name}@{version.version}")
            return None
        return Documentation(content=content)

    async def build_tree(
        self,
        repository: GitHubRepository,
        version: Version,
    ) -> DirectoryContent:
        """Ordered root content of the docs folder, empty if there is none."""
        return await self._build_directory(repository, version, self.root_folder)

    async def _build_directory(
        self,
        repository: GitHubRepository,
        version: Version,
        path: str,
    ) -> DirectoryContent:
        contents = await self.client.list_directory(repository.full_name, path, version.version)
        if contents is None:
            return {}

        manifest_file = next(
            (c for c in contents if c.type == "file" and c.name == INDEX_FILE_NAME),
            None,
        )
        children = [c for c in contents if c is not manifest_file]

        manifest, *built = await asyncio.gather(
            self._read_manifest(manifest_file),
            *(self._build_entry(repository, version, path, c) for c in children),
        )
        entries = [e for e in built if e is not None]

        result: DirectoryContent = {}
        for entry in order_entries(entries, manifest):
            if entry.key in result:
                logger.warning(
                    f"Duplicate key {entry.key!r} in {repository.full_name}/{path}"
                    f"@{version.version}, keeping the first entry"
                )
                continue
            result[entry.key] = entry.node
        return result

    async def _read_manifest(self, content: Optional[GitHubContent]) -> Optional[List[str]]:
        if content is None or not content.download_url:
            return None
        return parse_manifest(await self.client.download_raw(content.download_url))

    async def _build_entry(
        self,
        repository: GitHubRepository,
        version: Version,
        parent: str,
        content: GitHubContent,
    ) -> Optional[TreeEntry]:
        if content.type == "file" and content.name.endswith(PAGE_SUFFIX):
            return await self._build_page(repository, version, parent, content)

        if content.type == "dir":
            children = await self._build_directory(repository, version, content.path)
            if not children:
                logger.debug(f"Pruning empty directory {repository.full_name}/{content.path}")
                return None
            node = DirectoryNode(
                name=content.name,
                display_name=humanize(content.name),
                content=children,
            )
            return TreeEntry(key=content.name, name=content.name, node=node)

        return None

    async def _build_page(
        self,
        repository: GitHubRepository,
        version: Version,
        parent: str,
        content: GitHubContent,
    ) -> Optional[TreeEntry]:
        if not content.download_url:
            logger.warning(f"No download URL for {repository.full_name}/{content.path}, skipping")
            return None

        key = content.name[: -len(PAGE_SUFFIX)]
        directory_path = [s for s in parent[len(self.root_folder):].split("/") if s]

        commits, raw = await asyncio.gather(
            self.client.commit_history(repository.full_name, content.path, version.version, limit=1),
            self.client.download_raw(content.download_url),
        )
        last_update_date = commits[0].date if commits else UNKNOWN_DATE

        ctx = ProcessingContext(
            repository=repository,
            version=version,
            content=content,
            root_folder=self.root_folder,
        )
        html = await self.pipeline.process(raw, ctx)

        node = FileNode(
            name=key,
            display_name=page_title(key, html),
            content=html,
            path=[*directory_path, key],
            last_update_date=last_update_date,
        )
        return TreeEntry(key=key, name=content.name, node=node)
