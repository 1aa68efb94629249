"""Content processor protocol and the sequential pipeline that runs them."""

import logging
from dataclasses import dataclass
from typing import List, Protocol, Sequence

from docsite.constants import ROOT_FOLDER
from docsite.models import GitHubContent, GitHubRepository, Version

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessingContext:
    """What a processor knows about the page it transforms."""
    repository: GitHubRepository
    version: Version
    content: GitHubContent
    root_folder: str = ROOT_FOLDER  # repository folder the site is built from

    @property
    def directory(self) -> str:
        """Repository-relative directory of the page, e.g. "docs/guide"."""
        path = self.content.path
        return path.rsplit("/", 1)[0] if "/" in path else ""

    @property
    def docs_directory(self) -> str:
        """Directory of the page below the docs root, e.g. "guide" ("" at the root)."""
        directory = self.directory
        root = self.root_folder.strip("/")
        if directory == root:
            return ""
        if directory.startswith(root + "/"):
            return directory[len(root) + 1:]
        return directory


class ContentProcessor(Protocol):
    """Transforms a page's text; processors are chained in a fixed order."""

    async def __call__(self, text: str, ctx: ProcessingContext) -> str:
        ...


class ContentPipeline:
    """Runs processors strictly in sequence, each one fed the previous output."""

    def __init__(self, processors: Sequence[ContentProcessor]):
        self.processors: List[ContentProcessor] = list(processors)

    async def process(self, text: str, ctx: ProcessingContext) -> str:
        for processor in self.processors:
            text = await processor(text, ctx)
        return text

    def __len__(self) -> int:
        return len(self.processors)
