from pydantic import BaseModel, ConfigDict, Field
from typing import Annotated, List, Optional, Dict, Literal, Union

from docsite.constants import UNKNOWN_DATE


# GitHub payloads
class GitHubRepository(BaseModel):
    name: str  # e.g. "creative"
    full_name: str  # e.g. "unnamed/creative"
    private: bool = False
    html_url: str = ""
    description: Optional[str] = None
    stargazers_count: int = 0
    archived: bool = False


class GitHubContent(BaseModel):
    """A single entry returned by the contents API."""
    name: str
    path: str  # repository-relative, e.g. "docs/guide/setup.md"
    type: str  # file, dir, symlink, submodule
    download_url: Optional[str] = None
    html_url: Optional[str] = None


class Release(BaseModel):
    tag_name: str
    name: Optional[str] = None
    published_at: Optional[str] = None


class CommitInfo(BaseModel):
    sha: str
    date: str  # committer date, ISO-8601


class Versioning(BaseModel):
    """Maven metadata for a single artifact."""
    latest: str
    release: Optional[str] = None


# Documentation tree
class FileNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["file"] = "file"
    name: str
    display_name: str
    content: str  # rendered HTML
    path: List[str]  # segments from the docs root, last one without extension
    last_update_date: str = UNKNOWN_DATE


class DirectoryNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["dir"] = "dir"
    name: str
    display_name: str
    content: Dict[str, "Node"] = Field(default_factory=dict)


Node = Annotated[Union[FileNode, DirectoryNode], Field(discriminator="type")]
DirectoryNode.model_rebuild()

# Ordered child key -> node mapping of a directory
DirectoryContent = Dict[str, Node]


class Documentation(BaseModel):
    model_config = ConfigDict(frozen=True)

    content: DirectoryContent = Field(default_factory=dict)


class Version(BaseModel):
    model_config = ConfigDict(frozen=True)

    version: str  # release tag, e.g. "1.0.0"
    latest: bool = False
    documentation: Optional[Documentation] = None


class Project(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    display_name: str
    description: str = ""
    stars: int = 0
    versions: Dict[str, Version] = Field(default_factory=dict)
    latest_version: Optional[Version] = None

    def has_documentation(self) -> bool:
        """Whether at least one version carries documentation."""
        return any(v.documentation is not None for v in self.versions.values())
