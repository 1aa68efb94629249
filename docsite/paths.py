"""
Site paths of documentation pages.

A page lives at /docs/<project>/<version>/<dir>*/<file>. For the latest
version the version segment may also be written as "latest" or left out.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence

from docsite.constants import LATEST_ALIAS, ROOT_FOLDER
from docsite.models import DirectoryContent, FileNode, Project, Version
from docsite.navigation import first_file

DEFAULT_PREFIX = "/" + ROOT_FOLDER


class VersionStyle(str, Enum):
    """How the version segment of a path is written."""
    TAG = "tag"
    ALIAS = "alias"
    OMITTED = "omitted"


@dataclass(frozen=True)
class ResolvedPath:
    project: Project
    version: Version
    file: FileNode
    style: VersionStyle = VersionStyle.TAG


def to_path(
    project: Project,
    version: Version,
    file: FileNode,
    style: VersionStyle = VersionStyle.TAG,
    prefix: str = DEFAULT_PREFIX,
) -> str:
    """Site path of a page. ALIAS and OMITTED only apply to the latest version."""
    segments = [prefix.strip("/"), project.name]
    if style == VersionStyle.TAG or not version.latest:
        segments.append(version.version)
    elif style == VersionStyle.ALIAS:
        segments.append(LATEST_ALIAS)
    segments.extend(file.path)
    return "/" + "/".join(s for s in segments if s)


def resolved_to_path(resolved: ResolvedPath, prefix: str = DEFAULT_PREFIX) -> str:
    return to_path(resolved.project, resolved.version, resolved.file, resolved.style, prefix)


def find_file_node(tree: DirectoryContent, segments: Sequence[str]) -> Optional[FileNode]:
    """
    Page at a path inside a tree.

    A path ending at a directory gives that directory's first page, and an
    empty path the first page of the tree.
    """
    current = tree
    for index, segment in enumerate(segments):
        node = current.get(segment)
        if node is None:
            return None
        if isinstance(node, FileNode):
            return node if index == len(segments) - 1 else None
        current = node.content
    return first_file(current)


def split_path(path: str, prefix: str = DEFAULT_PREFIX) -> Optional[List[str]]:
    """Segments of a site path after the prefix, None if the prefix is missing."""
    segments = [s for s in path.split("?", 1)[0].split("/") if s]
    prefix_segments = [s for s in prefix.split("/") if s]
    if segments[: len(prefix_segments)] != prefix_segments:
        return None
    return segments[len(prefix_segments):]


def _candidates(project: Project, rest: List[str]):
    latest = project.latest_version
    if rest:
        head = rest[0]
        if head in project.versions:
            yield project.versions[head], rest[1:], VersionStyle.TAG
        elif head == LATEST_ALIAS and latest is not None:
            yield latest, rest[1:], VersionStyle.ALIAS
    if latest is not None:
        yield latest, rest, VersionStyle.OMITTED


def resolve_segments(projects: Dict[str, Project], segments: Sequence[str]) -> Optional[ResolvedPath]:
    """
    Resolve [<project>, <version>?, <path>...] to a page.

    The segment after the project is tried as a version tag, then as the
    "latest" alias, then as the start of a page path in the latest version.
    A version without documentation requested with no page path falls back
    to the first page of the latest version.
    """
    if not segments:
        return None

    project = projects.get(segments[0])
    if project is None:
        return None

    rest = list(segments[1:])
    for version, path, style in _candidates(project, rest):
        if version.documentation is None:
            continue
        file = find_file_node(version.documentation.content, path)
        if file is not None:
            return ResolvedPath(project=project, version=version, file=file, style=style)

    latest = project.latest_version
    if (
        len(rest) == 1
        and (rest[0] in project.versions or rest[0] == LATEST_ALIAS)
        and latest is not None
        and latest.documentation is not None
    ):
        file = first_file(latest.documentation.content)
        if file is not None:
            return ResolvedPath(project=project, version=latest, file=file)

    return None


def from_path(
    projects: Dict[str, Project],
    path: str,
    prefix: str = DEFAULT_PREFIX,
) -> Optional[ResolvedPath]:
    """Resolve a site path such as /docs/foo/2.0.0/guide/setup to a page."""
    segments = split_path(path, prefix)
    if segments is None:
        return None
    return resolve_segments(projects, segments)
