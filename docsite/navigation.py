"""Previous/next navigation and sidebar outline over a documentation tree."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from docsite.models import DirectoryContent, DirectoryNode, FileNode


@dataclass(frozen=True)
class Neighbors:
    previous: Optional[FileNode] = None
    next: Optional[FileNode] = None


def find_directory(tree: DirectoryContent, segments: Sequence[str]) -> Optional[DirectoryContent]:
    """Content of the directory reached by walking segments from the root."""
    current = tree
    for segment in segments:
        node = current.get(segment)
        if not isinstance(node, DirectoryNode):
            return None
        current = node.content
    return current


def first_file(content: DirectoryContent) -> Optional[FileNode]:
    """First page of a directory in display order, searching depth first."""
    for node in content.values():
        if isinstance(node, FileNode):
            return node
        found = first_file(node.content)
        if found is not None:
            return found
    return None


def neighbors(tree: DirectoryContent, current_path: Sequence[str]) -> Neighbors:
    """
    Pages before and after the current one.

    Only the current page's directory is scanned. The previous page is the
    closest sibling page before it; subdirectories are not entered. The next
    page is the closest following sibling page, or the first page of a
    following subdirectory, whichever comes first. Both are None when the
    current page cannot be found.
    """
    if not current_path:
        return Neighbors()

    directory = find_directory(tree, current_path[:-1])
    if directory is None:
        return Neighbors()

    name = current_path[-1]
    previous: Optional[FileNode] = None
    found = False

    for node in directory.values():
        if isinstance(node, DirectoryNode):
            if found:
                candidate = first_file(node.content)
                if candidate is not None:
                    return Neighbors(previous=previous, next=candidate)
            continue
        if found:
            return Neighbors(previous=previous, next=node)
        if node.name == name:
            found = True
            continue
        previous = node

    if not found:
        return Neighbors()
    return Neighbors(previous=previous, next=None)


def outline(tree: DirectoryContent) -> List[Dict[str, Any]]:
    """Sidebar structure of a tree: names and paths, no page content."""
    items = []
    for key, node in tree.items():
        if isinstance(node, FileNode):
            items.append({
                "type": "file",
                "key": key,
                "display_name": node.display_name,
                "path": list(node.path),
            })
        else:
            items.append({
                "type": "dir",
                "key": key,
                "display_name": node.display_name,
                "children": outline(node.content),
            })
    return items
