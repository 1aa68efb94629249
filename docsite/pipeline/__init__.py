"""
Pipeline module for the documentation site.

This module builds the project map from GitHub:
1. List the organization's public repositories
2. Resolve each repository's versions from its releases
3. Build the documentation tree of every version at its release tag
4. Render each page through the content processors
"""

from .tree_builder import TreeBuilder, TreeEntry, order_entries, parse_manifest
from .versions import ResolvedVersions, VersionResolver
from .projects import ProjectProvider

__all__ = [
    "TreeBuilder",
    "TreeEntry",
    "order_entries",
    "parse_manifest",
    "ResolvedVersions",
    "VersionResolver",
    "ProjectProvider",
]
