"""
Tests for the documentation tree builder

Covers:
- Manifest and lexicographic ordering
- Pruning of directories without pages
- Node paths, titles and update dates
- Missing docs folders
"""

import pytest

from docsite.constants import UNKNOWN_DATE
from docsite.models import DirectoryNode, FileNode, Version
from docsite.pipeline.tree_builder import TreeBuilder, TreeEntry, order_entries, parse_manifest
from tests.fakes import FakeGitHub, folder, page, walk

REPO = "unnamed/foo"


def build(files, pipeline, **kwargs) -> TreeBuilder:
    github = FakeGitHub(trees={f"{REPO}@1.0.0": files}, **kwargs)
    return TreeBuilder(github, pipeline)


def entry(key: str, name: str = None) -> TreeEntry:
    return TreeEntry(key=key, name=name or f"{key}.md", node=page(key))


# =============================================================================
# Ordering
# =============================================================================


class TestOrderEntries:
    """Tests for directory entry ordering."""

    def test_without_manifest_sorted_by_key(self):
        """Verify entries sort by key without a manifest."""
        entries = [entry("zeta"), entry("alpha"), entry("Beta"), entry("beta")]

        ordered = order_entries(entries, None)

        assert [e.key for e in ordered] == ["Beta", "alpha", "beta", "zeta"]

    def test_manifest_first_then_rest_sorted(self):
        """Verify manifest entries come first, then the rest by key."""
        entries = [entry("alpha"), entry("gamma"), entry("readme"), entry("zeta"), entry("beta")]

        ordered = order_entries(entries, ["zeta", "readme"])

        assert [e.key for e in ordered] == ["zeta", "readme", "alpha", "beta", "gamma"]

    def test_manifest_may_name_files_with_suffix(self):
        """Verify the manifest may name pages with their suffix."""
        entries = [entry("alpha"), entry("readme")]

        ordered = order_entries(entries, ["readme.md", "alpha"])

        assert [e.key for e in ordered] == ["readme", "alpha"]

    def test_manifest_names_without_entries_are_ignored(self):
        """Verify manifest lines naming nothing are ignored."""
        entries = [entry("b"), entry("a")]

        ordered = order_entries(entries, ["missing", "b"])

        assert [e.key for e in ordered] == ["b", "a"]

    def test_page_sorts_before_directory_with_same_key(self):
        """Verify a page and a directory sharing a key always come out page first."""
        directory = TreeEntry(key="guide", name="guide", node=folder("guide", page("guide", "setup")))

        for entries in ([directory, entry("guide")], [entry("guide"), directory]):
            assert [type(e.node) for e in order_entries(entries, None)] == [FileNode, DirectoryNode]
            assert [type(e.node) for e in order_entries(entries, ["guide"])] == [FileNode, DirectoryNode]

    def test_parse_manifest_skips_blank_lines(self):
        """Verify blank manifest lines are skipped."""
        assert parse_manifest("guide\n\n  readme  \r\n\n") == ["guide", "readme"]


# =============================================================================
# Building
# =============================================================================


class TestTreeBuilder:
    """Tests for building a version's tree."""

    @pytest.mark.asyncio
    async def test_manifest_orders_root(self, repository, pipeline):
        """Verify the root manifest orders the root."""
        builder = build(
            {
                "docs/readme.md": "# Readme",
                "docs/guide/setup.md": "# Setup",
                "docs/index.txt": "guide\nreadme",
            },
            pipeline,
        )

        tree = await builder.build_tree(repository, Version(version="1.0.0"))

        assert list(tree) == ["guide", "readme"]
        assert isinstance(tree["guide"], DirectoryNode)
        assert tree["guide"].display_name == "Guide"
        assert tree["guide"].content["setup"].path == ["guide", "setup"]
        assert "index" not in tree

    @pytest.mark.asyncio
    async def test_no_manifest_sorted_regardless_of_arrival(self, repository, pipeline):
        """Verify the order does not depend on download timing."""
        builder = build(
            {
                "docs/a.md": "# A",
                "docs/b.md": "# B",
                "docs/c.md": "# C",
            },
            pipeline,
            delays={"docs/a.md": 0.05, "docs/b.md": 0.02},
        )

        tree = await builder.build_tree(repository, Version(version="1.0.0"))

        assert list(tree) == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_directories_without_pages_are_pruned(self, repository, pipeline):
        """Verify directories with no page below them are pruned."""
        builder = build(
            {
                "docs/readme.md": "# Readme",
                "docs/assets/logo.png": "png",
                "docs/empty/nested/notes.txt": "notes",
                "docs/guide/img/shot.png": "png",
                "docs/guide/setup.md": "# Setup",
            },
            pipeline,
        )

        tree = await builder.build_tree(repository, Version(version="1.0.0"))

        assert list(tree) == ["guide", "readme"]
        assert list(tree["guide"].content) == ["setup"]

    @pytest.mark.asyncio
    async def test_node_invariants(self, repository, pipeline):
        """Verify node paths, names and titles across the tree."""
        builder = build(
            {
                "docs/readme.md": "# Readme",
                "docs/guide/setup.md": "# Setup",
                "docs/guide/deep/internals.md": "Internals without a heading",
                "docs/api_reference/client.md": "## Client API",
            },
            pipeline,
        )

        tree = await builder.build_tree(repository, Version(version="1.0.0"))

        for keys, node in walk(tree):
            if isinstance(node, FileNode):
                assert node.path == list(keys)
                assert node.name == keys[-1]
            else:
                assert any(isinstance(n, FileNode) for _, n in walk(node.content))

        assert tree["api_reference"].display_name == "Api Reference"
        assert tree["api_reference"].content["client"].display_name == "Client API"
        deep = tree["guide"].content["deep"].content["internals"]
        assert deep.display_name == "Internals"
        assert deep.path == ["guide", "deep", "internals"]

    @pytest.mark.asyncio
    async def test_pages_are_rendered_through_pipeline(self, repository, pipeline):
        """Verify pages go through the macro and markdown stages."""
        builder = build(
            {"docs/install.md": "# Install\n\nUse %%REPLACE_latestRelease{team.unnamed:creative}%%."},
            pipeline,
        )

        tree = await builder.build_tree(repository, Version(version="1.0.0"))

        html = tree["install"].content
        assert "<h1>Install</h1>" in html
        assert "Use 1.2.0." in html

    @pytest.mark.asyncio
    async def test_last_update_date(self, repository, pipeline):
        """Verify pages carry their last commit date or unknown."""
        builder = build(
            {"docs/readme.md": "# Readme", "docs/faq.md": "# FAQ"},
            pipeline,
            commits={"docs/readme.md": "2024-03-01T10:00:00Z"},
        )

        tree = await builder.build_tree(repository, Version(version="1.0.0"))

        assert tree["readme"].last_update_date == "2024-03-01T10:00:00Z"
        assert tree["faq"].last_update_date == UNKNOWN_DATE

    @pytest.mark.asyncio
    async def test_missing_docs_folder(self, repository, pipeline):
        """Verify a repository without a docs folder has no documentation."""
        builder = build({"README.md": "# Foo"}, pipeline)

        tree = await builder.build_tree(repository, Version(version="1.0.0"))
        documentation = await builder.fetch_documentation(repository, Version(version="1.0.0"))

        assert tree == {}
        assert documentation is None

    @pytest.mark.asyncio
    async def test_docs_folder_without_pages(self, repository, pipeline):
        """Verify a docs folder without pages has no documentation."""
        builder = build({"docs/logo.png": "png", "docs/index.txt": "logo"}, pipeline)

        documentation = await builder.fetch_documentation(repository, Version(version="1.0.0"))

        assert documentation is None

    @pytest.mark.asyncio
    async def test_duplicate_keys_keep_one_entry(self, repository, pipeline):
        """Verify a page wins over a directory with the same key."""
        builder = build(
            {"docs/guide.md": "# Guide page", "docs/guide/setup.md": "# Setup"},
            pipeline,
        )

        tree = await builder.build_tree(repository, Version(version="1.0.0"))

        assert list(tree) == ["guide"]
        assert isinstance(tree["guide"], FileNode)
        assert tree["guide"].display_name == "Guide page"

    @pytest.mark.asyncio
    async def test_reads_at_version_tag(self, repository, pipeline):
        """Verify the tree is read at the version tag."""
        github = FakeGitHub(trees={
            f"{REPO}@1.0.0": {"docs/old.md": "# Old"},
            f"{REPO}@2.0.0": {"docs/new.md": "# New"},
        })
        builder = TreeBuilder(github, pipeline)

        tree = await builder.build_tree(repository, Version(version="2.0.0"))

        assert list(tree) == ["new"]
        assert all(call.startswith("2.0.0:") for call in github.listed)

    @pytest.mark.asyncio
    async def test_custom_root_folder(self, repository, pipeline):
        """Verify pages under another root folder get root-relative paths and links."""
        github = FakeGitHub(trees={f"{REPO}@1.0.0": {
            "documentation/guide/setup.md": "# Setup\n\nSee [advanced](advanced.md).",
            "documentation/guide/advanced.md": "# Advanced",
            "docs/ignored.md": "# Ignored",
        }})
        builder = TreeBuilder(github, pipeline, root_folder="documentation")

        tree = await builder.build_tree(repository, Version(version="1.0.0"))

        assert list(tree) == ["guide"]
        setup = tree["guide"].content["setup"]
        assert setup.path == ["guide", "setup"]
        assert 'href="/docs/foo/1.0.0/guide/advanced"' in setup.content
