"""Shared fixtures for the documentation site tests."""

import pytest

from docsite.config import Settings
from docsite.context import DocsContext
from docsite.models import GitHubContent, GitHubRepository, Version, Versioning
from docsite.processors import ContentPipeline, MacroProcessor, MarkdownProcessor, ProcessingContext
from tests.fakes import FakeGitHub, FakeMetadata

ORG = "unnamed"


@pytest.fixture
def repository() -> GitHubRepository:
    return GitHubRepository(name="foo", full_name=f"{ORG}/foo", description="Foo library")


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, github_organization=ORG)


@pytest.fixture
def metadata() -> FakeMetadata:
    return FakeMetadata({
        "team.unnamed:creative": Versioning(latest="1.3.0-SNAPSHOT", release="1.2.0"),
        "team.unnamed:snapshot-only": Versioning(latest="0.1.0-SNAPSHOT"),
    })


@pytest.fixture
def pipeline(metadata) -> ContentPipeline:
    return ContentPipeline([MacroProcessor(metadata), MarkdownProcessor()])


@pytest.fixture
def make_ctx(repository):
    """Build a ProcessingContext for a page at a repository path."""

    def _make(path: str = "docs/guide/setup.md", version: str = "2.0.0", latest: bool = False):
        return ProcessingContext(
            repository=repository,
            version=Version(version=version, latest=latest),
            content=GitHubContent(name=path.rsplit("/", 1)[-1], path=path, type="file"),
        )

    return _make


@pytest.fixture
def site_github() -> FakeGitHub:
    """
    An organization with one documented project in two releases, one project
    without releases, and repositories that must not be published.
    """
    v2 = {
        "docs/index.txt": "guide\nreadme\n",
        "docs/readme.md": "# Welcome\n\nSee the [setup](guide/setup.md).",
        "docs/guide/setup.md": "# Setup\n\nInstall `%%REPLACE_latestRelease{team.unnamed:creative}%%`.",
        "docs/guide/advanced.md": "## Advanced usage\n",
    }
    v1 = {
        "docs/readme.md": "# Welcome (old)\n",
        "docs/guide/setup.md": "# Setup (old)\n",
    }
    return FakeGitHub(
        trees={f"{ORG}/foo@2.0.0": v2, f"{ORG}/foo@1.0.0": v1},
        releases={f"{ORG}/foo": ["2.0.0", "1.0.0"]},
        repositories=[
            GitHubRepository(name="foo", full_name=f"{ORG}/foo", stargazers_count=12),
            GitHubRepository(name="bar", full_name=f"{ORG}/bar"),
            GitHubRepository(name="secret", full_name=f"{ORG}/secret", private=True),
            GitHubRepository(name="legacy", full_name=f"{ORG}/legacy", archived=True),
        ],
        commits={"docs/readme.md": "2024-03-01T10:00:00Z"},
    )


@pytest.fixture
def context(settings, site_github, metadata) -> DocsContext:
    return DocsContext(settings, site_github, metadata)
