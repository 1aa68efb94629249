"""
Markdown to HTML - renders a page and rewrites its links and images.

Rendering uses Python-Markdown with GitHub-like extensions (tables, fenced
code highlighted by Pygments, autolinks, task lists, strikethrough). Raw HTML
in the source is escaped, not passed through, and links or images with a
scheme other than http(s) (or mailto for links) lose their URL.

Rewrites:
- <a href="other.md"> becomes /docs/<project>[/<tag>]/<path>, the tag being
  left out for the latest version
- <img src="img/x.png"> becomes the raw GitHub URL of the image at the tag
"""

import asyncio
import logging
import posixpath
from typing import Any, Dict, List
from urllib.parse import urlsplit

import markdown
from bs4 import BeautifulSoup

from docsite.constants import PAGE_SUFFIX
from docsite.processors.base import ProcessingContext

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS: List[str] = [
    "tables",
    "fenced_code",
    "codehilite",
    "pymdownx.magiclink",
    "pymdownx.tasklist",
    "pymdownx.tilde",
]

MARKDOWN_EXTENSION_CONFIGS: Dict[str, Dict[str, Any]] = {
    "codehilite": {
        "css_class": "highlight",
        "guess_lang": False,
    },
}

# URL schemes kept in the output; anything else (javascript:, data:, ...) is dropped
LINK_SCHEMES = frozenset({"http", "https", "mailto"})
IMAGE_SCHEMES = frozenset({"http", "https"})


def render_markdown(text: str) -> str:
    """Render markdown to an HTML fragment, escaping raw HTML."""
    md = markdown.Markdown(
        extensions=MARKDOWN_EXTENSIONS,
        extension_configs=MARKDOWN_EXTENSION_CONFIGS,
    )
    md.preprocessors.deregister("html_block")
    md.inlinePatterns.deregister("html")
    return md.convert(text)


def is_absolute_url(url: str) -> bool:
    parts = urlsplit(url)
    return bool(parts.scheme or parts.netloc)


def is_allowed_url(url: str, schemes=LINK_SCHEMES) -> bool:
    """Whether a URL is relative or uses one of the given schemes."""
    scheme = urlsplit(url.strip()).scheme.lower()
    return not scheme or scheme in schemes


def resolve_relative(directory: str, target: str) -> str:
    """
    Resolve target against directory, both relative to one root.

    Leading slashes in target mean the root; ".." never climbs above it.
    Returns the path without a leading slash.
    """
    resolved = posixpath.normpath(posixpath.join("/", directory, target))
    return resolved.lstrip("/")


def raw_content_url(raw_url: str, repo_full_name: str, ref: str, path: str) -> str:
    """URL of a file's raw content at an exact ref."""
    return f"{raw_url.rstrip('/')}/{repo_full_name}/{ref}/{path.lstrip('/')}"


class MarkdownProcessor:
    """Content processor turning markdown into link-rewritten HTML."""

    def __init__(
        self,
        docs_url_prefix: str = "/docs",
        raw_url: str = "https://raw.githubusercontent.com",
    ):
        self.docs_url_prefix = "/" + docs_url_prefix.strip("/")
        self.raw_url = raw_url

    async def __call__(self, text: str, ctx: ProcessingContext) -> str:
        return await asyncio.to_thread(self.render, text, ctx)

    def render(self, text: str, ctx: ProcessingContext) -> str:
        soup = BeautifulSoup(render_markdown(text), "html.parser")

        for anchor in soup.find_all("a", href=True):
            href = anchor["href"]
            if not is_allowed_url(href, LINK_SCHEMES):
                logger.warning(f"Dropping link with disallowed scheme in {ctx.content.path}: {href}")
                del anchor["href"]
            elif not is_absolute_url(href) and href.endswith(PAGE_SUFFIX):
                anchor["href"] = self.rewrite_href(href, ctx)

        for image in soup.find_all("img", src=True):
            src = image["src"]
            if not is_allowed_url(src, IMAGE_SCHEMES):
                logger.warning(f"Dropping image with disallowed scheme in {ctx.content.path}: {src}")
                del image["src"]
            elif not is_absolute_url(src):
                image["src"] = self.rewrite_src(src, ctx)

        return str(soup)

    def rewrite_href(self, href: str, ctx: ProcessingContext) -> str:
        """Turn a relative page link into a site path."""
        target = resolve_relative(ctx.docs_directory, href[: -len(PAGE_SUFFIX)])
        segments = [self.docs_url_prefix.strip("/"), ctx.repository.name]
        if not ctx.version.latest:
            segments.append(ctx.version.version)
        segments.append(target)
        return "/" + "/".join(s for s in segments if s)

    def rewrite_src(self, src: str, ctx: ProcessingContext) -> str:
        """Turn a relative image source into its raw GitHub URL at the version tag."""
        path = resolve_relative(ctx.directory, src)
        return raw_content_url(self.raw_url, ctx.repository.full_name, ctx.version.version, path)
