"""
Content processors - the transformations applied to every documentation page:
1. Expand version macros (%%REPLACE_...%%) from Maven metadata
2. Render markdown to HTML and rewrite links and images
"""

from .base import ContentPipeline, ContentProcessor, ProcessingContext
from .macros import MacroProcessor, MavenMetadataClient
from .markdown_to_html import MarkdownProcessor
from .titles import humanize, page_title

__all__ = [
    "ContentPipeline",
    "ContentProcessor",
    "ProcessingContext",
    "MacroProcessor",
    "MavenMetadataClient",
    "MarkdownProcessor",
    "humanize",
    "page_title",
]
