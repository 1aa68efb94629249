"""Exceptions raised while fetching and rendering documentation."""

from typing import Optional


class DocsiteError(Exception):
    """Base error for the documentation site."""

    pass


class GitHubError(DocsiteError):
    """A GitHub request failed or returned something unexpected."""

    def __init__(
        self,
        message: str,
        repository: Optional[str] = None,
        ref: Optional[str] = None,
        path: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.repository = repository
        self.ref = ref
        self.path = path
        self.status_code = status_code
        location = "/".join(p for p in (repository, path) if p)
        if ref:
            location = f"{location}@{ref}"
        super().__init__(f"{message} ({location})" if location else message)


class VersioningError(DocsiteError):
    """Maven metadata for a macro argument could not be fetched or parsed."""

    def __init__(self, group_id: str, artifact_id: str, reason: str, body: str = ""):
        self.group_id = group_id
        self.artifact_id = artifact_id
        self.body = body
        super().__init__(
            f"Failed to parse versioning for {group_id}:{artifact_id}: {reason} : XML: {body}"
        )
