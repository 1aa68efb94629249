"""
GitHub content client - lists, downloads and dates documentation files.

Every request goes through one shared httpx.AsyncClient and a semaphore that
bounds concurrent requests, since the tree builder fans out across siblings
and the API is rate limited:
- Unauthenticated: 60 requests/hour
- Authenticated: 5000 requests/hour
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Type, TypeVar
import httpx
from pydantic import BaseModel, ValidationError

from docsite.errors import GitHubError
from docsite.models import CommitInfo, GitHubContent, GitHubRepository, Release

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"

M = TypeVar("M", bound=BaseModel)


class GitHubClient:
    """
    Fetches documentation sources from the GitHub REST API.

    Usage:
        client = GitHubClient(access_token="ghp_...")

        # List a directory at a tag (None when the path does not exist)
        entries = await client.list_directory("unnamed/creative", "docs", "1.0.0")

        # Download a file listed above
        text = await client.download_raw(entries[0].download_url)

        await client.close()
    """

    def __init__(
        self,
        access_token: Optional[str] = None,
        base_url: str = DEFAULT_API_URL,
        max_concurrency: int = 8,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.access_token = access_token
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            headers = {
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            }
            if self.access_token:
                headers["Authorization"] = f"Bearer {self.access_token}"
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self):
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _get(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        repository: Optional[str] = None,
        ref: Optional[str] = None,
        path: Optional[str] = None,
    ) -> httpx.Response:
        client = await self._get_client()
        try:
            async with self._semaphore:
                return await client.get(url, params=params)
        except httpx.HTTPError as e:
            raise GitHubError(f"GitHub request failed: {e}", repository, ref, path) from e

    @staticmethod
    def _raise_for_status(
        response: httpx.Response,
        repository: Optional[str] = None,
        ref: Optional[str] = None,
        path: Optional[str] = None,
    ) -> None:
        if response.is_success:
            return
        raise GitHubError(
            f"GitHub API error {response.status_code}: {response.text}",
            repository,
            ref,
            path,
            status_code=response.status_code,
        )

    @staticmethod
    def _json(
        response: httpx.Response,
        repository: Optional[str] = None,
        ref: Optional[str] = None,
        path: Optional[str] = None,
    ) -> Any:
        """Decode a JSON body; an HTML rate-limit or proxy page raises GitHubError."""
        try:
            return response.json()
        except ValueError as e:
            raise GitHubError(
                f"GitHub returned a non-JSON body: {response.text[:200]}",
                repository,
                ref,
                path,
                status_code=response.status_code,
            ) from e

    @staticmethod
    def _parse_list(
        model: Type[M],
        data: Any,
        repository: Optional[str] = None,
        ref: Optional[str] = None,
        path: Optional[str] = None,
    ) -> List[M]:
        if not isinstance(data, list):
            raise GitHubError(
                f"Expected a list of {model.__name__}, got {type(data).__name__}",
                repository,
                ref,
                path,
            )
        try:
            return [model.model_validate(raw) for raw in data]
        except ValidationError as e:
            raise GitHubError(f"Unexpected {model.__name__} payload: {e}", repository, ref, path) from e

    async def list_directory(
        self,
        repo_full_name: str,
        path: str,
        ref: str,
    ) -> Optional[List[GitHubContent]]:
        """
        List the entries of a directory at a given ref.

        Args:
            repo_full_name: Owner/repo format (e.g., "unnamed/creative")
            path: Directory path within the repo (e.g., "docs/guide")
            ref: Branch, tag, or commit SHA

        Returns:
            The entries (possibly empty), or None if the path does not exist
            at that ref or is not a directory
        """
        response = await self._get(
            f"/repos/{repo_full_name}/contents/{path}",
            params={"ref": ref},
            repository=repo_full_name,
            ref=ref,
            path=path,
        )

        if response.status_code == 404:
            logger.debug(f"Path not found: {repo_full_name}/{path}@{ref}")
            return None

        self._raise_for_status(response, repo_full_name, ref, path)
        data = self._json(response, repo_full_name, ref, path)

        if not isinstance(data, list):
            logger.warning(f"Path is not a directory: {repo_full_name}/{path}@{ref}")
            return None

        return self._parse_list(GitHubContent, data, repo_full_name, ref, path)

    async def download_raw(self, url: str) -> str:
        """Download a file's raw text from its download URL."""
        response = await self._get(url, path=url)
        self._raise_for_status(response, path=url)
        return response.text

    async def commit_history(
        self,
        repo_full_name: str,
        path: str,
        ref: str,
        limit: int = 1,
    ) -> List[CommitInfo]:
        """
        Get the most recent commits touching a path, newest first.

        Args:
            repo_full_name: Owner/repo format
            path: File path within the repo
            ref: Branch, tag, or commit SHA to walk history from
            limit: Maximum number of commits to return

        Returns:
            List of CommitInfo, empty if the path has no history
        """
        response = await self._get(
            f"/repos/{repo_full_name}/commits",
            params={"path": path, "sha": ref, "per_page": limit},
            repository=repo_full_name,
            ref=ref,
            path=path,
        )
        self._raise_for_status(response, repo_full_name, ref, path)

        data = self._json(response, repo_full_name, ref, path)
        if not isinstance(data, list) or not all(isinstance(raw, dict) for raw in data):
            raise GitHubError("Unexpected commit list payload", repo_full_name, ref, path)

        commits = []
        for raw in data[:limit]:
            commit = raw.get("commit") or {}
            signature = commit.get("committer") or commit.get("author") or {}
            if not signature.get("date"):
                continue
            commits.append(CommitInfo(sha=raw.get("sha", ""), date=signature["date"]))
        return commits

    async def list_releases(self, repo_full_name: str) -> List[Release]:
        """List a repository's releases, newest first."""
        response = await self._get(
            f"/repos/{repo_full_name}/releases",
            repository=repo_full_name,
        )
        self._raise_for_status(response, repo_full_name)
        data = self._json(response, repo_full_name)
        return self._parse_list(Release, data, repo_full_name)

    async def list_organization_repositories(self, organization: str) -> List[GitHubRepository]:
        """List every repository of an organization."""
        repos: List[GitHubRepository] = []
        page = 1
        per_page = 100

        while True:
            response = await self._get(
                f"/orgs/{organization}/repos",
                params={"per_page": per_page, "page": page},
                repository=organization,
            )
            self._raise_for_status(response, organization)

            batch = self._parse_list(
                GitHubRepository, self._json(response, organization), organization
            )
            if not batch:
                break

            repos.extend(batch)

            if len(batch) < per_page:
                break
            page += 1

        return repos
