"""
Version macros - replaces %%REPLACE_<verb>{<groupId>:<artifactId>}%% tokens
with artifact versions read from a Maven repository.

For example:
    %%REPLACE_latestRelease{team.unnamed:creative-central-api}%%

Verbs:
- latestRelease: the latest release, or "unknown" if there is none
- latestVersion: the latest version, snapshots included
- latestReleaseOrSnapshot: the latest release, else the latest version

Tokens with any other verb, or an argument that is not "group:artifact",
are left exactly as written.
"""

import asyncio
import logging
import re
import xml.etree.ElementTree as ET
from typing import Optional
import httpx

from docsite.cache import TTLCache
from docsite.errors import VersioningError
from docsite.models import Versioning
from docsite.processors.base import ProcessingContext

logger = logging.getLogger(__name__)

MACRO_PATTERN = re.compile(r"%%REPLACE_([^%]+)\{([^%]+)\}%%")

LATEST_RELEASE = "latestRelease"
LATEST_VERSION = "latestVersion"
LATEST_RELEASE_OR_SNAPSHOT = "latestReleaseOrSnapshot"
UNKNOWN_RELEASE = "unknown"


def parse_maven_metadata(group_id: str, artifact_id: str, xml: str) -> Versioning:
    """Read <latest> and <release> out of a maven-metadata.xml document."""
    try:
        root = ET.fromstring(xml)
    except ET.ParseError as e:
        raise VersioningError(group_id, artifact_id, str(e), xml) from e

    latest = (root.findtext("versioning/latest") or "").strip()
    if not latest:
        raise VersioningError(group_id, artifact_id, "missing <latest>", xml)
    release = (root.findtext("versioning/release") or "").strip() or None

    return Versioning(latest=latest, release=release)


class MavenMetadataClient:
    """
    Fetches artifact versioning from a Nexus-hosted Maven repository.

    Results are memoized per "groupId:artifactId" for the lifetime of the
    client, with at most one request in flight per artifact.
    """

    def __init__(
        self,
        base_url: str,
        repository: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.repository = repository
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._memo: TTLCache[Versioning] = TTLCache(
            self._fetch, "maven-metadata", ttl_seconds=None
        )

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._client

    async def close(self):
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def metadata_url(self, group_id: str, artifact_id: str) -> str:
        location = f"{group_id.replace('.', '/')}/{artifact_id}"
        return f"{self.base_url}/repository/{self.repository}/{location}/maven-metadata.xml"

    async def get_versioning(self, group_id: str, artifact_id: str) -> Versioning:
        return await self._memo.get(f"{group_id}:{artifact_id}")

    async def _fetch(self, key: str) -> Versioning:
        group_id, artifact_id = key.split(":", 1)
        url = self.metadata_url(group_id, artifact_id)
        client = await self._get_client()

        try:
            response = await client.get(url)
        except httpx.HTTPError as e:
            raise VersioningError(group_id, artifact_id, f"request failed: {e}") from e

        if not response.is_success:
            raise VersioningError(
                group_id, artifact_id, f"HTTP {response.status_code}", response.text
            )

        versioning = parse_maven_metadata(group_id, artifact_id, response.text)
        logger.info(f"Resolved {key}: latest={versioning.latest} release={versioning.release}")
        return versioning


class MacroProcessor:
    """Content processor expanding version macros."""

    VERBS = (LATEST_RELEASE, LATEST_VERSION, LATEST_RELEASE_OR_SNAPSHOT)

    def __init__(self, metadata: MavenMetadataClient):
        self.metadata = metadata

    async def __call__(self, text: str, ctx: Optional[ProcessingContext] = None) -> str:
        matches = list(MACRO_PATTERN.finditer(text))
        if not matches:
            return text

        replacements = await asyncio.gather(*(self._replacement(m) for m in matches))

        parts = []
        last = 0
        for match, replacement in zip(matches, replacements):
            parts.append(text[last:match.start()])
            parts.append(replacement)
            last = match.end()
        parts.append(text[last:])
        return "".join(parts)

    async def _replacement(self, match: "re.Match[str]") -> str:
        verb, argument = match.group(1), match.group(2)
        if verb not in self.VERBS:
            return match.group(0)

        ids = argument.split(":")
        if len(ids) != 2 or not all(ids):
            logger.warning(f"Malformed macro argument left untouched: {match.group(0)}")
            return match.group(0)

        versioning = await self.metadata.get_versioning(ids[0], ids[1])

        if verb == LATEST_RELEASE:
            return versioning.release or UNKNOWN_RELEASE
        if verb == LATEST_VERSION:
            return versioning.latest
        return versioning.release or versioning.latest
