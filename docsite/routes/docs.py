"""Documentation API routes."""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from docsite.context import DocsContext
from docsite.errors import DocsiteError
from docsite.models import FileNode, Project, Version
from docsite.navigation import neighbors, outline
from docsite.paths import VersionStyle, resolve_segments, resolved_to_path, to_path

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["docs"])

CACHE_CONTROL = "public, s-maxage=10, stale-while-revalidate=59"


def get_context(request: Request) -> DocsContext:
    return request.app.state.docs


async def _load_projects(context: DocsContext) -> Dict[str, Project]:
    try:
        return await context.get_projects()
    except DocsiteError as e:
        logger.error(f"Failed to load projects: {e}")
        raise HTTPException(status_code=502, detail=f"Failed to load projects: {e}")


def _project_summary(project: Project) -> Dict[str, Any]:
    return {
        "name": project.name,
        "display_name": project.display_name,
        "description": project.description,
        "stars": project.stars,
        "latest_version": project.latest_version.version if project.latest_version else None,
        "versions": list(project.versions),
        "documented": project.has_documentation(),
    }


def _link(
    project: Project,
    version: Version,
    node: Optional[FileNode],
    style: VersionStyle,
    prefix: str,
) -> Optional[Dict[str, str]]:
    if node is None:
        return None
    return {
        "display_name": node.display_name,
        "path": to_path(project, version, node, style, prefix),
    }


@router.get("/projects")
async def api_list_projects(context: DocsContext = Depends(get_context)):
    """List published projects."""
    projects = await _load_projects(context)
    return {"projects": [_project_summary(p) for p in projects.values()]}


@router.get("/docs/{slug:path}")
async def api_get_page(
    slug: str,
    response: Response,
    context: DocsContext = Depends(get_context),
):
    """
    Get a documentation page by its site path below /docs.

    The first segment names the project, an optional second one the version
    (a release tag or "latest"), the rest the page.
    """
    segments = [s for s in slug.split("/") if s]
    if not segments:
        raise HTTPException(status_code=404, detail="Project name required")

    projects = await _load_projects(context)
    project = projects.get(segments[0])
    if project is None:
        raise HTTPException(status_code=404, detail=f"Project {segments[0]} not found")

    response.headers["Cache-Control"] = CACHE_CONTROL

    if not project.has_documentation():
        return {"project": _project_summary(project), "documented": False}

    resolved = resolve_segments(projects, segments)
    if resolved is None:
        raise HTTPException(status_code=404, detail=f"Page {'/'.join(segments)} not found")

    prefix = context.settings.docs_url_prefix
    tree = resolved.version.documentation.content
    nav = neighbors(tree, resolved.file.path)

    return {
        "project": _project_summary(project),
        "documented": True,
        "version": {
            "version": resolved.version.version,
            "latest": resolved.version.latest,
        },
        "path": resolved_to_path(resolved, prefix),
        "file": resolved.file.model_dump(),
        "previous": _link(project, resolved.version, nav.previous, resolved.style, prefix),
        "next": _link(project, resolved.version, nav.next, resolved.style, prefix),
        "sidebar": outline(tree),
    }
