"""
Documentation site API.

Serves the documentation of every public repository of the configured GitHub
organization, one tree per release, rebuilt when the project cache expires.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from docsite.cache import describe
from docsite.config import get_settings
from docsite.context import DocsContext
from docsite.routes import docs_router

logger = logging.getLogger(__name__)


def create_app(context: Optional[DocsContext] = None) -> FastAPI:
    """Build the API; a given context is used instead of one from settings."""
    settings = context.settings if context is not None else get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        docs = context or DocsContext.from_settings(settings)
        app.state.docs = docs
        logger.info(f"Serving documentation of {settings.github_organization}")
        yield
        await docs.close()

    app = FastAPI(
        title="Documentation",
        description="Versioned project documentation built from GitHub",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins_list(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(docs_router)

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        """Health check endpoint."""
        docs: DocsContext = request.app.state.docs
        return {
            "status": "ok",
            "timestamp": datetime.now().isoformat(),
            "caches": [describe(docs.project_cache), describe(docs.release_cache)],
        }

    return app


logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

app = create_app()


if __name__ == "__main__":
    uvicorn.run("docsite.server:app", host="0.0.0.0", port=8000)
