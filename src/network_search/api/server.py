"""
HTTP API Server for network search.

Serves the full results page data, the typeahead suggestion endpoint, and a
few operational endpoints (health, metrics, cache invalidation, content
events, sitemap). Cross-origin reads are allowed only for the configured
origin allowlist.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

from dependency_injector import providers
from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import SearchSettings
from ..container import ApplicationContainer
from ..domain.entities import ContentEvent, ContentEventKind
from ..shared.exceptions import ErrorCategory, NetworkSearchError
from ..shared.profiling import get_performance_metrics

logger = logging.getLogger(__name__)

DEFAULT_API_HOST = "127.0.0.1"
DEFAULT_API_PORT = 8765


# Pydantic models for API responses
class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    sources: list[str]
    cached_entries: int


class SuggestionModel(BaseModel):
    """One typeahead suggestion."""
    title: str
    url: str
    sourceName: str


class HitModel(BaseModel):
    title: str
    url: str
    sourceName: str
    sourceUrl: str
    modifiedAt: str
    score: int


class SearchResponseModel(BaseModel):
    """Aggregated search results."""
    query: str
    status: str
    total: int
    sourcesFailed: list[str]
    hits: list[HitModel]


class ContentEventRequest(BaseModel):
    """Content mutation reported by the local store."""
    kind: ContentEventKind
    post_type: str = "page"
    post_id: int | None = None
    old_status: str | None = None
    new_status: str | None = None


class InvalidationResponse(BaseModel):
    invalidated: bool
    cleared: int = 0


def _build_container(settings: SearchSettings | None) -> ApplicationContainer:
    container = ApplicationContainer()
    settings = settings or SearchSettings.from_env()
    container.settings.override(providers.Object(settings))
    return container


def _status_for(error: NetworkSearchError) -> int:
    if error.category is ErrorCategory.VALIDATION:
        return 400
    if error.category is ErrorCategory.API:
        return 502
    return 500


def create_api_server(
    settings: SearchSettings | None = None,
    container: ApplicationContainer | None = None,
) -> FastAPI:
    """
    Create the FastAPI server.

    Args:
        settings: Search settings. Loaded from the environment when omitted.
        container: Pre-built container (tests override providers on it).

    Returns:
        Configured FastAPI instance.
    """
    if container is None:
        container = _build_container(settings)
    elif settings is not None:
        container.settings.override(providers.Object(settings))
    settings = container.settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        service = container.service()
        logger.info(f"Network search API ready: results at {settings.results_url}, suggest at {settings.suggest_url}")
        logger.info(f"Active sources: {[p.name for p in service.providers]}")
        yield
        logger.info("Network search API shutting down")
        await service.aclose()

    app = FastAPI(
        title="Network Search API",
        description="Aggregated search across the local site network and remote WordPress sites.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_methods=["GET"],
        allow_headers=["Content-Type"],
    )

    @app.exception_handler(NetworkSearchError)
    async def handle_search_error(request: Request, exc: NetworkSearchError) -> JSONResponse:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return JSONResponse(status_code=_status_for(exc), content=exc.to_dict())

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Health check endpoint."""
        service = container.service()
        return HealthResponse(
            status="healthy",
            sources=[p.name for p in service.providers],
            cached_entries=len(service.cache),
        )

    @app.get(settings.results_path, response_model=SearchResponseModel)
    async def search(
        q: str = Query(default="", description="Search query"),
        include_remote: bool = Query(default=True, description="Also query remote WordPress sources"),
    ):
        """Aggregated, ranked results across all enabled sources."""
        response = await container.service().aggregate(q, include_remote=include_remote)
        return response.to_dict()

    @app.get(settings.suggest_path, response_model=list[SuggestionModel])
    async def suggest(q: str = Query(default="", description="Partial query")):
        """Typeahead suggestions; fewer than 2 characters yields []."""
        suggestions = await container.service().suggest(q)
        return [s.to_dict() for s in suggestions]

    @app.post("/api/cache/invalidate", response_model=InvalidationResponse)
    async def invalidate_cache():
        """Clear every cached search, suggestion, remote and sitemap entry."""
        cleared = container.service().invalidate_all()
        return InvalidationResponse(invalidated=True, cleared=cleared)

    @app.post("/api/events/content", response_model=InvalidationResponse)
    async def content_event(event: ContentEventRequest):
        """Report a content mutation from an external writer."""
        invalidated = container.service().handle_content_event(
            ContentEvent(
                kind=event.kind,
                post_type=event.post_type,
                post_id=event.post_id,
                old_status=event.old_status,
                new_status=event.new_status,
            )
        )
        return InvalidationResponse(invalidated=invalidated)

    @app.get("/api/sitemap")
    async def sitemap() -> list[dict[str, Any]]:
        """Published page trees for every public site."""
        trees = await container.sitemap().build()
        return [tree.to_dict() for tree in trees]

    @app.get("/api/metrics")
    async def metrics() -> dict[str, Any]:
        """Per-source call timings and cache statistics."""
        return {
            "sources": get_performance_metrics(),
            "cache": container.service().cache.stats.to_dict(),
        }

    return app


def run_api_server(
    host: str = DEFAULT_API_HOST,
    port: int = DEFAULT_API_PORT,
    settings: SearchSettings | None = None,
):
    """
    Run the HTTP API server.

    Args:
        host: Host to bind to (default: 127.0.0.1 for local only)
        port: Port to bind to (default: 8765)
        settings: Search settings; environment is used when omitted
    """
    import uvicorn

    app = create_api_server(settings)
    logger.info(f"Starting HTTP API server on {host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level="info")


def main() -> None:
    import argparse

    parser = argparse.ArgumentParser(description="Network Search HTTP API Server")
    parser.add_argument("--host", default=DEFAULT_API_HOST, help="Host to bind to")
    parser.add_argument("--port", type=int, default=DEFAULT_API_PORT, help="Port to bind to")
    parser.add_argument("--config", help="YAML settings file (overrides NETWORK_SEARCH_CONFIG)")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    settings = SearchSettings.from_yaml(args.config) if args.config else SearchSettings.from_env()
    run_api_server(host=args.host, port=args.port, settings=settings)


if __name__ == "__main__":
    main()
