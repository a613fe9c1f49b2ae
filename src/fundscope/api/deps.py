"""FastAPI dependencies."""
from __future__ import annotations

from fastapi import Request

from fundscope.search.engine import SearchEngine
from fundscope.services.embedding_service import EmbeddingService
from fundscope.services.search_service import SearchService


def get_search_engine(request: Request) -> SearchEngine:
    """The engine built once in the app lifespan (backend probe included)."""
    return request.app.state.search_engine


def get_search_service(request: Request) -> SearchService:
    return SearchService(get_search_engine(request))


def get_embedding_service(request: Request) -> EmbeddingService:
    return EmbeddingService(get_search_engine(request))
