"""FastAPI application factory."""
from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlmodel import SQLModel

from fundscope.domain.exceptions import NotFoundError, StageError
from fundscope.logging import get_run_id, logger
from fundscope.search.engine import SearchEngine


def create_app(search_engine: SearchEngine | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        from fundscope.infra.db import engine as engine_module  # registers WAL + sqlite-vec listeners

        db_engine = engine_module.engine
        database = db_engine.url.database
        if database and database != ":memory:":
            Path(database).parent.mkdir(parents=True, exist_ok=True)
        SQLModel.metadata.create_all(db_engine)

        owned_embedder = None
        engine = search_engine
        if engine is None:
            from fundscope.infra.embeddings.ollama import OllamaEmbeddingClient
            owned_embedder = OllamaEmbeddingClient()
            engine = SearchEngine.from_database(db_engine, embedder=owned_embedder)
        app.state.search_engine = engine
        logger.info(f"Search API ready (run {get_run_id()}, scanner: {engine.scanner.name}).")
        yield
        if owned_embedder is not None:
            await owned_embedder.aclose()

    app = FastAPI(
        title="Fundscope Search API",
        version="0.3.0",
        lifespan=lifespan,
    )

    # Import routers inside create_app() to avoid circular imports at module load time
    from fundscope.api.routers.funds import router as funds_router
    from fundscope.api.routers.search import router as search_router

    app.include_router(search_router)
    app.include_router(funds_router)

    @app.exception_handler(NotFoundError)
    def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.message})

    @app.exception_handler(StageError)
    def _stage_failed(request: Request, exc: StageError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"detail": exc.message, "stage": exc.stage})

    @app.exception_handler(ValueError)
    def _invalid(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.get("/health", tags=["ops"])
    def health() -> dict:
        return {"status": "ok"}

    return app
