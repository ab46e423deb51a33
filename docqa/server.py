"""
DocQA HTTP Server

FastAPI surface for hybrid question answering. The API gateway authenticates
the caller and forwards their identity in the ``X-User-Email`` header.

Endpoints:
- GET /ai/answers: answer a question (routes internally)
- GET /ai/search: similarity search only, no generation
- GET /health: service and similarity-index health
"""

import argparse
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from pydantic import BaseModel, Field

from . import __version__
from .common.config import load_config
from .common.providers import build_orchestrator
from .common.schemas import OutcomeStatus

logger = logging.getLogger("docqa.server")


# =============================================================================
# Response Models
# =============================================================================

class ApiResponse(BaseModel):
    """Envelope for every API response"""
    success: bool = True
    message: str = ""
    data: Any = None
    status: int = 200
    timestamp: datetime = Field(default_factory=datetime.now)


def ok(data: Any, message: str) -> ApiResponse:
    return ApiResponse(success=True, message=message, data=data, status=200)


# =============================================================================
# App Factory
# =============================================================================

def create_app(orchestrator=None, searcher=None, index=None, config=None) -> FastAPI:
    """
    Build the FastAPI app.

    Components not passed in are built from ``load_config()`` at startup, so
    tests can inject mocks and production wires everything from config.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.config = config or load_config()
        if orchestrator is None:
            built_orchestrator, built_searcher, built_index = build_orchestrator(app.state.config, index=index)
            app.state.orchestrator = built_orchestrator
            app.state.searcher = searcher or built_searcher
            app.state.index = built_index
        else:
            app.state.orchestrator = orchestrator
            app.state.searcher = searcher
            app.state.index = index
        logger.info("DocQA ready")

        yield

        logger.info("DocQA shutting down")
        if app.state.index is not None and hasattr(app.state.index, "close"):
            app.state.index.close()

    app = FastAPI(
        title="DocQA",
        description="Hybrid question answering over private documents",
        version=__version__,
        lifespan=lifespan,
    )
    _register_routes(app)
    return app


def current_user(x_user_email: Optional[str] = Header(None)) -> str:
    """Caller identity injected by the gateway"""
    if not x_user_email or not x_user_email.strip():
        raise HTTPException(status_code=401, detail="Missing user identity")
    return x_user_email.strip()


def _register_routes(app: FastAPI) -> None:

    @app.get("/health")
    def health(request: Request):
        """Health check including similarity-index connectivity"""
        index = getattr(request.app.state, "index", None)
        index_health = {"status": "unknown"}
        if index is not None:
            try:
                if index.test_connection():
                    index_health = {**index.get_stats(), "status": "up"}
                else:
                    index_health = {"status": "down", "error": "Unable to connect to similarity index"}
            except Exception as e:
                logger.error("Similarity index health check failed: %s", e)
                index_health = {"status": "down", "error": str(e)}

        return {
            "status": "healthy",
            "service": "docqa",
            "version": __version__,
            "initialized": getattr(request.app.state, "orchestrator", None) is not None,
            "similarity_index": index_health,
        }

    @app.get("/ai/answers", response_model=ApiResponse)
    def answer_question(
        request: Request,
        query: str = Query(...),
        user: str = Depends(current_user),
    ):
        """Answer a question; the route is chosen internally"""
        if not query.strip():
            raise HTTPException(status_code=400, detail="Query must not be blank")

        orchestrator = getattr(request.app.state, "orchestrator", None)
        if orchestrator is None:
            raise HTTPException(status_code=503, detail="Orchestrator not initialized")

        logger.info("Q&A request: %s [%s]", query, user)
        outcome = orchestrator.answer(query, user)

        if outcome.status == OutcomeStatus.SUCCESS:
            data = {
                "query": query,
                "answer": outcome.answer,
                "route_type": outcome.route,
                "sources_count": outcome.evidence_count,
                "type": "precise_answer",
            }
            return ok(data, "Answer generated successfully")

        data = {
            "query": query,
            "message": outcome.message,
            "status": outcome.status.value,
            "type": "no_answer",
        }
        return ok(data, outcome.message)

    @app.get("/ai/search", response_model=ApiResponse)
    def search(
        request: Request,
        query: str = Query(...),
        max_results: Optional[int] = Query(None, alias="maxResults", ge=1, le=100),
        user: str = Depends(current_user),
    ):
        """Similarity search only (no generation)"""
        searcher = getattr(request.app.state, "searcher", None)
        if searcher is None:
            raise HTTPException(status_code=503, detail="Searcher not initialized")

        if max_results is None:
            app_config = getattr(request.app.state, "config", None)
            max_results = app_config.qna.search_default_results if app_config else 5

        matches = searcher.search(query, user, max_results)
        return ok([m.model_dump() for m in matches], "Search completed successfully")


app = create_app()


# =============================================================================
# CLI Entry Point
# =============================================================================

def run_server(argv=None) -> None:
    """Run the DocQA server"""
    import uvicorn

    config = load_config()

    parser = argparse.ArgumentParser(description="DocQA hybrid question answering server")
    parser.add_argument("--host", default=config.server.host)
    parser.add_argument("--port", type=int, default=config.server.port)
    parser.add_argument("--log-level", default=config.server.log_level)
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    logger.info("Starting server on %s:%d", args.host, args.port)
    uvicorn.run(
        "docqa.server:app",
        host=args.host,
        port=args.port,
        reload=False,
    )


if __name__ == "__main__":
    run_server()
