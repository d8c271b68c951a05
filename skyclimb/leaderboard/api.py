"""FastAPI application exposing the leaderboard endpoints.

Serve with any ASGI server, e.g. ``uvicorn --factory skyclimb.leaderboard.api:create_app``.
"""
from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse, Response

from .errors import LeaderboardError, TransportError, ValidationError
from .service import ScoreService
from .store import store_from_config

logger = logging.getLogger(__name__)

INVALID_DATA = {"error": "Invalid data"}


def create_app(service: ScoreService | None = None) -> FastAPI:
    """Create the leaderboard app. Without a service, the store comes from Config."""

    resolved = service or ScoreService(store_from_config())

    app = FastAPI(title="SkyClimb leaderboard")
    app.state.service = resolved
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        message = "Method not allowed" if exc.status_code == 405 else str(exc.detail)
        return JSONResponse({"error": message}, status_code=exc.status_code)

    @app.options("/scores")
    def scores_preflight() -> Response:
        return Response(status_code=200)

    @app.get("/scores")
    def get_scores() -> Any:
        try:
            entries = resolved.top_scores()
        except LeaderboardError:
            logger.exception("Error fetching scores")
            return JSONResponse({"error": "Failed to fetch scores"}, status_code=500)
        except Exception:
            logger.exception("Unexpected error fetching scores")
            return JSONResponse({"error": "Failed to fetch scores"}, status_code=500)
        return {"scores": [e.model_dump() for e in entries]}

    @app.post("/scores")
    async def post_scores(request: Request) -> Any:
        try:
            payload = await request.json()
        except ValueError:
            return JSONResponse(INVALID_DATA, status_code=400)
        if not isinstance(payload, dict):
            return JSONResponse(INVALID_DATA, status_code=400)

        try:
            entry = await run_in_threadpool(resolved.save_score, payload.get("name"), payload.get("score"))
        except ValidationError as exc:
            logger.info("Rejected submission: %s", exc.reason)
            return JSONResponse(INVALID_DATA, status_code=400)
        except TransportError:
            logger.exception("Error saving score")
            return JSONResponse({"error": "Failed to save score"}, status_code=500)
        except Exception:
            logger.exception("Unexpected error saving score")
            return JSONResponse({"error": "Failed to save score"}, status_code=500)

        body: Dict[str, Any] = {"success": True, "score": entry.model_dump()}
        return body

    return app
