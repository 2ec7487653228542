from __future__ import annotations

from typing import cast

import requests
from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from pydantic import BaseModel, Field
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware

from evalbars.config import get_settings
from evalbars.manage_lifespan__fastapi import lifespan
from evalbars.models.tracked_link import TrackedLink, parse_game_id
from evalbars.utils.logger import get_logger
from evalbars.wiring import Runtime

logger = get_logger(__name__)


def _extract_api_token(request: Request) -> str | None:
    auth_header = request.headers.get("authorization")
    if auth_header and auth_header.lower().startswith("bearer "):
        return auth_header.split(" ", 1)[1].strip()
    api_key = request.headers.get("x-api-key")
    if api_key:
        return api_key.strip()
    return None


def _expected_token(request: Request) -> str:
    runtime = getattr(request.app.state, "runtime", None)
    if runtime is not None:
        return runtime.settings.api_token
    return get_settings().api_token


def require_api_token(request: Request) -> None:
    """Raise HTTP 401 when the request token is missing or invalid."""
    if request.url.path == "/api/health":
        return
    supplied = _extract_api_token(request)
    if not supplied or supplied != _expected_token(request):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


def get_runtime(request: Request) -> Runtime:
    runtime = getattr(request.app.state, "runtime", None)
    if runtime is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Runtime not started"
        )
    return runtime


class LinkRequest(BaseModel):
    white: str | None = None
    black: str | None = None
    game_id: str | None = None


class RoundRequest(BaseModel):
    round_id: str = Field(min_length=1)
    game_ids: list[str] = Field(default_factory=list)


def _serialize_link(index: int, link: TrackedLink) -> dict[str, object]:
    payload = link.model_dump(mode="json")
    payload["index"] = index
    payload["game_id"] = link.game_id
    return payload


def _resolve_pairing(payload: LinkRequest) -> tuple[str, str]:
    if payload.game_id:
        pairing = parse_game_id(payload.game_id)
        if pairing is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="game_id must look like 'White-vs-Black'",
            )
        return pairing
    if payload.white and payload.black:
        return payload.white, payload.black
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Provide white and black, or game_id",
    )


def create_app(runtime: Runtime | None = None) -> FastAPI:
    """Build the overlay API; the lifespan hook builds a runtime when none is given."""
    application = FastAPI(
        title="EVALBARS",
        version="0.1.0",
        lifespan=lifespan,
        dependencies=[Depends(require_api_token)],
        middleware=[
            Middleware(
                cast("type[object]", CORSMiddleware),
                allow_origins=["*"],
                allow_methods=["*"],
                allow_headers=["*"],
            )
        ],
    )
    if runtime is not None:
        application.state.runtime = runtime

    @application.get("/api/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @application.get("/api/links")
    def list_links(runtime: Runtime = Depends(get_runtime)) -> list[dict[str, object]]:
        return [
            _serialize_link(index, link) for index, link in enumerate(runtime.tracker.links())
        ]

    @application.post("/api/links", status_code=status.HTTP_201_CREATED)
    def add_link(
        payload: LinkRequest,
        runtime: Runtime = Depends(get_runtime),
    ) -> dict[str, object]:
        white, black = _resolve_pairing(payload)
        try:
            index = runtime.tracker.add_link(white, black)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
        return _serialize_link(index, runtime.tracker.links()[index])

    @application.delete("/api/links/{index}")
    def remove_link(index: int, runtime: Runtime = Depends(get_runtime)) -> dict[str, object]:
        try:
            removed = runtime.tracker.remove_link(index)
        except IndexError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
        return _serialize_link(index, removed)

    @application.get("/api/alerts")
    def list_alerts(runtime: Runtime = Depends(get_runtime)) -> dict[str, list[int]]:
        return {"indexes": runtime.tracker.active_alerts()}

    @application.get("/api/pairings")
    def list_pairings(runtime: Runtime = Depends(get_runtime)) -> list[dict[str, str]]:
        return [
            {"white": white, "black": black, "game_id": f"{white}-vs-{black}"}
            for white, black in runtime.pairings()
        ]

    @application.post("/api/round")
    def select_round(
        payload: RoundRequest,
        runtime: Runtime = Depends(get_runtime),
    ) -> dict[str, object]:
        runtime.select_round(payload.round_id, payload.game_ids)
        return {
            "round_id": payload.round_id,
            "mode": runtime.feed.mode.value,
            "links": len(runtime.tracker),
        }

    @application.get("/api/tournaments")
    def list_tournaments(
        nb: int = Query(50, ge=1, le=100),
        runtime: Runtime = Depends(get_runtime),
    ) -> list[dict[str, object]]:
        try:
            tournaments = runtime.broadcast.list_ongoing_tournaments(nb)
        except requests.RequestException as exc:
            logger.warning("Tournament listing failed: %s", exc)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY, detail="Broadcast index unavailable"
            ) from exc
        return [tournament.model_dump() for tournament in tournaments]

    return application


app = create_app()
