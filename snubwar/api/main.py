"""
FastAPI backend for Snub War.
Exposes one GameSession per game id: selection, actions, targets, snapshots.
"""

import random
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from snubwar.config import API_PORT, CORS_ORIGINS
from snubwar.engine.errors import SnapshotError, UnknownReferenceError
from snubwar.engine.queries import get_game_summary, get_unit_targets
from snubwar.engine.session import ActionResult, GameSession
from snubwar.engine.topology import get_topology

app = FastAPI(
    title="Snub War API",
    description="Backend API for Snub War - a two-player tactics game on a snub dodecahedron",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)


@app.middleware("http")
async def log_requests(request, call_next):
    """Log method and path so 500s can be traced to the failing endpoint."""
    method = getattr(request, "method", "?")
    url = getattr(request, "url", None)
    path = url.path if url else "?"
    try:
        response = await call_next(request)
        if response.status_code >= 500:
            print(f"[500] {method} {path}", flush=True)
        return response
    except Exception:
        print(f"[500] {method} {path} (exception)", flush=True)
        raise


@app.exception_handler(Exception)
async def unhandled_exception_handler(request, exc):
    """Return 500 with CORS headers and the traceback so the frontend can read the error."""
    import traceback
    tb = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    print(tb, flush=True)
    origin = request.headers.get("origin")
    if origin in CORS_ORIGINS:
        allow_origin = origin
    else:
        allow_origin = CORS_ORIGINS[0] if CORS_ORIGINS else "*"
    return JSONResponse(
        status_code=500,
        content={"detail": str(exc), "traceback": tb},
        headers={
            "Access-Control-Allow-Origin": allow_origin,
            "Access-Control-Allow-Credentials": "true",
        },
    )


# In-memory sessions, keyed by game id
games: dict[str, GameSession] = {}


# ===== Pydantic Models =====

class NewGameRequest(BaseModel):
    game_id: str
    seed: int | None = None
    require_move_confirmation: bool | None = None


class SelectRequest(BaseModel):
    unit_id: str


class ChooseActionRequest(BaseModel):
    action: str  # "move", "shoot", "fortify"


class TargetRequest(BaseModel):
    face_id: int


# ===== Helpers =====

def get_session(game_id: str) -> GameSession:
    """Get the session for game_id; raise 404 if there is none."""
    session = games.get(game_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Game {game_id} not found")
    return session


def session_for_response(game_id: str, session: GameSession) -> dict[str, Any]:
    """State plus selection, last result and summary for the UI."""
    last = session.last_action_result()
    return {
        "game_id": game_id,
        "state": session.state.to_dict(),
        "summary": get_game_summary(session.state),
        "selection": session.selection(),
        "available_actions": session.available_actions(),
        "selectable_units": session.selectable_units(),
        "require_move_confirmation": session.require_move_confirmation,
        "last_result": last.to_dict() if last else None,
    }


def result_for_response(game_id: str, session: GameSession, result: ActionResult) -> dict[str, Any]:
    """Raise 400 with {code, reason} for rejected inputs; otherwise the result plus fresh state."""
    if not result.success:
        raise HTTPException(status_code=400, detail={"code": result.code, "reason": result.reason})
    out = session_for_response(game_id, session)
    out["result"] = result.to_dict()
    return out


# ===== API Endpoints =====

@app.get("/")
def root():
    return {"message": "Snub War API", "version": "1.0.0"}


@app.get("/topology")
def get_board():
    """Faces, vertices, adjacency and HQ faces of the board."""
    return get_topology().to_dict()


@app.post("/games")
def create_game(request: NewGameRequest):
    """Create a new in-memory game. seed makes HQ placement and dice reproducible."""
    if request.game_id in games:
        raise HTTPException(status_code=400, detail=f"Game {request.game_id} already exists")
    session = GameSession(
        rng=random.Random(request.seed) if request.seed is not None else None,
        require_move_confirmation=request.require_move_confirmation,
    )
    games[request.game_id] = session
    return session_for_response(request.game_id, session)


@app.get("/games")
def list_games():
    return {
        "games": [
            {"game_id": game_id, **get_game_summary(session.state)}
            for game_id, session in games.items()
        ]
    }


@app.get("/games/{game_id}")
def get_game_state(game_id: str):
    """Current state, selection, available actions and the last input's result."""
    session = get_session(game_id)
    return session_for_response(game_id, session)


@app.delete("/games/{game_id}")
def delete_game(game_id: str):
    get_session(game_id)
    del games[game_id]
    return {"deleted": game_id}


@app.post("/games/{game_id}/select")
def select_unit(game_id: str, request: SelectRequest):
    session = get_session(game_id)
    return result_for_response(game_id, session, session.select_unit(request.unit_id))


@app.post("/games/{game_id}/action")
def choose_action(game_id: str, request: ChooseActionRequest):
    session = get_session(game_id)
    return result_for_response(game_id, session, session.choose_action(request.action))


@app.post("/games/{game_id}/target")
def target_face(game_id: str, request: TargetRequest):
    """Click a face for the chosen action. Commits the action when the target is legal."""
    session = get_session(game_id)
    return result_for_response(game_id, session, session.target_face(request.face_id))


@app.post("/games/{game_id}/cancel")
def cancel_action(game_id: str):
    session = get_session(game_id)
    return result_for_response(game_id, session, session.cancel_action())


@app.get("/games/{game_id}/units/{unit_id}/targets")
def get_targets(game_id: str, unit_id: str):
    """Legal move, shoot and fortify targets for one unit."""
    session = get_session(game_id)
    try:
        return get_unit_targets(session.state, session.topology, unit_id)
    except UnknownReferenceError as e:
        raise HTTPException(status_code=404, detail=e.to_dict())


@app.get("/games/{game_id}/history")
def get_history(game_id: str):
    session = get_session(game_id)
    return {"game_id": game_id, "history": list(session.state.move_history)}


@app.get("/games/{game_id}/export")
def export_game(game_id: str):
    session = get_session(game_id)
    return session.export_snapshot()


@app.post("/games/{game_id}/import")
def import_game(game_id: str, snapshot: dict[str, Any]):
    """Replace the game's state with a snapshot. A malformed snapshot is refused with 422."""
    session = get_session(game_id)
    try:
        result = session.import_snapshot(snapshot)
    except SnapshotError as e:
        raise HTTPException(status_code=422, detail=e.to_dict())
    return result_for_response(game_id, session, result)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=API_PORT)
