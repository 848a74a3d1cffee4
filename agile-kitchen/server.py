import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from game_context import configure_logging, create_session, load_settings
from game_runner import Game

logger = logging.getLogger(__name__)

settings = load_settings()
configure_logging(settings)

app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


sessions = {}


class StepRequest(BaseModel):
    session_id: str
    action: str | None = None
    choice: str | None = None
    kitchen_action: str | None = None
    skip_intro: bool | None = None
    elapsed_ms: int | None = None


class EventsRequest(BaseModel):
    session_id: str


def _new_session():
    session = create_session(settings)
    session.game = Game(session)
    return session


@app.post("/step")
def step(req: StepRequest):
    # Starting a run always rebuilds the in-memory session.
    if req.action in {"start"} and req.session_id in sessions:
        sessions.pop(req.session_id, None)

    if req.session_id not in sessions:
        sessions[req.session_id] = _new_session()
        logger.info("Created session %s", req.session_id)

    session = sessions[req.session_id]
    payload: Dict[str, Any] = {
        "action": req.action,
        "choice": req.choice,
        "kitchen_action": req.kitchen_action,
        "skip_intro": req.skip_intro,
        "elapsed_ms": req.elapsed_ms,
    }
    payload = {k: v for k, v in payload.items() if v is not None}
    events = session.step(payload)
    return events


@app.post("/events")
def events(req: EventsRequest):
    if req.session_id not in sessions:
        return []
    session = sessions[req.session_id]
    return session.drain_events()


@app.get("/state/{session_id}")
def state(session_id: str) -> Dict[str, Any]:
    session: Optional[Any] = sessions.get(session_id)
    if session is None:
        return {"ok": False, "error": f"Unknown session_id: {session_id}"}
    return {"ok": True, **session.snapshot()}
