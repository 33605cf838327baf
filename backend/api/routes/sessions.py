"""Routes for starting, stepping and inspecting simulation sessions."""

import asyncio
import logging
import os
import uuid

from fastapi import APIRouter, HTTPException, Query

from api.models import SessionCreateRequest, SessionStatus, StepResponse
from corridorsim.core.config import DEFAULT_AGENT_COUNT, MINUTES_PER_DAY, SimulationConfig
from corridorsim.core.engine import SimulationSession
from pipeline.city_data import load_city

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])

# In-memory session store, keyed by session_id
sessions: dict[str, dict] = {}


def default_agent_count() -> int:
    return int(os.environ.get("CORRIDORSIM_AGENT_COUNT", DEFAULT_AGENT_COUNT))


def get_session(session_id: str) -> dict:
    """Look up a session entry or raise 404."""
    entry = sessions.get(session_id)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    return entry


def build_status(session_id: str, entry: dict) -> SessionStatus:
    session: SimulationSession = entry["session"]
    total = session.config.duration_minutes
    return SessionStatus(
        session_id=session_id,
        name=entry["name"],
        status="finished" if session.finished else "running",
        current_minute=session.current_minute,
        progress=min(1.0, session.ticks_done / total) if total else 1.0,
        agent_count=len(session.agents),
        stop_count=len(session.stops),
    )


def start_session(config: SimulationConfig) -> SimulationSession:
    """Read the city data and start a session; runs in a worker thread."""
    session = SimulationSession(load_city(), config)
    session.start()
    return session


@router.post("", response_model=SessionStatus)
async def create_session(request: SessionCreateRequest) -> SessionStatus:
    """Load the city, create a population and start the clock."""
    config = SimulationConfig(
        agent_count=request.agent_count if request.agent_count is not None else default_agent_count(),
        random_seed=request.seed,
        start_minute=request.start_minute,
        duration_minutes=request.duration_minutes,
    )
    errors = config.validate()
    if errors:
        raise HTTPException(status_code=400, detail="; ".join(errors))

    loop = asyncio.get_running_loop()
    try:
        session = await loop.run_in_executor(None, start_session, config)
    except (FileNotFoundError, ValueError) as e:
        logger.exception("Failed to load city data")
        raise HTTPException(status_code=500, detail=f"City data unavailable: {e}")

    session_id = str(uuid.uuid4())
    sessions[session_id] = {
        "session": session,
        "name": request.name,
        "lock": asyncio.Lock(),
    }
    logger.info("Created session %s (%d agents)", session_id, len(session.agents))
    return build_status(session_id, sessions[session_id])


@router.get("/{session_id}", response_model=SessionStatus)
async def get_session_status(session_id: str) -> SessionStatus:
    """Get the clock and progress of a session."""
    return build_status(session_id, get_session(session_id))


@router.post("/{session_id}/step", response_model=StepResponse)
async def step_session(
    session_id: str,
    minutes: int = Query(default=1, ge=1, le=MINUTES_PER_DAY),
) -> StepResponse:
    """Advance the session clock by up to *minutes* simulated minutes."""
    entry = get_session(session_id)
    session: SimulationSession = entry["session"]
    async with entry["lock"]:
        loop = asyncio.get_running_loop()
        ticks = await loop.run_in_executor(None, session.run, minutes)
    return StepResponse(
        status=build_status(session_id, entry),
        ticks=ticks,
        metrics=session.metrics.to_dict(),
    )


@router.get("/{session_id}/metrics")
async def get_metrics(session_id: str) -> dict:
    """Current population metrics."""
    entry = get_session(session_id)
    session: SimulationSession = entry["session"]
    async with entry["lock"]:
        return {"minute": session.current_minute, "metrics": session.metrics.to_dict()}


@router.get("/{session_id}/agents")
async def get_agents(
    session_id: str,
    limit: int = Query(default=200, ge=1, le=20000),
    offset: int = Query(default=0, ge=0),
) -> dict:
    """Page through agent state."""
    entry = get_session(session_id)
    session: SimulationSession = entry["session"]
    async with entry["lock"]:
        page = session.agents[offset:offset + limit]
        return {
            "total": len(session.agents),
            "offset": offset,
            "agents": [a.to_dict() for a in page],
        }


@router.post("/{session_id}/reset", response_model=SessionStatus)
async def reset_session(session_id: str) -> SessionStatus:
    """Clear flow and routes and restart the day with the same settings."""
    entry = get_session(session_id)
    session: SimulationSession = entry["session"]
    async with entry["lock"]:
        session.reset()
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, session.start)
    return build_status(session_id, entry)


@router.delete("/{session_id}")
async def delete_session(session_id: str) -> dict:
    get_session(session_id)
    sessions.pop(session_id, None)
    return {"deleted": session_id}
