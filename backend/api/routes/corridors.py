"""Routes for recorded flow and corridor proposals."""

from fastapi import APIRouter, HTTPException

from api.models import FlowResponse, RouteGenerateRequest, RoutesResponse
from api.routes.sessions import get_session
from corridorsim.core.config import RouteSynthesisConfig
from corridorsim.core.engine import SimulationSession

router = APIRouter(prefix="/sessions", tags=["corridors"])


def _routes_response(session: SimulationSession) -> RoutesResponse:
    return RoutesResponse(
        routes=[r.to_dict() for r in session.generated_routes],
        proposal=session.proposal.to_dict() if session.proposal else None,
        baseline=session.baseline.to_dict() if session.baseline else None,
    )


@router.get("/{session_id}/flow", response_model=FlowResponse)
async def get_flow(session_id: str) -> FlowResponse:
    """Directed stop-to-stop flow recorded so far."""
    entry = get_session(session_id)
    session: SimulationSession = entry["session"]
    async with entry["lock"]:
        flow = session.context.flow
        summary = flow.summary()
        edges = sorted(flow.edges(), key=lambda e: e.count, reverse=True)
    return FlowResponse(
        edges=[e.to_dict() for e in edges],
        edges_count=summary.edges_count,
        total_traversals=summary.total_traversals,
        peak_hour=summary.peak_hour,
        hourly=summary.hourly,
    )


@router.post("/{session_id}/routes", response_model=RoutesResponse)
async def generate_routes(session_id: str, request: RouteGenerateRequest) -> RoutesResponse:
    """Synthesize corridors from the session's flow."""
    entry = get_session(session_id)
    config = RouteSynthesisConfig(**request.model_dump())
    errors = config.validate()
    if errors:
        raise HTTPException(status_code=400, detail="; ".join(errors))

    session: SimulationSession = entry["session"]
    async with entry["lock"]:
        session.generate_routes(config)
        return _routes_response(session)


@router.get("/{session_id}/routes", response_model=RoutesResponse)
async def get_routes(session_id: str) -> RoutesResponse:
    entry = get_session(session_id)
    async with entry["lock"]:
        return _routes_response(entry["session"])


@router.delete("/{session_id}/routes", response_model=RoutesResponse)
async def clear_routes(session_id: str) -> RoutesResponse:
    """Discard generated corridors; recorded flow is kept."""
    entry = get_session(session_id)
    session: SimulationSession = entry["session"]
    async with entry["lock"]:
        session.clear_routes()
        return _routes_response(session)
