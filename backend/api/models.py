"""Pydantic models for API request/response schemas."""

from typing import Optional

from pydantic import BaseModel, Field


class SessionCreateRequest(BaseModel):
    """Request to start a new simulated day."""

    agent_count: Optional[int] = Field(
        default=None, ge=0, le=20000, description="Number of agents (defaults to server setting)"
    )
    seed: int = Field(default=1337, description="Random seed for population and schedules")
    start_minute: int = Field(default=360, ge=0, le=1439, description="Minute of day the clock starts at")
    duration_minutes: int = Field(default=960, ge=1, le=1440, description="Length of the simulated window")
    name: str = Field(default="", description="Optional name for the session")


class SessionStatus(BaseModel):
    """Clock and progress of a session."""

    session_id: str = Field(..., description="Unique identifier for the session")
    name: str = Field(default="", description="Session name")
    status: str = Field(..., description="Current status: running or finished")
    current_minute: int = Field(..., description="Simulated minute of day")
    progress: float = Field(..., description="Progress from 0.0 to 1.0", ge=0.0, le=1.0)
    agent_count: int = Field(..., description="Agents in the population")
    stop_count: int = Field(..., description="Usable stops in the network")


class StepResponse(BaseModel):
    """Status and metrics after stepping a session."""

    status: SessionStatus
    ticks: int = Field(..., description="Minutes actually simulated by this request")
    metrics: dict = Field(..., description="SimulationMetrics as a dictionary")


class FlowResponse(BaseModel):
    """Recorded stop-to-stop flow."""

    edges: list[dict] = Field(default_factory=list, description="Flow edges with hourly histograms")
    edges_count: int
    total_traversals: int
    peak_hour: int
    hourly: list[int]


class RouteGenerateRequest(BaseModel):
    """Parameters for corridor synthesis."""

    top_edges: int = Field(default=120, description="Busiest edges considered")
    min_count: int = Field(default=8, description="Minimum traversals for an edge to qualify")
    max_routes: int = Field(default=8, description="Maximum corridors returned")
    max_stops_per_route: int = Field(default=18, description="Cap on stops per corridor")


class RoutesResponse(BaseModel):
    """Generated corridors and how much demand they capture."""

    routes: list[dict] = Field(default_factory=list)
    proposal: Optional[dict] = Field(default=None, description="ProposalSnapshot as a dictionary")
    baseline: Optional[dict] = Field(default=None, description="BaselineSnapshot, once the day has ended")
