"""Agent stepper: the per-minute walk/transit/dwell state machine.

Each tick visits every agent once:
    1. Dwelling   count down, no movement
    2. Idle       wait for the next departure, then plan a path
    3. Transit    ride stop-to-stop along the planned path
    4. Walking    walk the final leg (or the whole trip if no path exists)

Mutations are in-place on the agents passed in.
"""

import logging
from typing import Optional

from corridorsim.core.config import (
    CARBON_FACTORS,
    MINUTES_PER_DAY,
    TRANSIT_KM_PER_MIN,
    WALK_KM_PER_MIN,
    RegionBounds,
)
from corridorsim.core.context import SimulationContext
from corridorsim.core.state import Agent, AgentState, BusStop, TravelMode
from corridorsim.network.geometry import (
    clamp_to_region,
    in_region,
    is_valid_location,
    move_toward,
)

logger = logging.getLogger(__name__)


def prepare_stops(raw_stops: Optional[list[BusStop]], region: RegionBounds) -> list[BusStop]:
    """Drop malformed and out-of-region stops, dedupe by id (first wins)."""
    if not raw_stops:
        return []
    seen: set[str] = set()
    stops: list[BusStop] = []
    for s in raw_stops:
        if s is None or not s.id or not is_valid_location(s.location):
            continue
        if not in_region(s.location, region) or s.id in seen:
            continue
        seen.add(s.id)
        stops.append(s)
    return stops


def _sync_total(agent: Agent) -> None:
    agent.total_time_spent = agent.walking_time + agent.riding_time + agent.waiting_time


def _resting_state(agent: Agent) -> AgentState:
    return AgentState.AT_HOME if agent.trip_index == 0 else AgentState.AT_DESTINATION


def _activate_trip(agent: Agent, context: SimulationContext) -> None:
    """Plan the current trip: nearest stops at both ends, then a path."""
    trip = agent.current_trip
    region = context.region
    agent.target_location = clamp_to_region(trip.destination, region)

    origin = context.network.nearest_stop(agent.current_location)
    dest = context.network.nearest_stop(agent.target_location)
    agent.nearest_stop_id = origin.id
    agent.destination_stop_id = dest.id

    agent.path = context.network.path(origin.id, dest.id)
    agent.path_index = 0
    agent.recorded_hop = -1
    if agent.path:
        agent.mode = TravelMode.TRANSIT
        agent.state = AgentState.RIDING
    else:
        logger.debug("No path %s -> %s for %s; walking", origin.id, dest.id, agent.id)
        agent.mode = TravelMode.WALK_DIRECT
        agent.state = AgentState.WALKING_TO_DEST


def _step_transit(agent: Agent, minute: int, context: SimulationContext) -> None:
    path = agent.path
    if agent.path_index >= len(path) - 1:
        agent.mode = TravelMode.WALK_FINAL
        agent.state = AgentState.WALKING_TO_DEST
        return

    from_id = path[agent.path_index]
    to_id = path[agent.path_index + 1]
    to_stop = context.network.stops_by_id.get(to_id)
    if to_stop is None:
        agent.mode = TravelMode.WALK_DIRECT
        agent.state = AgentState.WALKING_TO_DEST
        return

    m = move_toward(agent.current_location, to_stop.location, TRANSIT_KM_PER_MIN)
    agent.current_location = clamp_to_region(m.location, context.region)
    agent.riding_time += 1
    agent.distance_traveled += m.moved_km
    agent.carbon_emitted += CARBON_FACTORS["bus_base_per_km"] * m.moved_km / 1000.0
    agent.state = AgentState.RIDING

    if agent.recorded_hop != agent.path_index:
        context.flow.record(from_id, to_id, minute)
        agent.recorded_hop = agent.path_index

    if m.arrived:
        agent.path_index += 1


def _step_walk(agent: Agent, context: SimulationContext) -> None:
    target = clamp_to_region(agent.target_location, context.region)
    m = move_toward(agent.current_location, target, WALK_KM_PER_MIN)
    agent.current_location = clamp_to_region(m.location, context.region)
    agent.walking_time += 1
    agent.distance_traveled += m.moved_km
    agent.state = AgentState.WALKING_TO_DEST

    if m.arrived:
        trip = agent.current_trip
        agent.dwell_left = trip.dwell if trip is not None else 0
        agent.target_location = None
        agent.path = None
        agent.path_index = 0
        agent.mode = TravelMode.IDLE
        agent.trip_index += 1
        agent.state = AgentState.AT_DESTINATION


def step_agent(agent: Agent, minute: int, context: SimulationContext) -> None:
    """Advance a single agent by one simulated minute."""
    t = minute % MINUTES_PER_DAY
    agent.current_location = clamp_to_region(agent.current_location, context.region)

    if agent.dwell_left > 0:
        agent.dwell_left -= 1
        agent.state = _resting_state(agent)
        _sync_total(agent)
        return

    if agent.mode == TravelMode.IDLE:
        trip = agent.current_trip
        if trip is None:
            agent.state = AgentState.AT_HOME
            agent.target_location = None
            return
        if t < trip.depart:
            agent.state = _resting_state(agent)
            agent.target_location = None
            return
        _activate_trip(agent, context)

    if agent.mode == TravelMode.TRANSIT:
        if agent.path:
            _step_transit(agent, minute, context)
        else:
            agent.mode = TravelMode.WALK_DIRECT
    elif agent.mode in (TravelMode.WALK_FINAL, TravelMode.WALK_DIRECT):
        if agent.target_location is not None:
            _step_walk(agent, context)
        else:
            agent.mode = TravelMode.IDLE

    _sync_total(agent)


def step_simulation(
    agents: list[Agent],
    minute: int,
    stops: Optional[list[BusStop]],
    context: SimulationContext,
) -> list[Agent]:
    """Advance every agent by exactly one simulated minute.

    Returns the agents untouched when fewer than two usable stops remain.
    """
    usable = prepare_stops(stops, context.region)
    if len(usable) < 2:
        logger.debug("Only %d usable stop(s); skipping tick %d", len(usable), minute)
        return agents

    context.network.ensure(usable)
    for agent in agents:
        step_agent(agent, minute, context)
    return agents
