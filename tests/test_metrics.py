import pytest

from corridorsim.analysis.metrics import SimulationMetrics, calculate_metrics
from corridorsim.analysis.proposals import (
    build_baseline,
    demand_captured,
    evaluate_proposal,
    route_length_km,
)
from corridorsim.core.state import Agent, AgentState
from corridorsim.flow.recorder import FlowRecorder
from corridorsim.flow.synthesis import BusRoute

from conftest import collinear_stops


def _agent(i, age, state, walk=0, ride=0, dist=0.0, co2=0.0) -> Agent:
    a = Agent(id=f"a{i}", home_location=(52.5, -1.88), current_location=(52.5, -1.88), age=age)
    a.state = state
    a.walking_time = walk
    a.riding_time = ride
    a.total_time_spent = walk + ride
    a.distance_traveled = dist
    a.carbon_emitted = co2
    return a


def test_empty_population():
    assert calculate_metrics([]) == SimulationMetrics()


def test_counts_and_averages():
    agents = [
        _agent(0, 10, AgentState.AT_HOME),
        _agent(1, 30, AgentState.RIDING, walk=2, ride=10, dist=4.123, co2=3.3891),
        _agent(2, 40, AgentState.WALKING_TO_DEST, walk=5, dist=0.4),
        _agent(3, 70, AgentState.AT_DESTINATION, walk=3, ride=6, dist=2.5, co2=2.055),
        _agent(4, 21, AgentState.WALKING_TO_STOP, walk=1),
    ]
    m = calculate_metrics(agents)
    assert m.total_agents == 5
    assert m.riding_agents == 1
    assert m.walking_agents == 2
    assert m.waiting_agents == 0
    assert m.arrived_agents == 1
    assert m.active_agents == 4
    assert m.average_age == 34.2
    assert m.average_travel_time == pytest.approx((12 + 5 + 9 + 1) / 5)
    assert m.average_wait_time == 0.0
    assert m.total_co2 == round(3.3891 + 2.055, 2)
    assert m.co2_per_capita == round((3.3891 + 2.055) / 5, 3)
    assert m.total_distance == round(4.123 + 0.4 + 2.5, 2)


def test_waiting_agents_are_counted():
    a = _agent(0, 30, AgentState.WAITING)
    a.waiting_time = 4
    a.total_time_spent = 4
    m = calculate_metrics([a])
    assert m.waiting_agents == 1
    assert m.average_wait_time == 4.0


def test_metrics_do_not_mutate_agents():
    agents = [_agent(0, 30, AgentState.RIDING, ride=3)]
    before = agents[0].to_dict()
    calculate_metrics(agents)
    calculate_metrics(agents)
    assert agents[0].to_dict() == before


def test_proposal_captures_route_edges_in_direction_of_travel():
    stops = collinear_stops(3)
    flow = FlowRecorder()
    for _ in range(10):
        flow.record("A", "B", 480)
    for _ in range(6):
        flow.record("B", "C", 490)
    for _ in range(4):
        flow.record("C", "B", 1000)
    route = BusRoute(
        id="r0",
        name="Proposed Corridor 1",
        stop_ids=("A", "B", "C"),
        geometry=tuple(s.location for s in stops),
        color="hsl(280, 70%, 60%)",
    )

    captured, total = demand_captured([route], flow)
    assert (captured, total) == (16, 20)

    proposal = evaluate_proposal(1320, [route], flow)
    assert proposal.routes_count == 1
    assert proposal.route_km == pytest.approx(2.0, abs=0.01)
    assert proposal.demand_captured_pct == 80.0
    assert proposal.demand_captured_traversals == 16
    assert proposal.efficiency == pytest.approx(8.0, abs=0.1)


def test_proposal_without_routes():
    proposal = evaluate_proposal(0, [], FlowRecorder())
    assert proposal.routes_count == 0
    assert proposal.route_km == 0.0
    assert proposal.demand_captured_pct == 0.0
    assert proposal.efficiency == 0.0


def test_route_length_of_single_point_is_zero():
    assert route_length_km([(52.5, -1.88)]) == 0.0


def test_baseline_from_flow_and_metrics():
    flow = FlowRecorder()
    flow.record("A", "B", 7 * 60)
    flow.record("A", "B", 7 * 60 + 10)
    flow.record("B", "C", 12 * 60)
    metrics = SimulationMetrics(total_co2=1.5, total_distance=12.25)
    baseline = build_baseline(1320, flow, metrics)
    assert baseline.minute == 1320
    assert baseline.edges == 2
    assert baseline.total_traversals == 3
    assert baseline.peak_hour == 7
    assert baseline.total_co2 == 1.5
    assert baseline.total_distance_km == 12.25
