from corridorsim.analysis.metrics import calculate_metrics
from corridorsim.core.config import RouteSynthesisConfig, SimulationConfig
from corridorsim.core.engine import SimulationSession, run_simulation
from corridorsim.core.state import AgentState
from corridorsim.network.geometry import in_region


def _config(**kwargs) -> SimulationConfig:
    base = dict(agent_count=60, random_seed=11, start_minute=6 * 60, duration_minutes=180)
    base.update(kwargs)
    return SimulationConfig(**base)


def test_session_start_creates_population(small_city):
    session = SimulationSession(small_city, _config())
    assert not session.tick()

    session.start()
    assert len(session.agents) == 60
    assert session.current_minute == 360
    assert all(a.state == AgentState.AT_HOME for a in session.agents)
    assert len(session.stops) == 16


def test_tick_preserves_invariants(small_city):
    session = SimulationSession(small_city, _config())
    session.start()
    for _ in range(120):
        assert session.tick()
        for agent in session.agents:
            assert agent.walking_time + agent.riding_time + agent.waiting_time == agent.total_time_spent
            assert agent.dwell_left >= 0
            assert in_region(agent.current_location, session.config.region)
    assert session.current_minute == 480
    assert session.metrics == calculate_metrics(session.agents)


def test_morning_commute_records_flow(small_city):
    session = SimulationSession(small_city, _config(agent_count=150))
    session.start()
    session.run()
    summary = session.context.flow.summary()
    assert summary.total_traversals > 0
    assert 6 <= summary.peak_hour <= 8
    assert session.metrics.total_distance > 0


def test_run_to_end_records_baseline_once(small_city):
    session = SimulationSession(small_city, _config())
    session.start()
    ticks = session.run()
    assert ticks == 180
    assert session.finished
    assert session.current_minute == session.config.end_minute
    assert session.baseline is not None
    assert session.baseline.minute == session.config.end_minute

    baseline = session.baseline
    assert session.run() == 0
    assert session.baseline is baseline


def test_partial_run_and_progress(small_city):
    session = SimulationSession(small_city, _config())
    session.start()
    seen = []
    assert session.run(30, progress_callback=lambda step, total: seen.append((step, total))) == 30
    assert seen[0] == (1, 180)
    assert seen[-1] == (30, 180)
    assert not session.finished
    assert session.baseline is None


def test_sessions_are_reproducible_and_independent(small_city):
    first = SimulationSession(small_city, _config())
    second = SimulationSession(small_city, _config())
    first.start()
    second.start()
    first.run(150)
    second.run(150)

    assert [a.current_location for a in first.agents] == [a.current_location for a in second.agents]
    assert [e.to_dict() for e in first.context.flow.edges()] == [
        e.to_dict() for e in second.context.flow.edges()
    ]
    assert first.context is not second.context


def test_generate_and_clear_routes(small_city):
    session = SimulationSession(small_city, _config(agent_count=200))
    session.start()
    session.run()

    routes = session.generate_routes(RouteSynthesisConfig(min_count=1))
    assert session.proposal is not None
    assert session.proposal.routes_count == len(routes)
    for route in routes:
        assert len(route.stop_ids) >= 3
        assert len(route.geometry) == len(route.stop_ids)

    session.clear_routes()
    assert session.generated_routes == []
    assert session.proposal is None
    assert session.context.flow.summary().total_traversals > 0


def test_reset_clears_state(small_city):
    session = SimulationSession(small_city, _config())
    session.start()
    session.run(90)
    session.reset()
    assert session.agents == []
    assert len(session.context.flow) == 0
    assert session.context.network.signature is None
    assert session.baseline is None
    assert not session.is_running


def test_run_simulation_snapshots(small_city):
    session, snapshots = run_simulation(small_city, _config(), snapshot_interval=60)
    assert len(snapshots) == 4
    assert [s["minute"] for s in snapshots] == [360, 420, 480, 540]
    assert session.baseline is not None
    assert snapshots[-1]["metrics"] == session.metrics.to_dict()


def test_config_validation():
    assert SimulationConfig().validate() == []
    bad = SimulationConfig(agent_count=-1, start_minute=1500, duration_minutes=0)
    assert len(bad.validate()) == 3
    assert bad.clamp().validate() == []


def test_run_simulation_with_zero_snapshot_interval(small_city):
    session, snapshots = run_simulation(small_city, _config(duration_minutes=5), snapshot_interval=0)
    assert [s["minute"] for s in snapshots] == [360, 361, 362, 363, 364, 365]
