import pytest

from lineuprx import (
    LineupOptimizer,
    NoTeamData,
    OptimizerError,
    ProjectionUnavailable,
    RosterPlayer,
    TeamSnapshot,
    WaiverPoolUnavailable,
)
from lineuprx.config import EngineSettings, Slot, slot_capacity
from lineuprx.ingest import parse_projection_payload
from lineuprx.models import AvailablePlayer
from lineuprx.optimizer import StaticWaiverPool, optimize_roster
from lineuprx.optimizer.chains import current_occupancy


class _FakeProjectionSource:
    def __init__(self, payload=None, error: Exception | None = None):
        self.records = parse_projection_payload(payload or {})
        self.error = error
        self.calls: list[tuple[int, object]] = []

    async def fetch_projections(self, week, year):
        self.calls.append((week, year))
        if self.error is not None:
            raise self.error
        return self.records


def _p(pid: str, position: str, slot: str | None = None) -> RosterPlayer:
    return RosterPlayer(
        player_id=pid,
        name=pid.upper(),
        position=position,
        projection_key=f"k_{pid}",
        lineup_slot=slot,
        is_starter=slot is not None,
    )


def _payload(points: dict[str, float]) -> dict:
    return {f"k_{pid}": {"pts_ppr": value, "pts_half_ppr": value - 1, "pts_std": value - 2} for pid, value in points.items()}


_LEAGUE_POINTS = {
    "qb1": 18.0,
    "qb2": 12.0,
    "rb1": 10.0,
    "rb2": 15.0,
    "wr1": 14.0,
    "wr2": 9.0,
    "te1": 8.0,
    "wr3": 11.0,
    "k1": 7.0,
    "def1": 6.0,
    "rb3": 16.0,
    "wr4": 13.0,
    "qb3": 20.0,
    "te2": 3.0,
}


def _league_team() -> TeamSnapshot:
    roster = [
        _p("qb1", "QB", "QB"),
        _p("qb2", "QB", "SUPER_FLEX"),
        _p("rb1", "RB", "RB1"),
        _p("rb2", "RB", "RB2"),
        _p("wr1", "WR", "WR1"),
        _p("wr2", "WR", "WR2"),
        _p("te1", "TE", "TE"),
        _p("wr3", "WR", "FLEX"),
        _p("k1", "K", "K"),
        _p("def1", "DEF", "DEF"),
        _p("rb3", "RB"),
        _p("wr4", "WR"),
        _p("qb3", "QB"),
        _p("te2", "TE"),
    ]
    positions = ["QB", "RB", "RB", "WR", "WR", "TE", "FLEX", "SUPER_FLEX", "K", "DEF", "BN", "BN", "BN", "BN"]
    return TeamSnapshot(team_name="Gridiron Gang", roster=roster, roster_positions=positions)


def _optimizer(source, pool=None) -> LineupOptimizer:
    return LineupOptimizer(source, pool, settings=EngineSettings())


@pytest.mark.anyio
async def test_optimize_lineup_starts_better_quarterback():
    team = TeamSnapshot(roster=[_p("qb1", "QB", "QB"), _p("qb2", "QB")], roster_positions=["QB", "BN"])
    source = _FakeProjectionSource(_payload({"qb1": 20.0, "qb2": 25.0}))

    result = await _optimizer(source).optimize_lineup(team, 4, "2024")

    assert source.calls == [(4, "2024")]
    assert [p.player_id for p in result.optimal_lineup[Slot.QB]] == ["qb2"]
    assert [p.player_id for p in result.benched_players] == ["qb1"]
    assert result.projected_points == pytest.approx(25.0)
    assert result.current_points == pytest.approx(20.0)
    assert result.improvement == pytest.approx(5.0)
    assert len(result.changes) == 1
    assert result.changes[0].player_out.player_id == "qb1"
    assert result.changes[0].improvement == pytest.approx(5.0)


@pytest.mark.anyio
async def test_optimize_lineup_fills_empty_flex_without_repositioning():
    team = TeamSnapshot(roster=[_p("rb1", "RB", "RB"), _p("wr1", "WR", "WR"), _p("wr2", "WR")])
    source = _FakeProjectionSource(_payload({"rb1": 10.0, "wr1": 12.0, "wr2": 15.0}))

    result = await _optimizer(source).optimize_lineup(team, 1, 2024, requirements={"RB": 1, "WR": 1, "FLEX": 1})

    assert len(result.move_chains) == 1
    steps = result.move_chains[0].steps
    assert [(s.player.player_id, s.from_slot, s.to_slot) for s in steps] == [("wr2", Slot.BENCH, Slot.FLEX)]
    assert result.changes[0].player_out is None


@pytest.mark.anyio
async def test_optimize_lineup_uses_scoring_format():
    team = TeamSnapshot(roster=[_p("qb1", "QB", "QB")], roster_positions=["QB"])
    source = _FakeProjectionSource(_payload({"qb1": 20.0}))

    result = await _optimizer(source).optimize_lineup(team, 1, 2024, scoring_format="std")

    assert result.projected_points == pytest.approx(18.0)
    assert result.changes == ()


@pytest.mark.anyio
async def test_full_league_optimization_is_executable_and_never_worse():
    team = _league_team()
    source = _FakeProjectionSource(_payload(_LEAGUE_POINTS))

    result = await _optimizer(source).optimize_lineup(team, 7, 2024)

    assert result.projected_points == pytest.approx(128.0)
    assert result.current_points == pytest.approx(110.0)
    assert result.projected_points >= result.current_points
    assert sum(chain.net_improvement for chain in result.move_chains) == pytest.approx(result.improvement)
    assert sorted(change.player_in.player_id for change in result.changes) == ["qb3", "rb3", "wr4"]

    occupancy = {slot: {p.player_id for p in players} for slot, players in current_occupancy(team.roster).items()}
    for chain in result.move_chains:
        for step in chain.steps:
            if step.from_slot is not Slot.BENCH:
                occupancy[step.from_slot].remove(step.player.player_id)
            if step.to_slot is not Slot.BENCH:
                holders = occupancy.setdefault(step.to_slot, set())
                assert len(holders) < slot_capacity(result.requirements, step.to_slot)
                holders.add(step.player.player_id)

    for slot, players in result.optimal_lineup.items():
        if slot is not Slot.BENCH:
            assert occupancy.get(slot, set()) == {p.player_id for p in players}


def test_optimize_roster_is_deterministic():
    team = _league_team()
    table = {f"k_{pid}": value for pid, value in _LEAGUE_POINTS.items()}
    requirements = {Slot.QB: 1, Slot.RB: 2, Slot.WR: 2, Slot.TE: 1, Slot.FLEX: 1, Slot.SUPER_FLEX: 1, Slot.K: 1, Slot.DEF: 1}

    assert optimize_roster(team.roster, table, requirements) == optimize_roster(team.roster, table, requirements)


@pytest.mark.anyio
async def test_missing_team_raises_no_team_data():
    optimizer = _optimizer(_FakeProjectionSource())

    with pytest.raises(NoTeamData):
        await optimizer.optimize_lineup(None, 1, 2024)
    with pytest.raises(NoTeamData):
        await optimizer.optimize_lineup(TeamSnapshot(roster=[]), 1, 2024)


@pytest.mark.anyio
async def test_projection_failure_propagates_unchanged():
    error = ProjectionUnavailable("HTTP error: 500", week=2, year="2024")
    optimizer = _optimizer(_FakeProjectionSource(error=error))
    team = TeamSnapshot(roster=[_p("qb1", "QB", "QB")])

    with pytest.raises(ProjectionUnavailable) as excinfo:
        await optimizer.optimize_lineup(team, 2, "2024")

    assert excinfo.value is error


@pytest.mark.anyio
async def test_waiver_recommendations_from_pool():
    team = TeamSnapshot(roster=[_p("wr_low", "WR", "WR"), _p("wr_high", "WR", "WR"), _p("rb1", "RB", "RB")])
    source = _FakeProjectionSource(_payload({"wr_low": 5.0, "wr_high": 12.0, "rb1": 14.0}))
    pool = StaticWaiverPool(
        [
            AvailablePlayer(player_key="fa1", name="Free One", position="WR", projected_points=9.5),
            AvailablePlayer(player_key="fa2", name="Free Two", position="WR", projected_points=7.0),
            AvailablePlayer(player_key="fa3", name="Free Three", position="RB", projected_points=16.0),
        ]
    )

    recommendations = await _optimizer(source, pool).get_waiver_recommendations(team, 5, 2024)

    assert [rec.player_to_add.player_key for rec in recommendations] == ["fa1"]
    assert recommendations[0].projected_impact == pytest.approx(4.5)
    assert recommendations[0].player_to_drop.player_id == "wr_low"


@pytest.mark.anyio
async def test_waiver_recommendations_need_a_pool():
    team = TeamSnapshot(roster=[_p("wr1", "WR", "WR")])

    with pytest.raises(WaiverPoolUnavailable) as excinfo:
        await _optimizer(_FakeProjectionSource()).get_waiver_recommendations(team, 1, 2024)

    assert isinstance(excinfo.value, OptimizerError)


@pytest.mark.anyio
async def test_starter_in_slot_league_does_not_use_scores_nothing():
    team = TeamSnapshot(roster=[_p("qb1", "QB", "QB"), _p("k1", "K", "K")], roster_positions=["QB", "BN", "BN"])
    source = _FakeProjectionSource(_payload({"qb1": 10.0, "k1": 8.0}))

    result = await _optimizer(source).optimize_lineup(team, 3, 2024)

    assert result.projected_points == pytest.approx(10.0)
    assert result.current_points == pytest.approx(10.0)
    assert result.improvement == pytest.approx(0.0)
    assert result.projected_points >= result.current_points
    assert result.changes == ()
    assert len(result.move_chains) == 1
    steps = result.move_chains[0].steps
    assert [(s.player.player_id, s.from_slot, s.to_slot) for s in steps] == [("k1", Slot.K, Slot.BENCH)]


@pytest.mark.anyio
async def test_unmodeled_slot_starter_is_left_alone():
    idp = RosterPlayer(player_id="lb1", name="LB1", position="LB", projection_key="k_lb1", lineup_slot="IDP", is_starter=True)
    team = TeamSnapshot(roster=[_p("qb1", "QB", "QB"), idp], roster_positions=["QB", "IDP", "BN"])
    source = _FakeProjectionSource(_payload({"qb1": 10.0, "lb1": 6.0}))

    result = await _optimizer(source).optimize_lineup(team, 3, 2024)

    assert result.current_points == pytest.approx(10.0)
    assert result.improvement == pytest.approx(0.0)
    assert result.move_chains == ()
