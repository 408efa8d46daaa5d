from __future__ import annotations

import pytest

from fpl_live.models import Fixture, Gameweek, Player, PlayerPerformanceScore, SquadPlayer, Team


def make_score(player_id: int, bps: int, team: int = 1, minutes: int = 90) -> PlayerPerformanceScore:
    return PlayerPerformanceScore(
        player_id=player_id, bps=bps, minutes=minutes, team=team, web_name=f"P{player_id}"
    )


def make_squad_player(id: int, position: str, is_starter: bool = True, **kw) -> SquadPlayer:
    defaults = dict(minutes=90, fixture_finished=True, points=2, multiplier=1, bench_order=None)
    defaults.update(kw)
    return SquadPlayer(id=id, position=position, is_starter=is_starter, **defaults)


def build_squad(
    starter_overrides: dict[int, dict] | None = None,
    bench: list[SquadPlayer] | None = None,
) -> list[SquadPlayer]:
    """A 4-4-2 starting XI (ids 1-11) with a default bench (ids 12-15).

    Starters: 1 GK, 2-5 DEF, 6-9 MID, 10-11 FWD.
    Bench: 12 GK, 13 DEF (order 1), 14 MID (order 2), 15 FWD (order 3).
    """
    overrides = starter_overrides or {}
    layout = [(1, "GK")] + [(i, "DEF") for i in range(2, 6)] + \
        [(i, "MID") for i in range(6, 10)] + [(10, "FWD"), (11, "FWD")]
    starters = [make_squad_player(pid, pos, **overrides.get(pid, {})) for pid, pos in layout]
    if bench is None:
        bench = [
            make_squad_player(12, "GK", is_starter=False),
            make_squad_player(13, "DEF", is_starter=False, bench_order=1),
            make_squad_player(14, "MID", is_starter=False, bench_order=2),
            make_squad_player(15, "FWD", is_starter=False, bench_order=3),
        ]
    return starters + bench


@pytest.fixture
def mock_teams() -> dict[int, Team]:
    return {
        1: Team(id=1, name="Arsenal", short_name="ARS"),
        2: Team(id=2, name="Chelsea", short_name="CHE"),
        3: Team(id=3, name="Liverpool", short_name="LIV"),
        4: Team(id=4, name="Man City", short_name="MCI"),
        5: Team(id=5, name="Tottenham", short_name="TOT"),
        6: Team(id=6, name="Aston Villa", short_name="AVL"),
    }


@pytest.fixture
def mock_gameweeks() -> list[Gameweek]:
    return [
        Gameweek(id=1, name="Gameweek 1", finished=True, is_current=False, is_next=False),
        Gameweek(id=2, name="Gameweek 2", finished=False, is_current=True, is_next=False),
        Gameweek(id=3, name="Gameweek 3", finished=False, is_current=False, is_next=True),
    ]


@pytest.fixture
def mock_fixtures() -> list[Fixture]:
    return [
        # GW 1 (finished)
        Fixture(id=1, gameweek=1, home_team=1, away_team=2, started=True, finished=True,
                home_score=2, away_score=1),
        # GW 2 (current): one finished, one live, one not started
        Fixture(id=3, gameweek=2, home_team=1, away_team=2, started=True, finished=True,
                home_score=0, away_score=0),
        Fixture(id=4, gameweek=2, home_team=3, away_team=4, started=True, finished=False,
                home_score=1, away_score=0),
        Fixture(id=5, gameweek=2, home_team=5, away_team=6, started=False, finished=False),
    ]


@pytest.fixture
def mock_players() -> list[Player]:
    return [
        Player(id=1, name="Raya", team=1, position=1, cost=5.5),
        Player(id=2, name="Saliba", team=1, position=2, cost=6.0),
        Player(id=3, name="Saka", team=1, position=3, cost=10.0),
        Player(id=4, name="Palmer", team=2, position=3, cost=10.5),
        Player(id=5, name="Jackson", team=2, position=4, cost=7.5),
        Player(id=6, name="Alisson", team=3, position=1, cost=5.5),
        Player(id=7, name="Van Dijk", team=3, position=2, cost=6.5),
        Player(id=8, name="Salah", team=3, position=3, cost=13.0),
        Player(id=9, name="Haaland", team=4, position=4, cost=15.0),
        Player(id=10, name="Ederson", team=4, position=1, cost=5.5),
        Player(id=11, name="Gvardiol", team=4, position=2, cost=6.0),
        Player(id=12, name="Son", team=5, position=3, cost=10.0),
        Player(id=13, name="Watkins", team=6, position=4, cost=9.0),
        Player(id=14, name="Martinez", team=6, position=1, cost=5.0),
        Player(id=15, name="Porro", team=5, position=2, cost=5.5),
        Player(id=16, name="Cucurella", team=2, position=2, cost=5.5),
        Player(id=17, name="Rogers", team=6, position=3, cost=6.0),
    ]


@pytest.fixture
def mock_picks() -> list[dict]:
    """3-4-3 with Salah captain; bench Martinez, Porro, Rogers, Cucurella."""
    order = [1, 2, 7, 11, 3, 4, 8, 12, 5, 9, 13, 14, 15, 17, 16]
    return [
        {
            "element": element,
            "position": slot,
            "multiplier": 0 if slot > 11 else (2 if element == 8 else 1),
            "is_captain": element == 8,
            "is_vice_captain": element == 3,
        }
        for slot, element in enumerate(order, 1)
    ]


@pytest.fixture
def mock_live_data() -> dict:
    def el(pid, minutes, bps, total_points, bonus=0):
        return {"id": pid, "stats": {"minutes": minutes, "bps": bps,
                                     "total_points": total_points, "bonus": bonus}}

    return {
        "elements": [
            # ARS v CHE, finished with official bonus
            el(1, 90, 28, 6, bonus=2),
            el(2, 0, 0, 0),
            el(3, 90, 32, 9, bonus=3),
            el(4, 90, 20, 2),
            el(5, 70, 10, 2),
            el(16, 90, 12, 1),
            # LIV v MCI, in play
            el(6, 60, 22, 6),
            el(7, 60, 30, 6),
            el(8, 60, 30, 8),
            el(9, 60, 15, 2),
            el(10, 60, 18, 2),
            el(11, 0, 0, 0),
            # TOT v AVL, not started
            el(12, 0, 0, 0),
            el(13, 0, 0, 0),
            el(14, 0, 0, 0),
            el(15, 0, 0, 0),
            el(17, 0, 0, 0),
            # Not in bootstrap
            el(999, 90, 50, 10),
        ]
    }


@pytest.fixture
def mock_bootstrap(mock_teams, mock_gameweeks, mock_players) -> dict:
    return {
        "teams": [{"id": t.id, "name": t.name, "short_name": t.short_name} for t in mock_teams.values()],
        "events": [
            {"id": gw.id, "name": gw.name, "finished": gw.finished,
             "is_current": gw.is_current, "is_next": gw.is_next}
            for gw in mock_gameweeks
        ],
        "elements": [
            {"id": p.id, "web_name": p.name, "team": p.team, "element_type": p.position,
             "now_cost": round(p.cost * 10), "status": "a"}
            for p in mock_players
        ],
    }


@pytest.fixture
def mock_raw_fixtures(mock_fixtures) -> list[dict]:
    return [
        {"id": f.id, "event": f.gameweek, "team_h": f.home_team, "team_a": f.away_team,
         "started": f.started, "finished": f.finished,
         "team_h_score": f.home_score, "team_a_score": f.away_score, "kickoff_time": None}
        for f in mock_fixtures
    ]
