from __future__ import annotations

import logging
from dataclasses import dataclass, field

import httpx

from .api import (
    bonus_added,
    current_gameweek,
    fetch_bootstrap,
    fetch_event_status,
    fetch_fixtures,
    fetch_live_gameweek,
    fetch_user_picks_full,
    make_client,
    parse_fixtures,
    parse_gameweeks,
    parse_players,
    parse_teams,
)
from .autosubs import apply_auto_subs
from .bonus import (
    allocate_live_fixtures,
    bonus_by_player,
    fixture_scores,
    total_predicted_bonus,
    validate_bps_consistency,
)
from .bps import calculate_player_bps, stats_from_feed
from .models import (
    AutoSubResult,
    BonusPick,
    Fixture,
    FixtureBonusResult,
    Player,
    PlayerPerformanceScore,
    SquadPlayer,
    Team,
    position_code,
)

logger = logging.getLogger(__name__)

STARTING_SLOTS = 11
GK_ELEMENT_TYPE = 1


def _live_map(live_data: dict) -> dict[int, dict]:
    return {e["id"]: e.get("stats", {}) for e in live_data.get("elements", [])}


def _explain_values(entry: dict) -> dict[str, int]:
    return {row["identifier"]: row.get("value", 0) for row in entry.get("stats", [])}


def _score(p: Player, stats: dict, fixture_id: int | None) -> PlayerPerformanceScore:
    bps = stats.get("bps")
    if bps is None:
        feed = stats_from_feed(p.id, p.team, p.position_name, stats, web_name=p.name)
        bps = calculate_player_bps(feed).total
    return PlayerPerformanceScore(
        player_id=p.id,
        bps=bps,
        minutes=stats.get("minutes", 0),
        team=p.team,
        web_name=p.name,
        fixture=fixture_id,
    )


def performance_scores_from_live(
    live_data: dict,
    players: dict[int, Player],
) -> list[PlayerPerformanceScore]:
    """One score per player per fixture, read from each element's ``explain``.

    In a double gameweek a player gets a separate score for each match and
    is ranked only in the fixtures listed for them. Elements without
    ``explain`` fall back to the gameweek totals with no fixture pinned. Rows
    without ``bps`` get an estimate from the BPS calculator.
    """
    scores = []
    for e in live_data.get("elements", []):
        p = players.get(e["id"])
        if p is None:
            continue
        stats = e.get("stats", {})
        explain = e.get("explain") or []
        if not explain:
            scores.append(_score(p, stats, None))
            continue
        for entry in explain:
            values = _explain_values(entry)
            if len(explain) == 1:
                # Single fixture: the gameweek totals are this match's totals
                values = {**values, **stats}
            scores.append(_score(p, values, entry["fixture"]))
    return scores


def check_fixture_bps(fixtures: list[Fixture], scores: list[PlayerPerformanceScore]) -> bool:
    """Cross-check live BPS against each live fixture's own ``bps`` stat rows."""
    consistent = True
    for f in fixtures:
        if not f.is_live or not f.bps_stats:
            continue
        live_rows = [
            {"player_id": s.player_id, "bps": s.bps}
            for s in fixture_scores(f, scores)
            if s.minutes > 0
        ]
        if not validate_bps_consistency(f.bps_stats, live_rows):
            logger.warning("Fixture %s: live BPS disagrees with fixture stats", f.id)
            consistent = False
    return consistent


def fixture_finished_by_team(fixtures: list[Fixture], gameweek: int) -> dict[int, bool]:
    """Map team id to whether all of its fixtures in ``gameweek`` are finished.

    A provisionally finished fixture counts, so DNP starters are subbed before
    bonus is confirmed. Teams without a fixture are absent; callers treat them
    as finished.
    """
    finished: dict[int, bool] = {}
    for f in fixtures:
        if f.gameweek != gameweek:
            continue
        done = f.finished or f.finished_provisional
        for team_id in (f.home_team, f.away_team):
            finished[team_id] = finished.get(team_id, True) and done
    return finished


def live_teams(fixtures: list[Fixture], gameweek: int) -> set[int]:
    teams: set[int] = set()
    for f in fixtures:
        if f.gameweek == gameweek and f.is_live:
            teams.update((f.home_team, f.away_team))
    return teams


def provisional_points(
    total_points: int,
    official_bonus: int,
    predicted_bonus: int,
    in_live_fixture: bool,
) -> int:
    if in_live_fixture and official_bonus == 0:
        return total_points + predicted_bonus
    return total_points


def build_squad(
    picks: list[dict],
    live_data: dict,
    players: dict[int, Player],
    fixtures: list[Fixture],
    gameweek: int,
    bonus: dict[int, int] | None = None,
) -> list[SquadPlayer]:
    """Turn an FPL picks payload into ``SquadPlayer`` entries for the engine."""
    bonus = bonus or {}
    live = _live_map(live_data)
    finished = fixture_finished_by_team(fixtures, gameweek)
    in_play = live_teams(fixtures, gameweek)

    squad = []
    bench_order = 0
    for pick in sorted(picks, key=lambda pk: pk["position"]):
        pid = pick["element"]
        p = players.get(pid)
        stats = live.get(pid, {})
        team = p.team if p else 0
        element_type = p.position if p else pick.get("element_type", 0)
        is_starter = pick["position"] <= STARTING_SLOTS

        order = None
        if not is_starter and element_type != GK_ELEMENT_TYPE:
            bench_order += 1
            order = bench_order

        points = provisional_points(
            stats.get("total_points", 0),
            stats.get("bonus", 0),
            bonus.get(pid, 0),
            team in in_play,
        )
        squad.append(
            SquadPlayer(
                id=pid,
                position=position_code(element_type),
                is_starter=is_starter,
                minutes=stats.get("minutes", 0),
                fixture_finished=finished.get(team, True),
                points=points,
                # Bench picks carry multiplier 0 until they come on
                multiplier=pick.get("multiplier") or 1,
                bench_order=order,
                web_name=p.name if p else f"ID {pid}",
            )
        )
    return squad


@dataclass
class LiveBonusReport:
    gameweek: int
    results: list[FixtureBonusResult]
    fixtures: list[Fixture]
    teams: dict[int, Team]
    players: dict[int, Player] = field(default_factory=dict)

    def to_dict(self) -> dict:
        fixtures = {f.id: f for f in self.fixtures}
        out = []
        for r in self.results:
            f = fixtures.get(r.fixture_id)
            d = r.to_dict()
            d["home"] = self.teams[r.team_h_id].short_name if r.team_h_id in self.teams else "???"
            d["away"] = self.teams[r.team_a_id].short_name if r.team_a_id in self.teams else "???"
            d["score"] = [f.home_score, f.away_score] if f else [None, None]
            out.append(d)
        return {"gameweek": self.gameweek, "fixtures": out}


@dataclass
class LiveTeamReport:
    user_id: int
    gameweek: int
    squad: list[SquadPlayer]
    result: AutoSubResult
    predicted_bonus: int
    bonus_added: bool
    official_subs: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "gameweek": self.gameweek,
            "squad": [p.to_dict() for p in self.squad],
            "auto_subs": self.result.to_dict(),
            "predicted_bonus": self.predicted_bonus,
            "bonus_added": self.bonus_added,
            "official_subs": self.official_subs,
        }


def _load_context(client: httpx.Client, gameweek: int | None):
    bootstrap = fetch_bootstrap(client)
    gameweeks = parse_gameweeks(bootstrap)
    gw = gameweek if gameweek is not None else current_gameweek(gameweeks).id
    players = {p.id: p for p in parse_players(bootstrap)}
    teams = parse_teams(bootstrap)
    fixtures = parse_fixtures(fetch_fixtures(client, gw))
    live_data = fetch_live_gameweek(client, gw)
    return gw, players, teams, fixtures, live_data


def load_live_bonus(gameweek: int | None = None) -> LiveBonusReport:
    with make_client() as client:
        gw, players, teams, fixtures, live_data = _load_context(client, gameweek)

    scores = performance_scores_from_live(live_data, players)
    check_fixture_bps(fixtures, scores)
    results = allocate_live_fixtures(fixtures, scores)
    logger.info("GW%s: predicted bonus for %d live fixtures", gw, len(results))
    return LiveBonusReport(gameweek=gw, results=results, fixtures=fixtures, teams=teams, players=players)


def load_live_team(user_id: int, gameweek: int | None = None) -> LiveTeamReport:
    with make_client() as client:
        gw, players, teams, fixtures, live_data = _load_context(client, gameweek)
        picks_data = fetch_user_picks_full(client, user_id, gw)
        status = fetch_event_status(client)

    scores = performance_scores_from_live(live_data, players)
    results = allocate_live_fixtures(fixtures, scores)
    picks = picks_data.get("picks", [])

    squad = build_squad(picks, live_data, players, fixtures, gw, bonus=bonus_by_player(results))
    result = apply_auto_subs(squad)
    bonus_picks = [
        BonusPick(
            player_id=pk["element"],
            multiplier=pk.get("multiplier", 1),
            is_captain=pk.get("is_captain", False),
        )
        for pk in picks
    ]
    logger.info(
        "Entry %s GW%s: %d auto-subs, %d pts",
        user_id, gw, len(result.subs_applied), result.total_points,
    )

    return LiveTeamReport(
        user_id=user_id,
        gameweek=gw,
        squad=squad,
        result=result,
        predicted_bonus=total_predicted_bonus(bonus_picks, results),
        bonus_added=bonus_added(status, gw),
        official_subs=picks_data.get("automatic_subs", []),
    )
