from __future__ import annotations

import logging
import os

import httpx

from .models import Fixture, Gameweek, Player, Team

logger = logging.getLogger(__name__)

BASE_URL = os.environ.get("FPL_API_BASE_URL", "https://fantasy.premierleague.com/api")
HTTP_TIMEOUT = float(os.environ.get("FPL_HTTP_TIMEOUT", "30"))


def make_client() -> httpx.Client:
    return httpx.Client(timeout=HTTP_TIMEOUT)


def fetch_bootstrap(client: httpx.Client) -> dict:
    resp = client.get(f"{BASE_URL}/bootstrap-static/")
    resp.raise_for_status()
    return resp.json()


def fetch_fixtures(client: httpx.Client, gameweek: int | None = None) -> list[dict]:
    params = {"event": gameweek} if gameweek is not None else None
    resp = client.get(f"{BASE_URL}/fixtures/", params=params)
    resp.raise_for_status()
    return resp.json()


def fetch_live_gameweek(client: httpx.Client, gameweek: int) -> dict:
    resp = client.get(f"{BASE_URL}/event/{gameweek}/live/")
    resp.raise_for_status()
    data = resp.json()
    logger.debug("GW%s live: %d elements", gameweek, len(data.get("elements", [])))
    return data


def fetch_user_picks_full(client: httpx.Client, user_id: int, gameweek: int) -> dict:
    """Returns the full picks response including automatic_subs, entry_history, etc."""
    resp = client.get(f"{BASE_URL}/entry/{user_id}/event/{gameweek}/picks/")
    resp.raise_for_status()
    return resp.json()


def fetch_event_status(client: httpx.Client) -> dict:
    resp = client.get(f"{BASE_URL}/event-status/")
    resp.raise_for_status()
    return resp.json()


def parse_teams(data: dict) -> dict[int, Team]:
    teams = {}
    for t in data["teams"]:
        teams[t["id"]] = Team(
            id=t["id"],
            name=t["name"],
            short_name=t["short_name"],
        )
    return teams


def parse_gameweeks(data: dict) -> list[Gameweek]:
    return [
        Gameweek(
            id=gw["id"],
            name=gw["name"],
            finished=gw["finished"],
            is_current=gw["is_current"],
            is_next=gw["is_next"],
        )
        for gw in data["events"]
    ]


def parse_players(data: dict) -> list[Player]:
    return [
        Player(
            id=e["id"],
            name=e.get("web_name", "Unknown"),
            team=e["team"],
            position=e["element_type"],
            cost=e.get("now_cost", 0) / 10.0,
            status=e.get("status", "a"),
        )
        for e in data["elements"]
    ]


def _fixture_bps_rows(f: dict) -> list[dict]:
    rows = []
    for stat in f.get("stats") or []:
        if stat.get("identifier") != "bps":
            continue
        for side in ("h", "a"):
            for row in stat.get(side, []):
                rows.append({"identifier": "bps", "player_id": row["element"], "value": row["value"]})
    return rows


def parse_fixtures(raw: list[dict]) -> list[Fixture]:
    return [
        Fixture(
            id=f["id"],
            gameweek=f.get("event"),
            home_team=f["team_h"],
            away_team=f["team_a"],
            started=bool(f.get("started")),
            finished=bool(f.get("finished")),
            home_score=f.get("team_h_score"),
            away_score=f.get("team_a_score"),
            kickoff_time=f.get("kickoff_time"),
            finished_provisional=bool(f.get("finished_provisional")),
            bps_stats=_fixture_bps_rows(f),
        )
        for f in raw
    ]


def current_gameweek(gameweeks: list[Gameweek]) -> Gameweek:
    current_gw = next((gw for gw in gameweeks if gw.is_current), None)
    if current_gw is None:
        current_gw = next((gw for gw in gameweeks if gw.is_next), None)
    if current_gw is None:
        raise ValueError("Cannot determine current gameweek")
    return current_gw


def bonus_added(event_status: dict, gameweek: int) -> bool:
    """Whether FPL has applied official bonus for every match day of ``gameweek``."""
    days = [s for s in event_status.get("status", []) if s.get("event") == gameweek]
    return bool(days) and all(s.get("bonus_added", False) for s in days)
