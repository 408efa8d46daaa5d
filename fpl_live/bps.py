"""Estimate the bonus points system (BPS) score from raw live match events.

Used when a live feed carries match events but no BPS yet. The estimate is
then ranked by :func:`fpl_live.bonus.allocate_fixture_bonus` like any other
BPS figure.
"""
from __future__ import annotations

from dataclasses import dataclass

from .models import PlayerPerformanceScore

BPS_SCORING = {
    # Attacking
    "goal_scored": 24,
    "assist": 18,
    "big_chance_created": 3,
    "key_pass": 1,
    "successful_dribble": 1,
    "winning_goal": 6,
    # Defending
    "clean_sheet_gk": 12,
    "clean_sheet_def": 12,
    "clean_sheet_mid": 6,
    "save": 2,
    "penalty_save": 15,
    "recovery": 1,
    "tackle": 2,
    "clearance_block_interception": 1,
    # General
    "minutes_60_plus": 6,
    "pass_completion_70": 2,
    "pass_completion_80": 4,
    "pass_completion_90": 6,
    # Negative
    "yellow_card": -3,
    "red_card": -9,
    "own_goal": -6,
    "penalty_miss": -6,
    "big_chance_missed": -3,
    "error_leading_to_goal": -6,
    "error_leading_to_goal_attempt": -3,
}

MIN_PASSES_FOR_BONUS = 10

CLEAN_SHEET_KEYS = {
    "GK": "clean_sheet_gk",
    "DEF": "clean_sheet_def",
    "MID": "clean_sheet_mid",
}


@dataclass
class LivePlayerStats:
    player_id: int
    team_id: int
    position: str  # GK / DEF / MID / FWD
    minutes: int = 0
    web_name: str = ""
    goals_scored: int = 0
    assists: int = 0
    clean_sheets: int = 0
    saves: int = 0
    penalties_saved: int = 0
    penalties_missed: int = 0
    yellow_cards: int = 0
    red_cards: int = 0
    own_goals: int = 0
    big_chances_created: int = 0
    big_chances_missed: int = 0
    key_passes: int = 0
    recoveries: int = 0
    successful_dribbles: int = 0
    tackles: int = 0
    clearances_blocks_interceptions: int = 0
    errors_leading_to_goal: int = 0
    errors_leading_to_goal_attempt: int = 0
    winning_goals: int = 0
    attempted_passes: int = 0
    completed_passes: int = 0


@dataclass
class BPSBreakdown:
    player_id: int
    team_id: int
    minutes: int
    attacking: int = 0
    defending: int = 0
    general: int = 0
    negative: int = 0
    web_name: str = ""

    @property
    def total(self) -> int:
        return self.attacking + self.defending + self.general + self.negative


# FPL live stat keys that map one-to-one onto LivePlayerStats fields
FEED_STAT_KEYS = (
    "minutes",
    "goals_scored",
    "assists",
    "clean_sheets",
    "saves",
    "penalties_saved",
    "penalties_missed",
    "yellow_cards",
    "red_cards",
    "own_goals",
)


def stats_from_feed(
    player_id: int,
    team_id: int,
    position: str,
    feed: dict,
    web_name: str = "",
) -> LivePlayerStats:
    """Build calculator input from an FPL live stats dict.

    The live feed only carries the headline events, so the finer counts
    (key passes, recoveries, passing) stay at 0.
    """
    counts = {key: int(feed.get(key) or 0) for key in FEED_STAT_KEYS}
    return LivePlayerStats(
        player_id=player_id,
        team_id=team_id,
        position=position,
        web_name=web_name,
        **counts,
    )


def _pass_completion_bps(stats: LivePlayerStats) -> int:
    if stats.attempted_passes <= MIN_PASSES_FOR_BONUS:
        return 0
    rate = stats.completed_passes / stats.attempted_passes * 100
    if rate >= 90:
        return BPS_SCORING["pass_completion_90"]
    if rate >= 80:
        return BPS_SCORING["pass_completion_80"]
    if rate >= 70:
        return BPS_SCORING["pass_completion_70"]
    return 0


def calculate_player_bps(stats: LivePlayerStats) -> BPSBreakdown:
    s = BPS_SCORING

    attacking = (
        stats.goals_scored * s["goal_scored"]
        + stats.assists * s["assist"]
        + stats.big_chances_created * s["big_chance_created"]
        + stats.key_passes * s["key_pass"]
        + stats.successful_dribbles * s["successful_dribble"]
        + stats.winning_goals * s["winning_goal"]
    )

    defending = (
        stats.saves * s["save"]
        + stats.penalties_saved * s["penalty_save"]
        + stats.recoveries * s["recovery"]
        + stats.tackles * s["tackle"]
        + stats.clearances_blocks_interceptions * s["clearance_block_interception"]
    )
    cs_key = CLEAN_SHEET_KEYS.get(stats.position)
    if stats.clean_sheets > 0 and cs_key:
        defending += s[cs_key]

    general = _pass_completion_bps(stats)
    if stats.minutes >= 60:
        general += s["minutes_60_plus"]

    negative = (
        stats.yellow_cards * s["yellow_card"]
        + stats.red_cards * s["red_card"]
        + stats.own_goals * s["own_goal"]
        + stats.penalties_missed * s["penalty_miss"]
        + stats.big_chances_missed * s["big_chance_missed"]
        + stats.errors_leading_to_goal * s["error_leading_to_goal"]
        + stats.errors_leading_to_goal_attempt * s["error_leading_to_goal_attempt"]
    )

    return BPSBreakdown(
        player_id=stats.player_id,
        team_id=stats.team_id,
        minutes=stats.minutes,
        attacking=attacking,
        defending=defending,
        general=general,
        negative=negative,
        web_name=stats.web_name,
    )


def to_performance_scores(stats_list: list[LivePlayerStats]) -> list[PlayerPerformanceScore]:
    scores = []
    for stats in stats_list:
        b = calculate_player_bps(stats)
        scores.append(
            PlayerPerformanceScore(
                player_id=b.player_id,
                bps=b.total,
                minutes=b.minutes,
                team=b.team_id,
                web_name=b.web_name,
            )
        )
    return scores


def team_bps_totals(
    breakdowns: list[BPSBreakdown],
    home_team_id: int,
    away_team_id: int,
) -> tuple[int, int]:
    home = sum(b.total for b in breakdowns if b.team_id == home_team_id)
    away = sum(b.total for b in breakdowns if b.team_id == away_team_id)
    return home, away
