from __future__ import annotations

import logging
from collections import defaultdict

from .models import BonusAward, BonusPick, Fixture, FixtureBonusResult, PlayerPerformanceScore

logger = logging.getLogger(__name__)

BONUS_TIERS = (3, 2, 1)


def _tie_groups(ranked: list[PlayerPerformanceScore]) -> list[list[PlayerPerformanceScore]]:
    groups: list[list[PlayerPerformanceScore]] = []
    for s in ranked:
        if groups and groups[-1][0].bps == s.bps:
            groups[-1].append(s)
        else:
            groups.append([s])
    return groups


def _assign_bonus(ranked: list[PlayerPerformanceScore]) -> list[BonusAward]:
    """Walk tie groups in rank order, paying out from a shrinking tier list.

    A group of n players consumes up to n of the remaining tiers and every
    member receives the lowest value among those consumed. Once the tiers are
    gone all further players get 0.
    """
    remaining = list(BONUS_TIERS)
    awards: list[BonusAward] = []
    rank = 1

    for group in _tie_groups(ranked):
        consumed = remaining[: len(group)]
        remaining = remaining[len(group):]
        bonus = consumed[-1] if consumed else 0

        for s in group:
            awards.append(
                BonusAward(
                    player_id=s.player_id,
                    bps=s.bps,
                    rank=rank,
                    predicted_bonus=bonus,
                    web_name=s.web_name,
                )
            )
        rank += len(group)

    return awards


def allocate_fixture_bonus(
    fixture_id: int,
    team_h_id: int,
    team_a_id: int,
    scores: list[PlayerPerformanceScore],
) -> FixtureBonusResult:
    """Predict bonus points for one fixture from live BPS.

    Only players with minutes who belong to one of the two fixture teams are
    ranked. Every eligible player appears in the result, including those who
    are not paid.
    """
    eligible = [
        s for s in scores
        if s.minutes > 0 and s.team in (team_h_id, team_a_id)
    ]
    if not eligible:
        logger.debug("Fixture %s has no eligible players", fixture_id)

    ranked = sorted(eligible, key=lambda s: (-s.bps, s.player_id))

    return FixtureBonusResult(
        fixture_id=fixture_id,
        team_h_id=team_h_id,
        team_a_id=team_a_id,
        bonuses=_assign_bonus(ranked),
    )


def fixture_scores(
    fixture: Fixture,
    scores: list[PlayerPerformanceScore],
) -> list[PlayerPerformanceScore]:
    """Scores that belong to ``fixture``.

    A score pinned to another fixture is dropped even when the player's team
    plays here, so a double gameweek keeps each match's BPS apart.
    """
    return [
        s for s in scores
        if s.team in (fixture.home_team, fixture.away_team)
        and s.fixture in (None, fixture.id)
    ]


def allocate_live_fixtures(
    fixtures: list[Fixture],
    scores: list[PlayerPerformanceScore],
) -> list[FixtureBonusResult]:
    """Predict bonus for every fixture currently in play."""
    results = []
    for f in fixtures:
        if not f.is_live:
            continue
        results.append(
            allocate_fixture_bonus(f.id, f.home_team, f.away_team, fixture_scores(f, scores))
        )
    return results


def bonus_by_player(results: list[FixtureBonusResult]) -> dict[int, int]:
    totals: dict[int, int] = defaultdict(int)
    for result in results:
        for b in result.bonuses:
            totals[b.player_id] += b.predicted_bonus
    return dict(totals)


def player_predicted_bonus(player_id: int, results: list[FixtureBonusResult]) -> int:
    return bonus_by_player(results).get(player_id, 0)


def total_predicted_bonus(picks: list[BonusPick], results: list[FixtureBonusResult]) -> int:
    """Sum predicted bonus across a squad, applying each pick's multiplier."""
    per_player = bonus_by_player(results)
    return sum(per_player.get(pick.player_id, 0) * pick.multiplier for pick in picks)


def format_bonus(bonus: int) -> str:
    return f"+{bonus}" if bonus > 0 else "0"


def _ordinal_suffix(n: int) -> str:
    if n % 100 in (11, 12, 13):
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")


def rank_display(award: BonusAward) -> str:
    label = f"{award.rank}{_ordinal_suffix(award.rank)} ({award.bps} BPS)"
    if award.predicted_bonus > 0:
        return f"{label} - {award.predicted_bonus} pts"
    return label


def validate_bps_consistency(
    fixture_stats: list[dict],
    live_stats: list[dict],
    tolerance: int = 1,
) -> bool:
    """Check live BPS against the per-fixture ``bps`` stat rows.

    ``fixture_stats`` rows carry ``identifier``, ``player_id`` and ``value``;
    ``live_stats`` rows carry ``player_id`` and ``bps``.
    """
    calculated = {
        row["player_id"]: row["value"]
        for row in fixture_stats
        if row.get("identifier") == "bps"
    }

    for row in live_stats:
        pid = row["player_id"]
        expected = calculated.get(pid, 0)
        if abs(row["bps"] - expected) > tolerance:
            logger.warning(
                "BPS mismatch for player %s: live=%s, calculated=%s",
                pid, row["bps"], expected,
            )
            return False
    return True
