from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from .models import AutoSubResult, SquadPlayer, SubRecord

logger = logging.getLogger(__name__)

STARTING_SIZE = 11

# Starting XI formation constraints
STARTING_MIN = {"GK": 1, "DEF": 3, "MID": 2, "FWD": 1}
STARTING_GK = 1


def formation_counts(players: list[SquadPlayer]) -> dict[str, int]:
    counts = {pos: 0 for pos in STARTING_MIN}
    for p in players:
        counts[p.position] = counts.get(p.position, 0) + 1
    return counts


def is_valid_formation(players: list[SquadPlayer]) -> bool:
    if len(players) != STARTING_SIZE:
        return False
    counts = formation_counts(players)
    if counts["GK"] != STARTING_GK:
        return False
    return all(counts[pos] >= minimum for pos, minimum in STARTING_MIN.items())


@dataclass
class _SubState:
    team: list[SquadPlayer]
    subs: list[SubRecord] = field(default_factory=list)
    explanations: list[str] = field(default_factory=list)


def _swap_in(team: list[SquadPlayer], out: SquadPlayer, sub: SquadPlayer) -> list[SquadPlayer]:
    entering = replace(sub, is_starter=True)
    return [entering if p.id == out.id else p for p in team]


def _sub_goalkeeper(state: _SubState, out: SquadPlayer, bench_gk: SquadPlayer | None) -> _SubState:
    if bench_gk is None or bench_gk.minutes <= 0:
        logger.debug("GK %s did not play, no bench GK available", out.id)
        return _SubState(
            team=state.team,
            subs=state.subs,
            explanations=state.explanations + [f"GK {out.id} DNP but no eligible bench GK"],
        )
    return _SubState(
        team=_swap_in(state.team, out, bench_gk),
        subs=state.subs + [SubRecord(out_id=out.id, in_id=bench_gk.id, reason="GK DNP")],
        explanations=state.explanations + [f"GK {out.id} DNP -> {bench_gk.id} in"],
    )


def _sub_outfield(state: _SubState, out: SquadPlayer, bench: list[SquadPlayer]) -> _SubState:
    in_team = {p.id for p in state.team}

    for candidate in bench:
        if candidate.minutes <= 0 or candidate.id in in_team:
            continue
        tentative = _swap_in(state.team, out, candidate)
        if not is_valid_formation(tentative):
            continue
        record = SubRecord(
            out_id=out.id,
            in_id=candidate.id,
            reason="Outfield DNP",
            order_used=candidate.bench_order,
        )
        return _SubState(
            team=tentative,
            subs=state.subs + [record],
            explanations=state.explanations
            + [f"Out {out.id} -> {candidate.id} (bench {candidate.bench_order})"],
        )

    logger.debug("Outfield %s did not play, no valid bench sub", out.id)
    return _SubState(
        team=state.team,
        subs=state.subs,
        explanations=state.explanations + [f"Outfield {out.id} DNP but no valid bench sub"],
    )


def apply_auto_subs(squad: list[SquadPlayer]) -> AutoSubResult:
    """Apply FPL automatic substitutions to a 15-man squad.

    Only starters with zero minutes whose fixtures have finished are replaced.
    Goalkeepers swap only with the bench goalkeeper. Outfield starters take the
    first bench player, in bench order, who played and keeps the eleven in a
    legal formation. Slots that cannot be filled are left as they are and
    explained. The input squad is never mutated.
    """
    starters = [p for p in squad if p.is_starter]
    bench_gk = next((p for p in squad if not p.is_starter and p.position == "GK"), None)
    bench_outfield = sorted(
        (p for p in squad if not p.is_starter and p.position != "GK"),
        key=lambda p: p.bench_order if p.bench_order is not None else 99,
    )

    state = _SubState(team=list(starters))
    for out in [p for p in starters if p.did_not_play]:
        if out.position == "GK":
            state = _sub_goalkeeper(state, out, bench_gk)
        else:
            state = _sub_outfield(state, out, bench_outfield)

    total = sum(p.points * (p.multiplier or 1) for p in state.team)
    return AutoSubResult(
        applied_team=state.team,
        total_points=total,
        subs_applied=state.subs,
        explanations=state.explanations,
    )
