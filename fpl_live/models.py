from __future__ import annotations

from dataclasses import asdict, dataclass, field

POSITION_CODES = {1: "GK", 2: "DEF", 3: "MID", 4: "FWD"}


def position_code(element_type: int) -> str:
    return POSITION_CODES.get(element_type, "UNK")


@dataclass
class Team:
    id: int
    name: str
    short_name: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Fixture:
    id: int
    gameweek: int | None
    home_team: int
    away_team: int
    started: bool = False
    finished: bool = False
    home_score: int | None = None
    away_score: int | None = None
    kickoff_time: str | None = None
    # Match over, bonus not yet confirmed
    finished_provisional: bool = False
    # Flattened "bps" stat rows: identifier, player_id, value
    bps_stats: list[dict] = field(default_factory=list)

    @property
    def is_live(self) -> bool:
        return self.started and not self.finished

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Gameweek:
    id: int
    name: str
    finished: bool
    is_current: bool
    is_next: bool


@dataclass
class Player:
    id: int
    name: str
    team: int
    position: int  # FPL element_type: 1=GK, 2=DEF, 3=MID, 4=FWD
    cost: float = 0.0  # in millions (e.g. 6.5)
    status: str = "a"

    @property
    def position_name(self) -> str:
        return position_code(self.position)

    def to_dict(self) -> dict:
        d = asdict(self)
        d["position_name"] = self.position_name
        return d


# ---------------------------------------------------------------------------
# Bonus prediction
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PlayerPerformanceScore:
    """Live BPS for one player in one fixture."""

    player_id: int
    bps: int
    minutes: int
    team: int
    web_name: str = ""
    fixture: int | None = None  # None when only gameweek totals are known


@dataclass
class BonusAward:
    player_id: int
    bps: int
    rank: int
    predicted_bonus: int
    web_name: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class FixtureBonusResult:
    fixture_id: int
    team_h_id: int
    team_a_id: int
    bonuses: list[BonusAward] = field(default_factory=list)

    @property
    def paid(self) -> list[BonusAward]:
        return [b for b in self.bonuses if b.predicted_bonus > 0]

    def to_dict(self) -> dict:
        return {
            "fixture_id": self.fixture_id,
            "team_h_id": self.team_h_id,
            "team_a_id": self.team_a_id,
            "bonuses": [b.to_dict() for b in self.bonuses],
        }


@dataclass
class BonusPick:
    player_id: int
    multiplier: int = 1
    is_captain: bool = False


# ---------------------------------------------------------------------------
# Automatic substitutions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SquadPlayer:
    id: int
    position: str  # GK / DEF / MID / FWD
    is_starter: bool
    minutes: int
    fixture_finished: bool
    points: int
    multiplier: int = 1
    bench_order: int | None = None  # 1..3, outfield bench only
    web_name: str = ""

    @property
    def did_not_play(self) -> bool:
        return self.minutes == 0 and self.fixture_finished

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class SubRecord:
    out_id: int
    in_id: int
    reason: str
    order_used: int | None = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class AutoSubResult:
    applied_team: list[SquadPlayer] = field(default_factory=list)
    total_points: int = 0
    subs_applied: list[SubRecord] = field(default_factory=list)
    explanations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "applied_team": [p.to_dict() for p in self.applied_team],
            "total_points": self.total_points,
            "subs_applied": [s.to_dict() for s in self.subs_applied],
            "explanations": list(self.explanations),
        }
