from __future__ import annotations

from datetime import datetime
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from .bonus import format_bonus, rank_display
from .live import LiveBonusReport

TEMPLATE_DIR = Path(__file__).parent / "templates"


def _environment() -> Environment:
    env = Environment(loader=FileSystemLoader(str(TEMPLATE_DIR)), autoescape=True)
    env.filters["bonus"] = format_bonus
    env.filters["rank_display"] = rank_display
    return env


def render_bonus_html(report: LiveBonusReport) -> str:
    template = _environment().get_template("bonus_report.html")
    return template.render(
        report=report,
        teams=report.teams,
        generated_at=datetime.now().strftime("%Y-%m-%d %H:%M"),
    )


def generate_html(report: LiveBonusReport, output_path: str = "bonus.html") -> None:
    Path(output_path).write_text(render_bonus_html(report), encoding="utf-8")
