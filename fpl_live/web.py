from __future__ import annotations

import logging
import os
import time
from pathlib import Path

from flask import Flask, jsonify, render_template

import httpx

from .bonus import format_bonus, rank_display
from .live import LiveBonusReport, load_live_bonus, load_live_team

logger = logging.getLogger(__name__)

app = Flask(__name__, template_folder=str(Path(__file__).parent / "templates"))
app.jinja_env.filters["bonus"] = format_bonus
app.jinja_env.filters["rank_display"] = rank_display

# In-memory cache for live bonus data (avoids re-fetching on every poll)
_cache: dict = {}
_CACHE_TTL = int(os.environ.get("FPL_LIVE_CACHE_TTL", "60"))


def _get_cached_bonus(gw: int | None = None) -> LiveBonusReport:
    """Load live bonus predictions, caching for _CACHE_TTL seconds."""
    now = time.time()
    key = f"bonus_{gw or 'current'}"
    if _cache.get(key) and now - _cache.get(f"{key}_ts", 0) < _CACHE_TTL:
        return _cache[key]

    report = load_live_bonus(gw)
    _cache[key] = report
    _cache[f"{key}_ts"] = now
    return report


def _error(e: Exception):
    if isinstance(e, httpx.HTTPStatusError):
        if e.response.status_code == 404:
            return jsonify({"error": "Data not available yet for this gameweek"}), 404
        return jsonify({"error": str(e)}), 502
    if isinstance(e, ValueError):
        return jsonify({"error": str(e)}), 400
    logger.exception("Unhandled error in live endpoint")
    return jsonify({"error": str(e)}), 500


@app.route("/")
def index():
    try:
        report = _get_cached_bonus()
    except Exception as e:
        return _error(e)
    return render_template(
        "bonus_report.html",
        report=report,
        teams=report.teams,
        generated_at=time.strftime("%Y-%m-%d %H:%M"),
    )


@app.route("/api/cache-status")
def api_cache_status():
    now = time.time()
    entries = {
        key: round(now - _cache[f"{key}_ts"])
        for key in _cache
        if not key.endswith("_ts")
    }
    return jsonify({"ttl": _CACHE_TTL, "age_seconds": entries})


@app.route("/api/bonus")
@app.route("/api/bonus/<int:gw>")
def api_bonus(gw: int | None = None):
    """Provisional bonus for every fixture in play."""
    try:
        report = _get_cached_bonus(gw)
        return jsonify(report.to_dict())
    except Exception as e:
        return _error(e)


@app.route("/api/bonus/<int:gw>/<int:fixture_id>")
def api_bonus_fixture(gw: int, fixture_id: int):
    try:
        report = _get_cached_bonus(gw)
    except Exception as e:
        return _error(e)
    result = next((r for r in report.results if r.fixture_id == fixture_id), None)
    if result is None:
        return jsonify({"error": "Fixture not in play"}), 404
    return jsonify(result.to_dict())


@app.route("/api/live/<int:user_id>")
@app.route("/api/live/<int:user_id>/<int:gw>")
def api_live(user_id: int, gw: int | None = None):
    """Effective XI after auto-subs, with predicted bonus, for a user's team."""
    try:
        report = load_live_team(user_id, gw)
        return jsonify(report.to_dict())
    except Exception as e:
        return _error(e)
