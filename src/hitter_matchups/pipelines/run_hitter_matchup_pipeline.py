# run_hitter_matchup_pipeline.py
"""
Daily hitter matchup pipeline.

For every probable starting pitcher on the given date, project which opposing
hitters bat 1-5, score each one against that pitcher, and write the combined
list to <output_dir>/today.json and <output_dir>/<date>.json.

Usage:
    hitter-matchups [YYYY-MM-DD] [--force] [--output-dir DIR]
"""
import argparse
import json
import logging
import logging.config
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from hitter_matchups.data_sources.mlb_stats_api import DEFAULT_BASE_URL, MlbStatsClient
from hitter_matchups.data_sources.signals import ProbableSignals, collect_probable_signals
from hitter_matchups.models.schema import RankedHitter
from hitter_matchups.models.scoring import score_hitter
from hitter_matchups.utils.config_loader import load_config

DEFAULT_ELIGIBILITY = {
    "min_ab_vs_pitcher": 1,
    "max_projected_slot": 5,
    "min_season_pa_combined": 85,
}


def is_eligible(hitter: RankedHitter, min_ab_vs_pitcher: int = 1, max_projected_slot: int = 5) -> bool:
    ab = hitter.bundle.vs_pitcher.ab or 0
    slot = hitter.projected_slot
    return ab >= min_ab_vs_pitcher and slot is not None and 1 <= slot <= max_projected_slot


def rank_hitters(signals: ProbableSignals, eligibility: dict = None) -> List[RankedHitter]:
    """Score every bundle, keep the eligible hitters, highest score first."""
    elig = {**DEFAULT_ELIGIBILITY, **(eligibility or {})}
    ranked = []
    for bundle in signals.bundles:
        result = score_hitter(bundle)
        ranked.append(RankedHitter(
            bundle=bundle,
            score=result.score,
            score_breakdown=result.breakdown,
            h2h_share=result.h2h_share,
            projected_pa=result.projected_pa,
            pitcher=signals.pitcher,
        ))
    ranked = [h for h in ranked if is_eligible(
        h, elig["min_ab_vs_pitcher"], elig["max_projected_slot"])]
    # stable: equal scores keep vs-pitcher response order
    return sorted(ranked, key=lambda h: h.score, reverse=True)


def summarize_probable(game: dict, signals: ProbableSignals, hitters: List[RankedHitter]) -> dict:
    teams = game["teams"]
    return {
        "gamePk": game.get("gamePk"),
        "gameDate": game.get("officialDate"),
        "venue": (game.get("venue") or {}).get("name"),
        "homeTeam": {"id": teams["home"]["team"]["id"], "name": teams["home"]["team"].get("name")},
        "awayTeam": {"id": teams["away"]["team"]["id"], "name": teams["away"]["team"].get("name")},
        "probablePitcher": signals.pitcher.to_dict(),
        "opponentTeam": {"id": signals.opponent_team_id, "name": signals.opponent_team_name},
        "window": {"startDate": signals.window_start.isoformat(), "endDate": signals.window_end.isoformat()},
        "qualifiedBattersCount": len(signals.candidate_ids),
        "hitters": [h.to_record() for h in hitters],
    }


def analyze_probable(client: MlbStatsClient, game: dict, probable_side: str, season: int,
                     start, end, eligibility: dict = None) -> Optional[dict]:
    signals = collect_probable_signals(client, game, probable_side, season, start, end)
    if signals is None:
        return None
    hitters = rank_hitters(signals, eligibility)

    logging.info("[Game %s] %s hitters vs %s: %d hitters",
                 game.get("gamePk"), signals.opponent_team_name or "Opponent",
                 signals.pitcher.name or "Unknown Pitcher", len(hitters))
    for h in hitters:
        logging.info("  - %s (slot %s) score=%d", h.bundle.name, h.projected_slot, h.score)
    return summarize_probable(game, signals, hitters)


def _wtb_sort_key(record: dict) -> float:
    wtb = record.get("wtb_percent")
    return wtb if isinstance(wtb, (int, float)) else -1


def combine_hitters(per_probable: list, min_season_pa: int = 85) -> list:
    """
    Flatten every probable's hitters with game context, keep those with enough
    season PA, and order by weighted hit rate (missing last).
    """
    combined = []
    for entry in per_probable:
        for h in entry.get("hitters", []):
            combined.append({
                **h,
                "gamePk": entry.get("gamePk"),
                "gameDate": entry.get("gameDate"),
                "opponentTeamName": (entry.get("opponentTeam") or {}).get("name"),
                "probablePitcherName": (entry.get("probablePitcher") or {}).get("name"),
            })
    combined = [h for h in combined if (h.get("season_pa") or 0) >= min_season_pa]
    return sorted(combined, key=_wtb_sort_key, reverse=True)


def build_daily(date_str: str, client: MlbStatsClient, cfg: dict = None) -> dict:
    cfg = cfg or {}
    pipeline_cfg = cfg.get("pipeline", {})
    eligibility = {**DEFAULT_ELIGIBILITY, **pipeline_cfg.get("eligibility", {})}
    lookback = int(pipeline_cfg.get("lookback_days", 7))

    target = datetime.strptime(date_str, "%Y-%m-%d").date()
    start = target - timedelta(days=lookback)
    season = target.year

    games = client.get_schedule(date_str)
    logging.info("Loaded %d games for %s", len(games), date_str)

    per_probable = []
    for game in games:
        for side in ("home", "away"):
            if not ((game.get("teams", {}).get(side) or {}).get("probablePitcher") or {}).get("id"):
                continue
            result = analyze_probable(client, game, side, season, start, target, eligibility)
            if result:
                per_probable.append(result)

    hitters = combine_hitters(per_probable, eligibility["min_season_pa_combined"])
    return {
        "date": date_str,
        "gamesAnalyzed": len(games),
        "hitterCount": len(hitters),
        "hitters": hitters,
    }


def output_paths(output_dir, date_str: str) -> List[Path]:
    out = Path(output_dir)
    return [out / "today.json", out / f"{date_str}.json"]


def write_outputs(doc: dict, output_dir) -> List[Path]:
    paths = output_paths(output_dir, doc["date"])
    paths[0].parent.mkdir(parents=True, exist_ok=True)
    for path in paths:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(doc, f, indent=2)
        logging.info("Saved %s", path)
    return paths


def main(argv=None) -> int:
    load_dotenv()  # Load environment variables from .env file

    parser = argparse.ArgumentParser(description="MLB hitter vs probable pitcher matchups")
    parser.add_argument("date", nargs="?", default=datetime.now().strftime('%Y-%m-%d'),
                        help="Date to process (YYYY-MM-DD)")
    parser.add_argument("--force", action="store_true", help="Force re-run even if output exists")
    parser.add_argument("--output-dir", help="Directory for today.json and <date>.json")
    parser.add_argument("--config", default="config/config.yaml", help="Config file")
    args = parser.parse_args(argv)

    cfg = load_config(args.config)
    logging.config.dictConfig(cfg["logging"])

    date_str = args.date
    try:
        datetime.strptime(date_str, '%Y-%m-%d')
    except ValueError:
        logging.error("Date must be in YYYY-MM-DD format, got %r", date_str)
        return 1

    output_dir = Path(args.output_dir or cfg.get("pipeline", {}).get("output_dir", "api"))
    if not output_dir.is_absolute():
        output_dir = Path(cfg["root_path"]) / output_dir
    if not args.force and all(p.exists() for p in output_paths(output_dir, date_str)):
        logging.info("Output for %s already exists in %s. Use --force to re-run.", date_str, output_dir)
        return 0

    api_cfg = cfg.get("mlb_stats_api", {})
    client = MlbStatsClient(api_cfg.get("base_url", DEFAULT_BASE_URL), api_cfg.get("timeout", 20))
    doc = build_daily(date_str, client, cfg)
    write_outputs(doc, output_dir)
    logging.info("Finished %s: %d games, %d hitters", date_str, doc["gamesAnalyzed"], doc["hitterCount"])
    return 0


if __name__ == '__main__':
    sys.exit(main())
