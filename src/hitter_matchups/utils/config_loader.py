import json
import logging
import os
import yaml
from pathlib import Path


def find_project_root(markers=(".git", "pyproject.toml", "requirements.txt")) -> Path:
    """
    Walk upwards from this file's directory to locate a project root marker.
    Returns the Path to the project root directory.
    Raises FileNotFoundError if not found.
    """
    current = Path(__file__).resolve().parent
    for parent in (current, *current.parents):
        for marker in markers:
            if (parent / marker).exists():
                return parent
    raise FileNotFoundError(f"Could not locate project root using markers: {markers}")


def find_config_path(filename: str = "config/config.yaml") -> Path:
    """
    Locate the given config file. Relative paths are tried against the
    current working directory first, then by walking upwards from this
    file's directory. Returns the Path to the first matching file.
    Raises FileNotFoundError if not found.
    """
    candidate = Path(filename)
    if candidate.is_absolute():
        if candidate.is_file():
            return candidate
        raise FileNotFoundError(f"Config file not found: {filename}")

    candidate = Path.cwd() / filename
    if candidate.is_file():
        return candidate

    current = Path(__file__).resolve()
    for parent in (current, *current.parents):
        candidate = parent / filename
        if candidate.is_file():
            return candidate
    raise FileNotFoundError(
        f"Could not locate {filename} in any parent directories")


def _parse(content: str, suffix: str) -> dict:
    if suffix in (".yaml", ".yml"):
        return yaml.safe_load(content)
    if suffix == ".json":
        return json.loads(content)
    # attempt YAML first, then JSON
    try:
        return yaml.safe_load(content)
    except yaml.YAMLError:
        return json.loads(content)


def load_config(filename: str = "config/config.yaml") -> dict:
    """
    Load and parse the YAML or JSON config file from the project root (or nearest parent).

    Environment overrides (MLB_STATS_API_URL, HITTER_MATCHUPS_OUTPUT_DIR) are
    applied on top of the file, so call load_dotenv() first when using a .env.

    Usage:
        from hitter_matchups.utils.config_loader import load_config
        config = load_config()
    """
    path = find_config_path(filename)
    logging.debug("Loading config from: %s", path)
    try:
        config = _parse(path.read_text(encoding="utf-8"), path.suffix) or {}
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise RuntimeError(f"Failed to load config from {path}: {e}") from e

    # Force root_path to always be the detected project root
    try:
        config["root_path"] = str(find_project_root())
    except FileNotFoundError as e:
        logging.warning("Could not auto-detect project root: %s", e)
        config["root_path"] = str(path.parent.parent)

    api_url = os.getenv("MLB_STATS_API_URL")
    if api_url:
        config.setdefault("mlb_stats_api", {})["base_url"] = api_url
    output_dir = os.getenv("HITTER_MATCHUPS_OUTPUT_DIR")
    if output_dir:
        config.setdefault("pipeline", {})["output_dir"] = output_dir
    return config
