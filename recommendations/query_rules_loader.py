from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

DEFAULT_RULESET_PATH = Path(__file__).resolve().parents[1] / "config" / "gift_rules.yaml"

_REQUIRED_KEYS = ("version", "relationships", "occasions", "interests_map", "age_segments", "limits")


def load_ruleset(path: str | Path) -> dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except FileNotFoundError as exc:
        raise ValueError(f"Ruleset file not found: {path}") from exc
    except yaml.YAMLError as exc:
        raise ValueError(f"Ruleset YAML is invalid: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError("Ruleset must be a mapping at top level")

    for key in _REQUIRED_KEYS:
        if key not in data:
            raise ValueError(f"Ruleset missing required key: {key}")

    if not isinstance(data["interests_map"], dict):
        raise ValueError("Ruleset interests_map must be a mapping")
    if not isinstance(data["relationships"], list) or not isinstance(data["occasions"], list):
        raise ValueError("Ruleset relationships and occasions must be lists")

    return data


@lru_cache()
def default_ruleset() -> dict[str, Any]:
    return load_ruleset(DEFAULT_RULESET_PATH)
