from __future__ import annotations

from typing import Any, Optional

AGE_BUCKET_TOKENS = frozenset({"child", "teen", "adult"})


def age_segment_names(ruleset: dict[str, Any]) -> frozenset[str]:
    segments = ruleset.get("age_segments", {})
    names = set(segments) if isinstance(segments, dict) else set()
    return AGE_BUCKET_TOKENS | names


def get_age_segment(age: Optional[int], ruleset: dict[str, Any], default: str = "adult") -> str:
    """Map an age onto the ruleset's age segment; unknown age falls back to ``default``."""
    if age is None:
        return default

    segments = ruleset.get("age_segments", {})
    if not isinstance(segments, dict):
        raise ValueError("Ruleset age_segments is invalid")

    for segment, config in segments.items():
        if not isinstance(config, dict):
            continue
        age_min = config.get("age_min")
        age_max = config.get("age_max")
        if isinstance(age_min, int) and isinstance(age_max, int) and age_min <= age <= age_max:
            return segment

    return default
