"""
Weakness Tracker

Maintains a running per-topic weakness score on the user record.

After every completed quiz, each topic that appeared in the quiz is updated
with a plain running mean of the incorrect percentage:

    attempts += 1
    weakness = round((weakness * (attempts - 1) + (100 - percentage)) / attempts)
    strength = 100 - weakness

Topics the user has never seen have no entry at all. A topic is "weak" when
its weakness score is strictly above 50; the weak-topic list is the only
signal the adaptive selector uses.

The JSON documents keep the camelCase keys they are served with.
"""

import copy
import math
from typing import Dict, List, Optional

WEAKNESS_THRESHOLD = 50


def round_half_up(value: float) -> int:
    """Round .5 upwards (Python's round() uses banker's rounding)."""
    return int(math.floor(value + 0.5))


def update_weakness(
    overall_weakness: Optional[Dict[str, Dict]],
    topic_analysis: Dict[str, Dict]
) -> Dict[str, Dict]:
    """
    Fold one completed quiz's topic analysis into the running weakness map.

    Args:
        overall_weakness: Current map topic -> {weaknessScore, strengthScore, totalAttempts}
        topic_analysis: Map topic -> {correct, total, percentage} for the quiz

    Returns:
        A new map; the input is not mutated so JSON columns see a fresh value.
    """
    updated = copy.deepcopy(overall_weakness) if overall_weakness else {}

    for topic, analysis in topic_analysis.items():
        entry = updated.get(topic) or {"weaknessScore": 0, "strengthScore": 0, "totalAttempts": 0}

        attempts = entry["totalAttempts"] + 1
        incorrect_percentage = 100 - analysis["percentage"]
        weakness = round_half_up(
            (entry["weaknessScore"] * (attempts - 1) + incorrect_percentage) / attempts
        )

        updated[topic] = {
            "weaknessScore": weakness,
            "strengthScore": 100 - weakness,
            "totalAttempts": attempts,
        }

    return updated


def get_weak_topics(overall_weakness: Optional[Dict[str, Dict]]) -> List[Dict]:
    """
    Topics with weaknessScore > 50, weakest first.

    sorted() is stable, so equal scores keep the map's insertion order.
    """
    if not overall_weakness:
        return []

    weak = [
        {"topic": topic, "weaknessScore": entry["weaknessScore"]}
        for topic, entry in overall_weakness.items()
        if entry.get("weaknessScore", 0) > WEAKNESS_THRESHOLD
    ]
    return sorted(weak, key=lambda item: item["weaknessScore"], reverse=True)


def get_weak_topic_names(overall_weakness: Optional[Dict[str, Dict]]) -> List[str]:
    return [item["topic"] for item in get_weak_topics(overall_weakness)]
