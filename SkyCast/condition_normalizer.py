"""Map free-text weather descriptions onto the closed set of condition tags."""
from typing import Optional
from weather_data import ConditionTag


DEFAULT_CONDITION = ConditionTag.CLOUDS

# Checked in order, each later match overrides the earlier result
SYNONYMS = (
    ("cloud", ConditionTag.CLOUDS),
    ("sunny", ConditionTag.CLEAR),
    ("storm", ConditionTag.THUNDERSTORM),
    ("fog", ConditionTag.MIST),
)


def normalize_condition(raw_text: Optional[str]) -> ConditionTag:
    """
    Normalize a condition description such as "Partly cloudy" or
    "Sunny with light haze" to a ConditionTag.

    Never raises; anything unrecognized maps to clouds.
    """
    text = (raw_text or "").lower()

    condition = DEFAULT_CONDITION
    for tag in ConditionTag:
        if tag.value in text:
            condition = tag
            break

    for keyword, tag in SYNONYMS:
        if keyword in text:
            condition = tag

    return condition
