"""Layout and rendering logic for the weather card - pure functions for testability."""
from typing import List, Tuple
from urllib.parse import quote

from weather_data import ConditionTag, SourceLink, WeatherRecord
from weather_provider import WeatherProviderError


MAX_SOURCES = 3
CARD_WIDTH = 60

CONDITION_LABELS = {
    ConditionTag.CLEAR: "Clear",
    ConditionTag.CLOUDS: "Cloudy",
    ConditionTag.RAIN: "Rain",
    ConditionTag.SNOW: "Snow",
    ConditionTag.THUNDERSTORM: "Storm",
    ConditionTag.MIST: "Mist",
}

ERROR_TITLES = {
    "location_not_found": "Location Not Found",
    "invalid_input": "Enter a Location",
    "configuration": "Service Unavailable",
    "network": "Connection Problem",
}
DEFAULT_ERROR_TITLE = "Weather Update Failed"


def get_condition_text(condition: ConditionTag) -> str:
    """Short display label for a condition (e.g., "Cloudy", "Storm")."""
    return CONDITION_LABELS[ConditionTag(condition)]


def display_sources(record: WeatherRecord, limit: int = MAX_SOURCES) -> List[SourceLink]:
    """Sources to show under the card; the record keeps the full list."""
    return list(record.source_links[:limit])


def wrap_text(text: str, width: int = CARD_WIDTH) -> List[str]:
    """Greedy word wrap. Words longer than ``width`` get a line of their own."""
    lines = []
    current = ""
    for word in text.split():
        if current and len(current) + 1 + len(word) > width:
            lines.append(current)
            current = word
        else:
            current = f"{current} {word}" if current else word
    if current:
        lines.append(current)
    return lines


def format_card(record: WeatherRecord, width: int = CARD_WIDTH) -> List[str]:
    """
    Calculate the lines of a weather card.

    Args:
        record: Weather record to display
        width: Maximum line width for the report paragraph

    Returns:
        List of display lines
    """
    lines = [
        record.resolved_location.upper(),
        f"{record.temperature_text}   Local time {record.local_time_text}",
        f"{get_condition_text(record.condition)}   UV {record.uv_index_text or 'n/a'}",
        "",
    ]
    lines.extend(wrap_text(record.report_text, width))

    sources = display_sources(record)
    if sources:
        lines.append("")
        lines.append("Sources:")
        for link in sources:
            lines.append(f"  {link.title or 'Source'} <{link.uri}>")
    return lines


def format_share_text(record: WeatherRecord, base_url: str) -> Tuple[str, str]:
    """
    Build the text and link used to share a card.

    Returns:
        Tuple of (share_text, share_url)
    """
    share_url = f"{base_url}?loc={quote(record.resolved_location)}"
    share_text = (
        f"Weather in {record.resolved_location}: {record.temperature_text}. "
        f"UV {record.uv_index_text}. Time: {record.local_time_text}. "
        "Check it out on SkyCast!"
    )
    return share_text, share_url


def format_error(error: WeatherProviderError) -> Tuple[str, str]:
    """Title and message for an error panel."""
    return ERROR_TITLES.get(error.kind, DEFAULT_ERROR_TITLE), str(error)
