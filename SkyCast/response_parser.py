"""Parse the model's labeled-line weather reply - pure functions for testability."""
import logging
import re
import time
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple

from condition_normalizer import normalize_condition
from weather_data import ConditionTag, SourceLink, WeatherRecord


LOCATION_LABEL = "LocationName"
CONDITION_LABEL = "Condition"
TEMP_LABEL = "Temp"
TIME_LABEL = "Time"
UV_LABEL = "UV"
REPORT_LABEL = "Report"

MISSING_TEMPERATURE = "--°C"
DEFAULT_UV_INDEX = "Low"
DEFAULT_CONDITION_TEXT = "clouds"

# Optional list enumerator ("6." or "6)") in front of the report label
_REPORT_LINE = re.compile(r"^(?:\d+[.)]\s*)?report:", re.IGNORECASE)
_REPORT_PREFIX = re.compile(r"^(?:\d+[.)]\s*)?report:\s*", re.IGNORECASE)


def _local_time() -> str:
    return time.strftime("%X")


@dataclass(frozen=True)
class ParsedResponse:
    """Fields extracted from a reply, plus which labels were found or defaulted."""
    resolved_location: str
    condition: ConditionTag
    temperature_text: str
    local_time_text: str
    uv_index_text: Optional[str]
    report_text: str
    found: Tuple[str, ...]
    defaulted: Tuple[str, ...]

    def to_record(
        self,
        fetched_at_ms: int,
        source_links: Iterable[SourceLink] = ()
    ) -> WeatherRecord:
        """Build the immutable WeatherRecord once the caller has a timestamp."""
        return WeatherRecord(
            report_text=self.report_text,
            resolved_location=self.resolved_location,
            fetched_at_ms=fetched_at_ms,
            condition=self.condition,
            temperature_text=self.temperature_text,
            local_time_text=self.local_time_text,
            uv_index_text=self.uv_index_text,
            source_links=tuple(source_links),
        )


def split_lines(raw_text: str) -> List[str]:
    """Split into stripped, non-empty lines, preserving order."""
    return [line.strip() for line in raw_text.split("\n") if line.strip()]


def find_value(lines: List[str], label: str) -> Optional[str]:
    """
    Find the value for a label.

    The first line containing the label (case-insensitive) wins. Returns the
    text after its first colon, or the whole line when there is no colon or
    nothing follows it.

    Args:
        lines: Lines from split_lines()
        label: Label to look for, e.g. "Temp"

    Returns:
        The value, or None if no line mentions the label
    """
    needle = label.lower()
    for line in lines:
        if needle in line.lower():
            _, colon, value = line.partition(":")
            value = value.strip()
            if colon and value:
                return value
            return line
    return None


def extract_report(lines: List[str]) -> Optional[str]:
    """
    Join the report line and everything after it.

    Returns None when no line starts with "report:", so the caller can fall
    back to the raw text.
    """
    for index, line in enumerate(lines):
        if _REPORT_LINE.match(line):
            joined = " ".join(lines[index:])
            return _REPORT_PREFIX.sub("", joined, count=1)
    return None


def parse_response(
    raw_text: str,
    fallback_location: str,
    now: Optional[Callable[[], str]] = None
) -> ParsedResponse:
    """
    Extract weather fields from a model reply.

    Each field falls back on its own: the location to ``fallback_location``,
    the condition to clouds, the temperature to a placeholder, the time to
    the device's local time and the UV index to "Low". The report falls back
    to the whole reply.

    Args:
        raw_text: Reply text (already checked for the invalid-location sentinel)
        fallback_location: Location to show if the reply does not name one
        now: Returns the local time string used when the reply has none

    Returns:
        ParsedResponse with the extracted fields
    """
    lines = split_lines(raw_text)
    found = []
    defaulted = []

    def value_or(label, fallback):
        value = find_value(lines, label)
        if value is None:
            defaulted.append(label)
            return fallback() if callable(fallback) else fallback
        found.append(label)
        return value

    location = value_or(LOCATION_LABEL, fallback_location)
    condition_text = value_or(CONDITION_LABEL, DEFAULT_CONDITION_TEXT)
    temperature = value_or(TEMP_LABEL, MISSING_TEMPERATURE)
    local_time = value_or(TIME_LABEL, now or _local_time)
    uv_index = value_or(UV_LABEL, DEFAULT_UV_INDEX)

    report = extract_report(lines)
    if not report:
        defaulted.append(REPORT_LABEL)
        report = raw_text
    else:
        found.append(REPORT_LABEL)

    if defaulted:
        logging.debug(f"Reply missing labels, using fallbacks for: {', '.join(defaulted)}")

    return ParsedResponse(
        resolved_location=location,
        condition=normalize_condition(condition_text),
        temperature_text=temperature,
        local_time_text=local_time,
        uv_index_text=uv_index,
        report_text=report,
        found=tuple(found),
        defaulted=tuple(defaulted),
    )
