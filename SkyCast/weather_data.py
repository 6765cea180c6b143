"""Weather domain model - pure data structures independent of any API."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Mapping, Optional, Tuple


class ConditionTag(str, Enum):
    """Closed set of weather conditions used to pick background art and overlays."""
    CLEAR = "clear"
    CLOUDS = "clouds"
    RAIN = "rain"
    SNOW = "snow"
    THUNDERSTORM = "thunderstorm"
    MIST = "mist"


@dataclass(frozen=True)
class SourceLink:
    """A citation returned alongside a generated answer."""
    uri: str
    title: Optional[str] = None


@dataclass(frozen=True)
class WeatherRecord:
    """Parsed weather report for one location."""
    report_text: str
    resolved_location: str
    fetched_at_ms: int  # epoch milliseconds
    condition: ConditionTag
    temperature_text: str  # e.g. "22°C / 72°F", not parsed
    local_time_text: str
    uv_index_text: Optional[str] = None
    source_links: Tuple[SourceLink, ...] = field(default_factory=tuple)

    def age_seconds(self, now_ms: int) -> float:
        """Seconds elapsed since this record was fetched."""
        return (now_ms - self.fetched_at_ms) / 1000.0


def dedupe_links(chunks: Optional[Iterable[Mapping]]) -> Tuple[SourceLink, ...]:
    """
    Collect grounding chunks into unique source links.

    Chunks look like ``{"web": {"uri": ..., "title": ...}}``. Chunks without a
    web uri, or not shaped like that, are skipped; the first occurrence of
    each uri wins.

    Args:
        chunks: Grounding chunks from the generation response (may be None)

    Returns:
        Tuple of SourceLink in order of first appearance
    """
    links = []
    seen = set()
    for chunk in chunks or ():
        if not isinstance(chunk, dict):
            continue
        web = chunk.get("web")
        if not isinstance(web, dict):
            continue
        uri = web.get("uri")
        if not uri or not isinstance(uri, str) or uri in seen:
            continue
        seen.add(uri)
        links.append(SourceLink(uri=uri, title=web.get("title") or None))
    return tuple(links)
