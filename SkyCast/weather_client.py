"""Weather client: prompt the model, parse its reply, cache the result."""
import logging
import time
from typing import Callable, Optional

from response_parser import parse_response
from weather_cache import WeatherFetchCache, cache_key, now_ms
from weather_data import WeatherRecord, dedupe_links
from weather_provider import (
    ConfigurationError,
    InvalidInputError,
    LocationNotFoundError,
    NetworkError,
    UpstreamError,
    WeatherProviderBase,
    WeatherProviderError,
)


INVALID_LOCATION_SENTINEL = "ERROR: INVALID_LOCATION"

PROMPT_TEMPLATE = """Search for the CURRENT weather in "{location}" right now.

Your response MUST be organized exactly like this:
1. LocationName: [The actual city and country names, e.g., "Abuja, Nigeria" or "London, UK". If coordinates were provided, resolve them to the nearest city.]
2. Condition: [one word: clear, clouds, rain, snow, thunderstorm, or mist]
3. Temp: [the temperature in C and F]
4. Time: [local time in that city]
5. UV: [UV Index]
6. Report: [A 2-3 sentence description of current conditions and what to wear]

If the location is invalid, start your response with "{sentinel}"."""

CONFIGURATION_MARKERS = ("api_key", "api key", "401", "403", "404", "permission_denied", "unauthenticated")
NETWORK_MARKERS = ("network", "fetch failed", "connection", "timed out")
QUOTA_MARKERS = ("429", "resource_exhausted")

QUOTA_MESSAGE = "Request limit reached. Please wait a moment and try again."


def build_prompt(location: str) -> str:
    """Prompt asking for the labeled-line weather format."""
    return PROMPT_TEMPLATE.format(location=location, sentinel=INVALID_LOCATION_SENTINEL)


def classify_error(error: Exception) -> WeatherProviderError:
    """
    Translate a provider failure into the error shown to the user.

    Auth and not-found signals point at configuration, connectivity problems
    at the network, and everything else is an upstream failure.
    """
    text = str(error).lower()
    if any(marker in text for marker in CONFIGURATION_MARKERS):
        return ConfigurationError()
    if any(marker in text for marker in NETWORK_MARKERS):
        return NetworkError()
    if any(marker in text for marker in QUOTA_MARKERS):
        return UpstreamError(QUOTA_MESSAGE)
    return UpstreamError()


class WeatherClient:
    """
    Fetch current weather for a location through a generative provider.

    Successful results are cached per location (default: 10 minutes), so
    repeated lookups for "Paris" and "  paris " make a single remote call.
    Failures are never retried automatically.
    """

    def __init__(
        self,
        provider: WeatherProviderBase,
        cache: Optional[WeatherFetchCache] = None,
        clock: Callable[[], float] = time.time,
        local_time: Optional[Callable[[], str]] = None
    ):
        """
        Initialize weather client.

        Args:
            provider: Generative provider to prompt
            cache: Record cache; a new 10 minute cache sharing ``clock`` if None
            clock: Returns the current epoch time in seconds
            local_time: Returns the display time used when a reply has none
        """
        self.provider = provider
        self.clock = clock
        self.cache = cache if cache is not None else WeatherFetchCache(clock=clock)
        self.local_time = local_time

    async def fetch_weather(self, location_query: str) -> WeatherRecord:
        """
        Get current weather for a location, using the cache if still fresh.

        Args:
            location_query: Location as typed by the user

        Returns:
            WeatherRecord: Parsed weather (may be cached)

        Raises:
            InvalidInputError: If the query is empty
            ConfigurationError: If no API key is set or the service rejects it
            LocationNotFoundError: If the model cannot resolve the location
            NetworkError: If the service cannot be reached
            UpstreamError: For any other service failure
        """
        key = cache_key(location_query or "")
        if not key:
            raise InvalidInputError()

        if not self.provider.is_configured():
            logging.error("No API key configured for weather provider")
            raise ConfigurationError()

        cached = self.cache.get(key)
        if cached is not None:
            return cached

        logging.info(f"Fetching weather for '{location_query}' from provider...")
        try:
            result = await self.provider.generate(build_prompt(location_query))
        except WeatherProviderError as e:
            error = classify_error(e)
            logging.warning(f"Weather fetch for '{location_query}' failed ({error.kind}): {e}")
            raise error from e

        if INVALID_LOCATION_SENTINEL in result.text:
            logging.warning(f"Provider could not resolve location '{location_query}'")
            raise LocationNotFoundError(location_query)

        parsed = parse_response(result.text, location_query, now=self.local_time)
        record = parsed.to_record(
            fetched_at_ms=now_ms(self.clock),
            source_links=dedupe_links(result.grounding_chunks),
        )
        logging.info(
            f"Weather fetch successful: {record.resolved_location}, "
            f"{record.temperature_text}, {record.condition.value}"
        )

        self.cache.put(key, record)
        return record
