"""Tests for weather client."""
import asyncio
import pytest
from weather_cache import WeatherFetchCache
from weather_client import (
    INVALID_LOCATION_SENTINEL,
    QUOTA_MESSAGE,
    WeatherClient,
    build_prompt,
    classify_error,
)
from weather_data import ConditionTag, SourceLink
from weather_provider import (
    ConfigurationError,
    GenerationResult,
    InvalidInputError,
    LocationNotFoundError,
    NetworkError,
    UpstreamError,
    WeatherProviderBase,
    WeatherProviderError,
)


PARIS_REPLY = (
    "1. LocationName: Paris, France\n"
    "2. Condition: Partly cloudy\n"
    "3. Temp: 17°C / 63°F\n"
    "4. Time: 11:20\n"
    "5. UV: 4\n"
    "6. Report: Mild with passing clouds. A light jacket is enough."
)


class MockProvider(WeatherProviderBase):
    """Mock generative provider for testing."""

    def __init__(self, text=PARIS_REPLY, chunks=None, raise_error=None, configured=True):
        self.text = text
        self.chunks = chunks or []
        self.raise_error = raise_error
        self.configured = configured
        self.call_count = 0
        self.prompts = []

    def is_configured(self):
        return self.configured

    async def generate(self, prompt):
        self.call_count += 1
        self.prompts.append(prompt)
        if self.raise_error:
            raise self.raise_error
        return GenerationResult(text=self.text, grounding_chunks=list(self.chunks))


class FakeClock:
    """Controllable epoch clock in seconds."""

    def __init__(self, start=1_700_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


def fetch(client, location):
    return asyncio.run(client.fetch_weather(location))


def test_fetch_weather_parses_reply(clock):
    """Test a successful fetch."""
    provider = MockProvider()
    client = WeatherClient(provider, clock=clock)

    record = fetch(client, "paris")

    assert provider.call_count == 1
    assert record.resolved_location == "Paris, France"
    assert record.condition == ConditionTag.CLOUDS
    assert record.temperature_text == "17°C / 63°F"
    assert record.local_time_text == "11:20"
    assert record.uv_index_text == "4"
    assert record.report_text == "Mild with passing clouds. A light jacket is enough."
    assert record.fetched_at_ms == 1_700_000_000_000


def test_prompt_includes_location_and_sentinel(clock):
    """Test the prompt sent to the provider."""
    provider = MockProvider()
    client = WeatherClient(provider, clock=clock)

    fetch(client, "Lagos")

    prompt = provider.prompts[0]
    assert '"Lagos"' in prompt
    assert INVALID_LOCATION_SENTINEL in prompt
    for label in ("LocationName:", "Condition:", "Temp:", "Time:", "UV:", "Report:"):
        assert label in prompt


def test_build_prompt_orders_labels():
    """Test that the labeled lines appear in the fixed order."""
    prompt = build_prompt("Paris")
    positions = [prompt.index(label) for label in ("1. LocationName", "2. Condition", "3. Temp", "4. Time", "5. UV", "6. Report")]
    assert positions == sorted(positions)


def test_cache_shared_across_query_spelling(clock):
    """Test that "  Paris  " and "paris" hit the same cache entry."""
    provider = MockProvider()
    client = WeatherClient(provider, clock=clock)

    first = fetch(client, "  Paris  ")
    clock.advance(60)
    second = fetch(client, "paris")

    assert provider.call_count == 1
    assert second is first


def test_cache_expiry_triggers_new_call(clock):
    """Test that an entry older than 10 minutes is refreshed."""
    provider = MockProvider()
    client = WeatherClient(provider, clock=clock)

    first = fetch(client, "paris")
    clock.advance(601)
    second = fetch(client, "paris")

    assert provider.call_count == 2
    assert second.fetched_at_ms > first.fetched_at_ms


def test_cache_ttl_is_configurable(clock):
    """Test an injected cache with a short TTL."""
    provider = MockProvider()
    client = WeatherClient(provider, cache=WeatherFetchCache(ttl_seconds=5, clock=clock), clock=clock)

    fetch(client, "paris")
    clock.advance(5)
    fetch(client, "paris")

    assert provider.call_count == 2


@pytest.mark.parametrize("query", ["", "   ", "\t\n"])
def test_empty_query_is_invalid_input(clock, query):
    """Test that empty queries never reach the provider."""
    provider = MockProvider()
    client = WeatherClient(provider, clock=clock)

    with pytest.raises(InvalidInputError) as exc_info:
        fetch(client, query)

    assert provider.call_count == 0
    assert str(exc_info.value) == "Please enter a location."


def test_invalid_input_checked_before_configuration(clock):
    """Test that input validation comes first."""
    provider = MockProvider(configured=False)
    client = WeatherClient(provider, clock=clock)

    with pytest.raises(InvalidInputError):
        fetch(client, " ")


def test_missing_credential_is_configuration_error(clock):
    """Test that an unconfigured provider is never called."""
    provider = MockProvider(configured=False)
    client = WeatherClient(provider, clock=clock)

    with pytest.raises(ConfigurationError) as exc_info:
        fetch(client, "paris")

    assert provider.call_count == 0
    assert "check configuration" in str(exc_info.value)


def test_sentinel_is_location_not_found(clock):
    """Test that the sentinel wins over otherwise well-formed lines."""
    provider = MockProvider(text=f"{INVALID_LOCATION_SENTINEL}\n{PARIS_REPLY}")
    client = WeatherClient(provider, clock=clock)

    with pytest.raises(LocationNotFoundError) as exc_info:
        fetch(client, "Atlantis")

    assert "Atlantis" in str(exc_info.value)
    assert exc_info.value.query == "Atlantis"
    assert len(client.cache) == 0


def test_sentinel_anywhere_in_reply(clock):
    """Test that the sentinel is detected even when not at the start."""
    provider = MockProvider(text=f"Sorry.\n{INVALID_LOCATION_SENTINEL}")
    client = WeatherClient(provider, clock=clock)

    with pytest.raises(LocationNotFoundError):
        fetch(client, "Qwzx")


def test_source_links_deduplicated(clock):
    """Test that grounding chunks become unique source links."""
    chunks = [
        {"web": {"uri": "https://a.example", "title": "A"}},
        {"web": {"uri": "https://a.example", "title": "A2"}},
        {"web": {"uri": "https://b.example"}},
    ]
    provider = MockProvider(chunks=chunks)
    client = WeatherClient(provider, clock=clock)

    record = fetch(client, "paris")

    assert record.source_links == (
        SourceLink("https://a.example", "A"),
        SourceLink("https://b.example", None),
    )


def test_malformed_grounding_chunks_are_ignored(clock):
    """Test that badly shaped grounding chunks do not fail the fetch."""
    chunks = [None, {"web": "https://a.example"}, {"web": {"uri": "https://b.example", "title": "B"}}]
    provider = MockProvider(chunks=chunks)
    client = WeatherClient(provider, clock=clock)

    record = fetch(client, "paris")

    assert record.resolved_location == "Paris, France"
    assert record.source_links == (SourceLink("https://b.example", "B"),)


def test_resolved_location_falls_back_to_query(clock):
    """Test the location fallback when the reply does not name one."""
    provider = MockProvider(text="Report: Sunny and warm.")
    client = WeatherClient(provider, clock=clock, local_time=lambda: "13:00")

    record = fetch(client, "Timbuktu")

    assert record.resolved_location == "Timbuktu"
    assert record.local_time_text == "13:00"
    assert record.report_text == "Sunny and warm."


@pytest.mark.parametrize("message, expected", [
    ("Gemini API error 403 (PERMISSION_DENIED): Method doesn't allow unregistered callers.", ConfigurationError),
    ("Gemini API error 400 (INVALID_ARGUMENT): API key not valid. Please pass a valid API key.", ConfigurationError),
    ("Gemini API error 404 (NOT_FOUND): models/gemini-x is not found", ConfigurationError),
    ("HTTP 401: Unauthorized", ConfigurationError),
    ("Network error: [Errno 111] Connection refused", NetworkError),
    ("Network error: timed out", NetworkError),
    ("Gemini API error 500 (INTERNAL): An internal error has occurred.", UpstreamError),
    ("Response missing candidate text", UpstreamError),
])
def test_provider_errors_are_classified(clock, message, expected):
    """Test translation of provider failures."""
    original = WeatherProviderError(message)
    provider = MockProvider(raise_error=original)
    client = WeatherClient(provider, clock=clock)

    with pytest.raises(expected) as exc_info:
        fetch(client, "paris")

    assert type(exc_info.value) is expected
    assert exc_info.value.__cause__ is original
    assert len(client.cache) == 0


def test_quota_error_message():
    """Test the rate limit message."""
    error = classify_error(WeatherProviderError("Gemini API error 429 (RESOURCE_EXHAUSTED): Quota exceeded"))
    assert isinstance(error, UpstreamError)
    assert str(error) == QUOTA_MESSAGE


def test_generic_upstream_message():
    """Test the fallback message."""
    error = classify_error(WeatherProviderError("something odd"))
    assert str(error) == "Unable to load weather data. Please try again."


def test_failure_is_not_retried(clock):
    """Test that the client makes a single attempt."""
    provider = MockProvider(raise_error=WeatherProviderError("Network error: down"))
    client = WeatherClient(provider, clock=clock)

    with pytest.raises(NetworkError):
        fetch(client, "paris")

    assert provider.call_count == 1


def test_failure_keeps_existing_cache_entry(clock):
    """Test that a failed refresh does not disturb other entries."""
    provider = MockProvider()
    client = WeatherClient(provider, clock=clock)
    fetch(client, "paris")

    provider.raise_error = WeatherProviderError("Network error: down")
    with pytest.raises(NetworkError):
        fetch(client, "london")

    assert fetch(client, "paris").resolved_location == "Paris, France"
    assert provider.call_count == 2


def test_last_write_wins(clock):
    """Test that a later successful fetch overwrites the cache entry."""
    provider = MockProvider()
    client = WeatherClient(provider, clock=clock)
    fetch(client, "paris")

    clock.advance(700)
    provider.text = PARIS_REPLY.replace("17°C / 63°F", "19°C / 66°F")
    fetch(client, "PARIS")

    assert client.cache.get("paris").temperature_text == "19°C / 66°F"
