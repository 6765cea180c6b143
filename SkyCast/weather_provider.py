"""Weather provider abstraction and the errors surfaced to the UI."""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Mapping, Optional


@dataclass
class GenerationResult:
    """Raw reply from a generation call."""
    text: str
    grounding_chunks: List[Mapping] = field(default_factory=list)


class WeatherProviderBase(ABC):
    """Abstract base class for generative weather providers."""

    @abstractmethod
    def is_configured(self) -> bool:
        """Return True if the provider has a usable API credential."""
        pass

    @abstractmethod
    async def generate(self, prompt: str) -> GenerationResult:
        """
        Send a single prompt and return the model's reply.

        Returns:
            GenerationResult: Reply text and any grounding chunks

        Raises:
            WeatherProviderError: If the request fails
        """
        pass


class WeatherProviderError(Exception):
    """
    Exception raised when a weather lookup fails.

    ``str(error)`` is the message shown to the user. Subclasses identify the
    kind of failure.
    """
    kind = "provider"
    default_message = "Weather provider request failed."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)


class InvalidInputError(WeatherProviderError):
    """Empty or whitespace-only location query."""
    kind = "invalid_input"
    default_message = "Please enter a location."


class ConfigurationError(WeatherProviderError):
    """Missing or rejected API credential, or the model was not found."""
    kind = "configuration"
    default_message = "Weather service is currently unavailable. Please check configuration."


class LocationNotFoundError(WeatherProviderError):
    """The model could not resolve the requested location."""
    kind = "location_not_found"

    def __init__(self, query: str):
        self.query = query
        super().__init__(
            f'Location not found: we couldn\'t find a place matching "{query}". Please try again.'
        )


class NetworkError(WeatherProviderError):
    """The request never reached the service."""
    kind = "network"
    default_message = "Network connection issue. Please check your internet."


class UpstreamError(WeatherProviderError):
    """Any other failure reported by the service."""
    kind = "upstream"
    default_message = "Unable to load weather data. Please try again."
