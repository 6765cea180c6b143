"""Google Gemini generateContent provider implementation."""
import logging
import httpx
from typing import Optional
from weather_provider import GenerationResult, WeatherProviderBase, WeatherProviderError


DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-2.5-flash"


class GeminiProvider(WeatherProviderBase):
    """
    Weather provider backed by the Gemini REST API.

    Uses the generateContent endpoint:
    https://ai.google.dev/api/generate-content
    With search grounding enabled the model can look up live conditions and
    returns the pages it used as grounding chunks.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        use_search: bool = True,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize Gemini provider.

        Args:
            api_key: Gemini API key
            model: Model name (e.g., "gemini-2.5-flash")
            base_url: API root, without trailing slash
            use_search: Enable Google Search grounding
            timeout: HTTP request timeout in seconds
            client: Shared AsyncClient; a new one is opened per request if None
        """
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.use_search = use_search
        self.timeout = timeout
        self.client = client

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def is_configured(self) -> bool:
        key = (self.api_key or "").strip()
        return bool(key) and key != "undefined"

    def build_payload(self, prompt: str) -> dict:
        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        if self.use_search:
            payload["tools"] = [{"google_search": {}}]
        return payload

    async def generate(self, prompt: str) -> GenerationResult:
        """
        Send a prompt to Gemini.

        Returns:
            GenerationResult: Reply text and grounding chunks

        Raises:
            WeatherProviderError: If the API request fails
        """
        headers = {"x-goog-api-key": self.api_key or ""}
        payload = self.build_payload(prompt)

        try:
            logging.info(f"Making Gemini API request: {self.endpoint}")
            logging.debug(f"Request options: model={self.model}, search={self.use_search}")

            if self.client is not None:
                response = await self.client.post(self.endpoint, json=payload, headers=headers, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.endpoint, json=payload, headers=headers)

            logging.info(f"API response status: {response.status_code}")

            if not response.is_success:
                logging.error(f"API request failed with status {response.status_code}")
                self._handle_error_response(response)

            data = response.json()
            logging.debug(f"API response (truncated): {str(data)[:500]}...")

            candidates = data.get("candidates") or []
            if not candidates:
                feedback = data.get("promptFeedback", {})
                logging.error(f"Response has no candidates (feedback: {feedback})")
                raise WeatherProviderError("Response missing 'candidates'")
            candidate = candidates[0]

            parts = (candidate.get("content") or {}).get("parts") or []
            text = "".join(part.get("text", "") for part in parts)
            if not text.strip():
                logging.error(f"Candidate has no text (finishReason: {candidate.get('finishReason')})")
                raise WeatherProviderError("Response missing candidate text")

            metadata = candidate.get("groundingMetadata") or {}
            chunks = metadata.get("groundingChunks") or []
            logging.debug(f"Reply: {len(text)} chars, {len(chunks)} grounding chunks")

            return GenerationResult(text=text, grounding_chunks=list(chunks))

        except httpx.RequestError as e:
            logging.error(f"Network error during API request: {e}")
            raise WeatherProviderError(f"Network error: {str(e)}") from e
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            logging.error(f"Failed to parse API response: {e}", exc_info=True)
            raise WeatherProviderError(f"Failed to parse response: {str(e)}") from e

    def _handle_error_response(self, response: httpx.Response) -> None:
        """Parse and raise error from a Gemini error response."""
        try:
            error_data = response.json().get("error", {})
        except ValueError:
            # Not JSON, use HTTP status
            logging.error(f"Non-JSON error response: HTTP {response.status_code}, body: {response.text[:500]}")
            raise WeatherProviderError(
                f"HTTP {response.status_code}: {response.text[:200]}"
            )

        code = error_data.get("code", response.status_code)
        status = error_data.get("status", "UNKNOWN")
        message = error_data.get("message", "Unknown error")
        logging.error(f"Gemini API error response: {error_data}")

        raise WeatherProviderError(f"Gemini API error {code} ({status}): {message}")
