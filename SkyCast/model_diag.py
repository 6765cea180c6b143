"""Minimal diagnostic for the Gemini API key and model."""
import argparse
import asyncio
import logging
import os
from typing import List

import requests
from dotenv import load_dotenv

from gemini_provider import DEFAULT_BASE_URL, DEFAULT_MODEL, GeminiProvider
from weather_provider import WeatherProviderError


def parse_args(argv=None):
    parser = argparse.ArgumentParser("Diagnostic for the Gemini API")
    parser.add_argument("--model", default=None)
    parser.add_argument("--timeout", type=int, default=10)
    parser.add_argument("--smoke-test", action="store_true", help="Also send a short prompt")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def list_models(api_key: str, base_url: str = DEFAULT_BASE_URL, timeout: int = 10) -> List[str]:
    """
    List the models the key can see.

    Returns:
        Model names without the "models/" prefix

    Raises:
        WeatherProviderError: If the request fails or the API reports an error
    """
    url = f"{base_url.rstrip('/')}/models"
    try:
        response = requests.get(url, params={"key": api_key}, timeout=timeout)
    except requests.exceptions.RequestException as e:
        raise WeatherProviderError(f"Network error: {str(e)}") from e

    try:
        data = response.json()
    except ValueError as e:
        raise WeatherProviderError(f"HTTP {response.status_code}: {response.text[:200]}") from e

    if not isinstance(data, dict):
        raise WeatherProviderError(f"HTTP {response.status_code}: unexpected response body")

    if "error" in data:
        error = data["error"]
        raise WeatherProviderError(
            f"Gemini API error {error.get('code', response.status_code)}: {error.get('message', 'Unknown error')}"
        )

    names = []
    for model in data.get("models") or []:
        if not isinstance(model, dict):
            continue
        name = model.get("name", "")
        names.append(name.split("/", 1)[1] if name.startswith("models/") else name)
    return names


async def smoke_test(provider: GeminiProvider) -> str:
    result = await provider.generate("Say hello")
    return result.text.strip()


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    load_dotenv()
    api_key = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
    model = args.model or os.getenv("GEMINI_MODEL", DEFAULT_MODEL)
    base_url = os.getenv("GEMINI_BASE_URL", DEFAULT_BASE_URL)

    if not api_key:
        raise SystemExit("Missing GEMINI_API_KEY in environment")

    logging.info("Test 1: listing available models")
    try:
        models = list_models(api_key, base_url, args.timeout)
    except WeatherProviderError as err:
        logging.error("Model listing failed: %s", err)
        return 1

    for name in models:
        print(f"- {name}")
    has_model = model in models
    print(f"\nHas {model}? {has_model}")

    if args.smoke_test:
        logging.info("Test 2: generating a reply with %s", model)
        provider = GeminiProvider(api_key, model=model, base_url=base_url, use_search=False, timeout=args.timeout)
        try:
            print(f"Response: {asyncio.run(smoke_test(provider))}")
        except WeatherProviderError as err:
            logging.error("Smoke test failed: %s", err)
            return 1

    logging.info("Diagnostics complete")
    return 0 if has_model else 1


if __name__ == "__main__":
    raise SystemExit(main())
