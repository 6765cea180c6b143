"""SkyCast terminal weather lookup."""
import argparse
import asyncio
import logging
import os
import sys
from typing import Optional, Tuple

from dotenv import load_dotenv

from backdrop import BackdropTransition
from gemini_provider import DEFAULT_BASE_URL, DEFAULT_MODEL, GeminiProvider
from layout import format_card, format_error, format_share_text
from search_history import SearchHistory
from weather_cache import WeatherFetchCache
from weather_client import WeatherClient
from weather_data import WeatherRecord
from weather_provider import UpstreamError, WeatherProviderError

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DEFAULT_LOG_FILE = os.path.join(BASE_DIR, "skycast.log")
DEFAULT_HISTORY_FILE = os.path.join(BASE_DIR, "skycast_history.json")
DEFAULT_SHARE_URL = "https://skycast.example/"
POPULAR_LOCATIONS = ["London", "Tokyo", "New York", "Paris", "Dubai"]


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser("Current weather from a generative model")
    parser.add_argument("locations", nargs="*", help="Locations to look up; interactive if omitted")
    parser.add_argument("--log-file", default=DEFAULT_LOG_FILE)
    parser.add_argument("--history-file", default=DEFAULT_HISTORY_FILE)
    parser.add_argument("--model", default=None, help="Overrides GEMINI_MODEL")
    parser.add_argument("--timeout", type=float, default=30.0, help="HTTP timeout in seconds")
    parser.add_argument("--cache-ttl", type=int, default=600)
    parser.add_argument("--no-search", action="store_true", help="Disable search grounding")
    parser.add_argument("--share-url", default=DEFAULT_SHARE_URL)
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def setup_logging(log_file: str, verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file)
        ]
    )


def load_config(model_override: Optional[str] = None) -> Tuple[Optional[str], str, str]:
    """
    Read API settings from the environment (and a .env file, if present).

    A missing key is not fatal here; the client reports it on the first fetch.
    """
    load_dotenv()
    api_key = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
    model = model_override or os.getenv("GEMINI_MODEL", DEFAULT_MODEL)
    base_url = os.getenv("GEMINI_BASE_URL", DEFAULT_BASE_URL)

    if not api_key:
        logging.warning("GEMINI_API_KEY is not set; lookups will fail until it is configured")

    logging.info("Configuration loaded: model=%s base_url=%s", model, base_url)
    return api_key, model, base_url


def build_weather_client(
    api_key: Optional[str],
    model: str,
    base_url: str,
    args: argparse.Namespace
) -> WeatherClient:
    provider = GeminiProvider(
        api_key=api_key,
        model=model,
        base_url=base_url,
        use_search=not args.no_search,
        timeout=args.timeout,
    )
    client = WeatherClient(
        provider=provider,
        cache=WeatherFetchCache(ttl_seconds=args.cache_ttl),
    )
    logging.info("Weather client ready (cache ttl=%ss, search=%s)", args.cache_ttl, not args.no_search)
    return client


def show_weather(record: WeatherRecord, share_url: str) -> None:
    print()
    print("\n".join(format_card(record)))
    share_text, url = format_share_text(record, share_url)
    print()
    print(f"Share: {share_text} {url}")
    print()


def show_error(error: WeatherProviderError) -> None:
    title, message = format_error(error)
    print(f"\n{title}\n{message}\n")


def show_history(history: SearchHistory) -> None:
    if len(history):
        print("Recent searches: " + ", ".join(history.items))
    else:
        print("Popular locations: " + ", ".join(POPULAR_LOCATIONS))


def lookup(
    client: WeatherClient,
    history: SearchHistory,
    backdrop: BackdropTransition,
    location: str,
    share_url: str
) -> Optional[WeatherRecord]:
    """Fetch and display one location. Returns None if the lookup failed."""
    try:
        record = asyncio.run(client.fetch_weather(location))
    except WeatherProviderError as err:
        logging.error("Weather lookup failed: %s", err)
        show_error(err)
        return None
    except Exception as exc:
        logging.exception("Unexpected error: %s", exc)
        show_error(UpstreamError())
        return None

    try:
        history.add(record.resolved_location)
    except OSError as exc:
        logging.error("Could not save search history: %s", exc)

    art = backdrop.request(record.condition)
    if art is not None and backdrop.image_loaded(art):
        backdrop.fade_in()
    logging.debug("Backdrop: %s (overlay %s)", backdrop.current, backdrop.overlay)

    show_weather(record, share_url)
    return record


def interactive_loop(client, history, backdrop, share_url: str) -> None:
    """Prompt for locations until EOF or 'q'. ':retry' repeats the last query."""
    last_query = None
    show_history(history)
    while True:
        try:
            query = input("Location> ").strip()
        except EOFError:
            print()
            return

        if query.lower() in ("q", "quit", ":quit"):
            return
        if query == ":clear":
            history.clear()
            print("History cleared.")
            continue
        if query == ":retry":
            if last_query is None:
                print("Nothing to retry.")
                continue
            query = last_query
        if not query:
            show_history(history)
            continue

        last_query = query
        lookup(client, history, backdrop, query, share_url)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)
    api_key, model, base_url = load_config(args.model)

    client = build_weather_client(api_key, model, base_url, args)
    history = SearchHistory(args.history_file)
    backdrop = BackdropTransition()

    try:
        if args.locations:
            failures = 0
            for location in args.locations:
                if lookup(client, history, backdrop, location, args.share_url) is None:
                    failures += 1
            return 1 if failures else 0
        interactive_loop(client, history, backdrop, args.share_url)
    except KeyboardInterrupt:
        logging.info("Stopping")
    return 0


if __name__ == "__main__":
    sys.exit(main())
