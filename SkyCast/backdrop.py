"""Background art for each weather condition and the cross-fade between them."""
import logging
from typing import Optional
from weather_data import ConditionTag


DEFAULT_KEY = "default"

BACKGROUNDS = {
    "clear": "https://images.unsplash.com/photo-1506126279646-a697353d3166?auto=format&fit=crop&w=2400&q=90",
    "clouds": "https://images.unsplash.com/photo-1534088568595-a066f7104211?auto=format&fit=crop&w=2400&q=90",
    "rain": "https://images.unsplash.com/photo-1519692938311-58ba5324884b?auto=format&fit=crop&w=2400&q=90",
    "snow": "https://images.unsplash.com/photo-1491002052546-bf38f186af56?auto=format&fit=crop&w=2400&q=90",
    "thunderstorm": "https://images.unsplash.com/photo-1605727216801-e27ce1d0cc28?auto=format&fit=crop&w=2400&q=90",
    "mist": "https://images.unsplash.com/photo-1485236715598-c32463e00fd8?auto=format&fit=crop&w=2400&q=90",
    DEFAULT_KEY: "https://images.unsplash.com/photo-1464822759023-fed622ff2c3b?auto=format&fit=crop&w=2400&q=90",
}

# Gradient tint drawn over the background art
OVERLAYS = {
    "clear": "from-blue-500/10 via-transparent to-orange-500/10",
    "clouds": "from-slate-400/10 via-transparent to-blue-900/20",
    "rain": "from-indigo-900/40 via-transparent to-slate-900/50",
    "snow": "from-blue-100/10 via-transparent to-slate-400/20",
    "thunderstorm": "from-purple-900/40 via-transparent to-black/60",
    "mist": "from-slate-500/20 via-transparent to-slate-700/30",
    DEFAULT_KEY: "from-black/40 via-transparent to-black/60",
}


def _key(condition: Optional[ConditionTag]) -> str:
    if condition is None:
        return DEFAULT_KEY
    return ConditionTag(condition).value


def background_for(condition: Optional[ConditionTag]) -> str:
    return BACKGROUNDS[_key(condition)]


def overlay_for(condition: Optional[ConditionTag]) -> str:
    return OVERLAYS[_key(condition)]


class BackdropTransition:
    """
    Tracks which background is shown while new art loads and fades in.

    New art is requested with ``request()``, reported loaded with
    ``image_loaded()`` and revealed with ``fade_in()``. A load that finishes
    after a newer request was made is ignored, so a slow image can never
    replace the art for a later condition.
    """

    def __init__(self):
        self.condition: Optional[ConditionTag] = None
        self.current = BACKGROUNDS[DEFAULT_KEY]
        self.previous = BACKGROUNDS[DEFAULT_KEY]
        self.pending: Optional[str] = None
        self.opacity = 1.0

    @property
    def overlay(self) -> str:
        return overlay_for(self.condition)

    def request(self, condition: ConditionTag) -> Optional[str]:
        """
        Switch to a new condition.

        The overlay follows the condition immediately. Returns the background
        URL to preload, or None if that art is already shown or loading.
        """
        self.condition = ConditionTag(condition)
        target = background_for(self.condition)
        if target == self.current:
            self.pending = None
            return None
        if target == self.pending:
            return None
        self.pending = target
        return target

    def image_loaded(self, url: str) -> bool:
        """Swap in loaded art. Returns False if the load is stale."""
        if url != self.pending:
            logging.debug(f"Ignoring stale background load: {url}")
            return False
        self.previous = self.current
        self.current = url
        self.pending = None
        self.opacity = 0.0
        return True

    def fade_in(self) -> None:
        self.opacity = 1.0

    @property
    def is_fading(self) -> bool:
        return self.opacity < 1.0
