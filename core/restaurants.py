import json
import logging
import os
from dataclasses import dataclass
from typing import List
from urllib.parse import quote_plus

from core.roulette.errors import DataLoadError
from core.state import AppState

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ["id", "name", "discount", "address", "latitude", "longitude", "cuisine", "rating", "open_until"]


@dataclass(frozen=True)
class Restaurant:
    id: str
    name: str
    discount: str
    address: str
    latitude: float
    longitude: float
    cuisine: str
    rating: float
    open_until: str

    @classmethod
    def from_dict(cls, raw: dict) -> "Restaurant":
        missing = [k for k in REQUIRED_FIELDS if k not in raw]
        if missing:
            raise DataLoadError(f"restaurant entry missing fields {missing}: {raw!r}")
        try:
            return cls(
                id=str(raw["id"]).strip(),
                name=str(raw["name"]).strip(),
                discount=str(raw["discount"]).strip(),
                address=str(raw["address"]).strip(),
                latitude=float(raw["latitude"]),
                longitude=float(raw["longitude"]),
                cuisine=str(raw["cuisine"]).strip(),
                rating=float(raw["rating"]),
                open_until=str(raw["open_until"]).strip(),
            )
        except (TypeError, ValueError) as e:
            raise DataLoadError(f"bad restaurant entry {raw.get('id')!r}: {e}") from e


def load_restaurants_from_json(path: str) -> List[Restaurant]:
    """Parse ``{"restaurants": [...]}``. Raises DataLoadError on any problem."""
    if not os.path.isfile(path):
        raise DataLoadError(f"{path}: file not found")
    try:
        with open(path, "r", encoding="utf-8") as f:
            doc = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise DataLoadError(f"{path}: {e}") from e

    rows = doc.get("restaurants") if isinstance(doc, dict) else None
    if not isinstance(rows, list):
        raise DataLoadError(f"{path}: expected a top-level 'restaurants' list")
    out = []
    for raw in rows:
        if not isinstance(raw, dict):
            raise DataLoadError(f"{path}: restaurant entries must be objects")
        out.append(Restaurant.from_dict(raw))
    return out


def load_restaurants(state: AppState) -> List[Restaurant]:
    """Load the bundled dataset into ``state``. Failures leave an empty wheel."""
    try:
        restaurants = load_restaurants_from_json(state.restaurants_path)
    except DataLoadError as e:
        logger.warning("Restaurant data unavailable, wheel disabled: %s", e)
        state.restaurants = []
        state.data_error = str(e)
        return []
    state.restaurants = restaurants
    state.data_error = None
    logger.info("Loaded %d restaurants from %s", len(restaurants), state.restaurants_path)
    return restaurants


def map_url(latitude: float, longitude: float, name: str) -> str:
    return f"https://maps.apple.com/?ll={latitude:.6f},{longitude:.6f}&q={quote_plus(name)}"


def share_text(r: Restaurant) -> str:
    return (
        f"Check out {r.name}!\n"
        f"{r.discount}\n"
        f"Open until {r.open_until}\n"
        f"Address: {r.address}"
    )


def details_text(r: Restaurant) -> str:
    return (
        f"{r.discount}\n"
        f"Cuisine: {r.cuisine}\n"
        f"Rating: {r.rating}\n"
        f"Open until: {r.open_until}\n"
        f"Address: {r.address}"
    )
