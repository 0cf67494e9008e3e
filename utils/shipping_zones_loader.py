"""
Shipping Zones Loader

Loads shipping zone definitions from a JSON file.
Each zone lists the countries it serves (or is the catch-all "rest" zone)
together with its price-based and weight-based rate tables.

Usage:
    from utils.shipping_zones_loader import get_shipping_zones

    zones = get_shipping_zones()  # Loaded once from config.SHIPPING_ZONES_FILE
"""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

import config
from models.shipping_zone import ShippingZoneDTO

logger = logging.getLogger(__name__)

_SHIPPING_ZONES: list[ShippingZoneDTO] | None = None


def load_shipping_zones(path: str | Path) -> list[ShippingZoneDTO]:
    """
    Load shipping zones from a JSON file.

    Zones keep the order of the file: zone resolution picks the first
    zone that lists a country. Zones without an explicit id get their
    position in the list as id.

    Args:
        path: Path to the zones file (relative paths resolve from the project root)

    Returns:
        list[ShippingZoneDTO]: Zones in configured order

    Raises:
        FileNotFoundError: If the zones file doesn't exist
        json.JSONDecodeError: If JSON is malformed
        ValueError: If a zone does not match the expected structure

    Example:
        >>> zones = load_shipping_zones("shipping_zones.json")
        >>> zones[0].price_rates[0].name
        'Standard'
    """
    zones_path = Path(path)
    if not zones_path.is_absolute():
        project_root = Path(__file__).parent.parent
        zones_path = project_root / zones_path

    if not zones_path.exists():
        raise FileNotFoundError(
            f"Shipping zones file not found: {zones_path}\n"
            f"Please create {zones_path.name} or set SHIPPING_ZONES_FILE"
        )

    try:
        with open(zones_path, "r", encoding="utf-8") as f:
            raw_zones = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"❌ Failed to parse {zones_path}: {e}")
        raise

    return parse_shipping_zones(raw_zones)


def parse_shipping_zones(raw_zones: list[dict]) -> list[ShippingZoneDTO]:
    """
    Validate raw zone dicts into ShippingZoneDTOs.

    Args:
        raw_zones: List of zone dicts as found in the JSON file

    Returns:
        list[ShippingZoneDTO]
    """
    if not isinstance(raw_zones, list):
        raise ValueError("Shipping zones configuration must be a JSON list of zones")

    zones = []
    for position, raw_zone in enumerate(raw_zones):
        zone_data = dict(raw_zone)
        zone_data.setdefault("id", str(position))
        zone_data["id"] = str(zone_data["id"])
        try:
            zones.append(ShippingZoneDTO.model_validate(zone_data))
        except ValidationError as e:
            raise ValueError(f"Invalid shipping zone at position {position}: {e}") from e

    logger.info(f"✅ Loaded {len(zones)} shipping zones")
    return zones


def get_shipping_zones() -> list[ShippingZoneDTO]:
    """
    Get the configured shipping zones, loading them on first use.

    Returns:
        list[ShippingZoneDTO]: Zones from config.SHIPPING_ZONES_FILE
    """
    global _SHIPPING_ZONES
    if _SHIPPING_ZONES is None:
        _SHIPPING_ZONES = load_shipping_zones(config.SHIPPING_ZONES_FILE)
    return _SHIPPING_ZONES
