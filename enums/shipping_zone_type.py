from enum import Enum


class ShippingZoneType(str, Enum):
    COUNTRIES = "countries"   # Matches an explicit list of country codes
    REST = "rest"             # Catch-all for every country not listed elsewhere
