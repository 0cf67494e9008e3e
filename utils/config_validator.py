"""
Configuration Validation Module

Validates critical configuration values at startup to fail-fast
with clear error messages instead of runtime failures.
"""

import sys
from typing import Optional

from enums.runtime_environment import RuntimeEnvironment
from enums.shipping_zone_type import ShippingZoneType


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""
    pass


def validate_shipping_zones_file(path: str) -> None:
    """
    Validate that the shipping zones file exists and parses.

    Args:
        path: The SHIPPING_ZONES_FILE value from config

    Raises:
        ConfigValidationError: If the file is missing or malformed
    """
    from utils.shipping_zones_loader import load_shipping_zones

    try:
        zones = load_shipping_zones(path)
    except FileNotFoundError as e:
        raise ConfigValidationError(
            f"{e}\n"
            "Add to .env: SHIPPING_ZONES_FILE=<path-to-zones.json>"
        )
    except ValueError as e:
        raise ConfigValidationError(f"Shipping zones file {path} is invalid: {e}")

    rest_zones = [zone.id for zone in zones if zone.type == ShippingZoneType.REST]
    if len(rest_zones) > 1:
        raise ConfigValidationError(
            f"Only one catch-all ('rest') shipping zone is allowed, found: {', '.join(rest_zones)}"
        )


def validate_session_ttl(ttl_seconds: int) -> None:
    """
    Validate the session key expiry.

    Args:
        ttl_seconds: SESSION_TTL_SECONDS value

    Raises:
        ConfigValidationError: If TTL is not positive
    """
    if ttl_seconds is None or ttl_seconds <= 0:
        raise ConfigValidationError(
            f"SESSION_TTL_SECONDS must be a positive number of seconds (currently: {ttl_seconds})"
        )


def validate_required_config(value: Optional[str], name: str, example: str = "") -> None:
    """
    Validate that a required config value is set.

    Args:
        value: The config value to check
        name: Name of the config variable
        example: Optional example value to show in error message

    Raises:
        ConfigValidationError: If value is missing
    """
    if not value:
        error_msg = f"{name} is required but not set!"
        if example:
            error_msg += f"\nAdd to .env: {name}={example}"
        raise ConfigValidationError(error_msg)


def validate_startup_config(config_module) -> None:
    """
    Validate all critical configuration at startup.

    Args:
        config_module: The config module to validate

    Raises:
        ConfigValidationError: If any validation fails
    """
    validate_shipping_zones_file(config_module.SHIPPING_ZONES_FILE)

    validate_session_ttl(getattr(config_module, 'SESSION_TTL_SECONDS', None))

    # Tests run against fakeredis; every other environment needs a real server
    if getattr(config_module, 'RUNTIME_ENVIRONMENT', None) != RuntimeEnvironment.TEST:
        validate_required_config(getattr(config_module, 'REDIS_HOST', None), 'REDIS_HOST', 'localhost')


def validate_or_exit(config_module) -> None:
    """
    Validate configuration and exit with error code 1 if validation fails.

    This is the main entry point for startup validation.

    Args:
        config_module: The config module to validate
    """
    try:
        validate_startup_config(config_module)
    except ConfigValidationError as e:
        print(f"\n ERROR: Configuration Validation Failed\n", file=sys.stderr)
        print(str(e), file=sys.stderr)
        print("\nStartup aborted. Please fix configuration and try again.\n", file=sys.stderr)
        sys.exit(1)
