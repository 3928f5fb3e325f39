"""Latitude/longitude disambiguation for TAGO GPS fields.

TAGO reports each bus position as two numbers, ``gpslati`` and ``gpslong``,
but the field names do not reliably say which one is the latitude. A valid
latitude never exceeds 90, so a value above 90 can only be a longitude.
"""
import logging
import math
from typing import Any, Tuple

from .errors import ParseError

logger = logging.getLogger(__name__)

MAX_LATITUDE = 90.0


def to_float(value: Any, field: str) -> float:
    """Parse a raw coordinate field, raising ParseError when it is not a finite number."""
    try:
        result = float(value)
    except (TypeError, ValueError):
        raise ParseError(f"Invalid coordinate in field {field}: {value!r}")
    if not math.isfinite(result):
        raise ParseError(f"Invalid coordinate in field {field}: {value!r}")
    return result


def disambiguate(a: float, b: float) -> Tuple[float, float]:
    """
    Decide which of two coordinate numbers is the latitude.

    Only positive longitudes are disambiguated: the values are compared
    against +90 without taking the absolute value, so a western-hemisphere
    pair such as (-120.0, 35.0) keeps the first-field-as-latitude default.

    Args:
        a: First raw coordinate (``gpslati``)
        b: Second raw coordinate (``gpslong``)

    Returns:
        Tuple of (lat, lng)
    """
    if a > MAX_LATITUDE and b <= MAX_LATITUDE:
        return b, a
    if b > MAX_LATITUDE and a <= MAX_LATITUDE:
        return a, b
    # Both fit a latitude: first field wins
    return a, b


def resolve_item_coordinates(item: dict) -> Tuple[float, float]:
    """Return (lat, lng) for a raw TAGO bus item."""
    a = to_float(item.get("gpslati"), "gpslati")
    b = to_float(item.get("gpslong"), "gpslong")
    lat, lng = disambiguate(a, b)

    logger.debug(
        f"Coordinate mapping: node={item.get('nodenm')} raw1={a} raw2={b} => lat={lat} lng={lng}"
    )
    return lat, lng
