"""Coordinate validation helpers."""

import math

from greenroute.core.exceptions import ValidationError
from greenroute.schemas.route import Location


def is_valid_latitude(lat: float) -> bool:
    return not math.isnan(lat) and -90.0 <= lat <= 90.0


def is_valid_longitude(lng: float) -> bool:
    return not math.isnan(lng) and -180.0 <= lng <= 180.0


def is_valid_location(location: Location) -> bool:
    """Check latitude is in [-90, 90] and longitude in [-180, 180], bounds inclusive."""
    return is_valid_latitude(location.latitude) and is_valid_longitude(location.longitude)


def validate_locations(**locations: Location) -> None:
    """Raise ValidationError naming every out-of-range location.

    Example:
        validate_locations(start=start, end=end)
    """
    invalid = [name for name, location in locations.items() if not is_valid_location(location)]
    if invalid:
        raise ValidationError(f"Invalid coordinates for: {', '.join(invalid)}")
