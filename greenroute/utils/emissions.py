"""CO2 emission estimates per transport mode."""

from typing import Union

from greenroute.config import EMISSION_FACTORS_G_PER_KM
from greenroute.schemas.route import TransportMode


def emission_factor(mode: Union[TransportMode, str]) -> float:
    """Grams of CO2 per kilometre for a mode (0.0 for modes without a factor)."""
    key = mode.value if isinstance(mode, TransportMode) else str(mode)
    return EMISSION_FACTORS_G_PER_KM.get(key, 0.0)


def estimate_emission(mode: Union[TransportMode, str], distance_m: float) -> float:
    """Estimate CO2 grams for travelling ``distance_m`` metres by ``mode``.

    Args:
        mode: Transport mode
        distance_m: Distance in metres

    Returns:
        Emission in grams
    """
    return distance_m / 1000.0 * emission_factor(mode)
