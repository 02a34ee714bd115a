"""EV charging station schemas."""

from typing import List, Optional

from pydantic import BaseModel


class Connection(BaseModel):
    """Charger connection offered by a station."""

    type: str
    power_kw: Optional[float] = None


class ChargingStation(BaseModel):
    """EV charging station. Identity is ``id``."""

    id: int
    name: str
    address: str = ""
    latitude: float
    longitude: float
    connections: List[Connection] = []
    usage_type: Optional[str] = None
