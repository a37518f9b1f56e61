"""Named landmarks around Nouakchott used to group listings by proximity."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class Landmark:
    name: str
    lat: float
    lng: float
    radius: float  # kilometres
    type: str
    priority: int  # 1 = highest

    def to_dict(self) -> dict:
        return asdict(self)


LANDMARKS: Mapping[str, Landmark] = MappingProxyType(
    {
        "center": Landmark(
            name="Centre de Nouakchott",
            lat=18.0735,
            lng=-15.9582,
            radius=5.0,
            type="city_center",
            priority=1,
        ),
        "port": Landmark(
            name="Port de Nouakchott",
            lat=18.0833,
            lng=-15.9667,
            radius=3.0,
            type="business",
            priority=2,
        ),
        "airport": Landmark(
            name="Aéroport International",
            lat=18.0975,
            lng=-15.9475,
            radius=4.0,
            type="transport",
            priority=3,
        ),
        "embassy": Landmark(
            name="Quartier des Ambassades",
            lat=18.0900,
            lng=-15.9500,
            radius=2.0,
            type="luxury",
            priority=4,
        ),
        "beach": Landmark(
            name="Plage de Nouakchott",
            lat=18.0600,
            lng=-15.9800,
            radius=3.0,
            type="leisure",
            priority=5,
        ),
        "market": Landmark(
            name="Marché Capitale",
            lat=18.0700,
            lng=-15.9600,
            radius=2.0,
            type="commercial",
            priority=6,
        ),
    }
)
