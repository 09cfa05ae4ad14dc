"""
In-memory transport network model: cities as nodes, routes as undirected edges
"""
import math
from dataclasses import dataclass, field, replace
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from services.exceptions import DataIntegrityError

EARTH_RADIUS_KM = 6371.0
SYNTHETIC_TRANSPORT_TYPE = "synthetic"


@dataclass(frozen=True)
class Coordinate:
    """Represents a geographic coordinate"""
    lat: float
    lng: float

    def distance_km_to(self, other: 'Coordinate') -> float:
        """Calculate distance in kilometres using Haversine formula"""
        lat1_rad = math.radians(self.lat)
        lat2_rad = math.radians(other.lat)
        delta_lat = math.radians(other.lat - self.lat)
        delta_lng = math.radians(other.lng - self.lng)

        a = (math.sin(delta_lat / 2) ** 2 +
             math.cos(lat1_rad) * math.cos(lat2_rad) *
             math.sin(delta_lng / 2) ** 2)
        c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

        return EARTH_RADIUS_KM * c


@dataclass(frozen=True)
class City:
    """A settlement participating in the transport network"""
    id: str
    coordinate: Optional[Coordinate] = None
    name: Optional[str] = None
    infrastructure: FrozenSet[str] = field(default_factory=frozenset)

    def has(self, facility: str) -> bool:
        return facility in self.infrastructure

    def distance_km_to(self, other: 'City') -> Optional[float]:
        """Great-circle distance, or None when either city has no coordinates"""
        if self.coordinate is None or other.coordinate is None:
            return None
        return self.coordinate.distance_km_to(other.coordinate)


@dataclass(frozen=True)
class Route:
    """An existing (or synthetic) transport link between two cities"""
    from_city_id: str
    to_city_id: str
    weight: float = 0.0
    transport_type: str = "unknown"
    route_id: Optional[int] = None
    duration_minutes: Optional[int] = None
    suggested_mode: Optional[str] = None

    @property
    def is_synthetic(self) -> bool:
        return self.transport_type == SYNTHETIC_TRANSPORT_TYPE

    def endpoints(self) -> Tuple[str, str]:
        """Endpoints in lexical order; direction is ignored for connectivity"""
        if self.from_city_id <= self.to_city_id:
            return self.from_city_id, self.to_city_id
        return self.to_city_id, self.from_city_id

    def with_id(self, route_id: int) -> 'Route':
        return replace(self, route_id=route_id)


class Graph:
    """Immutable snapshot of the transport network.

    Construction validates the snapshot: city ids must be unique non-empty
    strings and every route must join two different known cities. Anything
    else raises DataIntegrityError before any analysis runs.
    """

    def __init__(self, cities: Iterable[City], routes: Iterable[Route]):
        self._cities: Dict[str, City] = {}
        for city in cities:
            if not isinstance(city.id, str) or not city.id.strip():
                raise DataIntegrityError(f"Invalid city id: {city.id!r}", {"city_id": city.id})
            if city.id in self._cities:
                raise DataIntegrityError(f"Duplicate city id: {city.id}", {"city_id": city.id})
            self._cities[city.id] = city

        self._routes: Tuple[Route, ...] = tuple(routes)
        self._adjacency: Dict[str, Set[str]] = {city_id: set() for city_id in self._cities}

        for route in self._routes:
            for endpoint in (route.from_city_id, route.to_city_id):
                if endpoint not in self._cities:
                    raise DataIntegrityError(
                        f"Route {route.from_city_id} -> {route.to_city_id} references unknown city {endpoint}",
                        {"route": (route.from_city_id, route.to_city_id), "city_id": endpoint},
                    )
            if route.from_city_id == route.to_city_id:
                raise DataIntegrityError(
                    f"Route connects city {route.from_city_id} to itself",
                    {"city_id": route.from_city_id},
                )
            # Undirected for connectivity purposes
            self._adjacency[route.from_city_id].add(route.to_city_id)
            self._adjacency[route.to_city_id].add(route.from_city_id)

    @property
    def city_count(self) -> int:
        return len(self._cities)

    @property
    def route_count(self) -> int:
        return len(self._routes)

    @property
    def routes(self) -> Tuple[Route, ...]:
        return self._routes

    def city_ids(self) -> List[str]:
        """City ids in lexical order"""
        return sorted(self._cities)

    def cities(self) -> List[City]:
        return [self._cities[city_id] for city_id in self.city_ids()]

    def has_city(self, city_id: str) -> bool:
        return city_id in self._cities

    def city(self, city_id: str) -> City:
        try:
            return self._cities[city_id]
        except KeyError:
            raise DataIntegrityError(f"Unknown city: {city_id}", {"city_id": city_id}) from None

    def neighbors(self, city_id: str) -> FrozenSet[str]:
        if city_id not in self._adjacency:
            raise DataIntegrityError(f"Unknown city: {city_id}", {"city_id": city_id})
        return frozenset(self._adjacency[city_id])

    def with_routes(self, routes: Iterable[Route]) -> 'Graph':
        """New graph with the extra routes appended"""
        return Graph(self._cities.values(), self._routes + tuple(routes))

    def __repr__(self) -> str:
        return f"Graph(cities={self.city_count}, routes={self.route_count})"
