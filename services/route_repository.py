"""
Route repository: the only shared, mutable state of the connectivity service.

Every implementation returns a GraphSnapshot tagged with a revision and
commits route batches atomically. A batch submitted with an expected
revision is rejected with StaleSnapshotError when another writer has
committed in between.
"""
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import NETWORK_REVISION_ROW_ID, CityRecord, NetworkRevision, TransportRouteRecord
from services.exceptions import (
    DataIntegrityError,
    RepositoryReadError,
    RepositoryWriteError,
    StaleSnapshotError,
)
from services.graph_model import City, Coordinate, Route
from services.transport_modes import normalize_transport_type

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GraphSnapshot:
    cities: Tuple[City, ...]
    routes: Tuple[Route, ...]
    revision: int


class RouteRepository(ABC):
    """Persistence port for the transport network."""

    @abstractmethod
    def load_graph(self) -> GraphSnapshot:
        """Load all cities and routes with the current revision."""

    @abstractmethod
    def add_routes(self, routes: Sequence[Route], expected_revision: Optional[int] = None) -> List[Route]:
        """Commit all routes or none. Returns the stored routes with their ids."""


def _check_endpoints(routes: Sequence[Route], known_city_ids) -> None:
    for route in routes:
        for endpoint in (route.from_city_id, route.to_city_id):
            if endpoint not in known_city_ids:
                raise DataIntegrityError(
                    f"Cannot store route {route.from_city_id} -> {route.to_city_id}: unknown city {endpoint}",
                    {"city_id": endpoint},
                )


class InMemoryRouteRepository(RouteRepository):
    """Process-local repository guarded by a lock"""

    def __init__(self, cities: Iterable[City] = (), routes: Iterable[Route] = ()):
        self._lock = threading.Lock()
        self._cities: Tuple[City, ...] = tuple(cities)
        self._routes: List[Route] = []
        self._next_id = 1
        self._revision = 0
        for route in routes:
            self._routes.append(route.with_id(self._next_id))
            self._next_id += 1

    @property
    def revision(self) -> int:
        return self._revision

    def load_graph(self) -> GraphSnapshot:
        with self._lock:
            return GraphSnapshot(self._cities, tuple(self._routes), self._revision)

    def add_routes(self, routes: Sequence[Route], expected_revision: Optional[int] = None) -> List[Route]:
        with self._lock:
            if expected_revision is not None and expected_revision != self._revision:
                raise StaleSnapshotError(expected_revision, self._revision)
            _check_endpoints(routes, {city.id for city in self._cities})

            stored = [route.with_id(self._next_id + offset) for offset, route in enumerate(routes)]
            self._routes.extend(stored)
            self._next_id += len(stored)
            self._revision += 1
            return stored


def _parse_infrastructure(value: Optional[str]) -> frozenset:
    if not value:
        return frozenset()
    return frozenset(tag.strip().lower() for tag in value.split(",") if tag.strip())


def _city_from_record(record: CityRecord) -> City:
    coordinate = None
    if record.lat is not None and record.lng is not None:
        coordinate = Coordinate(lat=record.lat, lng=record.lng)
    return City(
        id=record.id,
        coordinate=coordinate,
        name=record.name,
        infrastructure=_parse_infrastructure(record.infrastructure),
    )


def _route_from_record(record: TransportRouteRecord) -> Route:
    return Route(
        from_city_id=record.from_city_id,
        to_city_id=record.to_city_id,
        weight=record.weight,
        transport_type=normalize_transport_type(record.transport_type),
        route_id=record.id,
        duration_minutes=record.duration_minutes,
        suggested_mode=record.suggested_mode,
    )


def _city_to_record(city: City) -> CityRecord:
    return CityRecord(
        id=city.id,
        name=city.name,
        lat=city.coordinate.lat if city.coordinate else None,
        lng=city.coordinate.lng if city.coordinate else None,
        infrastructure=",".join(sorted(city.infrastructure)) or None,
    )


def _route_to_record(route: Route) -> TransportRouteRecord:
    return TransportRouteRecord(
        from_city_id=route.from_city_id,
        to_city_id=route.to_city_id,
        weight=route.weight,
        transport_type=route.transport_type,
        duration_minutes=route.duration_minutes,
        suggested_mode=route.suggested_mode,
        is_synthetic=route.is_synthetic,
    )


class SqlAlchemyRouteRepository(RouteRepository):
    """Repository backed by the cities / transport_routes tables"""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def load_graph(self) -> GraphSnapshot:
        try:
            with self.session_factory() as session:
                with session.begin():
                    # Revision first: a commit landing after this read makes any plan built
                    # on the snapshot stale, whatever isolation level the database runs at
                    revision_row = session.get(NetworkRevision, NETWORK_REVISION_ROW_ID)
                    cities = session.query(CityRecord).order_by(CityRecord.id).all()
                    routes = session.query(TransportRouteRecord).order_by(TransportRouteRecord.id).all()
                    snapshot = GraphSnapshot(
                        cities=tuple(_city_from_record(record) for record in cities),
                        routes=tuple(_route_from_record(record) for record in routes),
                        revision=revision_row.value if revision_row else 0,
                    )
        except SQLAlchemyError as e:
            logger.error(f"Failed to load route network: {e}")
            raise RepositoryReadError(f"Failed to load route network: {e}") from e

        logger.debug(f"Loaded {len(snapshot.cities)} cities and {len(snapshot.routes)} routes "
                     f"at revision {snapshot.revision}")
        return snapshot

    def add_routes(self, routes: Sequence[Route], expected_revision: Optional[int] = None) -> List[Route]:
        try:
            with self.session_factory() as session:
                with session.begin():
                    revision_row = self._lock_revision(session, expected_revision)
                    if expected_revision is not None and expected_revision != revision_row.value:
                        raise StaleSnapshotError(expected_revision, revision_row.value)

                    endpoints = {route.from_city_id for route in routes} | {route.to_city_id for route in routes}
                    known = {
                        city_id for (city_id,) in
                        session.query(CityRecord.id).filter(CityRecord.id.in_(endpoints)).all()
                    }
                    _check_endpoints(routes, known)

                    records = [_route_to_record(route) for route in routes]
                    session.add_all(records)
                    session.flush()
                    revision_row.value += 1
                    stored = [route.with_id(record.id) for route, record in zip(routes, records)]
        except SQLAlchemyError as e:
            logger.error(f"Failed to store {len(routes)} routes, batch rolled back: {e}")
            raise RepositoryWriteError(f"Failed to store route batch: {e}") from e

        logger.info(f"Stored {len(stored)} routes")
        return stored

    def seed(self, cities: Sequence[City], routes: Sequence[Route]) -> None:
        """Replace the whole network in one transaction"""
        try:
            with self.session_factory() as session:
                with session.begin():
                    revision_row = self._lock_revision(session)
                    session.query(TransportRouteRecord).delete()
                    session.query(CityRecord).delete()
                    session.add_all([_city_to_record(city) for city in cities])
                    session.flush()
                    session.add_all([_route_to_record(route) for route in routes])
                    revision_row.value += 1
        except SQLAlchemyError as e:
            logger.error(f"Failed to seed route network: {e}")
            raise RepositoryWriteError(f"Failed to seed route network: {e}") from e

    @staticmethod
    def _lock_revision(session, expected_revision: Optional[int] = None) -> NetworkRevision:
        revision_row = (
            session.query(NetworkRevision)
            .filter(NetworkRevision.id == NETWORK_REVISION_ROW_ID)
            .with_for_update()
            .one_or_none()
        )
        if revision_row is None:
            revision_row = NetworkRevision(id=NETWORK_REVISION_ROW_ID, value=0)
            session.add(revision_row)
            try:
                session.flush()
            except IntegrityError as e:
                # Another writer created the row and committed its batch first
                logger.warning("Network revision row was created by a concurrent writer")
                raise StaleSnapshotError(expected_revision or 0, 1) from e
        return revision_row
