import pytest
from sqlalchemy.exc import OperationalError

from database.config import DatabaseConfig, DatabaseManager
from models import NETWORK_REVISION_ROW_ID, NetworkRevision, TransportRouteRecord
from services.exceptions import (
    DataIntegrityError,
    RepositoryReadError,
    RepositoryWriteError,
    StaleSnapshotError,
)
from services.graph_model import Route
from services.route_repository import InMemoryRouteRepository, SqlAlchemyRouteRepository

from conftest import cities, located, route


@pytest.fixture
def sql_repository(session_factory):
    repository = SqlAlchemyRouteRepository(session_factory)
    repository.seed(
        [located("A", 62.0, 129.7, "airport", "bus_station"), *cities("B", "C")],
        [route("A", "B", weight=12.5, transport_type="PLANE")],
    )
    return repository


def test_sql_load_graph(sql_repository):
    snapshot = sql_repository.load_graph()

    assert [c.id for c in snapshot.cities] == ["A", "B", "C"]
    assert snapshot.cities[0].coordinate.lat == 62.0
    assert snapshot.cities[0].infrastructure == frozenset({"airport", "bus_station"})
    assert snapshot.cities[1].coordinate is None
    assert len(snapshot.routes) == 1
    assert snapshot.routes[0].transport_type == "airplane"
    assert snapshot.routes[0].route_id is not None
    assert snapshot.revision == 1


def test_sql_add_routes_bumps_revision(sql_repository):
    stored = sql_repository.add_routes(
        [Route("B", "C", weight=3.0, transport_type="synthetic", suggested_mode="bus")],
        expected_revision=1,
    )

    assert stored[0].route_id is not None
    snapshot = sql_repository.load_graph()
    assert snapshot.revision == 2
    assert len(snapshot.routes) == 2
    assert snapshot.routes[-1].is_synthetic
    assert snapshot.routes[-1].suggested_mode == "bus"


def test_sql_stale_revision_writes_nothing(sql_repository):
    with pytest.raises(StaleSnapshotError) as exc_info:
        sql_repository.add_routes([route("B", "C")], expected_revision=0)

    assert exc_info.value.actual_revision == 1
    snapshot = sql_repository.load_graph()
    assert len(snapshot.routes) == 1
    assert snapshot.revision == 1


def test_sql_unknown_endpoint_rolls_back_whole_batch(sql_repository):
    with pytest.raises(DataIntegrityError):
        sql_repository.add_routes([route("B", "C"), route("C", "Z")])

    assert len(sql_repository.load_graph().routes) == 1


def test_sql_errors_are_wrapped(sql_repository, engine):
    TransportRouteRecord.__table__.drop(engine)

    with pytest.raises(RepositoryReadError) as read_error:
        sql_repository.load_graph()
    assert isinstance(read_error.value.__cause__, OperationalError)

    with pytest.raises(RepositoryWriteError):
        sql_repository.add_routes([route("B", "C")])


def test_sql_empty_database(session_factory):
    snapshot = SqlAlchemyRouteRepository(session_factory).load_graph()
    assert snapshot.cities == ()
    assert snapshot.routes == ()
    assert snapshot.revision == 0


def test_memory_repository_round_trip():
    repository = InMemoryRouteRepository(cities("A", "B"), [route("A", "B")])
    snapshot = repository.load_graph()
    assert snapshot.revision == 0
    assert snapshot.routes[0].route_id == 1

    stored = repository.add_routes([route("B", "A")], expected_revision=0)
    assert stored[0].route_id == 2
    assert repository.revision == 1

    with pytest.raises(StaleSnapshotError):
        repository.add_routes([route("B", "A")], expected_revision=0)
    with pytest.raises(DataIntegrityError):
        repository.add_routes([route("A", "Z")])
    assert len(repository.load_graph().routes) == 2


def test_create_tables_adds_revision_row_once(engine, session_factory):
    manager = DatabaseManager(DatabaseConfig(), engine=engine)

    manager.create_tables()
    SqlAlchemyRouteRepository(session_factory).add_routes([], expected_revision=0)
    manager.create_tables()

    with session_factory() as session:
        assert session.query(NetworkRevision).count() == 1
        assert session.get(NetworkRevision, NETWORK_REVISION_ROW_ID).value == 1
