import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from models import Base
from services.graph_model import City, Coordinate, Route


def cities(*ids):
    return [City(id=city_id) for city_id in ids]


def route(a, b, weight=1.0, transport_type="bus"):
    return Route(from_city_id=a, to_city_id=b, weight=weight, transport_type=transport_type)


def located(city_id, lat, lng, *facilities):
    return City(id=city_id, coordinate=Coordinate(lat=lat, lng=lng), infrastructure=frozenset(facilities))


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autoflush=False, expire_on_commit=False, bind=engine)
