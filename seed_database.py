"""
Database seeder script to populate the smart routes network with sample data
Run this after setting DATABASE_URL; existing cities and routes are replaced
"""

import sys
import logging
from dotenv import load_dotenv

from database.config import get_database_manager
from services.exceptions import RepositoryWriteError
from services.graph_model import City, Coordinate, Route
from services.route_repository import SqlAlchemyRouteRepository

# Load environment variables
load_dotenv()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Sample data: Yakutia network, deliberately left disconnected
SAMPLE_CITIES = [
    City(
        id="yakutsk",
        name="Yakutsk",
        coordinate=Coordinate(lat=62.0278, lng=129.7042),
        infrastructure=frozenset({"airport", "bus_station", "ferry_pier"}),
    ),
    City(
        id="mirny",
        name="Mirny",
        coordinate=Coordinate(lat=62.5353, lng=113.9611),
        infrastructure=frozenset({"airport", "bus_station"}),
    ),
    City(
        id="neryungri",
        name="Neryungri",
        coordinate=Coordinate(lat=56.6583, lng=124.7250),
        infrastructure=frozenset({"airport", "bus_station"}),
    ),
    City(
        id="srednekolymsk",
        name="Srednekolymsk",
        coordinate=Coordinate(lat=67.4500, lng=153.7000),
        infrastructure=frozenset({"airport", "bus_station"}),
    ),
    City(
        id="chokurdakh",
        name="Chokurdakh",
        coordinate=Coordinate(lat=70.6167, lng=147.9000),
        infrastructure=frozenset({"airport"}),
    ),
    City(
        id="olekminsk",
        name="Olekminsk",
        coordinate=Coordinate(lat=60.3744, lng=120.4203),
        infrastructure=frozenset({"bus_station", "ferry_pier"}),
    ),
]

SAMPLE_ROUTES = [
    Route(from_city_id="yakutsk", to_city_id="mirny", weight=820.0, transport_type="airplane", duration_minutes=120),
    Route(from_city_id="yakutsk", to_city_id="neryungri", weight=810.0, transport_type="bus", duration_minutes=900),
    Route(from_city_id="srednekolymsk", to_city_id="chokurdakh", weight=450.0, transport_type="airplane", duration_minutes=90),
]

def seed_database():
    """Replace the route network with the sample data"""
    db_manager = get_database_manager()
    db_manager.create_tables()
    repository = SqlAlchemyRouteRepository(db_manager.session_factory)

    try:
        repository.seed(SAMPLE_CITIES, SAMPLE_ROUTES)
    except RepositoryWriteError as e:
        logger.error(f"Error seeding database: {e}")
        sys.exit(1)

    logger.info("Database seeding completed successfully")
    logger.info(f"  {len(SAMPLE_CITIES)} cities")
    logger.info(f"  {len(SAMPLE_ROUTES)} routes")

if __name__ == "__main__":
    seed_database()
